"""Per-turn readers for the user's financial state.

Each reader returns an explicit result instead of raising, so the turn
orchestrator decides what a failed read means for the turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union
from uuid import UUID

import psycopg

from finance_coach.services.goals_service import list_goals
from finance_coach.services.profile_service import get_credit_info, get_profile

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TurnContext:
    """Authenticated identity plus the storage handle for one request (None when unreachable)."""

    user_id: UUID | None
    connection: Any


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Degraded:
    reason: str


@dataclass(frozen=True)
class Fatal:
    reason: str


ReadResult = Union[Ok[T], Degraded, Fatal]


def resolve_identity(ctx: TurnContext) -> ReadResult[UUID]:
    if ctx.user_id is None:
        return Fatal("no authenticated identity")
    return Ok(ctx.user_id)


STORAGE_UNAVAILABLE = "storage unavailable"


async def read_profile(ctx: TurnContext) -> ReadResult[dict[str, Any] | None]:
    """Profile row, Ok(None) when the user never onboarded."""
    if ctx.connection is None:
        return Degraded(f"profile read skipped: {STORAGE_UNAVAILABLE}")
    try:
        row = await get_profile(ctx.connection, ctx.user_id)
    except psycopg.Error as exc:
        logger.warning("profile read failed user_id=%s error=%r", ctx.user_id, exc)
        return Degraded(f"profile read failed: {type(exc).__name__}")
    return Ok(row)


async def read_credit(ctx: TurnContext) -> ReadResult[dict[str, Any] | None]:
    """Credit row, Ok(None) for new users without credit data."""
    if ctx.connection is None:
        return Degraded(f"credit read skipped: {STORAGE_UNAVAILABLE}")
    try:
        row = await get_credit_info(ctx.connection, ctx.user_id)
    except psycopg.Error as exc:
        logger.warning("credit read failed user_id=%s error=%r", ctx.user_id, exc)
        return Degraded(f"credit read failed: {type(exc).__name__}")
    return Ok(row)


async def read_goals(ctx: TurnContext) -> ReadResult[list[dict[str, Any]]]:
    """All goals, newest first."""
    if ctx.connection is None:
        return Degraded(f"goals read skipped: {STORAGE_UNAVAILABLE}")
    try:
        rows = await list_goals(ctx.connection, ctx.user_id, status="all")
    except psycopg.Error as exc:
        logger.warning("goals read failed user_id=%s error=%r", ctx.user_id, exc)
        return Degraded(f"goals read failed: {type(exc).__name__}")
    return Ok(rows)
