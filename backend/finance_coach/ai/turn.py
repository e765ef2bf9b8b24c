"""One coaching turn: authenticate, read state, synthesize, complete, record."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

import psycopg

from finance_coach.ai.history import append_message
from finance_coach.ai.openai_client import ProviderError, ProviderRequestError
from finance_coach.ai.prompt import build_instruction_text
from finance_coach.ai.state import (
    Degraded,
    Fatal,
    Ok,
    ReadResult,
    TurnContext,
    read_credit,
    read_goals,
    read_profile,
    resolve_identity,
)

logger = logging.getLogger(__name__)


class TurnState(str, Enum):
    AUTHENTICATING = "authenticating"
    READING_STATE = "reading_state"
    SYNTHESIZING = "synthesizing"
    INVOKING = "invoking"
    RECORDING = "recording"
    RESPONDING = "responding"
    FAILED = "failed"


class AuthFailure(Exception):
    """Raised when the turn has no resolvable identity."""


class CompletionProvider(Protocol):
    async def complete(self, instruction_text: str, user_message: str) -> str: ...


@dataclass
class TurnOutcome:
    reply: str
    degraded: list[str] = field(default_factory=list)
    recorded: int = 0


def _enter(ctx: TurnContext, state: TurnState) -> None:
    logger.debug("turn user_id=%s state=%s", ctx.user_id, state.value)


def _value_or(result: ReadResult[Any], fallback: Any, degraded: list[str]) -> Any:
    """Unwrap a read result; degraded and fatal reads both fall back for this turn."""
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, (Degraded, Fatal)):
        degraded.append(result.reason)
        return fallback
    raise TypeError(f"Unexpected read result: {result!r}")


async def _record(ctx: TurnContext, message: str, is_user_message: bool) -> bool:
    if ctx.connection is None:
        logger.error(
            "chat history append skipped, storage unavailable user_id=%s is_user_message=%s",
            ctx.user_id,
            is_user_message,
        )
        return False
    try:
        await append_message(ctx.connection, ctx.user_id, message, is_user_message)
    except (psycopg.Error, ValueError) as exc:
        logger.error(
            "chat history append failed user_id=%s is_user_message=%s error=%r",
            ctx.user_id,
            is_user_message,
            exc,
        )
        return False
    return True


async def run_turn(
    ctx: TurnContext,
    message: str,
    provider: CompletionProvider,
) -> TurnOutcome:
    """
    Run one single-turn exchange for the authenticated user.

    Only a missing identity (`AuthFailure`) or a provider failure
    (`ProviderError`) fails the turn. Failed reads fall back to absent
    state, and failed history appends are logged without changing the reply.
    History is written only after the provider answered, so a failed turn
    leaves no rows behind.
    """
    _enter(ctx, TurnState.AUTHENTICATING)
    identity = resolve_identity(ctx)
    if not isinstance(identity, Ok):
        _enter(ctx, TurnState.FAILED)
        raise AuthFailure(identity.reason)

    _enter(ctx, TurnState.READING_STATE)
    degraded: list[str] = []
    profile = _value_or(await read_profile(ctx), None, degraded)
    credit = _value_or(await read_credit(ctx), None, degraded)
    goals = _value_or(await read_goals(ctx), [], degraded)

    _enter(ctx, TurnState.SYNTHESIZING)
    instruction_text = build_instruction_text(profile, credit, goals)

    _enter(ctx, TurnState.INVOKING)
    try:
        reply = await provider.complete(instruction_text, message)
    except ProviderRequestError as exc:
        _enter(ctx, TurnState.FAILED)
        logger.error(
            "completion provider error user_id=%s status=%s body=%s",
            ctx.user_id,
            exc.status_code,
            exc,
        )
        raise
    except ProviderError as exc:
        _enter(ctx, TurnState.FAILED)
        logger.error("completion provider response unusable user_id=%s error=%s", ctx.user_id, exc)
        raise

    _enter(ctx, TurnState.RECORDING)
    recorded = 0
    # Two separate appends: a crash in between leaves the user message unanswered.
    if await _record(ctx, message, True):
        recorded += 1
    if await _record(ctx, reply, False):
        recorded += 1

    _enter(ctx, TurnState.RESPONDING)
    logger.info(
        "coach turn completed user_id=%s goals=%d degraded=%d recorded=%d",
        ctx.user_id,
        len(goals),
        len(degraded),
        recorded,
    )
    return TurnOutcome(reply=reply, degraded=degraded, recorded=recorded)
