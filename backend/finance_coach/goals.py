"""Goals router: owner-scoped CRUD over financial goals."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, field_serializer

from .auth import get_current_user_id
from .database import get_db_connection
from .services.goals_service import (
    GoalPriority,
    GoalStatus,
    create_goal,
    delete_goal,
    get_goal,
    list_goals,
    update_goal,
)

GoalStatusFilter = Literal["active", "completed", "paused", "all"]

router = APIRouter(prefix="/goals", tags=["goals"])


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class GoalCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    target_amount: Decimal | None = Field(default=None, gt=Decimal("0"), max_digits=12, decimal_places=2)
    target_date: date | None = None
    priority: GoalPriority = "medium"
    status: GoalStatus = "active"
    notes: str | None = Field(default=None, max_length=2000)


class GoalUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    target_amount: Decimal | None = Field(default=None, gt=Decimal("0"), max_digits=12, decimal_places=2)
    target_date: date | None = None
    priority: GoalPriority | None = None
    status: GoalStatus | None = None
    notes: str | None = Field(default=None, max_length=2000)


class GoalResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    target_amount: Decimal | None = None
    target_date: date | None = None
    priority: GoalPriority
    status: GoalStatus
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("target_amount")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        if value is None:
            return None
        return _money(value)


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal_endpoint(
    payload: GoalCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    """Create one financial goal for the current user."""
    try:
        row = await create_goal(connection, user_id, payload.model_dump())
        return GoalResponse(**row)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("", response_model=list[GoalResponse])
async def list_goals_endpoint(
    status: GoalStatusFilter = Query(default="all"),
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[GoalResponse]:
    """List current user's goals newest first, optionally filtered by status."""
    try:
        rows = await list_goals(connection, user_id, status=status)
        return [GoalResponse(**row) for row in rows]
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.get("/{goal_id}", response_model=GoalResponse)
async def get_goal_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    try:
        row = await get_goal(connection, user_id, goal_id)
        return GoalResponse(**row)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal_endpoint(
    goal_id: UUID,
    payload: GoalUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    """Partially update one goal."""
    patch_data = payload.model_dump(exclude_unset=True)
    if not patch_data:
        raise HTTPException(status_code=422, detail="At least one field must be provided")

    try:
        row = await update_goal(connection, user_id, goal_id, patch_data)
        return GoalResponse(**row)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
):
    """Delete one goal for the current user."""
    try:
        await delete_goal(connection, user_id, goal_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
