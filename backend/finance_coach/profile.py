"""Profile router: read/upsert the caller's profile and credit record."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_claims, get_current_user_id
from .database import get_db_connection
from .services.profile_service import (
    get_credit_info,
    get_profile,
    upsert_credit_info,
    upsert_profile,
)

router = APIRouter(prefix="/profile", tags=["profile"])


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class ProfileUpsertRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=120)
    last_name: str | None = Field(default=None, max_length=120)
    age: int | None = Field(default=None, ge=0, le=150)
    email: str | None = Field(default=None, min_length=3, max_length=255)


class ProfileResponse(BaseModel):
    user_id: UUID
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None
    email: str | None = None
    created_at: datetime
    updated_at: datetime


class CreditUpsertRequest(BaseModel):
    credit_score: int | None = Field(default=None, ge=300, le=850)
    total_debt: Decimal | None = Field(default=None, ge=Decimal("0"), max_digits=12, decimal_places=2)
    late_payments: int = Field(default=0, ge=0)
    credit_utilization: Decimal | None = Field(
        default=None, ge=Decimal("0"), le=Decimal("100"), max_digits=5, decimal_places=2
    )


class CreditResponse(BaseModel):
    user_id: UUID
    credit_score: int | None = None
    total_debt: Decimal | None = None
    late_payments: int = 0
    credit_utilization: Decimal | None = None
    last_updated: datetime

    @field_validator("late_payments", mode="before")
    @classmethod
    def default_late_payments(cls, value: int | None) -> int:
        # NULL in storage means no late payments were recorded
        return 0 if value is None else value

    @field_serializer("total_debt", "credit_utilization")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        if value is None:
            return None
        return _money(value)


@router.get("", response_model=ProfileResponse)
async def get_profile_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> ProfileResponse:
    row = await get_profile(connection, user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    return ProfileResponse(**row)


@router.put("", response_model=ProfileResponse)
async def upsert_profile_endpoint(
    payload: ProfileUpsertRequest,
    user_id: UUID = Depends(get_current_user_id),
    claims: dict[str, Any] = Depends(get_current_claims),
    connection: Any = Depends(get_db_connection),
) -> ProfileResponse:
    """Create or replace the profile; email defaults to the signed-in account's email."""
    data = payload.model_dump()
    if data["email"] is None:
        data["email"] = claims.get("email")

    try:
        row = await upsert_profile(connection, user_id, data)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return ProfileResponse(**row)


@router.get("/credit", response_model=CreditResponse)
async def get_credit_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> CreditResponse:
    row = await get_credit_info(connection, user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Credit information not found")

    return CreditResponse(**row)


@router.put("/credit", response_model=CreditResponse)
async def upsert_credit_endpoint(
    payload: CreditUpsertRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> CreditResponse:
    try:
        row = await upsert_credit_info(connection, user_id, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return CreditResponse(**row)
