"""Service layer for the one-per-user profile and credit records (upsert semantics)."""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

MONEY_QUANT = Decimal("0.01")

PROFILE_COLUMNS = "id, user_id, first_name, last_name, age, email, created_at, updated_at"
CREDIT_COLUMNS = "id, user_id, credit_score, total_debt, late_payments, credit_utilization, last_updated"


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def _validate_profile(data: dict[str, Any]) -> dict[str, Any]:
    age = data.get("age")
    if age is not None:
        age = int(age)
        if age < 0 or age > 150:
            raise ValueError("age must be between 0 and 150")

    return {
        "first_name": _clean_text(data.get("first_name")),
        "last_name": _clean_text(data.get("last_name")),
        "age": age,
        "email": _clean_text(data.get("email")),
    }


def _validate_credit(data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate one credit record before upsert.

    Rules:
    - credit_score within 300..850 when present
    - total_debt >= 0 when present
    - late_payments is a non-negative integer, missing means 0
    - credit_utilization within 0..100 when present
    """
    credit_score = data.get("credit_score")
    if credit_score is not None:
        credit_score = int(credit_score)
        if credit_score < 300 or credit_score > 850:
            raise ValueError("credit_score must be between 300 and 850")

    total_debt = _optional_decimal(data.get("total_debt"))
    if total_debt is not None and total_debt < Decimal("0.00"):
        raise ValueError("total_debt must be >= 0")

    late_payments = data.get("late_payments")
    late_payments = 0 if late_payments is None else int(late_payments)
    if late_payments < 0:
        raise ValueError("late_payments must be >= 0")

    credit_utilization = _optional_decimal(data.get("credit_utilization"))
    if credit_utilization is not None and not (Decimal("0") <= credit_utilization <= Decimal("100")):
        raise ValueError("credit_utilization must be between 0 and 100")

    return {
        "credit_score": credit_score,
        "total_debt": total_debt,
        "late_payments": late_payments,
        "credit_utilization": credit_utilization,
    }


async def get_profile(connection: AsyncConnection, user_id: UUID) -> dict[str, Any] | None:
    """Fetch the caller's profile; None when the user has not onboarded yet."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {PROFILE_COLUMNS}
            FROM profiles
            WHERE user_id = %s
            """,
            (user_id,),
        )
        return await cursor.fetchone()


async def upsert_profile(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create or replace the caller's profile row."""
    normalized = _validate_profile(data)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            INSERT INTO profiles (user_id, first_name, last_name, age, email)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (user_id) DO UPDATE
            SET first_name = EXCLUDED.first_name,
                last_name = EXCLUDED.last_name,
                age = EXCLUDED.age,
                email = EXCLUDED.email
            RETURNING {PROFILE_COLUMNS}
            """,
            (
                user_id,
                normalized["first_name"],
                normalized["last_name"],
                normalized["age"],
                normalized["email"],
            ),
        )
        return await cursor.fetchone()


async def get_credit_info(connection: AsyncConnection, user_id: UUID) -> dict[str, Any] | None:
    """Fetch the caller's credit record; None for users who never entered one."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {CREDIT_COLUMNS}
            FROM credit_info
            WHERE user_id = %s
            """,
            (user_id,),
        )
        return await cursor.fetchone()


async def upsert_credit_info(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    normalized = _validate_credit(data)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            INSERT INTO credit_info (user_id, credit_score, total_debt, late_payments, credit_utilization)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (user_id) DO UPDATE
            SET credit_score = EXCLUDED.credit_score,
                total_debt = EXCLUDED.total_debt,
                late_payments = EXCLUDED.late_payments,
                credit_utilization = EXCLUDED.credit_utilization,
                last_updated = NOW()
            RETURNING {CREDIT_COLUMNS}
            """,
            (
                user_id,
                normalized["credit_score"],
                normalized["total_debt"],
                normalized["late_payments"],
                normalized["credit_utilization"],
            ),
        )
        return await cursor.fetchone()
