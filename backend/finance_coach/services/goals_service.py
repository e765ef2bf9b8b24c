"""Service layer for financial goal CRUD."""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any, Literal
from uuid import UUID

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

GoalPriority = Literal["high", "medium", "low"]
GoalStatus = Literal["active", "completed", "paused"]
VALID_PRIORITIES: set[str] = {"high", "medium", "low"}
VALID_STATUSES: set[str] = {"active", "completed", "paused"}
MONEY_QUANT = Decimal("0.01")

GOAL_COLUMNS = (
    "id, user_id, title, description, target_amount, target_date, "
    "priority, status, notes, created_at, updated_at"
)


def quantize_amount(value: Decimal) -> Decimal:
    """Normalize money values to NUMERIC(12,2) precision."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _validate_goal_state(goal_data: dict[str, Any]) -> dict[str, Any]:
    """
    Validate merged goal state.

    Rules:
    - title is required and non-blank
    - target_amount > 0 when present
    - priority in high/medium/low, status in active/completed/paused

    Unknown priority/status values raise instead of falling back to defaults.
    """
    title = str(goal_data.get("title") or "").strip()
    if not title:
        raise ValueError("title is required")

    priority = goal_data.get("priority")
    priority = "medium" if priority is None else str(priority)
    if priority not in VALID_PRIORITIES:
        raise ValueError("priority must be one of: high, medium, low")

    status = goal_data.get("status")
    status = "active" if status is None else str(status)
    if status not in VALID_STATUSES:
        raise ValueError("status must be one of: active, completed, paused")

    target_amount = goal_data.get("target_amount")
    if target_amount is not None:
        target_amount = quantize_amount(Decimal(str(target_amount)))
        if target_amount <= Decimal("0.00"):
            raise ValueError("target_amount must be greater than 0")

    target_date: date | None = goal_data.get("target_date")

    return {
        "title": title,
        "description": _optional_text(goal_data.get("description")),
        "target_amount": target_amount,
        "target_date": target_date,
        "priority": priority,
        "status": status,
        "notes": _optional_text(goal_data.get("notes")),
    }


async def _fetch_goal_row(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> dict[str, Any] | None:
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {GOAL_COLUMNS}
            FROM financial_goals
            WHERE id = %s
              AND user_id = %s
            """,
            (goal_id, user_id),
        )
        return await cursor.fetchone()


async def create_goal(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create one goal for the authenticated user."""
    normalized = _validate_goal_state(data)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            INSERT INTO financial_goals
                (user_id, title, description, target_amount, target_date, priority, status, notes)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {GOAL_COLUMNS}
            """,
            (
                user_id,
                normalized["title"],
                normalized["description"],
                normalized["target_amount"],
                normalized["target_date"],
                normalized["priority"],
                normalized["status"],
                normalized["notes"],
            ),
        )
        return await cursor.fetchone()


async def list_goals(
    connection: AsyncConnection,
    user_id: UUID,
    status: str = "all",
) -> list[dict[str, Any]]:
    """List goals for the user, newest first, optionally filtered by one status."""
    query_status = status.strip().lower()
    if query_status != "all" and query_status not in VALID_STATUSES:
        raise ValueError("status must be one of: active, completed, paused, all")

    sql = f"""
    SELECT {GOAL_COLUMNS}
    FROM financial_goals
    WHERE user_id = %s
    """
    params: list[Any] = [user_id]

    if query_status != "all":
        sql += " AND status = %s"
        params.append(query_status)

    sql += " ORDER BY created_at DESC"

    async with connection.cursor() as cursor:
        await cursor.execute(sql, tuple(params))
        rows = await cursor.fetchall()

    return list(rows)


async def get_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> dict[str, Any]:
    row = await _fetch_goal_row(connection, user_id, goal_id)
    if row is None:
        raise LookupError("Goal not found")

    return row


async def update_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    patch: dict[str, Any],
) -> dict[str, Any]:
    """Apply partial goal update; validation runs on the merged state."""
    existing = await _fetch_goal_row(connection, user_id, goal_id)
    if existing is None:
        raise LookupError("Goal not found")

    merged = {
        field: patch.get(field, existing[field])
        for field in (
            "title",
            "description",
            "target_amount",
            "target_date",
            "priority",
            "status",
            "notes",
        )
    }

    normalized = _validate_goal_state(merged)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            UPDATE financial_goals
            SET title = %s,
                description = %s,
                target_amount = %s,
                target_date = %s,
                priority = %s,
                status = %s,
                notes = %s
            WHERE id = %s
              AND user_id = %s
            RETURNING {GOAL_COLUMNS}
            """,
            (
                normalized["title"],
                normalized["description"],
                normalized["target_amount"],
                normalized["target_date"],
                normalized["priority"],
                normalized["status"],
                normalized["notes"],
                goal_id,
                user_id,
            ),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("Goal not found")

    return row


async def delete_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
) -> None:
    """Hard-delete one goal scoped to the authenticated user."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            DELETE FROM financial_goals
            WHERE id = %s
              AND user_id = %s
            RETURNING id
            """,
            (goal_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("Goal not found")
