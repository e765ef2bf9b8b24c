"""Instruction text for the financial coach, rendered from the user's stored state."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from typing import Any

NOT_PROVIDED = "Not provided"

COACH_PREAMBLE = """
You are a helpful financial coach AI assistant. You provide personalized financial advice based on the user's information.
""".strip()

COACH_CLOSING = """
Please provide helpful, personalized financial advice based on this information. Be encouraging, practical, and specific in your recommendations. If you don't have enough information about something, ask clarifying questions.
""".strip()


def format_amount(value: Any) -> str:
    """Render a currency amount without trailing zero decimals: 400000.00 -> 400000."""
    amount = Decimal(str(value)).normalize()
    return format(amount, "f")


def _or_not_provided(value: Any) -> str:
    if value is None or value == "":
        return NOT_PROVIDED
    return str(value)


def _format_date(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _identity_block(profile: dict[str, Any] | None) -> str:
    profile = profile or {}
    name = profile.get("first_name") or "Unknown"
    if profile.get("last_name"):
        name = f"{name} {profile['last_name']}"

    return "\n".join(
        [
            "User Information:",
            f"- Name: {name}",
            f"- Age: {_or_not_provided(profile.get('age'))}",
            f"- Email: {_or_not_provided(profile.get('email'))}",
        ]
    )


def _credit_block(credit: dict[str, Any]) -> str:
    total_debt = credit.get("total_debt")
    utilization = credit.get("credit_utilization")
    late_payments = credit.get("late_payments")

    return "\n".join(
        [
            "Credit Information:",
            f"- Credit Score: {_or_not_provided(credit.get('credit_score'))}",
            f"- Total Debt: {'$' + format_amount(total_debt) if total_debt is not None else NOT_PROVIDED}",
            # a missing count means no late payments were recorded
            f"- Late Payments: {late_payments if late_payments is not None else 0}",
            f"- Credit Utilization: {format_amount(utilization) + '%' if utilization is not None else NOT_PROVIDED}",
        ]
    )


def _goal_entry(position: int, goal: dict[str, Any]) -> str:
    headline = f"{position}. {goal.get('title')}"
    if goal.get("target_amount") is not None:
        headline += f" (Target: ${format_amount(goal['target_amount'])})"
    if goal.get("target_date") is not None:
        headline += f" (Due: {_format_date(goal['target_date'])})"

    lines = [
        headline,
        f"   Status: {goal.get('status') or 'active'}",
        f"   Priority: {goal.get('priority') or 'medium'}",
    ]
    if goal.get("description"):
        lines.append(f"   Description: {goal['description']}")

    return "\n".join(lines)


def _goals_block(goals: Sequence[dict[str, Any]]) -> str:
    entries = [_goal_entry(index, goal) for index, goal in enumerate(goals, start=1)]
    return "Financial Goals:\n" + "\n".join(entries)


def build_instruction_text(
    profile: dict[str, Any] | None,
    credit: dict[str, Any] | None,
    goals: Sequence[dict[str, Any]],
) -> str:
    """
    Render profile, credit and goals into the system-level instruction.

    Goals keep the caller's order. Every field has a textual fallback, so any
    combination of absent inputs still yields a complete instruction.
    """
    sections = [COACH_PREAMBLE, _identity_block(profile)]

    if credit is not None:
        sections.append(_credit_block(credit))

    if goals:
        sections.append(_goals_block(goals))

    sections.append(COACH_CLOSING)
    return "\n\n".join(sections)
