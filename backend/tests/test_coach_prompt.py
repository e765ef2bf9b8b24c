from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from finance_coach.ai.prompt import (
    COACH_CLOSING,
    COACH_PREAMBLE,
    build_instruction_text,
    format_amount,
)


def _goal(**overrides):
    goal = {
        "title": "Emergency fund",
        "description": None,
        "target_amount": None,
        "target_date": None,
        "priority": "medium",
        "status": "active",
    }
    goal.update(overrides)
    return goal


@pytest.mark.parametrize(
    "profile,credit,goals",
    [
        (None, None, []),
        ({"first_name": "Ana"}, None, []),
        (None, {"credit_score": None}, []),
        (None, None, [_goal()]),
        ({}, {}, [_goal(title="x", status=None, priority=None)]),
    ],
)
def test_instruction_text_is_total(profile, credit, goals) -> None:
    text = build_instruction_text(profile, credit, goals)

    assert text.startswith(COACH_PREAMBLE)
    assert text.endswith(COACH_CLOSING)
    assert "User Information:" in text


def test_identity_block_fallbacks_without_profile() -> None:
    text = build_instruction_text(None, None, [])

    assert "- Name: Unknown" in text
    assert "- Age: Not provided" in text
    assert "- Email: Not provided" in text
    assert "Credit Information:" not in text
    assert "Financial Goals:" not in text


def test_identity_block_full_profile() -> None:
    profile = {"first_name": "Ana", "last_name": "Lima", "age": 31, "email": "ana@example.com"}

    text = build_instruction_text(profile, None, [])

    assert "- Name: Ana Lima" in text
    assert "- Age: 31" in text
    assert "- Email: ana@example.com" in text


def test_credit_block_late_payments_default_to_zero() -> None:
    credit = {
        "credit_score": None,
        "total_debt": None,
        "late_payments": None,
        "credit_utilization": None,
    }

    text = build_instruction_text(None, credit, [])

    assert "- Late Payments: 0" in text
    assert "- Credit Score: Not provided" in text
    assert "- Total Debt: Not provided" in text
    assert "- Credit Utilization: Not provided" in text


def test_credit_block_renders_values() -> None:
    credit = {
        "credit_score": 712,
        "total_debt": Decimal("15250.50"),
        "late_payments": 2,
        "credit_utilization": Decimal("34.00"),
    }

    text = build_instruction_text(None, credit, [])

    assert "- Credit Score: 712" in text
    assert "- Total Debt: $15250.5" in text
    assert "- Late Payments: 2" in text
    assert "- Credit Utilization: 34%" in text


def test_goals_keep_input_order_and_optional_suffixes() -> None:
    goals = [
        _goal(title="Pay off card", target_amount=Decimal("3000.00")),
        _goal(title="Vacation", target_date=date(2027, 6, 1)),
        _goal(title="Car", target_amount=Decimal("12000.00"), target_date=date(2028, 1, 15)),
        _goal(title="Read a finance book"),
    ]

    text = build_instruction_text(None, None, goals)

    lines = text.splitlines()
    headlines = [line for line in lines if line[:2] in {"1.", "2.", "3.", "4."}]
    assert headlines == [
        "1. Pay off card (Target: $3000)",
        "2. Vacation (Due: 2027-06-01)",
        "3. Car (Target: $12000) (Due: 2028-01-15)",
        "4. Read a finance book",
    ]


def test_goal_entry_fallbacks_and_description() -> None:
    goals = [_goal(title="Invest", status=None, priority=None, description="Index funds monthly")]

    text = build_instruction_text(None, None, goals)

    assert "   Status: active" in text
    assert "   Priority: medium" in text
    assert "   Description: Index funds monthly" in text


def test_house_goal_scenario() -> None:
    profile = {"first_name": "Ana"}
    goals = [
        {
            "title": "Buy a house",
            "target_amount": 400000,
            "priority": "high",
            "status": "active",
        }
    ]

    text = build_instruction_text(profile, None, goals)

    assert "Ana" in text
    assert "1. Buy a house (Target: $400000)" in text
    assert "Status: active" in text
    assert "Priority: high" in text
    assert "Credit Information:" not in text


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("400000.00"), "400000"),
        (Decimal("1250.50"), "1250.5"),
        (Decimal("0.99"), "0.99"),
        (400000, "400000"),
        (12.5, "12.5"),
    ],
)
def test_format_amount(value, expected) -> None:
    assert format_amount(value) == expected
