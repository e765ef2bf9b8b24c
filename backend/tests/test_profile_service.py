from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from finance_coach.services import profile_service


def _run(coro):
    return asyncio.run(coro)


class FakeProfileCursor:
    def __init__(self, connection):
        self.connection = connection
        self._rows = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def execute(self, query, params=None):
        params = params or ()
        normalized = " ".join(query.split())
        self._rows = []

        if normalized.startswith("INSERT INTO profiles") and "ON CONFLICT (user_id) DO UPDATE" in normalized:
            user_id, first_name, last_name, age, email = params
            now = self.connection._next_timestamp()
            existing = self.connection.profiles.get(user_id)
            row = {
                "id": existing["id"] if existing else uuid4(),
                "user_id": user_id,
                "first_name": first_name,
                "last_name": last_name,
                "age": age,
                "email": email,
                "created_at": existing["created_at"] if existing else now,
                "updated_at": now,
            }
            self.connection.profiles[user_id] = row
            self._rows = [row]
            return

        if normalized.startswith("INSERT INTO credit_info") and "ON CONFLICT (user_id) DO UPDATE" in normalized:
            user_id, credit_score, total_debt, late_payments, credit_utilization = params
            existing = self.connection.credit.get(user_id)
            row = {
                "id": existing["id"] if existing else uuid4(),
                "user_id": user_id,
                "credit_score": credit_score,
                "total_debt": total_debt,
                "late_payments": late_payments,
                "credit_utilization": credit_utilization,
                "last_updated": self.connection._next_timestamp(),
            }
            self.connection.credit[user_id] = row
            self._rows = [row]
            return

        if "FROM profiles WHERE user_id = %s" in normalized:
            row = self.connection.profiles.get(params[0])
            self._rows = [row] if row else []
            return

        if "FROM credit_info WHERE user_id = %s" in normalized:
            row = self.connection.credit.get(params[0])
            self._rows = [row] if row else []
            return

        raise AssertionError(f"Unhandled query: {normalized}")

    async def fetchone(self):
        if not self._rows:
            return None
        return self._rows[0]


class FakeProfileConnection:
    def __init__(self):
        self.profiles = {}
        self.credit = {}
        self._tick = 0

    def _next_timestamp(self):
        self._tick += 1
        return datetime(2026, 2, 1, 8, 0, self._tick)

    def cursor(self):
        return FakeProfileCursor(self)


def test_profile_absent_before_onboarding() -> None:
    assert _run(profile_service.get_profile(FakeProfileConnection(), uuid4())) is None


def test_upsert_profile_keeps_one_row_per_user() -> None:
    connection = FakeProfileConnection()
    user_id = uuid4()

    async def scenario():
        first = await profile_service.upsert_profile(
            connection, user_id, {"first_name": "Ana", "email": "ana@example.com"}
        )
        second = await profile_service.upsert_profile(
            connection, user_id, {"first_name": " Ana ", "last_name": "Lima", "age": 31, "email": "ana@example.com"}
        )
        fetched = await profile_service.get_profile(connection, user_id)
        return first, second, fetched

    first, second, fetched = _run(scenario())

    assert len(connection.profiles) == 1
    assert second["id"] == first["id"]
    assert fetched["first_name"] == "Ana"
    assert fetched["last_name"] == "Lima"
    assert fetched["age"] == 31


def test_upsert_profile_rejects_out_of_range_age() -> None:
    with pytest.raises(ValueError):
        _run(profile_service.upsert_profile(FakeProfileConnection(), uuid4(), {"age": 200}))


def test_upsert_credit_defaults_late_payments_to_zero() -> None:
    connection = FakeProfileConnection()
    user_id = uuid4()

    row = _run(
        profile_service.upsert_credit_info(
            connection,
            user_id,
            {"credit_score": 705, "total_debt": Decimal("1234.567"), "late_payments": None},
        )
    )

    assert row["late_payments"] == 0
    assert row["total_debt"] == Decimal("1234.57")
    assert row["credit_utilization"] is None


def test_upsert_credit_replaces_existing_row() -> None:
    connection = FakeProfileConnection()
    user_id = uuid4()

    async def scenario():
        await profile_service.upsert_credit_info(connection, user_id, {"credit_score": 650})
        await profile_service.upsert_credit_info(connection, user_id, {"credit_score": 700, "late_payments": 1})
        return await profile_service.get_credit_info(connection, user_id)

    row = _run(scenario())

    assert len(connection.credit) == 1
    assert row["credit_score"] == 700
    assert row["late_payments"] == 1


@pytest.mark.parametrize(
    "data",
    [
        {"credit_score": 200},
        {"credit_score": 900},
        {"total_debt": Decimal("-1")},
        {"late_payments": -2},
        {"credit_utilization": Decimal("120")},
    ],
)
def test_upsert_credit_rejects_invalid_values(data) -> None:
    connection = FakeProfileConnection()

    with pytest.raises(ValueError):
        _run(profile_service.upsert_credit_info(connection, uuid4(), data))

    assert connection.credit == {}
