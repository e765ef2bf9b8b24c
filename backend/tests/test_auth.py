from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import jwt
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from finance_coach import auth
from finance_coach.config import settings


def _token(sub, *, minutes=15, audience="authenticated", secret=None, **extra):
    now = datetime.now(timezone.utc)
    payload = {"sub": sub, "iat": int(now.timestamp()), "exp": int((now + timedelta(minutes=minutes)).timestamp())}
    if audience is not None:
        payload["aud"] = audience
    payload.update(extra)
    return jwt.encode(payload, secret or settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _client() -> TestClient:
    app = FastAPI()

    @app.get("/whoami")
    async def whoami(user_id: UUID = Depends(auth.get_current_user_id)) -> dict[str, str]:
        return {"user_id": str(user_id)}

    return TestClient(app)


def test_valid_token_resolves_user_id() -> None:
    user_id = uuid4()

    with _client() as client:
        response = client.get("/whoami", headers={"Authorization": f"Bearer {_token(str(user_id))}"})

    assert response.status_code == 200
    assert response.json() == {"user_id": str(user_id)}


def test_missing_header_is_401() -> None:
    with _client() as client:
        response = client.get("/whoami")

    assert response.status_code == 401


def test_expired_token_is_401() -> None:
    with _client() as client:
        response = client.get(
            "/whoami",
            headers={"Authorization": f"Bearer {_token(str(uuid4()), minutes=-5)}"},
        )

    assert response.status_code == 401


def test_wrong_signature_is_401() -> None:
    token = _token(str(uuid4()), secret="another-secret-key-of-decent-length")

    with _client() as client:
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_wrong_audience_is_401() -> None:
    with _client() as client:
        response = client.get(
            "/whoami",
            headers={"Authorization": f"Bearer {_token(str(uuid4()), audience='anon')}"},
        )

    assert response.status_code == 401


def test_audience_check_can_be_disabled(monkeypatch) -> None:
    monkeypatch.setattr(settings, "jwt_audience", "")
    user_id = uuid4()

    with _client() as client:
        response = client.get(
            "/whoami",
            headers={"Authorization": f"Bearer {_token(str(user_id), audience=None)}"},
        )

    assert response.status_code == 200


def test_non_uuid_subject_is_401() -> None:
    with _client() as client:
        response = client.get("/whoami", headers={"Authorization": f"Bearer {_token('not-a-uuid')}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token subject"
