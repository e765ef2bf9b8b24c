"""FastAPI router for the authenticated financial-coach chat."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from finance_coach.ai.history import DEFAULT_HISTORY_LIMIT, list_history
from finance_coach.ai.openai_client import CompletionClient, ProviderError
from finance_coach.ai.state import TurnContext
from finance_coach.ai.turn import AuthFailure, run_turn
from finance_coach.auth import get_current_user_id
from finance_coach.config import settings
from finance_coach.database import get_db_connection, get_optional_db_connection

router = APIRouter(prefix="/chat", tags=["chat"])

PROVIDER_FAILURE_MESSAGE = "The financial coach could not answer right now. Please try again."


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    response: str


class ChatHistoryItem(BaseModel):
    id: UUID
    message: str
    is_user_message: bool
    timestamp: datetime


def _get_completion_client() -> CompletionClient:
    return CompletionClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.openai_timeout_seconds,
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_optional_db_connection),
):
    """
    Answer one message using the user's profile, credit data and goals.

    Example request:
    {"message": "How much should I save monthly?"}

    Example response:
    {"response": "Based on your goal of buying a house ..."}
    """
    message_text = payload.message.strip()
    if not message_text:
        return _error(422, "message must not be empty")

    if not settings.openai_api_key:
        return _error(503, "Financial coach is unavailable because OPENAI_API_KEY is not configured.")

    ctx = TurnContext(user_id=user_id, connection=connection)

    try:
        outcome = await run_turn(ctx, message_text, _get_completion_client())
    except AuthFailure:
        return _error(401, "Not authenticated")
    except ProviderError:
        return _error(502, PROVIDER_FAILURE_MESSAGE)

    return ChatResponse(response=outcome.reply)


@router.get("/history", response_model=list[ChatHistoryItem])
async def chat_history(
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[ChatHistoryItem]:
    """Return the caller's most recent messages, oldest first."""
    rows = await list_history(connection, user_id, limit=limit)
    return [ChatHistoryItem(**row) for row in rows]
