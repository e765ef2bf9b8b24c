"""Append-only chat history for the coach.

One row per message in `chat_history`; rows are never updated or deleted.
The history is persisted for the chat screen only and is not replayed into
the model context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

DEFAULT_HISTORY_LIMIT = 100


async def append_message(
    connection: AsyncConnection,
    user_id: UUID,
    message: str,
    is_user_message: bool,
) -> None:
    """Append one message exactly as given; blank text is rejected."""
    if not message.strip():
        raise ValueError("Message content cannot be empty")

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            INSERT INTO chat_history (user_id, message, is_user_message)
            VALUES (%s, %s, %s)
            """,
            (user_id, message, is_user_message),
        )


async def list_history(
    connection: AsyncConnection,
    user_id: UUID,
    limit: int = DEFAULT_HISTORY_LIMIT,
) -> list[dict[str, Any]]:
    """Load the most recent messages in chronological order."""
    if limit < 1:
        return []

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT id, message, is_user_message, timestamp
            FROM chat_history
            WHERE user_id = %s
            ORDER BY timestamp DESC
            LIMIT %s
            """,
            (user_id, limit),
        )
        rows = await cursor.fetchall()

    return list(reversed(rows))
