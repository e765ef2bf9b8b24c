"""Minimal OpenAI chat-completions wrapper for single-turn coaching replies."""

from __future__ import annotations

from typing import Any

import httpx

COMPLETION_TEMPERATURE = 0.7
COMPLETION_MAX_TOKENS = 1000


class ProviderError(Exception):
    """Base exception for completion provider failures."""


class ProviderRequestError(ProviderError):
    """Raised when the provider request fails or returns a non-success status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class ProviderResponseError(ProviderError):
    """Raised when a success response body cannot be parsed into a reply."""


class CompletionClient:
    """Thin client for `POST /chat/completions` with one system and one user message."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _build_body(self, instruction_text: str, user_message: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": instruction_text},
                {"role": "user", "content": user_message},
            ],
            "temperature": COMPLETION_TEMPERATURE,
            "max_tokens": COMPLETION_MAX_TOKENS,
        }

    async def complete(self, instruction_text: str, user_message: str) -> str:
        """Send one request and return the assistant reply text; no retries."""
        body = self._build_body(instruction_text, user_message)
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=headers,
                    json=body,
                )
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise ProviderRequestError(503, f"Completion request failed: {exc}") from exc

        if response.status_code >= 400:
            raise ProviderRequestError(response.status_code, response.text)

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderResponseError("Invalid JSON from completion provider") from exc

        return self._parse_response(payload)

    def _parse_response(self, payload: Any) -> str:
        if not isinstance(payload, dict):
            raise ProviderResponseError("Completion response is not an object")

        choices = payload.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            raise ProviderResponseError("Completion response missing choices")

        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ProviderResponseError("Completion response missing message content")

        return content
