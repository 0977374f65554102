"""Chat completions endpoint adapter."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from .base import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    LLMExecutionException,
    LLMUnavailableException,
)
from ..config import ConfigLoader
from .credentials import CredentialsManager


class ChatCompletionsAdapter:
    """Adapter for a chat-completions style endpoint authenticated with an ``api-key`` header."""

    def __init__(
        self,
        credentials: CredentialsManager | None = None,
        endpoint: str | None = None,
        api_key: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint or (credentials.get_endpoint() if credentials else None)
        self.api_key = api_key or (credentials.get_api_key() if credentials else None)
        self.timeout = timeout
        self.transport = transport

    async def chat(self, request: ChatRequest) -> ChatResponse:
        if not self.endpoint:
            raise LLMUnavailableException("API_ENDPOINT not configured.")
        if not self.api_key:
            raise LLMUnavailableException("API_KEY not configured.")

        payload = self._build_payload(request)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(self.endpoint, headers=self._headers(), json=payload)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise LLMExecutionException(f"Request failed: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMExecutionException(f"Malformed response body: {exc}") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise LLMExecutionException("No response generated.")

        choice = choices[0]
        message = choice.get("message") or {}
        content = message.get("content")
        if not isinstance(content, str):
            raise LLMExecutionException("Response choice carries no message content.")

        return ChatResponse(content=content)

    async def complete(self, prompt: str, temperature: float = 0.7, top_p: float = 0.95, max_tokens: int = 500) -> str:
        """Send a single user prompt and return the reply text."""
        response = await self.chat(
            ChatRequest(
                messages=[ChatMessage(role="user", content=prompt)],
                temperature=temperature,
                top_p=top_p,
                max_tokens=max_tokens,
            )
        )
        return response.content

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "api-key": self.api_key or ""}

    @staticmethod
    def _build_payload(request: ChatRequest) -> Dict[str, object]:
        return {
            "messages": [{"role": m.role, "content": m.content} for m in request.messages],
            "temperature": request.temperature,
            "top_p": request.top_p,
            "max_tokens": request.max_tokens,
        }


def create_adapter(config: ConfigLoader, transport: Optional[httpx.AsyncBaseTransport] = None) -> ChatCompletionsAdapter:
    """Build an adapter from a ConfigLoader."""
    return ChatCompletionsAdapter(
        credentials=CredentialsManager(config),
        timeout=float(config.get("request.timeout_seconds", 60.0)),
        transport=transport,
    )
