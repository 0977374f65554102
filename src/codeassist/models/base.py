"""Shared request/response types and exceptions for the model endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List


class LLMException(Exception):
    """Base exception for LLM errors."""


class LLMUnavailableException(LLMException):
    """Raised when the model endpoint is not configured."""


class LLMExecutionException(LLMException):
    """Raised when a request to the model endpoint fails."""


@dataclass
class ChatMessage:
    role: str
    content: str


@dataclass
class ChatRequest:
    messages: List[ChatMessage]
    temperature: float = 0.7
    top_p: float = 0.95
    max_tokens: int = 500


@dataclass
class ChatResponse:
    content: str
