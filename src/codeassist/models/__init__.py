"""Model endpoint client."""

from .base import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    LLMException,
    LLMExecutionException,
    LLMUnavailableException,
)
from .client import ChatCompletionsAdapter, create_adapter
from .credentials import CredentialsManager

__all__ = [
    "ChatCompletionsAdapter",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "CredentialsManager",
    "LLMException",
    "LLMExecutionException",
    "LLMUnavailableException",
    "create_adapter",
]
