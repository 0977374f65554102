"""Credential loading for the chat endpoint."""

from __future__ import annotations

import os
from typing import Optional

from ..config import ConfigLoader


class CredentialsManager:
    """Loads the endpoint URL and API key from env or ~/.config/codeassist/credentials.toml."""

    ENDPOINT_ENV = "API_ENDPOINT"
    API_KEY_ENV = "API_KEY"

    def __init__(self, config: Optional[ConfigLoader] = None) -> None:
        self.config = config or ConfigLoader()

    def get_endpoint(self) -> Optional[str]:
        """Return the chat endpoint URL, preferring the environment."""
        if os.getenv(self.ENDPOINT_ENV):
            return os.getenv(self.ENDPOINT_ENV)
        return self.config.get_credential("endpoint", "url")

    def get_api_key(self) -> Optional[str]:
        """Return the API key, preferring the environment."""
        if os.getenv(self.API_KEY_ENV):
            return os.getenv(self.API_KEY_ENV)
        return self.config.get_credential("endpoint", "api_key")
