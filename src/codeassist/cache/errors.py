"""Exceptions raised by the prompt cache persistence layer."""

from __future__ import annotations


class CacheError(Exception):
    """Base exception for cache persistence errors."""


class CacheFormatError(CacheError):
    """Raised when a cache file matches neither the current nor the legacy format."""
