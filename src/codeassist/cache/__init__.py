"""Prompt cache and its persistence."""

from .errors import CacheError, CacheFormatError
from .prompt_cache import CACHE_LIMIT, CacheEntry, PromptCache
from .store import DEFAULT_CACHE_FILE, CacheStore, load_cache, save_cache

__all__ = [
    "CACHE_LIMIT",
    "CacheEntry",
    "CacheError",
    "CacheFormatError",
    "CacheStore",
    "DEFAULT_CACHE_FILE",
    "PromptCache",
    "load_cache",
    "save_cache",
]
