"""codeassist - AI code assistant with a persistent prompt cache."""

__version__ = "0.1.0"
__author__ = "codeassist Contributors"

from .cache import CACHE_LIMIT, CacheEntry, CacheError, CacheFormatError, CacheStore, PromptCache
from .config import Config
from .tasks import TaskKind, build_prompt

__all__ = [
    "CACHE_LIMIT",
    "CacheEntry",
    "CacheError",
    "CacheFormatError",
    "CacheStore",
    "Config",
    "PromptCache",
    "TaskKind",
    "build_prompt",
]
