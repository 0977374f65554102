"""Bounded prompt/response cache."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

CACHE_LIMIT = 10


@dataclass(frozen=True)
class CacheEntry:
    prompt: str
    response: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"prompt": self.prompt, "response": self.response}


class PromptCache:
    """
    In-memory FIFO cache of model responses keyed by the full prompt text.

    Entries are kept oldest first. Inserting into a full cache drops the entry
    at the front; lookups never change the order, so a frequently read entry
    is evicted just like any other.

    Duplicate prompts are stored as separate entries and ``lookup`` returns
    the oldest one, which can be stale until it is evicted.
    """

    def __init__(self, entries: Optional[Iterable[CacheEntry]] = None, limit: int = CACHE_LIMIT) -> None:
        if limit < 1:
            raise ValueError(f"Cache limit must be positive, got {limit}")
        self.limit = limit
        self._entries: List[CacheEntry] = list(entries) if entries else []

    @property
    def entries(self) -> Tuple[CacheEntry, ...]:
        """Snapshot of the entries, oldest first."""
        return tuple(self._entries)

    def lookup(self, prompt: str) -> Optional[str]:
        """Return the response of the first entry whose prompt matches exactly."""
        for entry in self._entries:
            if entry.prompt == prompt:
                return entry.response
        return None

    def insert(self, prompt: str, response: str) -> None:
        """Append an entry, evicting the oldest one if the cache is full."""
        if len(self._entries) >= self.limit:
            self._entries.pop(0)
        self._entries.append(CacheEntry(prompt=prompt, response=response))

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"PromptCache(entries={len(self._entries)}, limit={self.limit})"
