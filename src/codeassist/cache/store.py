"""Loading and saving the prompt cache as JSON."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union

from .errors import CacheError, CacheFormatError
from .prompt_cache import CACHE_LIMIT, CacheEntry, PromptCache

DEFAULT_CACHE_FILE = "api_cache.json"

PathLike = Union[str, Path]


class CacheStore:
    """Handles the on-disk cache file (current format plus the legacy mapping)."""

    @staticmethod
    def load(path: PathLike, limit: int = CACHE_LIMIT) -> PromptCache:
        """
        Load a cache file.

        A missing file yields an empty cache. The current
        ``{"entries": [...]}`` shape is tried first, then the legacy flat
        ``{prompt: response}`` mapping. Anything else raises
        ``CacheFormatError`` rather than silently discarding the file.
        Oversized files are accepted as stored.
        """
        file_path = Path(path)
        if not file_path.exists():
            return PromptCache(limit=limit)

        try:
            raw = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheError(f"Unable to read cache file {file_path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CacheFormatError(f"Cache file {file_path} is not valid JSON: {exc}") from exc

        entries = CacheStore._decode_current(data)
        if entries is None:
            entries = CacheStore._decode_legacy(data)
        if entries is None:
            raise CacheFormatError(
                f"Cache file {file_path} matches neither the current nor the legacy cache format"
            )
        return PromptCache(entries, limit=limit)

    @staticmethod
    def save(path: PathLike, cache: PromptCache) -> None:
        """Atomically overwrite ``path`` with the cache in the current format."""
        file_path = Path(path)
        data = {"entries": [entry.to_dict() for entry in cache]}
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(dir=file_path.parent, suffix=".tmp")
        except OSError as exc:
            raise CacheError(f"Unable to write cache file {file_path}: {exc}") from exc

        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as fp:
                json.dump(data, fp, indent=2)
                fp.flush()
                os.fsync(fp.fileno())
            shutil.move(tmp_path, file_path)
        except (OSError, UnicodeError) as exc:
            raise CacheError(f"Unable to write cache file {file_path}: {exc}") from exc
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    # ------------------------------------------------------------------ #
    # Format decoders
    # ------------------------------------------------------------------ #
    @staticmethod
    def _decode_current(data: Any) -> Optional[List[CacheEntry]]:
        if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
            return None

        entries: List[CacheEntry] = []
        for item in data["entries"]:
            if not isinstance(item, dict):
                return None
            prompt = item.get("prompt")
            response = item.get("response")
            if not isinstance(prompt, str) or not isinstance(response, str):
                return None
            entries.append(CacheEntry(prompt=prompt, response=response))
        return entries

    @staticmethod
    def _decode_legacy(data: Any) -> Optional[List[CacheEntry]]:
        # An "entries" key means a damaged current-format file, not a legacy mapping.
        if not isinstance(data, dict) or "entries" in data:
            return None
        if not all(isinstance(value, str) for value in data.values()):
            return None
        return [CacheEntry(prompt=prompt, response=response) for prompt, response in data.items()]


def load_cache(path: PathLike, limit: int = CACHE_LIMIT) -> PromptCache:
    """Load the cache stored at ``path``."""
    return CacheStore.load(path, limit=limit)


def save_cache(path: PathLike, cache: PromptCache) -> None:
    """Persist ``cache`` to ``path``."""
    CacheStore.save(path, cache)
