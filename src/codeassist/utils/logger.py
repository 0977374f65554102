"""Session event logger."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def prompt_digest(prompt: str) -> str:
    """Short stable digest used to reference prompts in logs."""
    return hashlib.sha256(prompt.encode("utf-8", "surrogatepass")).hexdigest()[:12]


class Logger:
    """Minimal logger that appends session events as JSON lines."""

    def __init__(self, log_dir: Path, filename: str = "session.log") -> None:
        self.log_dir = log_dir
        self.path = log_dir / filename
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def _write(self, payload: dict) -> None:
        entry = {"timestamp": datetime.now(timezone.utc).isoformat(), **payload}
        with self.path.open("a", encoding="utf-8") as fp:
            fp.write(json.dumps(entry) + "\n")

    def event(self, name: str, **fields: Any) -> None:
        self._write({"event": name, **fields})

    def log_session_start(self, language: str) -> None:
        self.event("session_start", language=language)

    def log_cache_loaded(self, path: Path, entries: int) -> None:
        self.event("cache_loaded", path=str(path), entries=entries)

    def log_cache_load_failed(self, path: Path, reason: str) -> None:
        self.event("cache_load_failed", path=str(path), reason=reason)

    def log_cache_hit(self, task: str, prompt: str) -> None:
        self.event("cache_hit", task=task, prompt=prompt_digest(prompt))

    def log_cache_miss(self, task: str, prompt: str) -> None:
        self.event("cache_miss", task=task, prompt=prompt_digest(prompt))

    def log_request_failed(self, task: str, reason: str) -> None:
        self.event("request_failed", task=task, reason=reason)

    def log_cache_saved(self, path: Path, entries: int) -> None:
        self.event("cache_saved", path=str(path), entries=entries)


class NullLogger(Logger):
    """Logger that drops every event."""

    def __init__(self) -> None:
        pass

    def _write(self, payload: dict) -> None:
        return None
