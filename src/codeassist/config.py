"""Configuration loader for codeassist (global + project TOML, env overrides)."""

from __future__ import annotations

import os
import platform
import stat
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .cache import CACHE_LIMIT, DEFAULT_CACHE_FILE

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for Python <3.11
    import tomli as tomllib  # type: ignore


class ConfigLoader:
    """
    Handles configuration loading from multiple sources with priority resolution.

    Priority (highest → lowest):
    1. Command-line arguments (applied by the CLI via ``set``)
    2. Environment variables (CODEASSIST_*), including a ``.env`` file in the cwd
    3. Project config (.codeassist/config.toml)
    4. Global config (~/.config/codeassist/config.toml)
    5. Built-in defaults
    """

    ENV_PREFIX = "CODEASSIST_"

    def __init__(
        self,
        global_dir: Optional[Path] = None,
        project_dir: Optional[Path] = None,
        create_defaults: bool = True,
        load_env_file: bool = True,
    ) -> None:
        self.global_dir = global_dir or self.get_global_config_dir()
        self.project_dir = project_dir if project_dir is not None else self.get_project_config_dir()
        self.create_defaults = create_defaults

        self.config: Dict[str, Any] = {}
        self.credentials: Dict[str, Any] = {}

        if load_env_file:
            # Existing environment variables win over the .env file.
            load_dotenv(Path.cwd() / ".env", override=False)

        self._load_all()

    # ------------------------------------------------------------------ #
    # Public getters
    # ------------------------------------------------------------------ #
    def get(self, key: str, default: Any = None) -> Any:
        """Get config value by dot-separated key."""
        keys = key.split(".")
        value: Any = self.config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    def set(self, key: str, value: Any) -> None:
        """Override a config value by dot-separated key."""
        self._set_nested(self.config, key, value)

    def get_path(self, key: str, default: Optional[str] = None) -> Optional[Path]:
        """Get a config value as an expanded path."""
        value = self.get(key, default)
        if value is None:
            return None
        return Path(str(value)).expanduser()

    def get_credential(self, section: str, key: str) -> Optional[str]:
        """Get a credential value from credentials.toml."""
        return self.credentials.get(section, {}).get(key)

    # ------------------------------------------------------------------ #
    # Load/merge helpers
    # ------------------------------------------------------------------ #
    def _load_all(self) -> None:
        """Load all configuration files with proper priority."""
        self._load_global_config()
        self._load_credentials()

        if self.project_dir:
            self._load_project_config()

        self._apply_env_overrides()

    def _load_global_config(self) -> None:
        """Load global configuration on top of the defaults."""
        self.config = self._get_default_config()
        config_file = self.global_dir / "config.toml"
        if config_file.exists():
            with open(config_file, "rb") as f:
                self._deep_merge(self.config, tomllib.load(f))
        elif self.create_defaults:
            self._create_default_config()

    def _load_credentials(self) -> None:
        """Load credentials with security checks."""
        creds_file = self.global_dir / "credentials.toml"
        if not creds_file.exists():
            return

        if platform.system() != "Windows":
            st = creds_file.stat()
            # world/group readable bits disallowed
            if st.st_mode & (stat.S_IRWXG | stat.S_IRWXO):
                raise PermissionError(
                    f"Insecure permissions on {creds_file}. Run: chmod 600 {creds_file}"
                )

        with open(creds_file, "rb") as f:
            self.credentials = tomllib.load(f)

    def _load_project_config(self) -> None:
        """Load project-specific config and merge with global."""
        config_file = self.project_dir / "config.toml"
        if config_file.exists():
            with open(config_file, "rb") as f:
                self._deep_merge(self.config, tomllib.load(f))

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides (CODEASSIST_SECTION_KEY)."""
        for key, value in os.environ.items():
            if not key.startswith(self.ENV_PREFIX):
                continue
            # Only the first underscore separates section from key: CODEASSIST_CACHE_PATH -> cache.path
            section, _, name = key[len(self.ENV_PREFIX) :].lower().partition("_")
            if not name:
                continue
            self._set_nested(self.config, f"{section}.{name}", self._coerce(value))

    # ------------------------------------------------------------------ #
    # Static paths/helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def get_global_config_dir() -> Path:
        """Get platform-specific global config directory following XDG spec."""
        system = platform.system()
        if system == "Windows":
            base = Path(os.environ.get("APPDATA", "~\\AppData\\Roaming")).expanduser()
        elif system == "Darwin":
            xdg = os.environ.get("XDG_CONFIG_HOME")
            base = Path(xdg) if xdg else Path.home() / ".config"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
        return base / "codeassist"

    @staticmethod
    def get_project_config_dir() -> Path | None:
        """Find .codeassist directory in current or parent directories."""
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_dir = parent / ".codeassist"
            if config_dir.is_dir():
                return config_dir
        return None

    # ------------------------------------------------------------------ #
    # Persistence helpers
    # ------------------------------------------------------------------ #
    def _create_default_config(self) -> None:
        self.global_dir.mkdir(parents=True, exist_ok=True)
        config_file = self.global_dir / "config.toml"
        with open(config_file, "w", encoding="utf-8") as f:
            f.write(self._get_default_config_toml())

    # ------------------------------------------------------------------ #
    # Default content
    # ------------------------------------------------------------------ #
    def _get_default_config(self) -> Dict[str, Any]:
        """Built-in defaults."""
        return {
            "general": {
                "log_dir": str(self.global_dir / "logs"),
                "log_events": True,
            },
            "cache": {
                "path": DEFAULT_CACHE_FILE,
                "limit": CACHE_LIMIT,
            },
            "request": {
                "temperature": 0.7,
                "top_p": 0.95,
                "max_tokens": 500,
                "timeout_seconds": 60.0,
            },
            "input": {
                "code_file": "code_input.txt",
            },
        }

    def _get_default_config_toml(self) -> str:
        """Default config TOML text for first-run creation."""
        default = self._get_default_config()
        return "\n".join(
            [
                "[general]",
                f"log_dir = '{default['general']['log_dir']}'",
                "log_events = true",
                "",
                "[cache]",
                f'path = "{default["cache"]["path"]}"',
                f'limit = {default["cache"]["limit"]}',
                "",
                "[request]",
                f'temperature = {default["request"]["temperature"]}',
                f'top_p = {default["request"]["top_p"]}',
                f'max_tokens = {default["request"]["max_tokens"]}',
                f'timeout_seconds = {default["request"]["timeout_seconds"]}',
                "",
                "[input]",
                f'code_file = "{default["input"]["code_file"]}"',
                "",
            ]
        )

    # ------------------------------------------------------------------ #
    # Utility helpers
    # ------------------------------------------------------------------ #
    def _deep_merge(self, base: dict, override: dict) -> None:
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _set_nested(self, d: dict, path: str, value: Any) -> None:
        keys = path.split(".")
        for key in keys[:-1]:
            d = d.setdefault(key, {})
        d[keys[-1]] = value

    @staticmethod
    def _coerce(value: str) -> Any:
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        for cast in (int, float):
            try:
                return cast(value)
            except ValueError:
                continue
        return value


Config = ConfigLoader

__all__ = ["ConfigLoader", "Config"]
