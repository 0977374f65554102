"""Interactive console session for the code assistant."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import click

from .cache import CACHE_LIMIT, DEFAULT_CACHE_FILE, CacheError, CacheFormatError, CacheStore, PromptCache
from .config import ConfigLoader
from .language import SUPPORTED_LANGUAGES, language_matches, normalize_language
from .models.base import LLMException
from .models.client import ChatCompletionsAdapter, create_adapter
from .tasks import TaskKind, build_prompt
from .utils.logger import Logger, NullLogger

MENU_CHOICES: Dict[str, TaskKind] = {
    "1": TaskKind.COMPLETION,
    "2": TaskKind.EXPLANATION,
    "3": TaskKind.REFACTOR,
    "4": TaskKind.HELP,
}
EXIT_CHOICE = "5"
END_MARKER = "END"


class AssistantSession:
    """
    Menu-driven session around a single prompt cache.

    The session owns the cache for its lifetime but never touches the disk
    itself; loading and saving happen in ``run_console_session`` so the cache
    is flushed exactly once, after the menu loop ends.
    """

    def __init__(
        self,
        adapter: ChatCompletionsAdapter,
        cache: PromptCache,
        language: str,
        logger: Optional[Logger] = None,
        code_file: Path = Path("code_input.txt"),
        request_options: Optional[Dict[str, float]] = None,
    ) -> None:
        self.adapter = adapter
        self.cache = cache
        self.language = language
        self.logger = logger or NullLogger()
        self.code_file = code_file
        self.request_options = request_options or {}

    async def run(self) -> None:
        """Run the main menu until the user exits or input ends."""
        self.logger.log_session_start(self.language)
        while True:
            self._print_menu()
            try:
                choice = self._read_line("Choose an option: ").strip()
            except (KeyboardInterrupt, EOFError):
                click.echo("\nExiting.")
                return

            if choice == EXIT_CHOICE:
                return
            kind = MENU_CHOICES.get(choice)
            if kind is None:
                click.echo(self._color("Invalid option, please try again.", "warning"))
                continue

            try:
                await self.run_task(kind)
            except (KeyboardInterrupt, EOFError):
                click.echo("\nExiting.")
                return

    async def run_task(self, kind: TaskKind, code: Optional[str] = None) -> Optional[str]:
        """
        Run one task and print the reply.

        Returns the response text, or None when the task was aborted (missing
        code file, language mismatch, model failure).
        """
        if kind.requires_code:
            if code is None:
                code = self.get_code_input()
            if code is None:
                return None
            if not language_matches(code, self.language):
                click.echo(
                    self._color(
                        "The detected language in the code does not match the specified language. Aborting.",
                        "warning",
                    )
                )
                return None

        prompt = build_prompt(kind, self.language, code)
        cached = self.cache.lookup(prompt)
        if cached is not None:
            self.logger.log_cache_hit(kind.value, prompt)
            click.echo(self._muted("Using cached response:"))
            click.echo(self._color(cached, "output"))
            return cached

        self.logger.log_cache_miss(kind.value, prompt)
        try:
            response = await self.adapter.complete(prompt, **self.request_options)
        except LLMException as exc:
            self.logger.log_request_failed(kind.value, str(exc))
            click.echo(self._color(f"Error running model: {exc}", "warning"))
            return None

        self.cache.insert(prompt, response)
        click.echo(self._color(response, "output"))
        return response

    def get_code_input(self) -> Optional[str]:
        """Ask for code, typed in manually or read from the code file."""
        while True:
            click.echo(f"Would you like to input the code manually or read it from '{self.code_file}'?")
            click.echo("1. Manual Input")
            click.echo(f"2. Read from '{self.code_file}'")
            choice = self._read_line("Choose an option: ").strip()

            if choice == "1":
                return self._read_manual_code()
            if choice == "2":
                try:
                    return Path(self.code_file).read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    click.echo(self._color(f"Unable to read {self.code_file}: {exc}", "warning"))
                    return None
            click.echo(self._color("Invalid option, please try again.", "warning"))

    def _read_manual_code(self) -> str:
        click.echo(f"Enter your code (type '{END_MARKER}' on a new line when finished):")
        lines = []
        while True:
            try:
                line = self._read_line()
            except EOFError:
                break
            if line.strip() == END_MARKER:
                break
            lines.append(line + "\n")
        return "".join(lines)

    @staticmethod
    def _read_line(label: str = "") -> str:
        if label:
            click.echo(label, nl=False)
        return input()

    def _print_menu(self) -> None:
        click.echo(self._bold(self._color("AI Code Assistant", "primary")))
        for key, kind in MENU_CHOICES.items():
            click.echo(f"{key}. {kind.title}")
        click.echo(f"{EXIT_CHOICE}. Exit")

    # Styling helpers
    @staticmethod
    def _color(text: str, style: str) -> str:
        palette = {
            "primary": "bright_green",
            "accent": "bright_cyan",
            "output": "bright_white",
            "muted": "bright_black",
            "warning": "bright_yellow",
        }
        return click.style(text, fg=palette.get(style, "white"))

    def _muted(self, text: str) -> str:
        return self._color(text, "muted")

    @staticmethod
    def _bold(text: str) -> str:
        return click.style(text, bold=True)


def ask_for_language() -> str:
    """Prompt until a supported language is entered."""
    names = ", ".join(SUPPORTED_LANGUAGES)
    while True:
        click.echo(f"Please specify the programming language you are using ({names}):")
        click.echo("Enter your programming language: ", nl=False)
        language = normalize_language(input())
        if language:
            return language
        click.echo(f"Invalid language. Please enter one of the following: {names}.")


def create_logger(config: ConfigLoader) -> Logger:
    """Build the event logger configured for this run."""
    if not config.get("general.log_events", True):
        return NullLogger()
    return Logger(config.get_path("general.log_dir") or Path("logs"))


def open_cache(config: ConfigLoader, cache_path: Path, logger: Logger, ignore_corrupt: bool = False) -> PromptCache:
    """Load the cache, optionally falling back to an empty one on a corrupt file."""
    limit = int(config.get("cache.limit", CACHE_LIMIT))
    try:
        cache = CacheStore.load(cache_path, limit=limit)
    except CacheFormatError as exc:
        logger.log_cache_load_failed(cache_path, str(exc))
        if not ignore_corrupt:
            raise
        click.echo(click.style(f"Ignoring unreadable cache: {exc}", fg="bright_yellow"), err=True)
        return PromptCache(limit=limit)
    except CacheError as exc:
        logger.log_cache_load_failed(cache_path, str(exc))
        raise
    logger.log_cache_loaded(cache_path, len(cache))
    return cache


def close_cache(cache_path: Path, cache: PromptCache, logger: Logger) -> None:
    """Flush the cache to disk."""
    CacheStore.save(cache_path, cache)
    logger.log_cache_saved(cache_path, len(cache))


def request_options(config: ConfigLoader) -> Dict[str, float]:
    """Sampling parameters sent with every request."""
    return {
        "temperature": float(config.get("request.temperature", 0.7)),
        "top_p": float(config.get("request.top_p", 0.95)),
        "max_tokens": int(config.get("request.max_tokens", 500)),
    }


async def run_console_session(
    config: ConfigLoader,
    language: Optional[str] = None,
    ignore_corrupt: bool = False,
    adapter: Optional[ChatCompletionsAdapter] = None,
) -> PromptCache:
    """Load the cache, run the interactive session and save the cache on exit."""
    language = language or ask_for_language()
    logger = create_logger(config)
    cache_path = config.get_path("cache.path", DEFAULT_CACHE_FILE)
    cache = open_cache(config, cache_path, logger, ignore_corrupt=ignore_corrupt)

    session = AssistantSession(
        adapter=adapter or create_adapter(config),
        cache=cache,
        language=language,
        logger=logger,
        code_file=config.get_path("input.code_file", "code_input.txt"),
        request_options=request_options(config),
    )
    await session.run()

    close_cache(cache_path, cache, logger)
    return cache


async def run_single_task(
    config: ConfigLoader,
    kind: TaskKind,
    language: str,
    code: Optional[str] = None,
    adapter: Optional[ChatCompletionsAdapter] = None,
) -> Optional[str]:
    """Run one task non-interactively through the persistent cache."""
    logger = create_logger(config)
    cache_path = config.get_path("cache.path", DEFAULT_CACHE_FILE)
    cache = open_cache(config, cache_path, logger)

    session = AssistantSession(
        adapter=adapter or create_adapter(config),
        cache=cache,
        language=language,
        logger=logger,
        request_options=request_options(config),
    )
    if kind.requires_code and code is None:
        raise ValueError(f"Task '{kind.value}' requires code input")
    response = await session.run_task(kind, code=code)

    close_cache(cache_path, cache, logger)
    return response
