"""codeassist CLI entry point."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .cache import CACHE_LIMIT, DEFAULT_CACHE_FILE, CacheError, CacheStore
from .config import ConfigLoader
from .language import SUPPORTED_LANGUAGES, normalize_language
from .tasks import TaskKind

PREVIEW_WIDTH = 60


def _load_config(cache_file: Optional[Path]) -> ConfigLoader:
    config = ConfigLoader()
    if cache_file is not None:
        config.set("cache.path", str(cache_file))
    return config


def _validate_language(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    language = normalize_language(value)
    if language is None:
        raise click.BadParameter(f"must be one of: {', '.join(SUPPORTED_LANGUAGES)}")
    return language


cache_file_option = click.option(
    "--cache-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Cache file to use (default: {DEFAULT_CACHE_FILE})",
)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--language", callback=_validate_language, help="Programming language of your code")
@cache_file_option
@click.option("--ignore-corrupt-cache", is_flag=True, help="Start with an empty cache if the cache file is unreadable")
@click.pass_context
def main(ctx: click.Context, language: Optional[str], cache_file: Optional[Path], ignore_corrupt_cache: bool) -> None:
    """AI Code Assistant - completion, explanation and refactoring from your terminal."""
    if ctx.invoked_subcommand is not None:
        return

    from .session import run_console_session

    try:
        config = _load_config(cache_file)
        asyncio.run(run_console_session(config, language=language, ignore_corrupt=ignore_corrupt_cache))
    except (CacheError, PermissionError) as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    except (KeyboardInterrupt, EOFError):
        # The session loop reports its own exit; nothing is left unsaved here.
        return


@main.command()
@click.argument("task", type=click.Choice([kind.value for kind in TaskKind]))
@click.option("--language", required=True, callback=_validate_language, help="Programming language of your code")
@click.option(
    "--file",
    "code_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read code from this file instead of stdin",
)
@cache_file_option
@click.pass_context
def ask(ctx: click.Context, task: str, language: str, code_file: Optional[Path], cache_file: Optional[Path]) -> None:
    """Run a single TASK without the interactive menu."""
    from .session import run_single_task

    kind = TaskKind(task)
    code = None
    if kind.requires_code:
        try:
            code = code_file.read_text(encoding="utf-8") if code_file else click.get_text_stream("stdin").read()
        except (OSError, UnicodeDecodeError) as exc:
            click.echo(f"Error: unable to read code: {exc}", err=True)
            ctx.exit(1)

    try:
        config = _load_config(cache_file)
        response = asyncio.run(run_single_task(config, kind, language, code=code))
    except (CacheError, PermissionError) as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    if response is None:
        ctx.exit(1)


@main.group()
def cache() -> None:
    """Inspect or upgrade the prompt cache file."""


@cache.command("show")
@cache_file_option
@click.pass_context
def cache_show(ctx: click.Context, cache_file: Optional[Path]) -> None:
    """List cached prompts, oldest first."""
    config = _load_config(cache_file)
    path = config.get_path("cache.path", DEFAULT_CACHE_FILE)
    try:
        prompt_cache = CacheStore.load(path, limit=int(config.get("cache.limit", CACHE_LIMIT)))
    except CacheError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)

    click.echo(f"{path}: {len(prompt_cache)} / {prompt_cache.limit} entries")
    for index, entry in enumerate(prompt_cache, start=1):
        preview = " ".join(entry.prompt.split())
        if len(preview) > PREVIEW_WIDTH:
            preview = preview[: PREVIEW_WIDTH - 3] + "..."
        click.echo(f"{index:>3}. {preview}")


@cache.command("migrate")
@cache_file_option
@click.pass_context
def cache_migrate(ctx: click.Context, cache_file: Optional[Path]) -> None:
    """Rewrite the cache file in the current format."""
    config = _load_config(cache_file)
    path = config.get_path("cache.path", DEFAULT_CACHE_FILE)
    if not path.exists():
        click.echo(f"No cache file at {path}.")
        return
    try:
        prompt_cache = CacheStore.load(path, limit=int(config.get("cache.limit", CACHE_LIMIT)))
        CacheStore.save(path, prompt_cache)
    except CacheError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
    click.echo(f"Rewrote {path} with {len(prompt_cache)} entries.")


if __name__ == "__main__":
    main()
