import json
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from codeassist.cli import main
from codeassist.tasks import TaskKind, build_prompt


class DummyAdapter:
    def __init__(self, reply: str = "cli reply") -> None:
        self.reply = reply
        self.prompts = []

    async def complete(self, prompt: str, **options) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def workdir(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ("API_ENDPOINT", "API_KEY", "CODEASSIST_CACHE_PATH"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture
def adapter(monkeypatch) -> DummyAdapter:
    dummy = DummyAdapter()
    monkeypatch.setattr("codeassist.session.create_adapter", lambda config: dummy)
    return dummy


def test_cache_show_lists_prompts(workdir: Path) -> None:
    (workdir / "api_cache.json").write_text(
        json.dumps({"entries": [{"prompt": "first\nprompt", "response": "r1"}, {"prompt": "x" * 100, "response": "r2"}]}),
        encoding="utf-8",
    )

    result = CliRunner().invoke(main, ["cache", "show"])

    assert result.exit_code == 0
    assert "2 / 10 entries" in result.output
    assert "1. first prompt" in result.output
    assert "..." in result.output


def test_cache_show_reports_corrupt_file(workdir: Path) -> None:
    (workdir / "api_cache.json").write_text(json.dumps({"entries": "not-a-list"}), encoding="utf-8")

    result = CliRunner().invoke(main, ["cache", "show"])

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_cache_migrate_rewrites_legacy_file(workdir: Path) -> None:
    path = workdir / "legacy.json"
    path.write_text(json.dumps({"a": "1"}), encoding="utf-8")

    result = CliRunner().invoke(main, ["cache", "migrate", "--cache-file", str(path)])

    assert result.exit_code == 0
    assert json.loads(path.read_text(encoding="utf-8")) == {"entries": [{"prompt": "a", "response": "1"}]}


def test_ask_help_uses_and_fills_cache(workdir: Path, adapter: DummyAdapter) -> None:
    runner = CliRunner()

    first = runner.invoke(main, ["ask", "help", "--language", "python"])
    second = runner.invoke(main, ["ask", "help", "--language", "python"])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert adapter.prompts == [build_prompt(TaskKind.HELP, "python")]
    assert "Using cached response:" in second.output


def test_ask_reads_code_from_file(workdir: Path, adapter: DummyAdapter) -> None:
    code_path = workdir / "snippet.rs"
    code_path.write_text("fn main() {}\n", encoding="utf-8")

    result = CliRunner().invoke(main, ["ask", "explanation", "--language", "Rust", "--file", str(code_path)])

    assert result.exit_code == 0, result.output
    assert adapter.prompts == [build_prompt(TaskKind.EXPLANATION, "Rust", "fn main() {}\n")]


def test_ask_rejects_unknown_language(workdir: Path, adapter: DummyAdapter) -> None:
    result = CliRunner().invoke(main, ["ask", "help", "--language", "Cobol"])

    assert result.exit_code == 2
    assert adapter.prompts == []


def test_interactive_session_with_corrupt_cache_exits_1(workdir: Path, adapter: DummyAdapter) -> None:
    (workdir / "api_cache.json").write_text("[]", encoding="utf-8")

    result = CliRunner().invoke(main, ["--language", "Python"], input="5\n")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_interactive_session_saves_on_exit(workdir: Path, adapter: DummyAdapter) -> None:
    result = CliRunner().invoke(main, [], input="java\n4\n5\n")

    assert result.exit_code == 0, result.output
    data = json.loads((workdir / "api_cache.json").read_text(encoding="utf-8"))
    assert data["entries"] == [{"prompt": build_prompt(TaskKind.HELP, "java"), "response": "cli reply"}]


def test_interactive_session_reports_save_failure(workdir: Path, adapter: DummyAdapter) -> None:
    blocker = workdir / "blocker"
    blocker.write_text("", encoding="utf-8")

    result = CliRunner().invoke(
        main, ["--language", "Python", "--cache-file", str(blocker / "api_cache.json")], input="4\n5\n"
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert adapter.prompts == [build_prompt(TaskKind.HELP, "Python")]


def test_ask_reports_save_failure(workdir: Path, adapter: DummyAdapter) -> None:
    blocker = workdir / "blocker"
    blocker.write_text("", encoding="utf-8")

    result = CliRunner().invoke(
        main, ["ask", "help", "--language", "Python", "--cache-file", str(blocker / "api_cache.json")]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_ask_reports_undecodable_code_file(workdir: Path, adapter: DummyAdapter) -> None:
    code_path = workdir / "latin1.py"
    code_path.write_bytes(b"def f():\n    return '\xff'\n")

    result = CliRunner().invoke(main, ["ask", "completion", "--language", "Python", "--file", str(code_path)])

    assert result.exit_code == 1
    assert "Error: unable to read code" in result.output
    assert adapter.prompts == []


def test_interrupt_prints_exit_message_once(workdir: Path, monkeypatch) -> None:
    async def interrupted_session(config, language=None, ignore_corrupt=False):
        # asyncio.run re-raises the interrupt after the session loop has already said goodbye.
        click.echo("\nExiting.")
        raise KeyboardInterrupt

    monkeypatch.setattr("codeassist.session.run_console_session", interrupted_session)

    result = CliRunner().invoke(main, ["--language", "Python"])

    assert result.exit_code == 0
    assert result.output.count("Exiting.") == 1
