"""Assistant tasks and the prompts sent for them."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class TaskKind(Enum):
    COMPLETION = "completion"
    EXPLANATION = "explanation"
    REFACTOR = "refactor"
    HELP = "help"

    @property
    def requires_code(self) -> bool:
        return self is not TaskKind.HELP

    @property
    def title(self) -> str:
        return TASK_TITLES[self]


TASK_TITLES = {
    TaskKind.COMPLETION: "Code Completion",
    TaskKind.EXPLANATION: "Code Explanation",
    TaskKind.REFACTOR: "Refactoring Suggestions",
    TaskKind.HELP: "Help: How to Use",
}

_INSTRUCTIONS = {
    TaskKind.COMPLETION: "Your task is to complete the given code:",
    TaskKind.EXPLANATION: "Your task is to explain the following code:",
    TaskKind.REFACTOR: "Your task is to provide refactoring suggestions for the following code:",
}

HELP_INSTRUCTIONS = (
    "Please provide a brief explanation on how to use the features of this AI Code Assistant, "
    "including code completion, code explanation, and refactoring suggestions."
)


def build_prompt(kind: TaskKind, language: str, code: Optional[str] = None) -> str:
    """
    Render the prompt for a task.

    The result doubles as the cache key, so it must be deterministic: the same
    task, language spelling and code always produce the same string.
    """
    preamble = f"You are working with {language} code."
    if kind is TaskKind.HELP:
        return f"{preamble} {HELP_INSTRUCTIONS}"
    if code is None:
        raise ValueError(f"Task '{kind.value}' requires code input")
    return f"{preamble} {_INSTRUCTIONS[kind]}\n\n{code}"
