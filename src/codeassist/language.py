"""Supported languages and a marker-based language check."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

SUPPORTED_LANGUAGES: Tuple[str, ...] = ("Python", "Rust", "JavaScript", "C++", "Java")

UNKNOWN_LANGUAGE = "Unknown"

# Checked in order; the first marker found decides.
_MARKERS: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("#include",), "C++"),
    (("fn main()",), "Rust"),
    (("def ",), "Python"),
    (("function", "console.log"), "JavaScript"),
    (("public static void main",), "Java"),
)


def normalize_language(value: str) -> Optional[str]:
    """Return the stripped input if it names a supported language, else None."""
    candidate = value.strip()
    if any(lang.lower() == candidate.lower() for lang in SUPPORTED_LANGUAGES):
        return candidate
    return None


def detect_language(code: str) -> str:
    """Guess the language of ``code`` from well-known markers."""
    for markers, language in _MARKERS:
        if any(marker in code for marker in markers):
            return language
    return UNKNOWN_LANGUAGE


def language_matches(code: str, language: str) -> bool:
    """Check that the detected language agrees with the declared one."""
    return detect_language(code).lower() == language.strip().lower()
