"""Injection patterns and the email exemption regex."""

from __future__ import annotations

import re
from collections.abc import Iterable

# ── Injection vectors ───────────────────────────────────────────────────
# Operator prefix, dotted-path traversal, regex/JS metacharacters,
# control characters, and brace templates (``{$where}``, ``${...}``).

PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\$"),
    re.compile(r"\."),
    re.compile(r"[\\/{}.(*+?|\[\]^)]"),
    re.compile(r"[\x00-\x1f\x7f-\x9f]"),
    re.compile(r"\{\s*\$|\$?\{(?:.|\r?\n)*\}"),
)

EMAIL_RE = re.compile(
    r"(?:[a-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r'|"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21\x23-\x5b\x5d-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])*")'
    r"@(?:(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]*[a-z0-9])?"
    r"|\[(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?|[a-z0-9-]*[a-z0-9]:"
    r"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x21-\x5a\x53-\x7f]|\\[\x01-\x09\x0b\x0c\x0e-\x7f])+)\])",
    re.IGNORECASE,
)


def compile_patterns(items: Iterable[str | re.Pattern[str]]) -> tuple[re.Pattern[str], ...]:
    """Compile a mix of pattern strings and compiled patterns into a tuple."""
    return tuple(item if isinstance(item, re.Pattern) else re.compile(item) for item in items)


def combine_patterns(patterns: Iterable[re.Pattern[str]]) -> re.Pattern[str]:
    """Join all patterns into one alternation so a string needs a single pass."""
    return re.compile("|".join(f"(?:{pattern.pattern})" for pattern in patterns))


def matches_any(value: str, patterns: Iterable[re.Pattern[str]]) -> bool:
    return any(pattern.search(value) for pattern in patterns)
