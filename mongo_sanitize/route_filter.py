"""Skip-route matching on canonicalized request paths."""

from __future__ import annotations

import re
from collections.abc import Iterable

_QUERY_OR_FRAGMENT = re.compile(r"[?#]")


def clean_url(url: str | None) -> str | None:
    """Canonicalize a path: drop query and fragment, trim slashes, keep one leading slash.

    Returns None for empty or non-string input.
    """
    if not isinstance(url, str) or not url:
        return None
    path = _QUERY_OR_FRAGMENT.split(url, maxsplit=1)[0]
    trimmed = path.strip("/")
    return f"/{trimmed}" if trimmed else "/"


def should_skip(skip_routes: Iterable[str], path: str | None) -> bool:
    """Exact match of the canonical *path* against the canonical skip routes."""
    cleaned = clean_url(path)
    if cleaned is None:
        return False
    return any(clean_url(route) == cleaned for route in skip_routes)
