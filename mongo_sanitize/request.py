"""Request view and the adapter that sanitizes its sections in place."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from starlette.datastructures import QueryParams
from starlette.types import Scope

from mongo_sanitize.config.options import SanitizeOptions
from mongo_sanitize.sanitizer import sanitize_value


class SanitizableRequest:
    """Sections of an ASGI request that the sanitizer can rewrite.

    ``body`` (parsed JSON) is a plain attribute. ``params`` writes through to
    ``scope["path_params"]``, which is empty until the router has matched the
    request. ``query`` is read-only because it is derived from
    ``scope["query_string"]``; it is rewritten through :meth:`replace_query`,
    which re-encodes the query string so the downstream app parses the
    sanitized values.
    """

    def __init__(self, scope: Scope, body: Any = None, raw_body: bytes = b"") -> None:
        self.scope = scope
        self.body = body
        self._parsed_body = body
        self._raw_body = raw_body

    @property
    def params(self) -> dict[str, Any]:
        return self.scope.setdefault("path_params", {})

    @params.setter
    def params(self, value: Mapping[str, Any]) -> None:
        current = self.params
        if value is current:
            return
        # Updated in place so a Request built over the same scope sees the change.
        current.clear()
        current.update(value)

    @property
    def method(self) -> str:
        return self.scope.get("method", "")

    @property
    def path(self) -> str:
        return self.scope.get("path", "")

    @property
    def url(self) -> str:
        query_string = self.scope.get("query_string", b"")
        if query_string:
            return f"{self.path}?{query_string.decode('latin-1')}"
        return self.path

    @property
    def query(self) -> dict[str, Any]:
        """Query parameters; repeated keys collapse into a list."""
        query: dict[str, Any] = {}
        for key, value in QueryParams(self.scope.get("query_string", b"")).multi_items():
            if key not in query:
                query[key] = value
            elif isinstance(query[key], list):
                query[key].append(value)
            else:
                query[key] = [query[key], value]
        return query

    def replace_query(self, data: Mapping[str, Any]) -> None:
        self.scope["query_string"] = urlencode(
            [(str(key), value) for key, value in data.items()], doseq=True
        ).encode("latin-1")

    @property
    def body_changed(self) -> bool:
        return self.body is not self._parsed_body

    def encoded_body(self) -> bytes:
        """Body bytes to forward: re-serialized JSON if the body was replaced."""
        if not self.body_changed:
            return self._raw_body
        return json.dumps(self.body).encode("utf-8")


def _snapshot(section: Any) -> Any:
    if isinstance(section, Mapping):
        return dict(section)
    if isinstance(section, (list, tuple)):
        return list(section)
    return section


def _write_section(request: Any, section: str, value: Any, options: SanitizeOptions) -> None:
    """Assign the sanitized section, or hand it to ``replace_<section>`` if read-only."""
    try:
        setattr(request, section, value)
        return
    except AttributeError:
        pass

    replace = getattr(request, f"replace_{section}", None)
    if callable(replace):
        replace(value)
        options.diagnostics.emit("trace", "REQUEST", "section_replaced", section=section)
    else:
        options.diagnostics.emit("warn", "REQUEST", "section_read_only", section=section)


def handle_request(request: Any, options: SanitizeOptions) -> None:
    """Sanitize every configured section of *request* and write the results back."""
    diagnostics = options.diagnostics
    diagnostics.emit("info", "REQUEST", "sanitizing_request", url=getattr(request, "url", None))

    for section in options.sanitize_objects:
        current = getattr(request, section, None)
        if not current:
            continue

        diagnostics.emit("debug", "REQUEST", "sanitizing_section", section=section, value=current)
        snapshot = _snapshot(current)
        if options.custom_sanitizer is not None:
            sanitized = options.custom_sanitizer(snapshot, options)
        else:
            sanitized = sanitize_value(snapshot, options)

        if diagnostics.enabled and sanitized != snapshot:
            diagnostics.emit(
                "debug", "REQUEST", "section_sanitized", section=section, before=snapshot, after=sanitized
            )
        _write_section(request, section, sanitized, options)
