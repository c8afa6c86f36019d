"""Shared test fixtures."""

from __future__ import annotations

import json
import os

import pytest

from mongo_sanitize.request import SanitizableRequest


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    """Isolate tests from MONGO_SANITIZE_* env vars and the cached settings."""
    for key in list(os.environ):
        if key.startswith("MONGO_SANITIZE_"):
            monkeypatch.delenv(key, raising=False)

    import mongo_sanitize.config.loader as loader
    loader._settings = None
    yield
    loader._settings = None


def make_scope(
    path: str = "/api/users",
    method: str = "POST",
    query_string: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> dict:
    return {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query_string,
        "headers": headers or [(b"content-type", b"application/json")],
        "root_path": "",
        "server": ("localhost", 8080),
        "client": ("127.0.0.1", 12345),
    }


@pytest.fixture
def make_request():
    """Factory for SanitizableRequest views over a fresh scope."""

    def _make(body=None, path: str = "/api/users", method: str = "POST", query_string: bytes = b""):
        raw = json.dumps(body).encode() if body is not None else b""
        return SanitizableRequest(make_scope(path, method, query_string), body, raw)

    return _make
