"""Diagnostics sink filtering tests."""

from __future__ import annotations

from structlog.testing import capture_logs

from mongo_sanitize.config.options import DebugOptions, resolve_options
from mongo_sanitize.diagnostics import Diagnostics
from mongo_sanitize.sanitizer import sanitize_value


def test_disabled_emits_nothing():
    diagnostics = Diagnostics(DebugOptions(enabled=False, level="trace"))
    with capture_logs() as logs:
        diagnostics.emit("error", "TEST", "something_happened")
    assert logs == []


def test_level_filtering():
    diagnostics = Diagnostics(DebugOptions(enabled=True, level="info"))
    with capture_logs() as logs:
        diagnostics.emit("debug", "TEST", "too_verbose")
        diagnostics.emit("info", "TEST", "kept")
        diagnostics.emit("warn", "TEST", "also_kept")
    assert [log["event"] for log in logs] == ["kept", "also_kept"]
    assert logs[1]["log_level"] == "warning"


def test_silent_level_emits_nothing():
    diagnostics = Diagnostics(DebugOptions(enabled=True, level="silent"))
    with capture_logs() as logs:
        diagnostics.emit("error", "TEST", "dropped")
    assert logs == []


def test_trace_maps_to_debug():
    diagnostics = Diagnostics(DebugOptions(enabled=True, level="trace"))
    with capture_logs() as logs:
        diagnostics.emit("trace", "STRING", "string_skipped", value="a@b.io")
    assert logs == [
        {
            "event": "string_skipped",
            "log_level": "debug",
            "component": "mongo-sanitize",
            "context": "STRING",
            "diagnostic_level": "trace",
            "value": "a@b.io",
        }
    ]


def test_sanitized_strings_reported_at_debug():
    opts = resolve_options(debug={"enabled": True, "level": "debug"})
    with capture_logs() as logs:
        sanitize_value({"name": "a.b", "ok": "fine"}, opts)
    sanitized = [log for log in logs if log["event"] == "string_sanitized"]
    assert [(log["original"], log["result"]) for log in sanitized] == [("a.b", "ab")]


def test_logging_does_not_change_result():
    data = {"$where": "x.y", "list": ["$in", None]}
    quiet = sanitize_value(data, resolve_options())
    with capture_logs():
        loud = sanitize_value(data, resolve_options(debug={"enabled": True, "level": "trace"}))
    assert quiet == loud
