"""Level-filtered diagnostics for sanitizer decisions.

Every decision point in the sanitizer reports through :class:`Diagnostics`.
When ``debug.enabled`` is off, or the event is more verbose than
``debug.level``, :meth:`Diagnostics.emit` returns before touching the logger,
so a disabled sink costs one comparison per call.
"""

from __future__ import annotations

import types
from typing import TYPE_CHECKING, Any

import structlog

from mongo_sanitize.logging_config import DIAGNOSTICS_LOGGER

if TYPE_CHECKING:
    from mongo_sanitize.config.options import DebugOptions

LOG_LEVELS: types.MappingProxyType = types.MappingProxyType({
    "silent": 0,
    "error": 1,
    "warn": 2,
    "info": 3,
    "debug": 4,
    "trace": 5,
})

# stdlib logging has no trace level
_LOGGER_METHODS = {
    "error": "error",
    "warn": "warning",
    "info": "info",
    "debug": "debug",
    "trace": "debug",
}


class Diagnostics:
    """Diagnostics sink bound to one resolved ``debug`` configuration."""

    def __init__(self, debug: DebugOptions) -> None:
        self._enabled = debug.enabled
        self._threshold = LOG_LEVELS.get(debug.level, 0)
        self.log_skipped_routes = debug.log_skipped_routes

    @property
    def enabled(self) -> bool:
        return self._enabled

    def is_enabled_for(self, level: str) -> bool:
        return self._enabled and LOG_LEVELS[level] <= self._threshold

    def emit(self, level: str, context: str, event: str, **data: Any) -> None:
        if not self.is_enabled_for(level):
            return
        log = getattr(structlog.get_logger(DIAGNOSTICS_LOGGER), _LOGGER_METHODS[level])
        log(event, component="mongo-sanitize", context=context, diagnostic_level=level, **data)
