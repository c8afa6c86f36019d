"""Error types raised by the sanitizer."""

from __future__ import annotations

import traceback
from typing import Any

TYPE_ERROR = "type_error"
DEPTH_ERROR = "depth_error"


class MongoSanitizeError(Exception):
    """Base error for sanitizer failures. ``type`` identifies the error kind."""

    def __init__(self, message: str, type: str = "generic") -> None:
        super().__init__(message)
        self.message = message
        self.type = type

    def code(self) -> str:
        return self.type

    def view(self) -> str:
        """Render the error with its kind and traceback for diagnostics."""
        trace = "".join(traceback.format_exception(type(self), self, self.__traceback__))
        return f"{self.__class__.__name__} [{self.type}]: {self.message}\n{trace}"


class ConfigurationError(MongoSanitizeError):
    """An option failed validation at setup time."""

    def __init__(self, message: str, field: str | None = None, value: Any = None) -> None:
        super().__init__(message, TYPE_ERROR)
        self.field = field
        self.value = value
