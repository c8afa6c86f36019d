"""Sanitizer options: defaults, validation and normalization.

Options are resolved once at setup time into an immutable
:class:`SanitizeOptions`. Every request reads the same instance, so nothing
here is mutated after construction; manual-mode overrides produce a new
instance through :meth:`SanitizeOptions.merge`.
"""

from __future__ import annotations

import dataclasses
import re
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from mongo_sanitize.diagnostics import LOG_LEVELS, Diagnostics
from mongo_sanitize.errors import ConfigurationError
from mongo_sanitize.patterns import PATTERNS, combine_patterns, compile_patterns

MODES = ("auto", "manual")

_DEFAULT_MAX_DEPTH = 64


@dataclass(frozen=True)
class StringOptions:
    trim: bool = False
    lowercase: bool = False
    max_length: int | None = None


@dataclass(frozen=True)
class ArrayOptions:
    filter_null: bool = False
    distinct: bool = False


@dataclass(frozen=True)
class DebugOptions:
    enabled: bool = False
    level: str = "info"
    log_skipped_routes: bool = False


DEFAULT_OPTIONS: types.MappingProxyType = types.MappingProxyType({
    "replace_with": "",
    "remove_matches": False,
    "sanitize_objects": ("body", "query"),
    "mode": "auto",
    "skip_routes": (),
    "custom_sanitizer": None,
    "recursive": True,
    "remove_empty": False,
    "patterns": PATTERNS,
    "allowed_keys": (),
    "denied_keys": (),
    "string_options": types.MappingProxyType({"trim": False, "lowercase": False, "max_length": None}),
    "array_options": types.MappingProxyType({"filter_null": False, "distinct": False}),
    "debug": types.MappingProxyType({"enabled": False, "level": "info", "log_skipped_routes": False}),
    "max_depth": _DEFAULT_MAX_DEPTH,
})


@dataclass(frozen=True)
class SanitizeOptions:
    """Fully resolved, validated sanitizer configuration."""

    replace_with: str = ""
    remove_matches: bool | None = False
    sanitize_objects: tuple[str, ...] = ("body", "query")
    mode: str = "auto"
    skip_routes: frozenset[str] = frozenset()
    custom_sanitizer: Callable[[Any, SanitizeOptions], Any] | None = None
    recursive: bool | None = True
    remove_empty: bool | None = False
    patterns: tuple[re.Pattern[str], ...] = PATTERNS
    allowed_keys: frozenset[str] = frozenset()
    denied_keys: frozenset[str] = frozenset()
    string_options: StringOptions = field(default_factory=StringOptions)
    array_options: ArrayOptions = field(default_factory=ArrayOptions)
    debug: DebugOptions = field(default_factory=DebugOptions)
    max_depth: int | None = _DEFAULT_MAX_DEPTH
    combined_pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)
    diagnostics: Diagnostics = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "combined_pattern", combine_patterns(self.patterns))
        object.__setattr__(self, "diagnostics", Diagnostics(self.debug))

    def to_dict(self) -> dict[str, Any]:
        """Raw option mapping that :func:`resolve_options` accepts back."""
        return {
            "replace_with": self.replace_with,
            "remove_matches": self.remove_matches,
            "sanitize_objects": self.sanitize_objects,
            "mode": self.mode,
            "skip_routes": tuple(self.skip_routes),
            "custom_sanitizer": self.custom_sanitizer,
            "recursive": self.recursive,
            "remove_empty": self.remove_empty,
            "patterns": self.patterns,
            "allowed_keys": tuple(self.allowed_keys),
            "denied_keys": tuple(self.denied_keys),
            "string_options": dataclasses.asdict(self.string_options),
            "array_options": dataclasses.asdict(self.array_options),
            "debug": dataclasses.asdict(self.debug),
            "max_depth": self.max_depth,
        }

    def merge(self, overrides: Mapping[str, Any] | None = None, **kwargs: Any) -> SanitizeOptions:
        """Return a new options object with *overrides* applied on top of this one."""
        combined = {**(overrides or {}), **kwargs}
        if not combined:
            return self
        return _resolve(combined, self.to_dict())


# ── Validation ──────────────────────────────────────────────────────────


def _is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float))


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def _is_optional_sequence(value: Any) -> bool:
    return value is None or _is_sequence(value)


def _is_patterns(value: Any) -> bool:
    return _is_sequence(value) and len(value) > 0 and all(
        isinstance(item, (str, re.Pattern)) for item in value
    )


def _is_max_depth(value: Any) -> bool:
    return value is None or (isinstance(value, int) and not isinstance(value, bool) and value > 0)


# Evaluated in order; the first failing field is reported.
_VALIDATORS: tuple[tuple[str, Callable[[Any], bool]], ...] = (
    ("replace_with", lambda value: isinstance(value, str)),
    ("remove_matches", _is_primitive),
    ("sanitize_objects", _is_sequence),
    ("mode", lambda value: value in MODES),
    ("skip_routes", _is_sequence),
    ("custom_sanitizer", lambda value: value is None or callable(value)),
    ("recursive", _is_primitive),
    ("remove_empty", _is_primitive),
    ("patterns", _is_patterns),
    ("allowed_keys", _is_optional_sequence),
    ("denied_keys", _is_optional_sequence),
    ("string_options", lambda value: isinstance(value, Mapping)),
    ("array_options", lambda value: isinstance(value, Mapping)),
    ("debug", lambda value: isinstance(value, Mapping)),
    ("max_depth", _is_max_depth),
)


def validate_options(options: Mapping[str, Any]) -> None:
    """Check each option against its predicate; raise on the first failure."""
    for key, validate in _VALIDATORS:
        value = options[key]
        if not validate(value):
            raise ConfigurationError(
                f'Invalid configuration: "{key}" with value {value!r}', field=key, value=value
            )


def _build_sub_options(cls: type, name: str, values: Mapping[str, Any]) -> Any:
    try:
        return cls(**values)
    except TypeError as exc:
        raise ConfigurationError(
            f'Invalid configuration: "{name}" with value {dict(values)!r}', field=name, value=values
        ) from exc


def _resolve(options: Mapping[str, Any], base: Mapping[str, Any]) -> SanitizeOptions:
    unknown = sorted(set(options) - set(base))
    if unknown:
        raise ConfigurationError(
            f'Invalid configuration: unknown option "{unknown[0]}"', field=unknown[0], value=options[unknown[0]]
        )

    merged = {**base, **options}
    validate_options(merged)

    debug = {**base["debug"], **merged["debug"]}
    if debug.get("level") not in LOG_LEVELS:
        raise ConfigurationError(
            f'Invalid configuration: "debug.level" with value {debug.get("level")!r}',
            field="debug.level",
            value=debug.get("level"),
        )

    string_options = _build_sub_options(StringOptions, "string_options", merged["string_options"])
    max_length = string_options.max_length
    if max_length is not None and (not isinstance(max_length, int) or isinstance(max_length, bool)):
        raise ConfigurationError(
            f'Invalid configuration: "string_options.max_length" with value {max_length!r}',
            field="string_options.max_length",
            value=max_length,
        )

    try:
        patterns = compile_patterns(merged["patterns"])
    except re.error as exc:
        raise ConfigurationError(
            f'Invalid configuration: "patterns" could not be compiled ({exc})',
            field="patterns",
            value=merged["patterns"],
        ) from exc

    return SanitizeOptions(
        replace_with=merged["replace_with"],
        remove_matches=merged["remove_matches"],
        sanitize_objects=tuple(merged["sanitize_objects"]),
        mode=merged["mode"],
        skip_routes=frozenset(merged["skip_routes"]),
        custom_sanitizer=merged["custom_sanitizer"],
        recursive=merged["recursive"],
        remove_empty=merged["remove_empty"],
        patterns=patterns,
        allowed_keys=frozenset(merged["allowed_keys"] or ()),
        denied_keys=frozenset(merged["denied_keys"] or ()),
        string_options=string_options,
        array_options=_build_sub_options(ArrayOptions, "array_options", merged["array_options"]),
        debug=_build_sub_options(DebugOptions, "debug", debug),
        max_depth=merged["max_depth"],
    )


def resolve_options(options: Mapping[str, Any] | SanitizeOptions | None = None, /, **overrides: Any) -> SanitizeOptions:
    """Merge user options over the defaults, validate and normalize them.

    Raises :class:`ConfigurationError` naming the first invalid option.
    """
    if isinstance(options, SanitizeOptions):
        return options.merge(overrides)
    if options is not None and not isinstance(options, Mapping):
        raise ConfigurationError("Options must be a mapping", field=None, value=options)
    return _resolve({**(options or {}), **overrides}, DEFAULT_OPTIONS)
