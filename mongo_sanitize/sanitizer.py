"""Recursive sanitization of JSON-like request data.

``sanitize_value`` is the single recursion point: it classifies a value and
hands it to the string, array or object sanitizer, which call back into it
for nested content. All functions return new containers and leave their
input untouched.
"""

from __future__ import annotations

from typing import Any

from mongo_sanitize.classify import ValueKind, classify, is_array, is_email, is_plain_object, is_truthy
from mongo_sanitize.config.options import SanitizeOptions
from mongo_sanitize.errors import DEPTH_ERROR, TYPE_ERROR, MongoSanitizeError
from mongo_sanitize.patterns import matches_any


def _check_depth(options: SanitizeOptions, depth: int) -> None:
    if options.max_depth is not None and depth > options.max_depth:
        options.diagnostics.emit("error", "DEPTH", "max_depth_exceeded", max_depth=options.max_depth)
        raise MongoSanitizeError(
            f"Input nesting exceeds maximum depth of {options.max_depth}", DEPTH_ERROR
        )


def sanitize_string(value: Any, options: SanitizeOptions, is_value: bool = False) -> Any:
    """Strip dangerous substrings from *value* and apply string shaping.

    Emails and non-strings come back unchanged. ``max_length`` applies only
    when the string is a value, never to object keys.
    """
    diagnostics = options.diagnostics
    if not isinstance(value, str) or is_email(value):
        diagnostics.emit("trace", "STRING", "string_skipped", value=value)
        return value

    result = options.combined_pattern.sub(options.replace_with, value)
    string_options = options.string_options
    if string_options.trim:
        result = result.strip()
    if string_options.lowercase:
        result = result.lower()
    if string_options.max_length and is_value:
        result = result[: string_options.max_length]

    if diagnostics.enabled and result != value:
        diagnostics.emit("debug", "STRING", "string_sanitized", original=value, result=result)
    return result


def _distinct_key(value: Any) -> tuple:
    # Scalars compare by value (True stays distinct from 1); anything else by identity.
    if value is None or isinstance(value, (str, int, float)):
        return (type(value) is bool, value)
    return ("ref", id(value))


def sanitize_array(value: Any, options: SanitizeOptions, _depth: int = 0) -> list:
    diagnostics = options.diagnostics
    if not is_array(value):
        diagnostics.emit("error", "ARRAY", "input_not_array", value_type=type(value).__name__)
        raise MongoSanitizeError("Input must be an array", TYPE_ERROR)
    _check_depth(options, _depth)

    diagnostics.emit("trace", "ARRAY", "sanitizing_array", length=len(value))
    result = [sanitize_value(item, options, True, _depth=_depth + 1) for item in value]

    if options.array_options.filter_null:
        before = len(result)
        result = [item for item in result if is_truthy(item)]
        diagnostics.emit("debug", "ARRAY", "filtered_nulls", before=before, after=len(result))

    if options.array_options.distinct:
        before = len(result)
        seen: set[tuple] = set()
        unique = []
        for item in result:
            key = _distinct_key(item)
            if key not in seen:
                seen.add(key)
                unique.append(item)
        result = unique
        diagnostics.emit("debug", "ARRAY", "removed_duplicates", before=before, after=len(result))

    return result


def sanitize_object(value: Any, options: SanitizeOptions, _depth: int = 0) -> dict:
    """Sanitize keys and values of a mapping under the key and removal policies.

    Per key, in order: allow-list, deny-list (email values survive it), key
    sanitization, ``remove_matches`` on the original key, ``remove_empty`` on
    the sanitized key, email preservation for denied keys, ``remove_matches``
    on the original string value, then recursive value sanitization.
    """
    diagnostics = options.diagnostics
    if not is_plain_object(value):
        diagnostics.emit("error", "OBJECT", "input_not_object", value_type=type(value).__name__)
        raise MongoSanitizeError("Input must be an object", TYPE_ERROR)
    _check_depth(options, _depth)

    allowed_keys = options.allowed_keys
    denied_keys = options.denied_keys
    patterns = options.patterns
    diagnostics.emit("trace", "OBJECT", "sanitizing_object", keys=list(value))

    result: dict = {}
    for key, item in value.items():
        email_value = is_email(item)
        if allowed_keys and key not in allowed_keys:
            diagnostics.emit("debug", "OBJECT", "key_not_allowed", key=key)
            continue
        if key in denied_keys and not email_value:
            diagnostics.emit("debug", "OBJECT", "key_denied", key=key)
            continue

        sanitized_key = sanitize_string(key, options)
        if options.remove_matches and isinstance(key, str) and matches_any(key, patterns):
            diagnostics.emit("debug", "OBJECT", "key_matches_pattern", key=key)
            continue
        if options.remove_empty and not is_truthy(sanitized_key):
            diagnostics.emit("debug", "OBJECT", "key_empty_after_sanitize", key=key)
            continue

        if email_value and key in denied_keys:
            result[sanitized_key] = item
            diagnostics.emit("trace", "OBJECT", "email_preserved", key=key)
            continue

        if options.remove_matches and isinstance(item, str) and matches_any(item, patterns):
            diagnostics.emit("debug", "OBJECT", "value_matches_pattern", key=key)
            continue

        sanitized_value = sanitize_value(item, options, True, _depth=_depth + 1)
        if not options.remove_empty or is_truthy(sanitized_value):
            result[sanitized_key] = sanitized_value

    return result


def sanitize_value(value: Any, options: SanitizeOptions, is_value: bool = False, *, _depth: int = 0) -> Any:
    """Route *value* to the sanitizer for its shape; unknown shapes pass through."""
    kind = classify(value)
    if kind in (ValueKind.ARRAY, ValueKind.OBJECT) and _depth > 0 and not options.recursive:
        return value
    if kind is ValueKind.ARRAY:
        return sanitize_array(value, options, _depth)
    if kind is ValueKind.OBJECT:
        return sanitize_object(value, options, _depth)
    if kind in (ValueKind.STRING, ValueKind.EMAIL):
        return sanitize_string(value, options, is_value)
    return value
