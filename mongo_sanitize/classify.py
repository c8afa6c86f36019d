"""Value classification used to route sanitization."""

from __future__ import annotations

import datetime
import enum
import math
from typing import Any

from mongo_sanitize.patterns import EMAIL_RE


class ValueKind(enum.Enum):
    PRIMITIVE = "primitive"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"
    STRING = "string"
    EMAIL = "email"
    OTHER = "other"


def is_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_RE.fullmatch(value) is not None


def is_plain_object(value: Any) -> bool:
    return isinstance(value, dict)


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_primitive(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float))


def is_date(value: Any) -> bool:
    return isinstance(value, (datetime.date, datetime.time))


def is_truthy(value: Any) -> bool:
    """JSON-style truthiness: containers are always truthy, NaN is falsy.

    ``filter_null`` and ``remove_empty`` drop falsy values, which means
    ``0``, ``False`` and ``""`` go along with ``None``.
    """
    if is_array(value) or is_plain_object(value):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def classify(value: Any) -> ValueKind:
    if is_primitive(value):
        return ValueKind.PRIMITIVE
    if is_date(value):
        return ValueKind.DATE
    if is_array(value):
        return ValueKind.ARRAY
    if is_plain_object(value):
        return ValueKind.OBJECT
    if isinstance(value, str):
        return ValueKind.EMAIL if is_email(value) else ValueKind.STRING
    return ValueKind.OTHER
