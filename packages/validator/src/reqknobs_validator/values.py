"""Value kinds and emptiness rules for loosely-typed request values.

A request field can be absent, null, a scalar, a sequence or a mapping. The
rules that decide whether a value counts as "empty" or "falsy" are kept here
as explicit tables instead of relying on Python truthiness, because they
differ from it: ``[]`` and ``{}`` are *not* falsy for validation purposes,
while NaN is.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from typing import Any


class _Unset:
    """Marker for a field that is not present in the request."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Unset:
        return self

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class ValueKind(Enum):
    """Kinds a request value can take."""

    UNSET = "unset"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OTHER = "other"


def kind_of(value: Any) -> ValueKind:
    """Classify a value into its ValueKind."""
    if value is UNSET:
        return ValueKind.UNSET
    if value is None:
        return ValueKind.NULL
    # bool is checked before numbers since it subclasses int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def is_unset(value: Any) -> bool:
    return value is UNSET


def is_null(value: Any) -> bool:
    return value is None


def is_nan(value: Any) -> bool:
    """True for the not-a-number marker."""
    return kind_of(value) is ValueKind.NUMBER and isinstance(value, float) and math.isnan(value)


def is_sequence(value: Any) -> bool:
    return kind_of(value) is ValueKind.SEQUENCE


def is_mapping(value: Any) -> bool:
    return kind_of(value) is ValueKind.MAPPING


def is_falsy(value: Any) -> bool:
    """Whether a value counts as falsy for ``optional(check_falsy=True)``.

    Falsy: UNSET, None, ``""``, numeric zero, ``False`` and NaN.
    Empty sequences and mappings are not falsy.
    """
    kind = kind_of(value)
    if kind in (ValueKind.UNSET, ValueKind.NULL):
        return True
    if kind is ValueKind.BOOLEAN:
        return value is False
    if kind is ValueKind.NUMBER:
        return value == 0 or is_nan(value)
    if kind is ValueKind.STRING:
        return value == ""
    return False


def is_empty_for_default(value: Any) -> bool:
    """Whether ``default()`` should replace a value.

    UNSET, None, ``""`` and NaN are replaced. ``0`` and ``False`` are kept.
    """
    kind = kind_of(value)
    if kind in (ValueKind.UNSET, ValueKind.NULL):
        return True
    if kind is ValueKind.STRING:
        return value == ""
    return is_nan(value)


def to_display_string(value: Any) -> str:
    """Render a value as a string the way string-based checks see it."""
    kind = kind_of(value)
    if kind in (ValueKind.UNSET, ValueKind.NULL):
        return ""
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER and isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "UNSET",
    "ValueKind",
    "kind_of",
    "is_unset",
    "is_null",
    "is_nan",
    "is_sequence",
    "is_mapping",
    "is_falsy",
    "is_empty_for_default",
    "to_display_string",
]
