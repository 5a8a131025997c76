"""Built-in validator step functions.

Each public function here is a factory: called with its options, it returns
a step function ``(value, context) -> bool``. The engine treats the result
as opaque and only looks at its truthiness.
"""

from __future__ import annotations

import math
import re
from collections.abc import Collection, Mapping
from typing import Any, Callable

from .exceptions import ChainBuildError
from .values import (
    UNSET,
    ValueKind,
    is_falsy,
    kind_of,
    to_display_string,
)

Check = Callable[[Any, Any], bool]

_INT = re.compile(r"^[-+]?\d+$")
_FLOAT = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SCALARS = (ValueKind.STRING, ValueKind.NUMBER, ValueKind.BOOLEAN)


def _within(number: float, min: float | None, max: float | None) -> bool:
    if min is not None and number < min:
        return False
    if max is not None and number > max:
        return False
    return True


def exists(values: str = "undefined") -> Check:
    """Field must be present.

    Args:
        values: Which values count as missing: ``"undefined"`` (only absent),
            ``"null"`` (absent or None) or ``"falsy"`` (any falsy value)
    """
    allowed = ["undefined", "null", "falsy"]
    if values not in allowed:
        raise ChainBuildError(
            f"Invalid exists() values option: {values!r}",
            context={"values": values, "allowed": allowed},
        )

    def check(value: Any, context: Any) -> bool:
        if values == "falsy":
            return not is_falsy(value)
        if values == "null":
            return value is not UNSET and value is not None
        return value is not UNSET

    return check


def not_empty() -> Check:
    def check(value: Any, context: Any) -> bool:
        kind = kind_of(value)
        if kind in (ValueKind.SEQUENCE, ValueKind.MAPPING):
            return len(value) > 0
        return to_display_string(value) != ""

    return check


def is_in(values: Collection[Any]) -> Check:
    """Value must equal one of ``values``.

    Scalars are also compared by their string form, so ``1`` matches ``"1"``.
    """
    allowed = list(values)
    allowed_strings = {to_display_string(v) for v in allowed if kind_of(v) in _SCALARS}

    def check(value: Any, context: Any) -> bool:
        if any(value == v for v in allowed if kind_of(v) is kind_of(value)):
            return True
        return kind_of(value) in _SCALARS and to_display_string(value) in allowed_strings

    return check


def equals(comparison: Any) -> Check:
    def check(value: Any, context: Any) -> bool:
        if kind_of(value) in _SCALARS and kind_of(comparison) in _SCALARS:
            return to_display_string(value) == to_display_string(comparison)
        return bool(value == comparison)

    return check


def is_string() -> Check:
    def check(value: Any, context: Any) -> bool:
        return isinstance(value, str)

    return check


def is_int(min: int | None = None, max: int | None = None) -> Check:
    """Value must be an integer, or a string holding one, within bounds."""

    def check(value: Any, context: Any) -> bool:
        kind = kind_of(value)
        if kind is ValueKind.NUMBER:
            if isinstance(value, float) and not value.is_integer():
                return False
            number = int(value)
        elif kind is ValueKind.STRING and _INT.match(value.strip()):
            number = int(value.strip())
        else:
            return False
        return _within(number, min, max)

    return check


def is_float(min: float | None = None, max: float | None = None) -> Check:
    """Value must be a finite number, or a string holding one, within bounds."""

    def check(value: Any, context: Any) -> bool:
        kind = kind_of(value)
        if kind is ValueKind.NUMBER:
            number = float(value)
        elif kind is ValueKind.STRING and _FLOAT.match(value.strip()):
            number = float(value.strip())
        else:
            return False
        return math.isfinite(number) and _within(number, min, max)

    return check


def is_boolean(loose: bool = False) -> Check:
    strict_values = {"true", "false", "0", "1"}
    loose_values = strict_values | {"yes", "no"}

    def check(value: Any, context: Any) -> bool:
        if isinstance(value, bool):
            return True
        if not isinstance(value, (str, int)):
            return False
        text = str(value)
        return text.lower() in loose_values if loose else text in strict_values

    return check


def is_array(min: int | None = None, max: int | None = None) -> Check:
    """Value must be a list or tuple whose length is within bounds."""

    def check(value: Any, context: Any) -> bool:
        return kind_of(value) is ValueKind.SEQUENCE and _within(len(value), min, max)

    return check


def is_object(strict: bool = True) -> Check:
    """Value must be a mapping.

    Args:
        strict: When False, sequences and None are accepted as well
    """

    def check(value: Any, context: Any) -> bool:
        if isinstance(value, Mapping):
            return True
        if strict:
            return False
        return kind_of(value) in (ValueKind.SEQUENCE, ValueKind.NULL)

    return check


def is_length(min: int = 0, max: int | None = None) -> Check:
    """String form of the value must have a length within bounds."""

    def check(value: Any, context: Any) -> bool:
        if kind_of(value) not in _SCALARS:
            return False
        return _within(len(to_display_string(value)), min, max)

    return check


def matches(pattern: str | re.Pattern[str], flags: int = 0) -> Check:
    regex = re.compile(pattern, flags) if isinstance(pattern, str) else pattern

    def check(value: Any, context: Any) -> bool:
        if kind_of(value) not in _SCALARS:
            return False
        return regex.search(to_display_string(value)) is not None

    return check


def is_email() -> Check:
    def check(value: Any, context: Any) -> bool:
        return isinstance(value, str) and _EMAIL.match(value) is not None

    return check


__all__ = [
    "exists",
    "not_empty",
    "is_in",
    "equals",
    "is_string",
    "is_int",
    "is_float",
    "is_boolean",
    "is_array",
    "is_object",
    "is_length",
    "matches",
    "is_email",
]
