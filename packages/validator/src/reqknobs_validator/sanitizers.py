"""Built-in sanitizer step functions.

Each public function is a factory returning a step function
``(value, context) -> new_value``. Sanitizers never fail. Unless stated
otherwise, values of a kind a sanitizer does not handle pass through
unchanged.
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Collection
from typing import Any, Callable

from .values import (
    UNSET,
    ValueKind,
    is_empty_for_default,
    kind_of,
    to_display_string,
)

Transform = Callable[[Any, Any], Any]

_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def default(default_value: Any) -> Transform:
    """Replace UNSET, None, ``""`` and NaN with ``default_value``."""

    def transform(value: Any, context: Any) -> Any:
        if is_empty_for_default(value):
            return copy.deepcopy(default_value)
        return value

    return transform


def replace(values: Any, new_value: Any) -> Transform:
    """Replace the value with ``new_value`` when it equals one of ``values``.

    ``values`` may be a single value or a list of values. Matching is exact.
    """
    if isinstance(values, (list, tuple, set, frozenset)):
        candidates: Collection[Any] = list(values)
    else:
        candidates = [values]

    def transform(value: Any, context: Any) -> Any:
        for candidate in candidates:
            if kind_of(candidate) is kind_of(value) and candidate == value:
                return copy.deepcopy(new_value)
        return value

    return transform


def to_array() -> Transform:
    """Wrap scalars in a list; UNSET becomes an empty list."""

    def transform(value: Any, context: Any) -> Any:
        if value is UNSET:
            return []
        if kind_of(value) is ValueKind.SEQUENCE:
            return value
        return [value]

    return transform


def trim(chars: str | None = None) -> Transform:
    def transform(value: Any, context: Any) -> Any:
        return value.strip(chars) if isinstance(value, str) else value

    return transform


def to_int() -> Transform:
    """Parse a leading integer; unparsable input becomes NaN."""

    def transform(value: Any, context: Any) -> Any:
        kind = kind_of(value)
        if kind in (ValueKind.NUMBER, ValueKind.BOOLEAN):
            if isinstance(value, float) and not math.isfinite(value):
                return float("nan")
            return int(value)
        match = _LEADING_INT.match(to_display_string(value)) if kind is ValueKind.STRING else None
        return int(match.group(1)) if match else float("nan")

    return transform


def to_float() -> Transform:
    """Parse a leading float; unparsable input becomes NaN."""

    def transform(value: Any, context: Any) -> Any:
        kind = kind_of(value)
        if kind in (ValueKind.NUMBER, ValueKind.BOOLEAN):
            return float(value)
        match = _LEADING_FLOAT.match(value) if kind is ValueKind.STRING else None
        return float(match.group(1)) if match else float("nan")

    return transform


def to_boolean(strict: bool = False) -> Transform:
    """Convert to bool.

    Non-strict: everything except ``"0"``, ``"false"`` and ``""`` is True.
    Strict: only ``"1"`` and ``"true"`` are True.
    """

    def transform(value: Any, context: Any) -> Any:
        if isinstance(value, bool):
            return value
        text = to_display_string(value)
        if strict:
            return text in ("1", "true")
        return text not in ("0", "false", "")

    return transform


def to_lower_case() -> Transform:
    def transform(value: Any, context: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    return transform


def to_upper_case() -> Transform:
    def transform(value: Any, context: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    return transform


__all__ = [
    "default",
    "replace",
    "to_array",
    "trim",
    "to_int",
    "to_float",
    "to_boolean",
    "to_lower_case",
    "to_upper_case",
]
