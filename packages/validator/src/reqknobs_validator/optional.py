"""Chain-wide absence policy.

``optional()`` is not positional: wherever it appears in a chain it is
folded into one ``OptionalPolicy`` that is checked once per field instance
before any step runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .values import is_falsy, is_null, is_unset


@dataclass(frozen=True)
class OptionalPolicy:
    """Decides whether a field's value counts as absent.

    Attributes:
        enabled: Whether the chain is optional at all
        nullable: Treat None as absent
        check_falsy: Treat any falsy value (``""``, 0, False, None, NaN) as absent
    """

    enabled: bool = False
    nullable: bool = False
    check_falsy: bool = False

    @classmethod
    def disabled(cls) -> OptionalPolicy:
        return cls()

    def is_absent(self, value: Any) -> bool:
        """True if the whole pipeline should be skipped for ``value``."""
        if not self.enabled:
            return False
        if is_unset(value):
            return True
        if self.check_falsy:
            return is_falsy(value)
        if self.nullable:
            return is_null(value)
        return False


__all__ = ["OptionalPolicy"]
