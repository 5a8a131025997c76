"""Exceptions for the validator package.

Built on the common exception framework from reqknobs_common.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqknobs_common import (
    ConfigurationError,
    ValidationError,
)

if TYPE_CHECKING:
    from .context import FailureRecord


class ChainBuildError(ConfigurationError):
    """Raised when a chain is declared in a way that cannot run."""

    pass


class SettingsError(ConfigurationError):
    """Raised when validator settings are invalid or cannot be loaded."""

    pass


class RequestValidationError(ValidationError):
    """Raised on request by a caller holding a request state with failures.

    Attributes:
        failures: The failure records, in the order they were recorded
    """

    def __init__(self, failures: list[FailureRecord]):
        self.failures = list(failures)
        super().__init__(
            f"Request failed validation with {len(self.failures)} error(s)",
            context={
                "fields": [f"{f.location}.{f.path}" for f in self.failures],
            },
        )


__all__ = [
    "ChainBuildError",
    "SettingsError",
    "RequestValidationError",
]
