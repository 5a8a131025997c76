"""Named step-function registries.

Built-in validators and sanitizers are registered here by name so that
chains can look them up with ``check_with()`` / ``sanitize_with()``, and so
that applications can add their own named step functions once at start-up.

Example:
    ```python
    from reqknobs_validator.library import register_validator

    def is_postcode():
        def check(value, context):
            return isinstance(value, str) and len(value.replace(" ", "")) in (5, 6, 7)
        return check

    register_validator("is_postcode", is_postcode)

    chain = body("postcode").check_with("is_postcode")
    ```
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from reqknobs_common import Registry

from . import sanitizers, validators

logger = logging.getLogger(__name__)

StepFactory = Callable[..., Callable[[Any, Any], Any]]


class StepRegistry(Registry[StepFactory]):
    """Registry of step-function factories keyed by name."""

    def build(self, name: str, *args: Any, **kwargs: Any) -> Callable[[Any, Any], Any]:
        """Look up a factory and build a step function from it.

        Raises:
            NotFoundError: If no factory is registered under ``name``
        """
        return self.get(name)(*args, **kwargs)


VALIDATORS = StepRegistry("validators", enable_metrics=True)
SANITIZERS = StepRegistry("sanitizers", enable_metrics=True)

for _name in validators.__all__:
    VALIDATORS.register(_name, getattr(validators, _name), metadata={"builtin": True})

for _name in sanitizers.__all__:
    SANITIZERS.register(_name, getattr(sanitizers, _name), metadata={"builtin": True})


def register_validator(name: str, factory: StepFactory, allow_overwrite: bool = False) -> None:
    """Register a named validator factory."""
    VALIDATORS.register(name, factory, metadata={"builtin": False}, allow_overwrite=allow_overwrite)
    logger.debug("Registered validator %s", name)


def register_sanitizer(name: str, factory: StepFactory, allow_overwrite: bool = False) -> None:
    """Register a named sanitizer factory."""
    SANITIZERS.register(name, factory, metadata={"builtin": False}, allow_overwrite=allow_overwrite)
    logger.debug("Registered sanitizer %s", name)


__all__ = [
    "StepFactory",
    "StepRegistry",
    "VALIDATORS",
    "SANITIZERS",
    "register_validator",
    "register_sanitizer",
]
