"""Common utilities and base classes for reqknobs packages.

This package provides shared functionality used across all reqknobs packages:

- **Exceptions**: Unified exception hierarchy with context support
- **Registry**: Thread-safe registry for managing named items

Example:
    ```python
    from reqknobs_common import ReqknobsError, Registry

    raise ReqknobsError("Something went wrong", context={"details": "here"})

    registry = Registry[MyType]("my_registry")
    registry.register("key", my_item)
    ```
"""

from reqknobs_common.exceptions import (
    ConfigurationError,
    NotFoundError,
    OperationError,
    ReqknobsError,
    ValidationError,
)
from reqknobs_common.registry import Registry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Exceptions
    "ReqknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    # Registry
    "Registry",
]
