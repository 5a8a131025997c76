"""Common exception hierarchy for all reqknobs packages.

Every reqknobs package raises exceptions derived from ``ReqknobsError``.
Each exception carries an optional context dictionary so callers can log
structured detail about what went wrong without parsing the message.

Note that validation *outcomes* (a field failing a check) are never raised:
they are recorded as failure records on the request state. The exceptions
here describe misuse of the library or a caller explicitly asking for a
collected result to be raised.

Example:
    ```python
    from reqknobs_common.exceptions import ConfigurationError, NotFoundError

    raise ConfigurationError(
        "with_message() must follow a validator",
        context={"chain": "body.email", "previous_step": "trim"}
    )

    try:
        registry.get("is_postcode")
    except ReqknobsError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class ReqknobsError(Exception):
    """Base exception for all reqknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (field names, keys, etc.)
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = ReqknobsError(
            "Chain build failed",
            context={"location": "body", "path": "email"}
        )
        str(error)
        # 'Chain build failed'
        error.context
        # {'location': 'body', 'path': 'email'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(ReqknobsError):
    """Raised when a caller asks for collected validation failures to be raised.

    The engine itself never raises this while running chains; failures are
    accumulated silently. Hosts that prefer exceptions convert a finished
    request state into one of these.

    Example:
        ```python
        raise ValidationError(
            "Request failed validation",
            context={"failures": 2}
        )
        ```
    """

    pass


class ConfigurationError(ReqknobsError):
    """Raised when configuration or chain declaration is invalid.

    Common scenarios include:
    - A modifier declared where it cannot apply
    - Unknown or mistyped settings keys
    - Unreadable settings files

    Example:
        ```python
        raise ConfigurationError(
            "Unknown settings key",
            context={"key": "default_mesage"}
        )
        ```
    """

    pass


class NotFoundError(ReqknobsError):
    """Raised when a requested item is not found.

    Example:
        ```python
        raise NotFoundError(
            "Step function not found",
            context={"key": "is_postcode", "registry": "validators"}
        )
        ```
    """

    pass


class OperationError(ReqknobsError):
    """Raised when an operation fails.

    Used for registry conflicts and other failures that do not fit the
    categories above.

    Example:
        ```python
        raise OperationError(
            "Item already registered",
            context={"key": "trim", "registry": "sanitizers"}
        )
        ```
    """

    pass


__all__ = [
    "ReqknobsError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]
