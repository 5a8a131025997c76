"""Pipeline step descriptors.

A chain is an ordered list of ``Step`` objects. Validator and sanitizer
steps wrap an opaque step function called as ``fn(value, context)``; the
function may return a plain value or an awaitable. Modifier steps (``NOT``,
``BAIL``, ``MESSAGE``, ``OPTIONAL``) produce no result of their own and act
on their neighbours.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .context import Context

StepFunction = Callable[[Any, "Context"], Union[Any, Awaitable[Any]]]
MessageFactory = Callable[[Any, "Context"], Any]
Message = Union[str, MessageFactory, Any]


class StepKind(Enum):
    """Kinds of pipeline steps."""

    VALIDATOR = "validator"
    """Built-in check; a falsy result is a failure."""

    CUSTOM = "custom"
    """Caller-supplied check; may be async and may raise."""

    SANITIZER = "sanitizer"
    """Built-in transformation; never fails."""

    CUSTOM_SANITIZER = "custom_sanitizer"
    """Caller-supplied transformation; may be async."""

    CONDITIONAL = "conditional"
    """Predicate that aborts the rest of the pipeline when false."""

    BAIL = "bail"
    """Stops the pipeline if an earlier validator failed."""

    NOT = "not"
    """Negates the next validator."""

    OPTIONAL = "optional"
    """Chain-wide absence policy; folded at build time."""

    MESSAGE = "message"
    """Rebinds the message of the preceding validator's failure."""

    @property
    def is_validator(self) -> bool:
        return self in (StepKind.VALIDATOR, StepKind.CUSTOM)

    @property
    def is_sanitizer(self) -> bool:
        return self in (StepKind.SANITIZER, StepKind.CUSTOM_SANITIZER)

    @property
    def is_modifier(self) -> bool:
        return self in (StepKind.NOT, StepKind.BAIL, StepKind.MESSAGE, StepKind.OPTIONAL)


@dataclass
class Step:
    """One element of a chain.

    Attributes:
        kind: What the step does
        fn: Step function for validators, sanitizers and conditions; the
            predicate (callable or chain) for conditionals
        name: Name used in logs and default messages
        message: Default failure message for validators, or the bound
            message for ``MESSAGE`` steps
        options: Step-specific configuration (bail level, optional flags)
    """

    kind: StepKind
    fn: Any = None
    name: str = ""
    message: Message | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        label = self.name or self.kind.value
        return f"Step({self.kind.value}:{label})"


async def invoke(fn: Callable[..., Any], *args: Any) -> tuple[Any, bool]:
    """Call a sync or async step function with one code path.

    Returns:
        Tuple of (result, was_awaited). Exceptions raised by ``fn`` or by
        the awaitable it returns propagate to the caller.
    """
    result = fn(*args)
    if inspect.isawaitable(result):
        return await result, True
    return result, False


def resolve_message(message: Message | None, value: Any, context: Context) -> Any:
    """Turn a static or dynamic message into its final form."""
    if callable(message):
        return message(value, context)
    return message


__all__ = [
    "StepFunction",
    "StepKind",
    "Step",
    "invoke",
    "resolve_message",
]
