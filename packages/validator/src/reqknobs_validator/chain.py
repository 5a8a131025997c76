"""Fluent validation chain builder.

A chain binds one field selector (one or more paths in one or more request
locations) to an ordered list of steps. Every step-adding method appends to
the chain and returns the chain itself::

    chain = (
        body("email")
        .trim()
        .not_empty().with_message("Email is required")
        .bail()
        .is_email().with_message("Not an email address")
    )

    state = await run_chains([chain, other_chain], request)

``not`` and ``if`` are Python keywords, so the negation and condition
modifiers are spelled ``not_()`` and ``if_()``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Collection, Sequence
from typing import Any, Callable

from .bail import BailLevel
from .context import RequestState
from .exceptions import ChainBuildError
from .executor import ChainExecutor
from .library import SANITIZERS, VALIDATORS
from .optional import OptionalPolicy
from .settings import ValidatorSettings
from .steps import Message, Step, StepKind

logger = logging.getLogger(__name__)


class ValidationChain:
    """Ordered pipeline of steps bound to a field selector.

    Attributes:
        fields: Field paths selected by the chain
        locations: Request locations searched, or None for the settings default
        steps: Steps in declaration order
        optional_policy: Chain-wide absence policy folded from ``optional()``
        settings: Settings overriding the executor's, or None
    """

    def __init__(
        self,
        fields: str | Sequence[str] = "",
        locations: str | Sequence[str] | None = None,
        settings: ValidatorSettings | None = None,
    ):
        self.fields: list[str] = [fields] if isinstance(fields, str) else list(fields)
        if isinstance(locations, str):
            locations = [locations]
        self.locations: list[str] | None = list(locations) if locations else None
        self.settings = settings
        self.steps: list[Step] = []
        self.optional_policy = OptionalPolicy.disabled()

    def _append(self, step: Step) -> ValidationChain:
        self.steps.append(step)
        return self

    # ------------------------------------------------------------------
    # Modifiers
    # ------------------------------------------------------------------

    def not_(self) -> ValidationChain:
        """Negate the result of the next validator."""
        return self._append(Step(StepKind.NOT, name="not"))

    def bail(self, level: BailLevel | str = BailLevel.CHAIN) -> ValidationChain:
        """Stop the pipeline here if any earlier validator failed.

        Args:
            level: ``"chain"`` stops this field only; ``"request"`` also
                stops every chain not yet started for the request
        """
        return self._append(
            Step(StepKind.BAIL, name="bail", options={"level": BailLevel.parse(level)})
        )

    def if_(self, condition: Callable[..., Any] | ValidationChain) -> ValidationChain:
        """Continue only when ``condition`` holds.

        Args:
            condition: Callable ``(value, context)`` returning a truthy value
                (sync or async), or another chain that must pass
        """
        return self._append(Step(StepKind.CONDITIONAL, fn=condition, name="if"))

    def optional(
        self,
        enabled: bool = True,
        *,
        nullable: bool = False,
        check_falsy: bool = False,
    ) -> ValidationChain:
        """Skip the whole chain when the value is absent.

        Applies to the whole chain wherever it is declared. When called more
        than once, the last call wins.

        Args:
            enabled: False makes the chain mandatory again
            nullable: Also treat None as absent
            check_falsy: Also treat ``""``, 0, False, None and NaN as absent
        """
        if enabled:
            policy = OptionalPolicy(enabled=True, nullable=nullable, check_falsy=check_falsy)
        else:
            policy = OptionalPolicy.disabled()
        self.optional_policy = policy
        return self._append(
            Step(
                StepKind.OPTIONAL,
                name="optional",
                options={"enabled": policy.enabled, "nullable": nullable, "check_falsy": check_falsy},
            )
        )

    def with_message(self, message: Message) -> ValidationChain:
        """Set the failure message of the validator declared just before.

        Args:
            message: Message, or a callable ``(value, context)`` building one

        Raises:
            ChainBuildError: If the previous step is not a validator
        """
        previous = self.steps[-1] if self.steps else None
        if previous is None or not previous.kind.is_validator:
            raise ChainBuildError(
                "with_message() must immediately follow a validator",
                context={
                    "fields": self.fields,
                    "previous_step": previous.name if previous else None,
                },
            )
        return self._append(Step(StepKind.MESSAGE, name="message", message=message))

    # ------------------------------------------------------------------
    # Generic and custom steps
    # ------------------------------------------------------------------

    def add_validator(
        self,
        fn: Callable[[Any, Any], Any],
        name: str | None = None,
        message: Message | None = None,
    ) -> ValidationChain:
        """Append an opaque validator step function."""
        return self._append(
            Step(StepKind.VALIDATOR, fn=fn, name=name or getattr(fn, "__name__", "validator"), message=message)
        )

    def add_sanitizer(self, fn: Callable[[Any, Any], Any], name: str | None = None) -> ValidationChain:
        """Append an opaque sanitizer step function."""
        return self._append(
            Step(StepKind.SANITIZER, fn=fn, name=name or getattr(fn, "__name__", "sanitizer"))
        )

    def custom(self, fn: Callable[[Any, Any], Any]) -> ValidationChain:
        """Append a caller-supplied validator.

        ``fn(value, context)`` may be sync or async. A sync result passes when
        truthy. An awaitable passes when it resolves. Raising fails, and the
        exception message becomes the failure message.
        """
        return self._append(Step(StepKind.CUSTOM, fn=fn, name=getattr(fn, "__name__", "custom")))

    def custom_sanitizer(self, fn: Callable[[Any, Any], Any]) -> ValidationChain:
        """Append a caller-supplied sanitizer; its (awaited) result replaces the value."""
        return self._append(
            Step(StepKind.CUSTOM_SANITIZER, fn=fn, name=getattr(fn, "__name__", "custom_sanitizer"))
        )

    def check_with(self, name: str, *args: Any, **kwargs: Any) -> ValidationChain:
        """Append a validator looked up by name in the validator registry."""
        return self.add_validator(VALIDATORS.build(name, *args, **kwargs), name=name)

    def sanitize_with(self, name: str, *args: Any, **kwargs: Any) -> ValidationChain:
        """Append a sanitizer looked up by name in the sanitizer registry."""
        return self.add_sanitizer(SANITIZERS.build(name, *args, **kwargs), name=name)

    # ------------------------------------------------------------------
    # Built-in validators
    # ------------------------------------------------------------------

    def exists(self, values: str = "undefined") -> ValidationChain:
        return self.check_with("exists", values=values)

    def not_empty(self) -> ValidationChain:
        return self.check_with("not_empty")

    def is_in(self, values: Collection[Any]) -> ValidationChain:
        return self.check_with("is_in", values)

    def equals(self, comparison: Any) -> ValidationChain:
        return self.check_with("equals", comparison)

    def is_string(self) -> ValidationChain:
        return self.check_with("is_string")

    def is_int(self, min: int | None = None, max: int | None = None) -> ValidationChain:
        return self.check_with("is_int", min=min, max=max)

    def is_float(self, min: float | None = None, max: float | None = None) -> ValidationChain:
        return self.check_with("is_float", min=min, max=max)

    def is_boolean(self, loose: bool = False) -> ValidationChain:
        return self.check_with("is_boolean", loose=loose)

    def is_array(self, min: int | None = None, max: int | None = None) -> ValidationChain:
        return self.check_with("is_array", min=min, max=max)

    def is_object(self, strict: bool = True) -> ValidationChain:
        return self.check_with("is_object", strict=strict)

    def is_length(self, min: int = 0, max: int | None = None) -> ValidationChain:
        return self.check_with("is_length", min=min, max=max)

    def matches(self, pattern: str | re.Pattern[str], flags: int = 0) -> ValidationChain:
        return self.check_with("matches", pattern, flags)

    def is_email(self) -> ValidationChain:
        return self.check_with("is_email")

    # ------------------------------------------------------------------
    # Built-in sanitizers
    # ------------------------------------------------------------------

    def default(self, default_value: Any) -> ValidationChain:
        return self.sanitize_with("default", default_value)

    def replace(self, values: Any, new_value: Any) -> ValidationChain:
        return self.sanitize_with("replace", values, new_value)

    def to_array(self) -> ValidationChain:
        return self.sanitize_with("to_array")

    def trim(self, chars: str | None = None) -> ValidationChain:
        return self.sanitize_with("trim", chars)

    def to_int(self) -> ValidationChain:
        return self.sanitize_with("to_int")

    def to_float(self) -> ValidationChain:
        return self.sanitize_with("to_float")

    def to_boolean(self, strict: bool = False) -> ValidationChain:
        return self.sanitize_with("to_boolean", strict=strict)

    def to_lower_case(self) -> ValidationChain:
        return self.sanitize_with("to_lower_case")

    def to_upper_case(self) -> ValidationChain:
        return self.sanitize_with("to_upper_case")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(
        self,
        request: Any,
        state: RequestState | None = None,
        dry_run: bool = False,
        executor: ChainExecutor | None = None,
    ) -> RequestState:
        """Run this chain alone against a request.

        Args:
            request: Host request object
            state: Request state to record into; a new one is created if None
            dry_run: Run without writing sanitized values to the request
            executor: Executor to use; a default one is created if None

        Returns:
            The request state holding the collected failures
        """
        state = state if state is not None else RequestState()
        executor = executor or ChainExecutor()
        await executor.run(self, request, state, dry_run=dry_run)
        return state

    def run_sync(
        self,
        request: Any,
        state: RequestState | None = None,
        dry_run: bool = False,
        executor: ChainExecutor | None = None,
    ) -> RequestState:
        """Blocking variant of ``run`` for hosts without an event loop."""
        return asyncio.run(self.run(request, state, dry_run, executor))

    def __repr__(self) -> str:
        return (
            f"ValidationChain(fields={self.fields!r}, locations={self.locations!r}, "
            f"steps={len(self.steps)})"
        )


def check(
    fields: str | Sequence[str] = "",
    locations: str | Sequence[str] | None = None,
    settings: ValidatorSettings | None = None,
) -> ValidationChain:
    """Chain over ``fields`` in ``locations`` (all configured locations if None)."""
    return ValidationChain(fields, locations, settings)


def _location_factory(location: str) -> Callable[..., ValidationChain]:
    def factory(*fields: str | Sequence[str], settings: ValidatorSettings | None = None) -> ValidationChain:
        paths: list[str] = []
        for entry in fields:
            paths.extend([entry] if isinstance(entry, str) else entry)
        return ValidationChain(paths or "", [location], settings)

    factory.__name__ = location
    factory.__doc__ = f"Chain over fields of the request's ``{location}``."
    return factory


body = _location_factory("body")
query = _location_factory("query")
params = _location_factory("params")
cookies = _location_factory("cookies")
headers = _location_factory("headers")


__all__ = [
    "ValidationChain",
    "check",
    "body",
    "query",
    "params",
    "cookies",
    "headers",
]
