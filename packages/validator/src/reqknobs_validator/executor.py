"""Chain execution engine.

``ChainExecutor.run()`` resolves a chain's selector against a request and
runs the chain's steps against every matched field instance. Steps for one
instance run strictly in order, each awaited before the next starts.
Instances matched by a wildcard are independent of each other and may run
concurrently; they only share the request state.

Outcomes per instance:

- a validator that returns a falsy result, raises, or (when negated) passes
  records a failure and marks the chain as failed
- a condition that is false or raises aborts the remaining steps silently
- an optional policy that finds the value absent skips every step silently
- a bail point reached after a failure stops the remaining steps; at request
  level it also stops every chain not yet started for the request

Exceptions raised by validators and conditions never leave the engine.
Exceptions raised by sanitizers do, since a sanitizer has no failure outcome.
When wildcard instances run concurrently, every instance settles first and
the first exception is then re-raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from .bail import BailConfig, BailLevel, evaluate_bail
from .conditions import ChainLike, ConditionEvaluator
from .context import Context, FailureRecord, RequestState
from .selection import FieldInstance, select_fields
from .settings import ValidatorSettings, get_settings
from .steps import Step, StepKind, invoke, resolve_message

logger = logging.getLogger(__name__)


class ChainExecutor:
    """Runs validation chains against requests.

    Args:
        settings: Settings to use. Defaults to the process-wide settings at
            the time each chain runs. A chain's own settings win over both.
    """

    def __init__(self, settings: ValidatorSettings | None = None):
        self._settings = settings
        self.conditions = ConditionEvaluator(self)

    def settings_for(self, chain: ChainLike) -> ValidatorSettings:
        chain_settings = getattr(chain, "settings", None)
        return chain_settings or self._settings or get_settings()

    async def run(
        self,
        chain: ChainLike,
        request: Any,
        state: RequestState,
        dry_run: bool = False,
    ) -> None:
        """Run one chain against a request.

        Args:
            chain: Chain to run
            request: Host request object, mutated in place by sanitizers
            state: Request state shared by every chain for this request
            dry_run: Run without writing sanitized values to the request
        """
        if state.request_bailed:
            logger.debug("Skipping chain %r: request already bailed", chain)
            return

        settings = self.settings_for(chain)
        locations = chain.locations or settings.locations
        instances = select_fields(request, chain.fields, locations, settings.wildcard)

        if settings.concurrent_instances and len(instances) > 1:
            # Let every instance settle before surfacing a sanitizer error
            results = await asyncio.gather(
                *(self._run_instance(chain, instance, request, state, dry_run, settings)
                  for instance in instances),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
        else:
            for instance in instances:
                await self._run_instance(chain, instance, request, state, dry_run, settings)

    async def _run_instance(
        self,
        chain: ChainLike,
        instance: FieldInstance,
        request: Any,
        state: RequestState,
        dry_run: bool,
        settings: ValidatorSettings,
    ) -> None:
        context = Context(
            value=instance.value,
            location=instance.location,
            path=instance.path,
            request_state=state,
            request=request,
            segments=instance.segments,
            dry_run=dry_run,
        )

        if chain.optional_policy.is_absent(context.original_value):
            logger.debug("Optional field %s.%s is absent, skipping", context.location, context.path)
            state.record_match(context.location, context.segments, context.value, optional_skipped=True)
            return

        chain_failed = False
        pending_negate = False
        last_failure: int | None = None

        for step in chain.steps:
            kind = step.kind

            if kind is StepKind.NOT:
                pending_negate = True
                continue

            if kind is StepKind.OPTIONAL:
                continue

            if kind is StepKind.MESSAGE:
                if last_failure is not None:
                    failed = state.errors.all()[last_failure]
                    state.errors.rebind_message(
                        last_failure, resolve_message(step.message, failed.value, context)
                    )
                continue

            if kind is StepKind.BAIL:
                config = BailConfig(level=step.options.get("level", BailLevel.CHAIN))
                if evaluate_bail(chain_failed, config, state).should_stop:
                    logger.debug("Bail stopped %s.%s", context.location, context.path)
                    break
                continue

            negate, pending_negate = pending_negate, False
            last_failure = None

            if kind is StepKind.CONDITIONAL:
                if not await self.conditions.evaluate(step.fn, context):
                    logger.debug("Condition aborted %s.%s", context.location, context.path)
                    return
                continue

            if kind.is_sanitizer:
                result, _ = await invoke(step.fn, context.value, context)
                context.set_value(result)
                continue

            if kind.is_validator:
                failure = await self._check(step, context, negate, settings)
                if failure is not None:
                    last_failure = state.errors.append(failure)
                    chain_failed = True

        state.record_match(context.location, context.segments, context.value)

    async def _check(
        self,
        step: Step,
        context: Context,
        negated: bool,
        settings: ValidatorSettings,
    ) -> FailureRecord | None:
        """Run a validator step; return a failure record or None on pass."""
        error_message: str | None = None
        try:
            result, awaited = await invoke(step.fn, context.value, context)
            passed = True if awaited else bool(result)
        except Exception as e:
            passed = False
            error_message = str(e) or None

        if negated:
            passed = not passed
            error_message = None

        if passed:
            return None

        if error_message is not None:
            message: Any = error_message
        elif step.message is not None:
            message = resolve_message(step.message, context.value, context)
        else:
            message = settings.default_message

        logger.debug("Validator %s failed for %s.%s", step.name or step.kind.value, context.location, context.path)
        return FailureRecord(
            location=context.location,
            path=context.path,
            value=context.value,
            message=message,
        )


async def run_chains(
    chains: Iterable[ChainLike],
    request: Any,
    state: RequestState | None = None,
    executor: ChainExecutor | None = None,
    dry_run: bool = False,
) -> RequestState:
    """Run chains against a request in registration order.

    Each chain completes, including every awaited step, before the next
    starts, so a request-level bail reliably stops every later chain.

    Args:
        chains: Chains in registration order
        request: Host request object
        state: Existing request state to continue; a new one is created if None
        executor: Executor to use; a default one is created if None
        dry_run: Run without writing sanitized values to the request

    Returns:
        The request state holding the collected failures
    """
    state = state if state is not None else RequestState()
    executor = executor or ChainExecutor()
    for chain in chains:
        await executor.run(chain, request, state, dry_run=dry_run)
    return state


def run_chains_sync(
    chains: Iterable[ChainLike],
    request: Any,
    state: RequestState | None = None,
    executor: ChainExecutor | None = None,
    dry_run: bool = False,
) -> RequestState:
    """Blocking variant of ``run_chains`` for hosts without an event loop."""
    return asyncio.run(run_chains(chains, request, state, executor, dry_run))


__all__ = [
    "ChainExecutor",
    "run_chains",
    "run_chains_sync",
]
