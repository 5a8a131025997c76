"""Evaluation of ``if_()`` predicates.

A predicate is either a callable ``(value, context)`` returning a truthy or
falsy result (possibly awaitable), or another validation chain. A chain
predicate runs against the same request in dry-run mode with its own scratch
request state; the condition holds when that run records no failures.
Failures, bails and sanitized values of the nested run never reach the
outer request.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .context import RequestState
from .steps import invoke

if TYPE_CHECKING:
    from .context import Context
    from .executor import ChainExecutor

logger = logging.getLogger(__name__)


@runtime_checkable
class ChainLike(Protocol):
    """What the engine needs from a chain."""

    fields: Any
    locations: Any
    steps: Any
    optional_policy: Any


class ConditionEvaluator:
    """Runs condition predicates and reports continue/stop."""

    def __init__(self, executor: ChainExecutor):
        self.executor = executor

    async def evaluate(self, predicate: Any, context: Context) -> bool:
        """Evaluate ``predicate`` for ``context``.

        Returns:
            True to continue the pipeline, False to abort it. A predicate
            that raises counts as False.
        """
        if isinstance(predicate, ChainLike):
            return await self._evaluate_chain(predicate, context)

        try:
            result, _ = await invoke(predicate, context.value, context)
        except Exception as e:
            logger.debug("Condition raised for %s.%s: %s", context.location, context.path, e)
            return False
        return bool(result)

    async def _evaluate_chain(self, chain: ChainLike, context: Context) -> bool:
        scratch = RequestState()
        try:
            await self.executor.run(chain, context.request, scratch, dry_run=True)
        except Exception as e:
            logger.debug("Condition chain raised for %s.%s: %s", context.location, context.path, e)
            return False
        return scratch.errors.is_empty()


__all__ = [
    "ChainLike",
    "ConditionEvaluator",
]
