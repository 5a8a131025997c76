"""Bail decisions at chain and request scope."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .exceptions import ChainBuildError

if TYPE_CHECKING:
    from .context import RequestState

logger = logging.getLogger(__name__)


class BailLevel(Enum):
    """How far a bail reaches."""

    CHAIN = "chain"
    """Stop the remaining steps for the current field instance."""

    REQUEST = "request"
    """Also prevent every chain not yet started for the request from running."""

    @classmethod
    def parse(cls, level: BailLevel | str) -> BailLevel:
        if isinstance(level, BailLevel):
            return level
        try:
            return cls(str(level).lower())
        except ValueError as e:
            raise ChainBuildError(
                f"Invalid bail level: {level!r}",
                context={"level": level, "allowed": [m.value for m in cls]},
            ) from e


@dataclass(frozen=True)
class BailConfig:
    level: BailLevel = BailLevel.CHAIN


@dataclass(frozen=True)
class BailDecision:
    should_stop: bool
    request_bailed: bool


def evaluate_bail(chain_failed: bool, config: BailConfig, state: RequestState) -> BailDecision:
    """Decide whether a bail point stops the pipeline.

    Marks ``state`` as bailed when a request-level bail stops the pipeline.
    Never clears an existing request-level bail.
    """
    if not chain_failed:
        return BailDecision(should_stop=False, request_bailed=state.request_bailed)

    if config.level is BailLevel.REQUEST and not state.request_bailed:
        logger.debug("Request-level bail: later chains will not start")
        state.mark_bailed()

    return BailDecision(should_stop=True, request_bailed=state.request_bailed)


__all__ = [
    "BailLevel",
    "BailConfig",
    "BailDecision",
    "evaluate_bail",
]
