"""Field validation and sanitization pipelines for multi-location requests.

Declare a chain per field, then run the chains for each request::

    from reqknobs_validator import body, query, run_chains

    chains = [
        query("page").optional().is_int(min=1).to_int(),
        body("email").trim().not_empty().bail().is_email(),
        body("tags").to_array().is_array(max=10),
    ]

    state = await run_chains(chains, request)
    for failure in state.errors:
        print(failure.location, failure.path, failure.message)

Components:

- **ValidationChain**: fluent builder of an ordered step list
- **ChainExecutor**: runs chains against requests
- **RequestState**: per-request error collector and request-level bail flag
- **Context**: per-field execution state passed to step functions
- **OptionalPolicy**, **BailLevel**: chain-wide absence policy and bail scope
- **ValidatorSettings**: engine defaults (messages, locations, wildcard)
"""

from .bail import BailConfig, BailLevel, evaluate_bail
from .chain import (
    ValidationChain,
    body,
    check,
    cookies,
    headers,
    params,
    query,
)
from .conditions import ConditionEvaluator
from .context import Context, ErrorCollector, FailureRecord, RequestState
from .exceptions import ChainBuildError, RequestValidationError, SettingsError
from .executor import ChainExecutor, run_chains, run_chains_sync
from .library import SANITIZERS, VALIDATORS, register_sanitizer, register_validator
from .optional import OptionalPolicy
from .settings import ValidatorSettings, configure, get_settings
from .steps import Step, StepKind
from .values import UNSET, ValueKind, is_falsy, kind_of

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Builder
    "ValidationChain",
    "check",
    "body",
    "query",
    "params",
    "cookies",
    "headers",
    # Execution
    "ChainExecutor",
    "run_chains",
    "run_chains_sync",
    "ConditionEvaluator",
    # State
    "Context",
    "RequestState",
    "ErrorCollector",
    "FailureRecord",
    # Steps and policies
    "Step",
    "StepKind",
    "OptionalPolicy",
    "BailLevel",
    "BailConfig",
    "evaluate_bail",
    # Library
    "VALIDATORS",
    "SANITIZERS",
    "register_validator",
    "register_sanitizer",
    # Settings
    "ValidatorSettings",
    "get_settings",
    "configure",
    # Values
    "UNSET",
    "ValueKind",
    "kind_of",
    "is_falsy",
    # Exceptions
    "ChainBuildError",
    "SettingsError",
    "RequestValidationError",
]
