"""Per-request and per-field execution state.

``RequestState`` is created once per request and shared by every chain run
for that request. ``Context`` is created once per (chain, matched field
instance) and carries the value being validated through the pipeline.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from .exceptions import RequestValidationError
from .selection import Segment, assign, format_path
from .values import UNSET

logger = logging.getLogger(__name__)


def snapshot(value: Any) -> Any:
    """Deep copy ``value``, or return it as is if it cannot be copied.

    Request values may hold objects such as open uploads or locks.
    """
    try:
        return copy.deepcopy(value)
    except Exception as e:
        logger.debug("Keeping reference to uncopyable %s: %s", type(value).__name__, e)
        return value


@dataclass(frozen=True)
class FailureRecord:
    """One recorded validation failure.

    Attributes:
        location: Request sub-object the value came from
        path: Concrete field path
        value: Value at the moment the check failed
        message: Failure message
    """

    location: str
    path: str
    value: Any
    message: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "path": self.path,
            "value": None if self.value is UNSET else self.value,
            "message": self.message,
        }


class ErrorCollector:
    """Append-only, insertion-ordered collection of failure records.

    Appends are serialized so that concurrently running field pipelines
    cannot lose or interleave records. Records are never removed, reordered
    or merged; the only permitted change is rebinding the message of a
    record just produced, which ``with_message()`` relies on.
    """

    def __init__(self) -> None:
        self._records: list[FailureRecord] = []
        self._lock = threading.Lock()

    def append(self, record: FailureRecord) -> int:
        """Append a record and return its position."""
        with self._lock:
            self._records.append(record)
            return len(self._records) - 1

    def rebind_message(self, index: int, message: Any) -> FailureRecord:
        """Replace the message of the record at ``index``."""
        with self._lock:
            record = replace(self._records[index], message=message)
            self._records[index] = record
            return record

    def all(self) -> list[FailureRecord]:
        """All records in insertion order."""
        with self._lock:
            return list(self._records)

    def for_field(self, location: str, path: str) -> list[FailureRecord]:
        """Records for one location and path, in insertion order."""
        return [r for r in self.all() if r.location == location and r.path == path]

    def is_empty(self) -> bool:
        with self._lock:
            return not self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[FailureRecord]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"ErrorCollector(records={len(self)})"


@dataclass
class _MatchedField:
    location: str
    segments: tuple[Segment, ...]
    value: Any
    optional_skipped: bool


class RequestState:
    """State shared by every chain run for one request.

    Holds the error collector and the request-level bail flag. The flag is
    monotonic: once ``mark_bailed()`` has been called it stays set for the
    lifetime of the state.
    """

    def __init__(self) -> None:
        self.errors = ErrorCollector()
        self._request_bailed = False
        self._matched: list[_MatchedField] = []
        self._lock = threading.Lock()

    @property
    def request_bailed(self) -> bool:
        return self._request_bailed

    def mark_bailed(self) -> None:
        self._request_bailed = True

    @property
    def is_valid(self) -> bool:
        return self.errors.is_empty()

    def record_match(
        self,
        location: str,
        segments: Sequence[Segment],
        value: Any,
        optional_skipped: bool = False,
    ) -> None:
        """Remember a field whose pipeline finished without failures."""
        with self._lock:
            self._matched.append(
                _MatchedField(location, tuple(segments), value, optional_skipped)
            )

    def matched_data(
        self,
        include_optionals: bool = False,
        locations: Sequence[str] | None = None,
    ) -> dict[str, Any]:
        """Final values of fields whose pipelines completed without failures.

        Args:
            include_optionals: Include fields skipped by ``optional()``
            locations: Restrict the result to these locations

        Returns:
            Mapping of location name to nested dictionary of values
        """
        failed = {(r.location, r.path) for r in self.errors.all()}
        data: dict[str, Any] = {}
        with self._lock:
            matched = list(self._matched)

        for entry in matched:
            if locations is not None and entry.location not in locations:
                continue
            if (entry.location, format_path(entry.segments)) in failed:
                continue
            if entry.optional_skipped and not include_optionals:
                continue
            if entry.value is UNSET:
                continue
            assign(data, entry.location, entry.segments, snapshot(entry.value))
        return data

    def raise_for_errors(self) -> None:
        """Raise RequestValidationError if any failure was recorded."""
        if not self.errors.is_empty():
            raise RequestValidationError(self.errors.all())

    def __repr__(self) -> str:
        return f"RequestState(errors={len(self.errors)}, request_bailed={self._request_bailed})"


@dataclass
class Context:
    """Execution state for one field instance within one chain.

    Attributes:
        value: Current value, updated by sanitizers
        original_value: Snapshot of the value before any step ran
        location: Request sub-object the value came from
        path: Concrete field path
        request_state: State shared by every chain for the request
        request: Host request object
        segments: Concrete path segments, used for write-through
        dry_run: When True, sanitized values are not written to the request
    """

    value: Any
    location: str
    path: str
    request_state: RequestState
    request: Any = None
    segments: tuple[Segment, ...] = ()
    dry_run: bool = False
    original_value: Any = field(init=False)

    def __post_init__(self) -> None:
        self.original_value = snapshot(self.value)

    def set_value(self, value: Any) -> None:
        """Update the current value and write it through to the request."""
        self.value = value
        if not self.dry_run and self.request is not None:
            assign(self.request, self.location, self.segments, value)


__all__ = [
    "FailureRecord",
    "ErrorCollector",
    "RequestState",
    "Context",
]
