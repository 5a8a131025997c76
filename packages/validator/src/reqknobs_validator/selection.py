"""Field selection against multi-location request objects.

A request holds several sub-objects ("locations") such as ``body`` or
``query``. The request may be a mapping of location name to sub-object, or
any object exposing the locations as attributes.

Field paths use dots for keys, ``[n]`` for list indexes and a wildcard
segment (``*`` by default) matching every key or index at that level::

    "email"
    "address.city"
    "items[0].sku"
    "items.*.sku"
    "tags[*]"
    'headers["x-request-id"]'
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from .values import UNSET

logger = logging.getLogger(__name__)

Segment = Union[str, int]

_BRACKET = re.compile(r"\[\s*(?:(-?\d+)|\"([^\"]*)\"|'([^']*)'|(\*))\s*\]")


class Wildcard:
    """Parsed wildcard segment."""

    def __repr__(self) -> str:
        return "Wildcard()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Wildcard)

    def __hash__(self) -> int:
        return hash("Wildcard")


WILDCARD = Wildcard()


def parse_path(path: str, wildcard: str = "*") -> list[Segment | Wildcard]:
    """Split a field path into key, index and wildcard segments.

    Args:
        path: Field path such as ``"items[0].name"``
        wildcard: Token treated as a wildcard segment

    Returns:
        List of segments. An empty path yields an empty list, which selects
        the whole location.
    """
    segments: list[Segment | Wildcard] = []
    if not path:
        return segments

    for part in path.split("."):
        head, _, rest = part.partition("[")
        if head:
            segments.append(WILDCARD if head == wildcard else head)
        if not rest:
            continue
        rest = "[" + rest
        position = 0
        while position < len(rest):
            match = _BRACKET.match(rest, position)
            if match is None:
                # Not a recognised index expression; keep it as a literal key
                segments.append(rest[position:])
                break
            index, double_quoted, single_quoted, star = match.groups()
            if index is not None:
                segments.append(int(index))
            elif star is not None:
                segments.append(WILDCARD)
            else:
                segments.append(double_quoted if double_quoted is not None else single_quoted)
            position = match.end()
    return segments


def format_path(segments: Sequence[Segment]) -> str:
    """Render concrete segments back into a path string."""
    rendered = ""
    for segment in segments:
        if isinstance(segment, int):
            rendered += f"[{segment}]"
        elif "." in segment or "[" in segment:
            rendered += f'["{segment}"]'
        else:
            rendered += f".{segment}" if rendered else segment
    return rendered


@dataclass
class FieldInstance:
    """One concrete field matched by a selector.

    Attributes:
        location: Request sub-object the value was read from
        path: Concrete path string (wildcards resolved)
        segments: Concrete path segments
        value: Value found at the path, or UNSET
    """

    location: str
    path: str
    segments: tuple[Segment, ...]
    value: Any = UNSET


def get_location(request: Any, location: str) -> Any:
    """Read a location sub-object from the request, or UNSET if missing."""
    if isinstance(request, Mapping):
        return request.get(location, UNSET)
    return getattr(request, location, UNSET)


def _ensure_location(request: Any, location: str) -> Any:
    container = get_location(request, location)
    if container is UNSET or container is None:
        container = {}
        if isinstance(request, MutableMapping):
            request[location] = container
        else:
            setattr(request, location, container)
    return container


def _child(container: Any, segment: Segment) -> Any:
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        if isinstance(segment, int) and str(segment) in container:
            return container[str(segment)]
        return UNSET
    if isinstance(container, (list, tuple)) and isinstance(segment, int):
        if -len(container) <= segment < len(container):
            return container[segment]
        return UNSET
    if isinstance(container, (list, tuple)) and isinstance(segment, str) and segment.isdigit():
        return _child(container, int(segment))
    return UNSET


def _expand(
    container: Any,
    segments: Sequence[Segment | Wildcard],
    prefix: tuple[Segment, ...],
) -> list[tuple[tuple[Segment, ...], Any]]:
    if not segments:
        return [(prefix, container)]

    head, tail = segments[0], segments[1:]
    if isinstance(head, Wildcard):
        if isinstance(container, Mapping):
            keys: list[Segment] = list(container.keys())
        elif isinstance(container, (list, tuple)):
            keys = list(range(len(container)))
        else:
            return []
        matches: list[tuple[tuple[Segment, ...], Any]] = []
        for key in keys:
            matches.extend(_expand(_child(container, key), tail, prefix + (key,)))
        return matches

    return _expand(_child(container, head), tail, prefix + (head,))


def select_fields(
    request: Any,
    paths: Sequence[str],
    locations: Sequence[str],
    wildcard: str = "*",
) -> list[FieldInstance]:
    """Resolve field paths against the request.

    Each path is looked up in each location. When a path is searched in more
    than one location, locations where it is absent are dropped if any other
    location has it; if it is absent everywhere, only the first location is
    kept so that presence checks can still fail once.

    Args:
        request: Host request object
        paths: Field paths
        locations: Location names to search
        wildcard: Wildcard token

    Returns:
        Field instances in declaration order (paths, then locations). A
        wildcard that matches nothing contributes no instances.
    """
    instances: list[FieldInstance] = []
    seen: set[tuple[str, str]] = set()

    for path in paths:
        parsed = parse_path(path, wildcard)
        per_path: list[FieldInstance] = []
        for location in locations:
            root = get_location(request, location)
            for segments, value in _expand(root, parsed, ()):
                per_path.append(
                    FieldInstance(
                        location=location,
                        path=format_path(segments),
                        segments=segments,
                        value=value,
                    )
                )

        if len(locations) > 1:
            present = [i for i in per_path if i.value is not UNSET]
            if present:
                per_path = present
            else:
                first_path_only = {}
                for instance in per_path:
                    first_path_only.setdefault(instance.path, instance)
                per_path = list(first_path_only.values())

        for instance in per_path:
            key = (instance.location, instance.path)
            if key not in seen:
                seen.add(key)
                instances.append(instance)

    logger.debug("Selected %d field instance(s) for %s in %s", len(instances), list(paths), list(locations))
    return instances


def assign(request: Any, location: str, segments: Sequence[Segment], value: Any) -> None:
    """Write a value into the request at ``location``/``segments``.

    Missing intermediate containers are created, and lists are padded with
    None up to the written index. Writing UNSET removes the key.
    Writing with an empty path replaces the whole location.
    """
    if not segments:
        if isinstance(request, MutableMapping):
            request[location] = value
        else:
            setattr(request, location, value)
        return

    container = _ensure_location(request, location)
    for position, segment in enumerate(segments[:-1]):
        next_segment = segments[position + 1]
        child = _child(container, segment)
        if child is UNSET or child is None:
            child = [] if isinstance(next_segment, int) else {}
            _set_child(container, segment, child)
        container = child

    _set_child(container, segments[-1], value)


def _set_child(container: Any, segment: Segment, value: Any) -> None:
    if isinstance(container, MutableMapping):
        if value is UNSET:
            container.pop(segment, None)
        else:
            container[segment] = value
        return
    if isinstance(container, list) and isinstance(segment, str) and segment.isdigit():
        segment = int(segment)
    if isinstance(container, list) and isinstance(segment, int):
        if segment >= len(container):
            if value is UNSET:
                return
            # Pad missing positions up to the written index
            container.extend([None] * (segment - len(container)))
            container.append(value)
        else:
            container[segment] = value
        return
    raise TypeError(
        f"Cannot assign into {type(container).__name__} at segment {segment!r}"
    )


__all__ = [
    "FieldInstance",
    "WILDCARD",
    "parse_path",
    "format_path",
    "get_location",
    "select_fields",
    "assign",
]
