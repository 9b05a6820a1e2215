"""Path addressing into the resume document dict.

A path is a dot-separated list of segments. A segment is either a plain
field name (``profile``) or an array element ``name[index]``
(``experience[0]``). Reads are forgiving and return a default for anything
that cannot be resolved; writes are persistent: only the containers along
the path are copied and every other branch is shared with the input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_SEGMENT_RE = re.compile(r"^(\w+)(?:\[(\d+)\])?$")


@dataclass(frozen=True)
class PathSegment:
    name: str
    index: int | None = None


def parse_path(path: str) -> list[PathSegment]:
    """Split a path into segments. Raises ValueError on malformed input."""
    if not path:
        raise ValueError("Empty path")
    segments = []
    for part in path.split("."):
        match = _SEGMENT_RE.match(part)
        if match is None:
            raise ValueError(f"Malformed path segment {part!r} in {path!r}")
        name, index = match.groups()
        segments.append(PathSegment(name, int(index) if index is not None else None))
    return segments


def get_value(document: Any, path: str, default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when it does not exist."""
    try:
        segments = parse_path(path)
    except ValueError:
        return default

    current = document
    for seg in segments:
        if not isinstance(current, dict) or seg.name not in current:
            return default
        current = current[seg.name]
        if seg.index is not None:
            if not isinstance(current, list) or seg.index >= len(current):
                return default
            current = current[seg.index]
    if current is None:
        return default
    return current


def set_value(document: dict[str, Any] | None, path: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``document`` with ``path`` set to ``value``.

    Missing containers are created: dicts for plain segments, lists padded
    with empty dicts for array segments. The input is never mutated.
    """
    segments = parse_path(path)
    return _set(document if isinstance(document, dict) else {}, segments, value)


def _set(node: dict[str, Any], segments: list[PathSegment], value: Any) -> dict[str, Any]:
    seg, rest = segments[0], segments[1:]
    updated = dict(node)

    if seg.index is None:
        if not rest:
            updated[seg.name] = value
        else:
            child = node.get(seg.name)
            updated[seg.name] = _set(child if isinstance(child, dict) else {}, rest, value)
        return updated

    existing = node.get(seg.name)
    items = list(existing) if isinstance(existing, list) else []
    while len(items) <= seg.index:
        items.append({})
    if not rest:
        items[seg.index] = value
    else:
        child = items[seg.index]
        items[seg.index] = _set(child if isinstance(child, dict) else {}, rest, value)
    updated[seg.name] = items
    return updated


def merge_unique(existing: list | None, incoming: list | None) -> list:
    """Append-with-dedup: existing items first, then unseen incoming items."""
    merged: list = []
    for item in (existing or []) + (incoming or []):
        if item not in merged:
            merged.append(item)
    return merged
