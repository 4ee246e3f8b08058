"""Core data types for the code intelligence engine.

Defines positions, ranges, symbol records, extracted function definitions,
and call hierarchy items/edges. Records produced by the engine are frozen;
CallEdge is the one mutable type, because the hierarchy tree owns and
mutates its expansion state in place.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from enum import Enum

from codenav.kinds import SymbolKind

_URI_PREFIX = "file://"
_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True, slots=True)
class Position:
    """A 0-indexed line/column position."""

    line: int
    character: int


@dataclass(frozen=True, slots=True)
class Range:
    """A span between two positions (end exclusive on the column)."""

    start: Position
    end: Position

    @classmethod
    def from_coords(
        cls, start_line: int, start_character: int, end_line: int, end_character: int
    ) -> Range:
        """Build a Range from four integers."""
        return cls(Position(start_line, start_character), Position(end_line, end_character))

    def contains_line(self, line: int) -> bool:
        """Return True if line lies within [start.line, end.line]."""
        return self.start.line <= line <= self.end.line


@dataclass(frozen=True, slots=True)
class SymbolRecord:
    """A named code entity with a location, as returned by symbol search.

    Attributes:
        name: Symbol name.
        kind: Symbol kind.
        file_path: File path, relative to the project root when possible.
        range: Defining range.
        container_name: Enclosing class/type name, if known.

    """

    name: str
    kind: SymbolKind
    file_path: str
    range: Range
    container_name: str | None = None


@dataclass(frozen=True, slots=True)
class CallSite:
    """A textual call expression found inside a definition's extent."""

    name: str
    start: Position
    end: Position

    @property
    def range(self) -> Range:
        return Range(self.start, self.end)


@dataclass(slots=True)
class FunctionDefinition:
    """A function/class/struct definition recovered from source text.

    Exists only during one extraction pass; the call list is filled by the
    second pass of the extractor.

    Attributes:
        name: Definition name.
        kind: Definition kind.
        start_line: 0-indexed line of the definition.
        start_column: Column where the definition match starts.
        end_line: 0-indexed last line of the detected extent.
        end_column: Length of the last extent line.
        name_column: Column where the name starts.
        calls: Call sites inside the extent, in source order.

    """

    name: str
    kind: SymbolKind
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    name_column: int = 0
    calls: list[CallSite] = field(default_factory=list)

    @property
    def range(self) -> Range:
        return Range.from_coords(self.start_line, self.start_column, self.end_line, self.end_column)

    @property
    def selection_range(self) -> Range:
        return Range.from_coords(
            self.start_line,
            self.name_column,
            self.start_line,
            self.name_column + len(self.name),
        )


class Direction(str, Enum):
    """Direction of a call hierarchy view."""

    INCOMING = "incoming"  # who calls this
    OUTGOING = "outgoing"  # what this calls


@dataclass(frozen=True, slots=True)
class CallHierarchyItem:
    """A node identity in the call hierarchy.

    Two items denote the same symbol when their (uri, selection_range) are
    equal; ``id`` is opaque and not stable across rebuilds.
    """

    id: str
    name: str
    kind: SymbolKind
    uri: str
    range: Range
    selection_range: Range

    @property
    def path(self) -> str:
        return uri_to_path(self.uri)

    def same_symbol(self, other: CallHierarchyItem) -> bool:
        """Compare symbol identity, ignoring the generated id."""
        return self.uri == other.uri and self.selection_range == other.selection_range


class NodeState(str, Enum):
    """Explicit expansion state of a call edge in the hierarchy tree."""

    COLLAPSED = "collapsed"  # never fetched, or collapsed
    LOADING = "loading"  # exactly one fetch in flight
    LOADED = "loaded"  # expanded with children


@dataclass(slots=True, eq=False)
class CallEdge:
    """An incoming or outgoing call edge and its tree state.

    ``item`` is the caller for incoming edges and the callee for outgoing
    edges. ``call_count`` is derived from ``from_ranges`` so it can never
    drift. ``children is not None`` means the node was expanded at least once.
    """

    item: CallHierarchyItem
    from_ranges: list[Range]
    direction: Direction
    expanded: bool = False
    loading: bool = False
    children: list[CallEdge] | None = None

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def call_count(self) -> int:
        return len(self.from_ranges)

    @property
    def state(self) -> NodeState:
        if self.loading:
            return NodeState.LOADING
        if self.expanded and self.children is not None:
            return NodeState.LOADED
        return NodeState.COLLAPSED


def generate_item_id() -> str:
    """Generate an opaque call hierarchy item id (``ch-<ms>-<random>``)."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"ch-{int(time.time() * 1000)}-{suffix}"


def uri_to_path(uri: str) -> str:
    """Strip the ``file://`` scheme from a URI."""
    return uri[len(_URI_PREFIX):] if uri.startswith(_URI_PREFIX) else uri


def path_to_uri(path: str) -> str:
    """Prefix a path with the ``file://`` scheme (idempotent)."""
    return path if path.startswith(_URI_PREFIX) else f"{_URI_PREFIX}{path}"


def relative_path(path: str, root: str) -> str:
    """Return path relative to root (forward slashes), or path unchanged."""
    normalized = uri_to_path(path).replace("\\", "/")
    normalized_root = root.replace("\\", "/").rstrip("/")
    if normalized_root and normalized.startswith(normalized_root + "/"):
        return normalized[len(normalized_root) + 1 :]
    return normalized
