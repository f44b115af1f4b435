"""Graph data structures for relationship traversal.

Public API:
    Direction: Edge direction relative to the node being expanded.
    CINode: Immutable configuration item with its class.
    RelEdge: Immutable relationship record between two CIs.
    TraversalOptions: Validated depth / filter / direction settings.
    RelationshipEntry: One discovered neighbour as emitted by the engine.
    TraversalResult: Container for a finished traversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..exceptions import InvalidTraversalOptionsError

MIN_DEPTH = 1
MAX_DEPTH = 5
DEFAULT_DEPTH = 3

UNKNOWN_CLASS = "unknown"


class Direction(Enum):
    """Direction of an edge relative to the node currently being expanded.

    If the current node is the edge's source the other endpoint is
    ``DOWNSTREAM``; if it is the edge's target the other endpoint is
    ``UPSTREAM``.
    """

    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Direction | str) -> Direction:
        """Coerce *value* into a Direction, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(d.value for d in cls)
            raise InvalidTraversalOptionsError(
                f"Unknown direction {value!r} (valid: {choices})"
            ) from None

    def allows(self, relative: Direction) -> bool:
        """True if an edge in *relative* direction passes this filter."""
        return self is Direction.BOTH or self is relative


@dataclass(frozen=True)
class CINode:
    """An immutable configuration item.

    Attributes:
        sys_id: Opaque record identifier.
        name: Human-readable display name.
        ci_class: CMDB class name (e.g. "cmdb_ci_linux_server").
    """

    sys_id: str
    name: str
    ci_class: str = UNKNOWN_CLASS

    def to_dict(self) -> dict[str, str]:
        return {"id": self.sys_id, "name": self.name, "class": self.ci_class}


@dataclass(frozen=True)
class RelEdge:
    """A directed relationship record between two CIs.

    Attributes:
        source_id: sys_id of the parent (source) CI.
        target_id: sys_id of the child (target) CI.
        rel_type: Relationship type label (e.g. "Depends on::Used by").
        source_name: Display name of the source CI, if the store returned one.
        target_name: Display name of the target CI, if the store returned one.
        sys_id: Identifier of the relationship record itself.
    """

    source_id: str
    target_id: str
    rel_type: str = ""
    source_name: str = ""
    target_name: str = ""
    sys_id: str = ""

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.source_id, self.target_id, self.rel_type)

    def relative_to(self, current_id: str) -> tuple[str, str, Direction] | None:
        """Return ``(other_id, other_name, direction)`` seen from *current_id*.

        Returns None when the edge does not touch *current_id*.
        """
        if self.source_id == current_id:
            return self.target_id, self.target_name, Direction.DOWNSTREAM
        if self.target_id == current_id:
            return self.source_id, self.source_name, Direction.UPSTREAM
        return None


@dataclass(frozen=True)
class TraversalOptions:
    """Settings for a single traversal.

    Validated on construction so that a bad depth or direction is
    reported before any record source is queried.

    Attributes:
        max_depth: Maximum traversal depth, inclusive range 1-5.
        rel_type: Case-insensitive substring filter on relationship types.
        ci_class: Case-insensitive substring filter on displayed CI classes.
            Filtering hides nodes from the output but never prunes the walk.
        direction: Which relative directions to follow.
        impact: Force ``UPSTREAM`` regardless of *direction*.
    """

    max_depth: int = DEFAULT_DEPTH
    rel_type: str | None = None
    ci_class: str | None = None
    direction: Direction = Direction.BOTH
    impact: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise InvalidTraversalOptionsError(
                f"max_depth must be an integer, got {self.max_depth!r}"
            )
        if not MIN_DEPTH <= self.max_depth <= MAX_DEPTH:
            raise InvalidTraversalOptionsError(
                f"max_depth must be between {MIN_DEPTH} and {MAX_DEPTH}, "
                f"got {self.max_depth}"
            )
        object.__setattr__(self, "direction", Direction.parse(self.direction))
        # Empty filters behave as "no filter".
        object.__setattr__(self, "rel_type", self.rel_type or None)
        object.__setattr__(self, "ci_class", self.ci_class or None)

    @property
    def effective_direction(self) -> Direction:
        return Direction.UPSTREAM if self.impact else self.direction

    def matches_rel_type(self, rel_type: str) -> bool:
        if self.rel_type is None:
            return True
        return self.rel_type.lower() in rel_type.lower()

    def matches_class(self, ci_class: str) -> bool:
        if self.ci_class is None:
            return True
        return self.ci_class.lower() in ci_class.lower()


@dataclass(frozen=True)
class RelationshipEntry:
    """A visible neighbour discovered during traversal.

    Attributes:
        node: The neighbouring CI.
        rel_type: Type label of the edge that reached it.
        direction: Direction relative to the parent being expanded.
        depth: 1 for direct neighbours of the root, and so on.
        branch: "Is last sibling" flags from depth 1 down to this entry,
            used only by the tree renderer.
    """

    node: CINode
    rel_type: str
    direction: Direction
    depth: int
    branch: tuple[bool, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.node.name,
            "class": self.node.ci_class,
            "type": self.rel_type,
            "direction": self.direction.value,
            "id": self.node.sys_id,
            "depth": self.depth,
        }


@dataclass
class TraversalResult:
    """Container for the outcome of one traversal.

    Attributes:
        root: The resolved root CI.
        entries: Visible neighbours in discovery (pre-order) order.
        expanded: sys_ids whose edges were fetched, in expansion order.
        edges: Every distinct edge returned while expanding.
        truncated: sys_ids whose edge query filled a whole page.
        discovered: Every neighbour that survived the edge filters, visible
            or not, keyed by sys_id with its resolved class.
    """

    root: CINode
    entries: list[RelationshipEntry] = field(default_factory=list)
    expanded: list[str] = field(default_factory=list)
    edges: list[RelEdge] = field(default_factory=list)
    truncated: list[str] = field(default_factory=list)
    discovered: dict[str, CINode] = field(default_factory=dict)

    @property
    def nodes(self) -> list[CINode]:
        """Distinct visible nodes in discovery order."""
        seen: dict[str, CINode] = {}
        for entry in self.entries:
            seen.setdefault(entry.node.sys_id, entry.node)
        return list(seen.values())


__all__ = [
    "MIN_DEPTH",
    "MAX_DEPTH",
    "DEFAULT_DEPTH",
    "UNKNOWN_CLASS",
    "Direction",
    "CINode",
    "RelEdge",
    "TraversalOptions",
    "RelationshipEntry",
    "TraversalResult",
]
