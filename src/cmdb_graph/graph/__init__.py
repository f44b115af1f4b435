"""Relationship graph traversal core.

Public API:
    Direction: Relative edge direction.
    CINode: Immutable configuration item.
    RelEdge: Immutable relationship record.
    TraversalOptions: Validated traversal settings.
    RelationshipEntry: One discovered neighbour.
    TraversalResult: Outcome of a traversal.
    IdentityResolver: Resolves a CI name or sys_id to the root node.
    ClassCache: Per-traversal CI class memo.
    EdgeFetcher: Fetches relationships touching one CI.
    TraversalEngine: Depth-bounded, cycle-safe walk.
    TraversalSink: Protocol for live consumers of a walk.
    TreeRenderer / RecordRenderer: The two output sinks.
"""

from __future__ import annotations

from .types import (
    DEFAULT_DEPTH,
    MAX_DEPTH,
    MIN_DEPTH,
    UNKNOWN_CLASS,
    CINode,
    Direction,
    RelationshipEntry,
    RelEdge,
    TraversalOptions,
    TraversalResult,
)
from .class_cache import ClassCache
from .edges import EDGE_PAGE_SIZE, EdgeFetcher
from .render import RecordRenderer, TreeRenderer, render_tree, to_record
from .resolver import IdentityResolver, looks_like_sys_id
from .traversal import TraversalEngine, TraversalSink

__all__ = [
    "DEFAULT_DEPTH",
    "MAX_DEPTH",
    "MIN_DEPTH",
    "UNKNOWN_CLASS",
    "EDGE_PAGE_SIZE",
    "Direction",
    "CINode",
    "RelEdge",
    "TraversalOptions",
    "RelationshipEntry",
    "TraversalResult",
    "IdentityResolver",
    "looks_like_sys_id",
    "ClassCache",
    "EdgeFetcher",
    "TraversalEngine",
    "TraversalSink",
    "TreeRenderer",
    "RecordRenderer",
    "render_tree",
    "to_record",
]
