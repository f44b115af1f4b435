"""Depth-bounded, cycle-safe relationship traversal.

The remote store only answers "edges touching node X", so the walk is a
recursive depth-first expansion guarded by a Visited set rather than a
search over a preloaded adjacency list.

Public API:
    TraversalSink: Receives entries as they are discovered.
    TraversalEngine: Walks the graph from a resolved root.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from ..sources.protocol import RecordSource
from ..sources.tables import CI_TABLE, REL_TABLE
from .class_cache import ClassCache
from .edges import EDGE_PAGE_SIZE, EdgeFetcher
from .types import (
    CINode,
    Direction,
    RelEdge,
    RelationshipEntry,
    TraversalOptions,
    TraversalResult,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class TraversalSink(Protocol):
    """Consumer of a traversal, called in discovery order."""

    def start(self, root: CINode) -> None:
        ...

    def emit(self, entry: RelationshipEntry) -> None:
        ...

    def finish(self, result: TraversalResult) -> None:
        ...


@dataclass(frozen=True)
class _Candidate:
    sys_id: str
    name: str
    rel_type: str
    direction: Direction


@dataclass
class _TraversalContext:
    """Mutable state shared by every expansion of one traversal."""

    options: TraversalOptions
    class_cache: ClassCache
    result: TraversalResult
    sinks: Sequence[TraversalSink] = ()
    visited: set[str] = field(default_factory=set)
    displayed: set[str] = field(default_factory=set)
    edge_keys: set[tuple[str, str, str]] = field(default_factory=set)


class TraversalEngine:
    """Builds the relationship tree of a CI one edge query at a time.

    Each node is expanded at most once: it is marked visited the moment
    it is scheduled, before recursing, and a visited node is never shown
    again.  A class filter only decides which nodes are shown; hidden
    nodes are still walked through.

    Args:
        source: Record source for edge and class queries.
        rel_table: Relationship table name.
        ci_table: CI table name used for class lookups.
        edge_page_size: Maximum edges fetched per node.
    """

    def __init__(
        self,
        source: RecordSource,
        rel_table: str = REL_TABLE,
        ci_table: str = CI_TABLE,
        edge_page_size: int = EDGE_PAGE_SIZE,
    ) -> None:
        self._source = source
        self._ci_table = ci_table
        self._fetcher = EdgeFetcher(source, rel_table, edge_page_size)

    def traverse(
        self,
        root: CINode,
        options: TraversalOptions | None = None,
        sinks: Sequence[TraversalSink] = (),
        class_cache: ClassCache | None = None,
    ) -> TraversalResult:
        """Walk outward from *root* and return every visible neighbour.

        Args:
            root: Resolved root CI (depth 0).
            options: Depth, filters and direction; defaults apply if None.
            sinks: Renderers fed with each entry as it is found.
            class_cache: Cache to reuse; a fresh one is created if None.
        """
        options = options or TraversalOptions()
        ctx = _TraversalContext(
            options=options,
            class_cache=class_cache or ClassCache(self._source, self._ci_table),
            result=TraversalResult(root=root),
            sinks=sinks,
        )
        ctx.visited.add(root.sys_id)
        ctx.class_cache.prime(root)

        logger.info(
            "Traversing from %s (depth=%d, direction=%s)",
            root.name, options.max_depth, options.effective_direction.value,
        )
        for sink in sinks:
            sink.start(root)
        self._expand(ctx, root.sys_id, depth=1, branch=())
        for sink in sinks:
            sink.finish(ctx.result)
        return ctx.result

    def _expand(
        self,
        ctx: _TraversalContext,
        current_id: str,
        depth: int,
        branch: tuple[bool, ...],
    ) -> None:
        options = ctx.options
        if depth > options.max_depth:
            return

        ctx.result.expanded.append(current_id)
        edges = self._fetcher.edges_touching(current_id)
        if self._fetcher.last_truncated:
            ctx.result.truncated.append(current_id)

        candidates = [
            c for c in self._candidates(ctx, current_id, edges)
            if c.sys_id not in ctx.visited
        ]
        if not candidates:
            return

        classes = ctx.class_cache.resolve_many(c.sys_id for c in candidates)
        nodes = [CINode(c.sys_id, c.name, classes[c.sys_id]) for c in candidates]
        shown = self._preview_visible(ctx, nodes, depth)

        for index, (candidate, node) in enumerate(zip(candidates, nodes)):
            ctx.result.discovered.setdefault(node.sys_id, node)
            # An earlier sibling's subtree may have reached this node already.
            if node.sys_id in ctx.visited:
                continue
            # Last among the siblings that will be drawn; hidden nodes use
            # the same flag so their children get no dangling connector.
            entry_branch = branch + (not any(shown[index + 1:]),)

            if self._is_visible(ctx, node):
                entry = RelationshipEntry(
                    node=node,
                    rel_type=candidate.rel_type,
                    direction=candidate.direction,
                    depth=depth,
                    branch=entry_branch,
                )
                ctx.result.entries.append(entry)
                for sink in ctx.sinks:
                    sink.emit(entry)

            # Hidden nodes are still walked so their children can appear.
            if depth < options.max_depth and node.sys_id not in ctx.visited:
                ctx.visited.add(node.sys_id)
                self._expand(ctx, node.sys_id, depth + 1, entry_branch)

    @staticmethod
    def _candidates(
        ctx: _TraversalContext,
        current_id: str,
        edges: list[RelEdge],
    ) -> list[_Candidate]:
        """Apply direction and type filters, then collapse duplicate edges."""
        direction_filter = ctx.options.effective_direction
        by_key: dict[tuple[str, Direction], _Candidate] = {}

        for edge in edges:
            if edge.key not in ctx.edge_keys:
                ctx.edge_keys.add(edge.key)
                ctx.result.edges.append(edge)

            relative = edge.relative_to(current_id)
            if relative is None:
                continue
            other_id, other_name, direction = relative
            if other_id == current_id:
                continue
            if not direction_filter.allows(direction):
                continue
            if not ctx.options.matches_rel_type(edge.rel_type):
                continue
            by_key.setdefault(
                (other_id, direction),
                _Candidate(other_id, other_name or other_id, edge.rel_type, direction),
            )
        return list(by_key.values())

    @staticmethod
    def _preview_visible(
        ctx: _TraversalContext,
        nodes: list[CINode],
        depth: int,
    ) -> list[bool]:
        """Predict which siblings will be shown, without touching Displayed.

        Only nodes reached through an earlier sibling's subtree can still
        be skipped afterwards.
        """
        options = ctx.options
        flags: list[bool] = []
        seen: set[str] = set()
        for node in nodes:
            repeat = node.sys_id in seen
            seen.add(node.sys_id)
            if options.ci_class is None:
                # A repeat is skipped once its first occurrence is expanded.
                flags.append(not (repeat and depth < options.max_depth))
            else:
                flags.append(
                    options.matches_class(node.ci_class)
                    and node.sys_id not in ctx.displayed
                    and not repeat
                )
        return flags

    @staticmethod
    def _is_visible(ctx: _TraversalContext, node: CINode) -> bool:
        if ctx.options.ci_class is None:
            return True
        if not ctx.options.matches_class(node.ci_class):
            return False
        if node.sys_id in ctx.displayed:
            return False
        ctx.displayed.add(node.sys_id)
        return True


__all__ = ["TraversalEngine", "TraversalSink"]
