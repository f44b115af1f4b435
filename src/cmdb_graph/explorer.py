"""RelationshipExplorer -- resolve a CI reference, then walk its graph."""

from __future__ import annotations

import logging
from typing import Sequence

from .graph.class_cache import ClassCache
from .graph.edges import EDGE_PAGE_SIZE
from .graph.resolver import NAME_CANDIDATE_LIMIT, IdentityResolver
from .graph.traversal import TraversalEngine, TraversalSink
from .graph.types import TraversalOptions, TraversalResult
from .sources.protocol import RecordSource
from .sources.tables import CI_TABLE, REL_TABLE

logger = logging.getLogger(__name__)


class RelationshipExplorer:
    """Single entry point for building a CI's relationship tree.

    Args:
        source: Record source for every lookup.
        ci_table: CI table name.
        rel_table: Relationship table name.
        edge_page_size: Maximum relationships fetched per CI.
        candidate_limit: Maximum name matches considered for the root.
    """

    def __init__(
        self,
        source: RecordSource,
        ci_table: str = CI_TABLE,
        rel_table: str = REL_TABLE,
        edge_page_size: int = EDGE_PAGE_SIZE,
        candidate_limit: int = NAME_CANDIDATE_LIMIT,
    ) -> None:
        self._source = source
        self._ci_table = ci_table
        self._resolver = IdentityResolver(source, ci_table, candidate_limit)
        self._engine = TraversalEngine(source, rel_table, ci_table, edge_page_size)

    def explore(
        self,
        reference: str,
        options: TraversalOptions | None = None,
        by_id: bool | None = None,
        sinks: Sequence[TraversalSink] = (),
    ) -> TraversalResult:
        """Resolve *reference* and traverse from it.

        Raises:
            CINotFoundError: If the root cannot be resolved.
            RecordSourceError: If the root lookup itself fails.
        """
        options = options or TraversalOptions()
        root = self._resolver.resolve(reference, by_id=by_id)
        logger.info("Resolved %r to %s [%s]", reference, root.sys_id, root.ci_class)

        class_cache = ClassCache(self._source, self._ci_table)
        class_cache.prime(root)
        result = self._engine.traverse(root, options, sinks=sinks, class_cache=class_cache)
        logger.info("Found %d related CI(s)", len(result.entries))
        return result


__all__ = ["RelationshipExplorer"]
