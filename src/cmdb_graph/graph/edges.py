"""Fetches the relationship records touching a single CI."""

from __future__ import annotations

import logging

from ..exceptions import RecordSourceError
from ..sources.protocol import RecordSource
from ..sources.query import DisplayValue, EncodedQuery, display_value, raw_value
from ..sources.tables import REL_FIELDS, REL_TABLE
from .types import RelEdge

logger = logging.getLogger(__name__)

EDGE_PAGE_SIZE = 100


class EdgeFetcher:
    """Issues one ``parent=X^ORchild=X`` query per expanded CI.

    Nodes with more than *page_size* relationships are truncated to the
    first page; exactly *page_size* is a complete answer.  The truncation is logged and remembered in
    ``last_truncated`` rather than raised.

    Args:
        source: Record source to query.
        rel_table: Relationship table name.
        page_size: Maximum relationships fetched per CI.
    """

    def __init__(
        self,
        source: RecordSource,
        rel_table: str = REL_TABLE,
        page_size: int = EDGE_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._source = source
        self._rel_table = rel_table
        self._page_size = page_size
        self.last_truncated = False

    @property
    def page_size(self) -> int:
        return self._page_size

    def edges_touching(self, sys_id: str) -> list[RelEdge]:
        """Return edges where *sys_id* is parent or child, in fetch order.

        A failed query yields an empty list so the traversal can carry on
        with its other branches.
        """
        self.last_truncated = False
        try:
            records = self._source.query_records(
                self._rel_table,
                EncodedQuery.either("parent", "child", sys_id),
                fields=REL_FIELDS,
                display_value=DisplayValue.ALL,
                # One extra row tells a full page apart from an overflowing one.
                limit=self._page_size + 1,
            )
        except RecordSourceError as exc:
            logger.warning("Edge query failed for %s, treating as leaf: %s", sys_id, exc)
            return []

        if len(records) > self._page_size:
            self.last_truncated = True
            records = records[: self._page_size]
            logger.warning(
                "%s has more than %d relationships; only the first %d are traversed",
                sys_id, self._page_size, self._page_size,
            )

        edges: list[RelEdge] = []
        for record in records:
            source_id = raw_value(record.get("parent"))
            target_id = raw_value(record.get("child"))
            if not source_id or not target_id:
                continue
            edges.append(
                RelEdge(
                    source_id=source_id,
                    target_id=target_id,
                    rel_type=display_value(record.get("type")),
                    source_name=display_value(record.get("parent")),
                    target_name=display_value(record.get("child")),
                    sys_id=raw_value(record.get("sys_id")),
                )
            )
        return edges


__all__ = ["EdgeFetcher", "EDGE_PAGE_SIZE"]
