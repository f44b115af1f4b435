"""Per-traversal memo of CI id -> class lookups."""

from __future__ import annotations

import logging
from typing import Iterable

from ..exceptions import RecordSourceError
from ..sources.protocol import RecordSource
from ..sources.query import EncodedQuery, raw_value
from ..sources.tables import CI_TABLE
from .types import UNKNOWN_CLASS, CINode

logger = logging.getLogger(__name__)


class ClassCache:
    """Memoizes ``sys_id -> sys_class_name`` for the lifetime of one traversal.

    Failed or empty lookups are cached as ``"unknown"`` so a node that
    cannot be read is never queried twice.  Entries are never invalidated.
    """

    def __init__(self, source: RecordSource, ci_table: str = CI_TABLE) -> None:
        self._source = source
        self._ci_table = ci_table
        self._classes: dict[str, str] = {}

    def __contains__(self, sys_id: object) -> bool:
        return sys_id in self._classes

    def __len__(self) -> int:
        return len(self._classes)

    def prime(self, node: CINode) -> None:
        """Seed the cache with a node whose class is already known."""
        self._classes.setdefault(node.sys_id, node.ci_class)

    def resolve_class(self, sys_id: str) -> str:
        return self.resolve_many([sys_id])[sys_id]

    def resolve_many(self, sys_ids: Iterable[str]) -> dict[str, str]:
        """Resolve classes for *sys_ids* with at most one query.

        Returns:
            Mapping in the order the ids were given.
        """
        ordered = list(dict.fromkeys(sys_ids))
        missing = [sid for sid in ordered if sid not in self._classes]
        if missing:
            self._fetch(missing)
        return {sid: self._classes[sid] for sid in ordered}

    def _fetch(self, sys_ids: list[str]) -> None:
        query = (
            EncodedQuery.equals("sys_id", sys_ids[0])
            if len(sys_ids) == 1
            else EncodedQuery.one_of("sys_id", sys_ids)
        )
        try:
            records = self._source.query_records(
                self._ci_table,
                query,
                fields=["sys_id", "sys_class_name"],
                limit=len(sys_ids),
            )
        except RecordSourceError as exc:
            logger.warning("Class lookup failed for %d CI(s): %s", len(sys_ids), exc)
            records = []

        for record in records:
            sys_id = raw_value(record.get("sys_id"))
            if sys_id in sys_ids:
                self._classes[sys_id] = raw_value(record.get("sys_class_name")) or UNKNOWN_CLASS
        for sys_id in sys_ids:
            if sys_id not in self._classes:
                logger.debug("No class found for %s", sys_id)
                self._classes[sys_id] = UNKNOWN_CLASS


__all__ = ["ClassCache"]
