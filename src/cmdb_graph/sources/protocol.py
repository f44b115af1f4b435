"""RecordSource protocol -- the one capability the traversal core consumes.

Public API:
    RecordSource: Runtime-checkable protocol for filtered table reads.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .query import DisplayValue, EncodedQuery


@runtime_checkable
class RecordSource(Protocol):
    """Generic filtered read against a remote tabular store.

    The traversal core uses it to resolve a CI by name or id, to look up
    a CI's class and to fetch the relationship records touching a CI.
    Implementations raise ``RecordSourceError`` when a read fails.
    """

    def query_records(
        self,
        table: str,
        query: EncodedQuery | None = None,
        fields: list[str] | None = None,
        display_value: DisplayValue = DisplayValue.RAW,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        """Return up to *limit* records of *table* matching *query*.

        Args:
            table: Table name (e.g. "cmdb_ci", "cmdb_rel_ci").
            query: Filter; None returns unfiltered rows.
            fields: Columns to return; None returns every column.
            display_value: Raw values, display values, or both as
                ``{"value": ..., "display_value": ...}`` pairs.
            limit: Maximum number of rows.
        """
        ...

    def close(self) -> None:
        """Release resources held by the source."""
        ...


__all__ = ["RecordSource"]
