"""InMemoryRecordSource -- dict-backed RecordSource for tests and fixtures.

Records are stored the way the Table API returns them with
``sysparm_display_value=all``: reference fields hold
``{"value": ..., "display_value": ...}`` pairs, plain fields hold strings.
Reads project and convert them according to the requested display mode.

Public API:
    InMemoryRecordSource: Thread-safe in-memory RecordSource.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any

from ..exceptions import RecordSourceError
from .query import DisplayValue, EncodedQuery, project_record
from .tables import CI_TABLE, REL_TABLE


class InMemoryRecordSource:
    """Dict-based RecordSource that needs no instance.

    Thread-safe via a reentrant lock.

    Args:
        fail_tables: Tables whose reads raise ``RecordSourceError``,
            for exercising degraded traversal paths.
    """

    def __init__(self, fail_tables: set[str] | None = None) -> None:
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self.fail_tables: set[str] = set(fail_tables or ())
        # (table, encoded query, limit) for every read, in call order.
        self.calls: list[tuple[str, str, int]] = []

    # ── population ───────────────────────────────────────────

    def add_record(self, table: str, record: dict[str, Any]) -> dict[str, Any]:
        stored = dict(record)
        stored.setdefault("sys_id", uuid.uuid4().hex)
        with self._lock:
            self._tables.setdefault(table, []).append(stored)
        return stored

    def add_ci(self, sys_id: str, name: str, ci_class: str = "cmdb_ci") -> dict[str, Any]:
        return self.add_record(
            CI_TABLE,
            {"sys_id": sys_id, "name": name, "sys_class_name": ci_class},
        )

    def add_relationship(
        self,
        parent_id: str,
        child_id: str,
        rel_type: str,
        sys_id: str | None = None,
    ) -> dict[str, Any]:
        """Add a ``cmdb_rel_ci`` record, naming endpoints from known CIs."""
        return self.add_record(
            REL_TABLE,
            {
                "sys_id": sys_id or uuid.uuid4().hex,
                "parent": {"value": parent_id, "display_value": self._ci_name(parent_id)},
                "child": {"value": child_id, "display_value": self._ci_name(child_id)},
                "type": {"value": rel_type, "display_value": rel_type},
            },
        )

    def _ci_name(self, sys_id: str) -> str:
        with self._lock:
            for record in self._tables.get(CI_TABLE, []):
                if record.get("sys_id") == sys_id:
                    return str(record.get("name", sys_id))
        return sys_id

    # ── RecordSource ─────────────────────────────────────────

    def query_records(
        self,
        table: str,
        query: EncodedQuery | None = None,
        fields: list[str] | None = None,
        display_value: DisplayValue = DisplayValue.RAW,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        with self._lock:
            self.calls.append((table, query.encode() if query else "", limit))
            if table in self.fail_tables:
                raise RecordSourceError(table, "simulated read failure")
            rows = [
                r for r in self._tables.get(table, [])
                if query is None or query.matches(r)
            ]
        return [project_record(r, fields, display_value) for r in rows[:limit]]

    def close(self) -> None:
        with self._lock:
            self._tables.clear()


__all__ = ["InMemoryRecordSource"]
