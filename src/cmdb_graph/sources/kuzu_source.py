"""KuzuRecordSource -- offline CMDB snapshot backed by Kuzu.

CIs are stored as ``CI`` nodes and ``cmdb_rel_ci`` records as ``REL_CI``
relationships.  Table reads are translated into parameterised Cypher so
the traversal engine can re-explore a saved neighbourhood without an
instance.

Public API:
    KuzuRecordSource: RecordSource over an embedded Kuzu database.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any

import kuzu

from ..exceptions import RecordSourceError
from ..graph.types import UNKNOWN_CLASS, CINode, TraversalResult
from .query import IN, Condition, DisplayValue, EncodedQuery, project_record
from .tables import CI_TABLE, REL_TABLE

logger = logging.getLogger(__name__)

# Table API field -> Cypher expression, per supported table.
_CI_COLUMNS = {
    "sys_id": "n.sys_id",
    "name": "n.name",
    "sys_class_name": "n.sys_class_name",
}
_REL_COLUMNS = {
    "sys_id": "r.sys_id",
    "parent": "p.sys_id",
    "child": "c.sys_id",
    "type": "r.rel_type",
}


class KuzuRecordSource:
    """Kuzu implementation of the RecordSource protocol.

    Schema is created on first use.  All values are bound as Cypher
    parameters.

    Args:
        db_path: Filesystem path for the Kuzu database.
    """

    # ── construction / lifecycle ──────────────────────────────

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        self._db = kuzu.Database(str(self._db_path))
        self._conn = kuzu.Connection(self._db)
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Release Kuzu resources so the path can be reopened."""
        if self._conn is not None:
            self._conn.close()
        if self._db is not None:
            self._db.close()
        self._conn = None  # type: ignore[assignment]
        self._db = None  # type: ignore[assignment]

    def _ensure_schema(self) -> None:
        self._conn.execute(
            "CREATE NODE TABLE IF NOT EXISTS CI("
            "sys_id STRING, name STRING, sys_class_name STRING, "
            "PRIMARY KEY(sys_id))"
        )
        self._conn.execute(
            "CREATE REL TABLE IF NOT EXISTS REL_CI("
            "FROM CI TO CI, sys_id STRING, rel_type STRING)"
        )

    # ── snapshot writes ───────────────────────────────────────

    def add_ci(self, sys_id: str, name: str, ci_class: str = UNKNOWN_CLASS) -> None:
        """Insert or update a CI."""
        params = {"sid": sys_id, "name": name, "cls": ci_class}
        if self._ci_exists(sys_id):
            self._conn.execute(
                "MATCH (n:CI) WHERE n.sys_id = $sid "
                "SET n.name = $name, n.sys_class_name = $cls",
                params,
            )
        else:
            self._conn.execute(
                "CREATE (:CI {sys_id: $sid, name: $name, sys_class_name: $cls})",
                params,
            )

    def add_relationship(
        self,
        parent_id: str,
        child_id: str,
        rel_type: str,
        sys_id: str | None = None,
    ) -> bool:
        """Insert a relationship unless it is already stored.

        Without *sys_id* an existing edge with the same parent, child and
        type counts as already stored.

        Returns:
            True if a relationship was created.

        Raises:
            KeyError: If either endpoint CI does not exist.
        """
        for endpoint in (parent_id, child_id):
            if not self._ci_exists(endpoint):
                raise KeyError(f"CI not found: {endpoint}")

        if sys_id:
            existing = self._conn.execute(
                "MATCH (:CI)-[r:REL_CI]->(:CI) WHERE r.sys_id = $rid RETURN r.sys_id",
                {"rid": sys_id},
            )
        else:
            existing = self._conn.execute(
                "MATCH (a:CI)-[r:REL_CI]->(b:CI) "
                "WHERE a.sys_id = $pid AND b.sys_id = $cid AND r.rel_type = $rtype "
                "RETURN r.sys_id",
                {"pid": parent_id, "cid": child_id, "rtype": rel_type},
            )
        if existing.has_next():
            return False

        self._conn.execute(
            "MATCH (a:CI), (b:CI) WHERE a.sys_id = $pid AND b.sys_id = $cid "
            "CREATE (a)-[:REL_CI {sys_id: $rid, rel_type: $rtype}]->(b)",
            {
                "pid": parent_id,
                "cid": child_id,
                "rid": sys_id or uuid.uuid4().hex,
                "rtype": rel_type,
            },
        )
        return True

    def save_result(self, result: TraversalResult) -> int:
        """Write the CIs and edges seen by a traversal into the snapshot.

        Returns:
            Number of relationships created.
        """
        known: dict[str, CINode] = {result.root.sys_id: result.root}
        known.update(result.discovered)
        for node in known.values():
            self.add_ci(node.sys_id, node.name, node.ci_class)

        created = 0
        for edge in result.edges:
            # Endpoints filtered out of the walk are stored without a class.
            for sys_id, name in (
                (edge.source_id, edge.source_name),
                (edge.target_id, edge.target_name),
            ):
                if sys_id not in known and not self._ci_exists(sys_id):
                    self.add_ci(sys_id, name or sys_id)
            if self.add_relationship(
                edge.source_id, edge.target_id, edge.rel_type, edge.sys_id or None
            ):
                created += 1
        logger.info(
            "Saved %d CI(s) and %d new relationship(s) to %s",
            len(known), created, self._db_path,
        )
        return created

    # ── RecordSource ──────────────────────────────────────────

    def query_records(
        self,
        table: str,
        query: EncodedQuery | None = None,
        fields: list[str] | None = None,
        display_value: DisplayValue = DisplayValue.RAW,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        if table == CI_TABLE:
            where, params = self._where(table, query, _CI_COLUMNS)
            cypher = (
                f"MATCH (n:CI){where} "
                f"RETURN n.sys_id, n.name, n.sys_class_name "
                f"ORDER BY n.sys_id LIMIT {int(limit)}"
            )
            rows = self._rows(table, cypher, params)
            records = [
                {"sys_id": row[0], "name": row[1] or "", "sys_class_name": row[2] or ""}
                for row in rows
            ]
        elif table == REL_TABLE:
            where, params = self._where(table, query, _REL_COLUMNS)
            cypher = (
                f"MATCH (p:CI)-[r:REL_CI]->(c:CI){where} "
                f"RETURN r.sys_id, p.sys_id, p.name, c.sys_id, c.name, r.rel_type "
                f"ORDER BY r.sys_id LIMIT {int(limit)}"
            )
            rows = self._rows(table, cypher, params)
            records = [
                {
                    "sys_id": row[0] or "",
                    "parent": {"value": row[1], "display_value": row[2] or ""},
                    "child": {"value": row[3], "display_value": row[4] or ""},
                    "type": {"value": row[5] or "", "display_value": row[5] or ""},
                }
                for row in rows
            ]
        else:
            raise RecordSourceError(table, "table is not stored in a Kuzu snapshot")

        return [project_record(r, fields, display_value) for r in records]

    # ── private helpers ───────────────────────────────────────

    def _ci_exists(self, sys_id: str) -> bool:
        result = self._conn.execute(
            "MATCH (n:CI) WHERE n.sys_id = $sid RETURN n.sys_id", {"sid": sys_id}
        )
        return result.has_next()

    def _rows(self, table: str, cypher: str, params: dict[str, Any]) -> list[list[Any]]:
        try:
            result = self._conn.execute(cypher, params)
        except RuntimeError as exc:
            raise RecordSourceError(table, f"snapshot query failed: {exc}") from exc
        rows: list[list[Any]] = []
        while result.has_next():
            rows.append(result.get_next())
        return rows

    @staticmethod
    def _where(
        table: str,
        query: EncodedQuery | None,
        columns: dict[str, str],
    ) -> tuple[str, dict[str, Any]]:
        """Translate *query* into a WHERE clause and its parameters."""
        if query is None or not query.conditions:
            return "", {}

        params: dict[str, Any] = {}
        clauses: list[str] = []
        for condition in query.conditions:
            clauses.append(_condition_clause(table, condition, columns, params))

        joiner = " OR " if query.any_of else " AND "
        return f" WHERE {joiner.join(clauses)}", params


def _condition_clause(
    table: str,
    condition: Condition,
    columns: dict[str, str],
    params: dict[str, Any],
) -> str:
    column = columns.get(condition.field)
    if column is None:
        raise RecordSourceError(table, f"unsupported field: {condition.field}")

    parts: list[str] = []
    values = condition.values if condition.operator == IN else (str(condition.value),)
    for value in values:
        pname = f"p{len(params)}"
        params[pname] = value
        parts.append(f"{column} = ${pname}")
    if not parts:
        return "false"
    return f"({' OR '.join(parts)})"


__all__ = ["KuzuRecordSource"]
