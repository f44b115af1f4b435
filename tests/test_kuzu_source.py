"""Tests for KuzuRecordSource (offline CMDB snapshots).

Test categories:
- TestKuzuWrites: upserts, relationship dedup, missing endpoints
- TestKuzuQueries: CI and relationship reads, display modes, unsupported tables
- TestSnapshotRoundTrip: save a traversal, re-explore it offline

All tests use real Kuzu databases via tmp_path.
"""

from __future__ import annotations

import pytest

from cmdb_graph import (
    DisplayValue,
    EncodedQuery,
    InMemoryRecordSource,
    KuzuRecordSource,
    RecordSource,
    RecordSourceError,
    RelationshipExplorer,
    TraversalOptions,
)


# ── fixtures ──────────────────────────────────────────────────


@pytest.fixture
def snapshot(tmp_path):
    """Create a fresh KuzuRecordSource for each test."""
    s = KuzuRecordSource(tmp_path / "snapshot_db")
    yield s
    s.close()


@pytest.fixture
def populated(snapshot):
    """Snapshot holding a three-node chain.

    Graph structure:
        svc --r1 Depends on--> app --r2 Runs on--> srv
    """
    snapshot.add_ci("svc", "billing", "cmdb_ci_service")
    snapshot.add_ci("app", "billing-app", "cmdb_ci_appl")
    snapshot.add_ci("srv", "lnx-01", "cmdb_ci_linux_server")
    snapshot.add_relationship("svc", "app", "Depends on::Used by", sys_id="r1")
    snapshot.add_relationship("app", "srv", "Runs on::Runs", sys_id="r2")
    return snapshot


# ── TestKuzuWrites ────────────────────────────────────────────


class TestKuzuWrites:
    """Idempotent snapshot writes."""

    def test_add_ci_upserts(self, snapshot):
        snapshot.add_ci("a", "old-name", "cmdb_ci")
        snapshot.add_ci("a", "new-name", "cmdb_ci_server")
        rows = snapshot.query_records("cmdb_ci")
        assert rows == [{"sys_id": "a", "name": "new-name", "sys_class_name": "cmdb_ci_server"}]

    def test_relationship_dedup_by_sys_id(self, populated):
        assert populated.add_relationship("svc", "app", "Depends on::Used by", sys_id="r1") is False
        assert len(populated.query_records("cmdb_rel_ci")) == 2

    def test_relationship_dedup_by_key(self, populated):
        assert populated.add_relationship("app", "srv", "Runs on::Runs") is False
        assert populated.add_relationship("srv", "app", "Runs on::Runs") is True

    def test_relationship_needs_both_endpoints(self, snapshot):
        snapshot.add_ci("a", "A")
        with pytest.raises(KeyError):
            snapshot.add_relationship("a", "missing", "Uses::Used by")


# ── TestKuzuQueries ───────────────────────────────────────────


class TestKuzuQueries:
    """Table reads translated to Cypher."""

    def test_ci_by_name(self, populated):
        rows = populated.query_records(
            "cmdb_ci", EncodedQuery.equals("name", "billing-app"), fields=["sys_id"]
        )
        assert rows == [{"sys_id": "app"}]

    def test_ci_in_query(self, populated):
        rows = populated.query_records(
            "cmdb_ci",
            EncodedQuery.one_of("sys_id", ["srv", "svc", "nope"]),
            fields=["sys_id", "sys_class_name"],
        )
        assert rows == [
            {"sys_id": "srv", "sys_class_name": "cmdb_ci_linux_server"},
            {"sys_id": "svc", "sys_class_name": "cmdb_ci_service"},
        ]

    def test_relationships_touching(self, populated):
        rows = populated.query_records(
            "cmdb_rel_ci",
            EncodedQuery.either("parent", "child", "app"),
            fields=["sys_id", "parent", "child", "type"],
            display_value=DisplayValue.ALL,
        )
        assert [r["sys_id"]["value"] for r in rows] == ["r1", "r2"]
        assert rows[0]["parent"] == {"value": "svc", "display_value": "billing"}
        assert rows[1]["type"]["display_value"] == "Runs on::Runs"

    def test_relationships_raw_mode(self, populated):
        rows = populated.query_records(
            "cmdb_rel_ci", EncodedQuery.equals("child", "srv"), fields=["parent"]
        )
        assert rows == [{"parent": "app"}]

    def test_limit(self, populated):
        assert len(populated.query_records("cmdb_ci", limit=1)) == 1

    def test_unsupported_table(self, populated):
        with pytest.raises(RecordSourceError):
            populated.query_records("incident")

    def test_unsupported_field(self, populated):
        with pytest.raises(RecordSourceError, match="unsupported field"):
            populated.query_records("cmdb_ci", EncodedQuery.equals("ip_address", "10.0.0.1"))

    def test_protocol_compliance(self, snapshot):
        assert isinstance(snapshot, RecordSource)


# ── TestSnapshotRoundTrip ─────────────────────────────────────


class TestSnapshotRoundTrip:
    """A saved traversal explores the same offline."""

    def test_save_and_reexplore(self, snapshot):
        online = InMemoryRecordSource()
        online.add_ci("a", "A", "cmdb_ci_service")
        online.add_ci("b", "B", "cmdb_ci_appl")
        online.add_ci("c", "C", "cmdb_ci_server")
        online.add_relationship("a", "b", "Uses::Used by", sys_id="r1")
        online.add_relationship("b", "c", "Uses::Used by", sys_id="r2")
        online.add_relationship("c", "a", "Uses::Used by", sys_id="r3")

        options = TraversalOptions(max_depth=5)
        before = RelationshipExplorer(online).explore("A", options)
        assert snapshot.save_result(before) == 3

        after = RelationshipExplorer(snapshot).explore("A", options)
        assert after.root == before.root
        assert [e.to_dict() for e in after.entries] == [e.to_dict() for e in before.entries]

    def test_save_keeps_hidden_nodes(self, snapshot):
        online = InMemoryRecordSource()
        online.add_ci("a", "A", "cmdb_ci_service")
        online.add_ci("b", "B", "cmdb_ci_appl")
        online.add_ci("c", "C", "cmdb_ci_server")
        online.add_relationship("a", "b", "Uses::Used by", sys_id="r1")
        online.add_relationship("b", "c", "Uses::Used by", sys_id="r2")

        result = RelationshipExplorer(online).explore(
            "A", TraversalOptions(max_depth=2, ci_class="server")
        )
        snapshot.save_result(result)
        rows = snapshot.query_records(
            "cmdb_ci", EncodedQuery.equals("sys_id", "b"), fields=["sys_class_name"]
        )
        assert rows == [{"sys_class_name": "cmdb_ci_appl"}]

    def test_save_is_idempotent(self, snapshot, cycle_source):
        result = RelationshipExplorer(cycle_source).explore("A", TraversalOptions(max_depth=5))
        assert snapshot.save_result(result) == 3
        assert snapshot.save_result(result) == 0
