"""Pytest configuration and fixtures for cmdb-graph tests."""

import pytest

from cmdb_graph.sources import InMemoryRecordSource

USES = "Uses::Used by"
DEPENDS = "Depends on::Used by"
HOSTED = "Hosted on::Hosts"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests independent of the caller's SN_* variables and .env file."""
    for name in ("SN_INSTANCE", "SN_USER", "SN_PASSWORD", "SN_TIMEOUT", "SN_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def source():
    """Empty in-memory record source."""
    s = InMemoryRecordSource()
    yield s
    s.close()


@pytest.fixture
def cycle_source(source):
    """Three CIs in a cycle.

    Graph structure:
        A --Uses--> B --Uses--> C --Uses--> A
    """
    source.add_ci("a", "A", "cmdb_ci_service")
    source.add_ci("b", "B", "cmdb_ci_appl")
    source.add_ci("c", "C", "cmdb_ci_server")
    source.add_relationship("a", "b", USES)
    source.add_relationship("b", "c", USES)
    source.add_relationship("c", "a", USES)
    return source


@pytest.fixture
def service_source(source):
    """A small service map with a class mix and a shared database.

    Graph structure:
        portal --Depends on--> app --Depends on--> db
        portal --Depends on--> api --Depends on--> db
        app    --Hosted on-->  srv --Hosted on-->  rack
        lb     --Depends on--> portal
    """
    source.add_ci("portal", "web-portal", "cmdb_ci_service")
    source.add_ci("app", "app-01", "cmdb_ci_appl")
    source.add_ci("api", "api-01", "cmdb_ci_appl")
    source.add_ci("db", "db-01", "cmdb_ci_db_instance")
    source.add_ci("srv", "srv-01", "cmdb_ci_linux_server")
    source.add_ci("rack", "rack-07", "cmdb_ci_rack")
    source.add_ci("lb", "lb-01", "cmdb_ci_lb")
    source.add_relationship("portal", "app", DEPENDS)
    source.add_relationship("portal", "api", DEPENDS)
    source.add_relationship("app", "db", DEPENDS)
    source.add_relationship("api", "db", DEPENDS)
    source.add_relationship("app", "srv", HOSTED)
    source.add_relationship("srv", "rack", HOSTED)
    source.add_relationship("lb", "portal", DEPENDS)
    return source
