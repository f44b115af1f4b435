"""Tests for InstanceSettings and logging setup."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from cmdb_graph import InstanceSettings, TableAPISource
from cmdb_graph.config import normalize_instance_url
from cmdb_graph.logging import setup_logging


@pytest.fixture
def instance_env(monkeypatch):
    monkeypatch.setenv("SN_INSTANCE", "acme.service-now.com/")
    monkeypatch.setenv("SN_USER", "admin")
    monkeypatch.setenv("SN_PASSWORD", "secret")


class TestInstanceSettings:
    def test_from_environment(self, instance_env):
        settings = InstanceSettings()
        assert settings.instance == "https://acme.service-now.com"
        assert settings.user == "admin"
        assert settings.password == "secret"
        assert settings.timeout == 30.0
        assert settings.log_level == "WARNING"

    def test_overrides(self, instance_env, monkeypatch):
        monkeypatch.setenv("SN_TIMEOUT", "5")
        monkeypatch.setenv("SN_LOG_LEVEL", "DEBUG")
        settings = InstanceSettings()
        assert settings.timeout == 5.0
        assert settings.log_level == "DEBUG"

    def test_missing_values(self):
        with pytest.raises(ValidationError) as exc_info:
            InstanceSettings()
        missing = {e["loc"][0] for e in exc_info.value.errors()}
        assert missing == {"instance", "user", "password"}

    def test_blank_instance_rejected(self, instance_env, monkeypatch):
        monkeypatch.setenv("SN_INSTANCE", "  ")
        with pytest.raises(ValidationError):
            InstanceSettings()

    def test_source_from_settings(self, instance_env):
        with TableAPISource.from_settings(InstanceSettings()) as source:
            assert source.instance_url == "https://acme.service-now.com"

    @pytest.mark.parametrize(
        ("given", "expected"),
        [
            ("acme.service-now.com", "https://acme.service-now.com"),
            (" https://acme.service-now.com// ", "https://acme.service-now.com"),
            ("http://localhost:8080", "http://localhost:8080"),
        ],
    )
    def test_normalize_instance_url(self, given, expected):
        assert normalize_instance_url(given) == expected


class TestSetupLogging:
    def test_level_applied(self):
        logger = setup_logging("debug")
        assert logger.name == "cmdb_graph"
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_defaults_to_warning(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.WARNING
