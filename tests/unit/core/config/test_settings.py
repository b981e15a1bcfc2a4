"""Tests for settings and health store selection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hms.core.config.settings import Settings, get_settings
from hms.core.server.app import create_app, create_health_store
from hms.core.server.main import _is_loopback_host, describe_screen_config, run
from hms.domains.health.connectors.composite import CompositeHealthStore
from hms.domains.health.connectors.providers import MockHealthStore


class TestSettings:
    def test_defaults(self):
        settings = get_settings()
        assert settings.hms_host == "127.0.0.1"
        assert settings.health_store == "mock"
        assert settings.record_limit == 100
        assert settings.error_policy == "silent"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ERROR_POLICY", "surface")
        monkeypatch.setenv("RECORD_LIMIT", "25")
        settings = get_settings()
        assert settings.error_policy == "surface"
        assert settings.record_limit == 25

    def test_rejects_unknown_store(self, monkeypatch):
        monkeypatch.setenv("HEALTH_STORE", "fitbit")
        with pytest.raises(ValidationError):
            get_settings()


class TestCreateHealthStore:
    def test_mock(self):
        assert isinstance(create_health_store(Settings(health_store="mock")), MockHealthStore)

    def test_apple_health_is_composite_with_mock_fallback(self, tmp_path):
        export = tmp_path / "export.xml"
        export.write_text("<HealthData/>")
        store = create_health_store(
            Settings(health_store="apple_health", apple_health_export_path=str(export))
        )
        assert isinstance(store, CompositeHealthStore)
        assert store.data_source == "apple_health"

    def test_apple_health_requires_path(self):
        with pytest.raises(ValueError, match="APPLE_HEALTH_EXPORT_PATH"):
            create_health_store(Settings(health_store="apple_health"))

    def test_negative_record_limit_rejected(self, monkeypatch):
        monkeypatch.setenv("RECORD_LIMIT", "-1")
        with pytest.raises(ValueError, match="RECORD_LIMIT"):
            create_app()


class TestLoopbackGuard:
    @pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "::1"])
    def test_loopback(self, host):
        assert _is_loopback_host(host)

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.10", "example.com"])
    def test_not_loopback(self, host):
        assert not _is_loopback_host(host)

    def test_run_refuses_public_host(self, monkeypatch):
        monkeypatch.setenv("HMS_HOST", "0.0.0.0")
        monkeypatch.setenv("HMS_ALLOW_INSECURE_BIND", "false")
        with pytest.raises(RuntimeError, match="0.0.0.0"):
            run()


class TestDescribeScreenConfig:
    def test_mock(self):
        assert describe_screen_config(Settings(health_store="mock")) == (
            "store=mock error_policy=silent record_limit=100"
        )

    def test_apple_health_includes_export_path(self):
        summary = describe_screen_config(
            Settings(
                health_store="apple_health",
                apple_health_export_path="/data/export.xml",
                error_policy="surface",
            )
        )
        assert summary.startswith("store=apple_health (/data/export.xml)")
        assert "error_policy=surface" in summary
