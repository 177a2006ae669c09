"""Unit tests for logging helpers, metrics and settings."""

import io
import json
import logging
from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import capture_logs

from pyboiler.observability.logging import (
    configure_logging,
    get_logger,
    parse_level,
    set_global_name,
)
from pyboiler.observability.metrics import BootMetrics
from pyboiler.settings import BootSettings


@pytest.fixture
def restore_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestLogging:
    """Tests for logging helpers."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("debug", logging.DEBUG),
            ("WARN", logging.WARNING),
            (" error ", logging.ERROR),
            (None, logging.INFO),
            ("verbose", logging.INFO),
        ],
    )
    def test_parse_level(self, name: str | None, expected: int) -> None:
        """Test level name mapping."""
        assert parse_level(name) == expected

    @pytest.mark.unit
    def test_json_output_carries_global_name(self, restore_structlog: None) -> None:
        """Test that the application identity is attached to every line."""
        output = io.StringIO()
        configure_logging(level=logging.INFO, output=output, json_format=True)
        set_global_name("svc-test")

        get_logger("boiler").info("sync_ready", sources=2)
        get_logger("boiler").debug("filtered_out")

        lines = [json.loads(line) for line in output.getvalue().splitlines()]
        assert len(lines) == 1
        assert lines[0]["app"] == "svc-test"
        assert lines[0]["logger"] == "boiler"
        assert lines[0]["event"] == "sync_ready"
        assert lines[0]["level"] == "info"

    @pytest.mark.unit
    def test_named_logger_carries_name(self) -> None:
        """Test that a named logger can be created and tags its events."""
        with capture_logs() as logs:
            get_logger("worker").info("started", attempt=1)

        assert logs == [
            {"event": "started", "attempt": 1, "logger": "worker", "log_level": "info"}
        ]


class TestBootMetrics:
    """Tests for BootMetrics."""

    @pytest.mark.unit
    def test_counters(self) -> None:
        """Test counter updates and serialization."""
        metrics = BootMetrics()
        metrics.record_source_loaded()
        metrics.record_plugin_loaded()
        metrics.record_enrichment_failure()
        metrics.record_enrichment_failure()
        metrics.record_sync_duration(1.5)

        assert metrics.to_dict() == {
            "sync_assembly_duration_ms": 1.5,
            "enrichment_duration_ms": 0.0,
            "sources_loaded": 1,
            "plugins_loaded": 1,
            "enrichment_failures_total": 2,
        }


class TestBootSettings:
    """Tests for BootSettings."""

    @pytest.mark.unit
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variable names."""
        monkeypatch.setenv("PYBOILER_SUFFIX", "-canary")
        monkeypatch.setenv("CONFIG_LEARN_DIR", "/tmp/learn")
        monkeypatch.setenv("PYBOILER_ENV", "production")
        monkeypatch.setenv("PYBOILER_LOG_JSON", "false")

        settings = BootSettings()

        assert settings.app_name_suffix == "-canary"
        assert str(settings.learn_directory) == "/tmp/learn"
        assert settings.environment == "production"
        assert settings.log_json is False

    @pytest.mark.unit
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test defaults without environment."""
        for name in (
            "PYBOILER_SUFFIX",
            "CONFIG_LEARN_DIR",
            "PYBOILER_ENV",
            "PYBOILER_LOG_LEVEL",
            "PYBOILER_LOG_JSON",
        ):
            monkeypatch.delenv(name, raising=False)

        settings = BootSettings()

        assert settings.app_name_suffix == ""
        assert settings.learn_directory is None
        assert settings.environment == "development"
        assert settings.log_level is None
