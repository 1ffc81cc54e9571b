"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from lodestar.config.models import LoggingConfig, LogOutputConfig
from lodestar.core.logging import (
    _add_scan_id,
    clear_scan_id,
    configure_logging,
    get_log_file_path,
    get_logger,
    get_scan_id,
    set_scan_id,
)


class TestScanIdCorrelation:
    """Scan ID context variable tests."""

    def setup_method(self) -> None:
        """Clear scan ID before each test."""
        clear_scan_id()

    def test_given_scan_id_when_set_then_can_retrieve(self) -> None:
        """Scan ID can be set and retrieved."""
        # Given
        scan_id = "scan-123"

        # When
        result = set_scan_id(scan_id)

        # Then
        assert result == scan_id
        assert get_scan_id() == scan_id

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        """Set generates a UUID-based ID when none provided."""
        # When
        sid = set_scan_id()

        # Then
        assert len(sid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        # Given
        set_scan_id("to-clear")

        # When
        clear_scan_id()

        # Then
        assert get_scan_id() is None

    def test_given_scan_id_when_processed_then_added_to_event(self) -> None:
        # Given
        set_scan_id("abc")

        # When
        event = _add_scan_id(None, "info", {"event": "scan_started"})

        # Then
        assert event["scan_id"] == "abc"

    def test_given_no_scan_id_when_processed_then_event_unchanged(self) -> None:
        event = _add_scan_id(None, "info", {"event": "x"})
        assert "scan_id" not in event


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_scan_id()

    def test_given_json_format_when_log_then_valid_json_output(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON format produces valid JSON with required fields."""
        # Given
        configure_logging(json_format=True, level="INFO")
        logger = get_logger("test")

        # When
        logger.info("catalog_swapped", generation=3)

        # Then
        captured = capsys.readouterr()
        lines = [line for line in captured.err.strip().split("\n") if line]
        if lines:
            data = json.loads(lines[-1])
            assert data["event"] == "catalog_swapped"
            assert data["generation"] == 3
            assert data["level"] == "info"
            assert "timestamp" in data

    def test_given_file_output_when_log_then_written_with_scan_id(self, tmp_path: Path) -> None:
        """File outputs receive JSON lines that carry the active scan ID."""
        # Given
        log_file = tmp_path / "logs" / "lodestar.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )
        configure_logging(config=config)
        set_scan_id("feedbeef0001")

        # When
        get_logger("coordinator").debug("scan_started", generation=1)
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Then
        assert get_log_file_path() == log_file
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "scan_started"
        assert data["scan_id"] == "feedbeef0001"
        assert data["logger"] == "coordinator"

    def test_given_level_when_configured_then_root_level_set(self) -> None:
        configure_logging(level="WARNING")
        assert logging.getLogger().level == logging.WARNING
        assert get_log_file_path() is None

    def test_given_relative_file_destination_then_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogOutputConfig(destination="relative/path.log")
