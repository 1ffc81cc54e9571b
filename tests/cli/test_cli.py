"""Tests for the lodestar CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from lodestar.cli.main import cli


@pytest.fixture
def config_file(tmp_path: Path, make_app, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr("lodestar.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml")
    root = tmp_path / "Applications"
    root.mkdir()
    make_app(root, "Safari", "com.apple.Safari")
    make_app(root, "Terminal", "com.apple.Terminal")
    path = tmp_path / "config.yaml"
    path.write_text(
        "discovery:\n"
        "  roots:\n"
        f"    - path: {root}\n"
        "watcher:\n"
        "  enabled: false\n"
    )
    return path


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)
        handler.close()
    structlog.reset_defaults()


def _last_json(output: str) -> object:
    lines = [line for line in output.strip().splitlines() if line.startswith(("[", "{"))]
    return json.loads(lines[-1])


class TestCli:
    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        for command in ("scan", "search", "watch"):
            assert command in result.output

    def test_given_roots_when_scan_json_then_counts_reported(self, config_file: Path) -> None:
        # When
        result = CliRunner().invoke(cli, ["--config", str(config_file), "scan", "--json"])

        # Then
        assert result.exit_code == 0, result.output
        data = _last_json(result.output)
        assert isinstance(data, dict)
        assert data["resources"] == 2
        assert data["generation"] == 1

    def test_given_query_when_search_json_then_ranked_results(self, config_file: Path) -> None:
        # When
        result = CliRunner().invoke(
            cli, ["--config", str(config_file), "search", "safa", "--json"]
        )

        # Then
        assert result.exit_code == 0, result.output
        data = _last_json(result.output)
        assert isinstance(data, list)
        assert data[0]["id"] == "com.apple.Safari"
        assert data[0]["matchScore"] >= 0.95

    def test_given_usage_file_when_search_then_usage_applied(
        self, config_file: Path, tmp_path: Path
    ) -> None:
        # Given
        usage = tmp_path / "usage.yaml"
        usage.write_text("com.apple.Terminal: 100\n")

        # When
        result = CliRunner().invoke(
            cli,
            ["--config", str(config_file), "search", "apple", "--usage", str(usage), "--json"],
        )

        # Then
        assert result.exit_code == 0, result.output
        data = _last_json(result.output)
        assert isinstance(data, list)
        assert data[0]["id"] == "com.apple.Terminal"
        assert data[0]["score"] == pytest.approx(1.0)

    def test_given_bad_usage_file_then_error(self, config_file: Path, tmp_path: Path) -> None:
        usage = tmp_path / "usage.yaml"
        usage.write_text("com.apple.Terminal: lots\n")

        result = CliRunner().invoke(
            cli, ["--config", str(config_file), "search", "apple", "--usage", str(usage)]
        )

        assert result.exit_code == 1
        assert "non-numeric" in result.output

    def test_given_missing_config_then_error(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            cli, ["--config", str(tmp_path / "missing.yaml"), "scan"]
        )
        assert result.exit_code == 1
        assert "CONFIG_FILE_NOT_FOUND" in result.output

    def test_given_no_readable_roots_then_scan_fails(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(f"discovery:\n  roots:\n    - path: {tmp_path / 'nowhere'}\n")

        result = CliRunner().invoke(cli, ["--config", str(path), "scan"])

        assert result.exit_code == 1
        assert "SCAN_NO_READABLE_ROOTS" in result.output


class TestCliLogging:
    """The config's logging section is applied once a command loads config."""

    def test_given_configured_level_then_root_logger_uses_it(self, config_file: Path) -> None:
        # Given
        config_file.write_text(config_file.read_text() + "logging:\n  level: DEBUG\n")

        # When
        result = CliRunner().invoke(cli, ["--config", str(config_file), "scan", "--json"])

        # Then
        assert result.exit_code == 0, result.output
        assert logging.getLogger().level == logging.DEBUG

    def test_given_verbose_flag_then_overrides_configured_level(self, config_file: Path) -> None:
        # Given
        config_file.write_text(config_file.read_text() + "logging:\n  level: ERROR\n")

        # When
        result = CliRunner().invoke(
            cli, ["-v", "--config", str(config_file), "scan", "--json"]
        )

        # Then
        assert result.exit_code == 0, result.output
        assert logging.getLogger().level == logging.DEBUG

    def test_given_file_output_then_scan_events_written(
        self, config_file: Path, tmp_path: Path
    ) -> None:
        # Given
        log_file = tmp_path / "logs" / "lodestar.log"
        config_file.write_text(
            config_file.read_text()
            + "logging:\n"
            + "  level: INFO\n"
            + "  outputs:\n"
            + f"    - destination: {log_file}\n"
            + "      format: json\n"
        )

        # When
        result = CliRunner().invoke(cli, ["--config", str(config_file), "scan", "--json"])
        for handler in logging.getLogger().handlers:
            handler.flush()

        # Then
        assert result.exit_code == 0, result.output
        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines()]
        assert "catalog_swapped" in events
