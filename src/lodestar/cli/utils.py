"""CLI utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from lodestar.config.loader import load_config
from lodestar.config.models import LodestarConfig
from lodestar.core.errors import LodestarError
from lodestar.core.logging import configure_logging
from lodestar.engine import Engine
from lodestar.index.models import MappingUsageScores

_console = Console(stderr=True)


def get_console() -> Console:
    return _console


def load_cli_config(ctx: click.Context) -> LodestarConfig:
    """Resolve config for a command and apply its logging section.

    ``-v`` raises the configured level to DEBUG. Config errors become click errors.
    """
    obj = ctx.obj or {}
    try:
        config = load_config(obj.get("config_path"))
    except LodestarError as e:
        raise click.ClickException(str(e)) from e

    logging_config = config.logging
    if obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    return config


def load_usage_file(path: Path | None) -> MappingUsageScores:
    """Read an ``id: count`` YAML mapping. The engine never writes it back."""
    if path is None:
        return MappingUsageScores()
    try:
        data: Any = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read usage file {path}: {e}") from e
    if not isinstance(data, Mapping):
        raise click.ClickException(f"Usage file {path} must map ids to counts")
    try:
        scores = {str(k): float(v) for k, v in data.items()}
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Usage file {path} has a non-numeric count: {e}") from e
    return MappingUsageScores(scores)


def scan_once(engine: Engine) -> bool:
    """Run a single blocking scan pass; True when a catalog was published."""

    async def _run() -> bool:
        try:
            return await engine.coordinator.rescan()
        finally:
            await engine.coordinator.stop()

    return asyncio.run(_run())
