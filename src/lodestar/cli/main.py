"""Lodestar CLI - lodestar command."""

from pathlib import Path

import click

from lodestar import __version__
from lodestar.cli.scan import scan_command
from lodestar.cli.search import search_command
from lodestar.cli.watch import watch_command
from lodestar.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="lodestar")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ~/.config/lodestar/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Lodestar - application discovery and ranked search for quick-launchers."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    # commands replace this with the config's logging section once loaded
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(scan_command, name="scan")
cli.add_command(search_command, name="search")
cli.add_command(watch_command, name="watch")


if __name__ == "__main__":
    cli()
