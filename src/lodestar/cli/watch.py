"""lodestar watch command - keep the catalog fresh until interrupted."""

import asyncio
import contextlib

import click

from lodestar.cli.utils import get_console, load_cli_config
from lodestar.engine import Engine


async def _run(engine: Engine) -> None:
    await engine.start()
    try:
        await asyncio.Event().wait()
    finally:
        await engine.stop()


@click.command()
@click.pass_context
def watch_command(ctx: click.Context) -> None:
    """Run periodic rescans and rescan on filesystem changes (Ctrl+C to stop)."""
    config = load_cli_config(ctx)
    engine = Engine.from_config(config)
    console = get_console()
    console.print(
        f"Watching {len(config.discovery.roots)} roots, "
        f"refresh every {config.discovery.refresh_interval_sec:g}s"
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(_run(engine))
    console.print("[green]✓[/green] Stopped")
