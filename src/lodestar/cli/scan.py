"""lodestar scan command - run one discovery pass and summarize it."""

import json

import click
from rich.table import Table

from lodestar.cli.utils import get_console, load_cli_config, scan_once
from lodestar.engine import Engine


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scan_command(ctx: click.Context, as_json: bool) -> None:
    """Scan the configured roots and report what was discovered."""
    config = load_cli_config(ctx)
    config.watcher.enabled = False
    engine = Engine.from_config(config)

    console = get_console()
    with console.status("[cyan]Scanning application roots...[/cyan]", spinner="dots"):
        published = scan_once(engine)

    status = engine.coordinator.status
    if not published:
        raise click.ClickException(f"Scan failed: {status.last_error or 'unknown error'}")

    catalog = engine.catalog
    if as_json:
        click.echo(
            json.dumps(
                {
                    "generation": status.generation,
                    "resources": status.resource_count,
                    "terms": catalog.stats.terms,
                    "dropped": catalog.stats.dropped,
                    "duplicates": catalog.stats.duplicates,
                }
            )
        )
        return

    table = Table(title=f"{status.resource_count} resources")
    table.add_column("Name")
    table.add_column("Id", style="dim")
    table.add_column("Location", style="dim")
    for resource in sorted(catalog.resources.values(), key=lambda r: r.display_name.lower()):
        table.add_row(resource.display_name, resource.id, str(resource.location))
    console.print(table)
    console.print(
        f"  [green]✓[/green] {catalog.stats.terms} index terms, "
        f"{catalog.stats.dropped} dropped, {catalog.stats.duplicates} duplicates"
    )
