"""lodestar search command - scan, then rank resources against a query."""

import json
from pathlib import Path

import click
from rich.table import Table

from lodestar.cli.utils import get_console, load_cli_config, load_usage_file, scan_once
from lodestar.config.constants import SEARCH_MAX_LIMIT
from lodestar.engine import Engine


@click.command()
@click.argument("query")
@click.option(
    "-n",
    "--limit",
    type=click.IntRange(1, SEARCH_MAX_LIMIT),
    default=None,
    help="Maximum results (default from config)",
)
@click.option(
    "--usage",
    "usage_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file mapping resource ids to usage counts",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--open", "open_top", is_flag=True, help="Open the top result")
@click.pass_context
def search_command(
    ctx: click.Context,
    query: str,
    limit: int | None,
    usage_path: Path | None,
    as_json: bool,
    open_top: bool,
) -> None:
    """Search installed applications for QUERY."""
    config = load_cli_config(ctx)
    config.watcher.enabled = False
    engine = Engine.from_config(config, usage=load_usage_file(usage_path))

    console = get_console()
    with console.status("[cyan]Indexing applications...[/cyan]", spinner="dots"):
        published = scan_once(engine)
    if not published:
        raise click.ClickException(
            f"Scan failed: {engine.coordinator.status.last_error or 'unknown error'}"
        )

    results = engine.search_scored(query, limit)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {**r.item.to_dict(), "matchScore": r.match_score, "score": r.combined}
                    for r in results
                ]
            )
        )
    elif not results:
        console.print(f"No results for [bold]{query}[/bold]")
    else:
        table = Table()
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Score", justify="right")
        table.add_column("Id", style="dim")
        table.add_column("Location", style="dim")
        for i, r in enumerate(results, start=1):
            table.add_row(
                str(i),
                r.item.display_name,
                f"{r.combined:.3f}",
                r.item.id,
                str(r.item.location),
            )
        console.print(table)

    if open_top and results:
        click.launch(str(results[0].item.location))
