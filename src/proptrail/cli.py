# src/proptrail/cli.py
"""
PropTrail Command Line Interface (CLI).

Terminal access to the history engine using ``typer`` and ``rich``. Every
command loads an event file (JSON list/export or CSV) into a fresh in-memory
History Service through the importer, then renders one read-side view.

Usage
-----
    $ proptrail properties events.json
    $ proptrail timeline events.json --property prop-1 --limit 10
    $ proptrail search events.csv --keywords "price" --type price_change
    $ proptrail analytics events.json --property prop-1
    $ proptrail export events.json --property prop-1 --format csv -o out.csv
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from proptrail.core.contracts.events import HistoryEventType
from proptrail.core.contracts.requests import (
    EXPORT_FORMATS,
    GetTimelineRequest,
    HistorySearchQuery,
    TimelineExportOptions,
    TimelineFilters,
    TimelineImportOptions,
)
from proptrail.core.errors import HistoryError
from proptrail.history import HistoryService

load_dotenv()

app = typer.Typer(
    help="PropTrail: property event history, timelines and analytics.",
    rich_markup_mode="markdown",
)
console = Console()

EventFile = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="JSON or CSV file of history events.",
    ),
]
PropertyOpt = Annotated[str, typer.Option("--property", "-p", help="Property identifier.")]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _load_service(path: Path, property_id: str | None = None) -> HistoryService:
    """Import ``path`` into a fresh service; rejected rows are reported, not fatal."""
    source = "csv" if path.suffix.lower() == ".csv" else "json"
    service = HistoryService()
    report = service.import_events(
        path.read_text(encoding="utf-8"),
        TimelineImportOptions(source=source, property_id=property_id, skip_invalid=True),
    )
    if not report.success and not report.imported and not report.rejected:
        console.print(f"[bold red]❌ Could not load {path.name}:[/bold red] {report.message}")
        raise typer.Exit(code=1)
    for row in report.rejected:
        reasons = ", ".join(e.message for e in row.errors)
        console.print(f"[dim yellow]Skipped row {row.row}: {reasons}[/dim yellow]")
    console.print(f"[dim]Loaded {len(report.imported)} event(s) from {path.name}[/dim]")
    return service


def _event_table(title: str) -> Table:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Source")
    return table


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def timeline(
    file: EventFile,
    property_id: PropertyOpt,
    page: Annotated[int, typer.Option(min=1, help="1-based page number.")] = 1,
    limit: Annotated[int, typer.Option(min=1, help="Events per page.")] = 20,
    event_type: Annotated[
        list[HistoryEventType] | None,
        typer.Option("--type", "-t", help="Only these event types (repeatable)."),
    ] = None,
) -> None:
    """Show a property's timeline, newest first."""
    service = _load_service(file, property_id)
    result = service.get_property_timeline(
        GetTimelineRequest(
            property_id=property_id,
            filters=TimelineFilters(event_types=event_type or []),
            page=page,
            limit=limit,
        )
    )
    if not result.success or result.timeline is None:
        console.print(f"[bold red]❌ {result.message}[/bold red]")
        raise typer.Exit(code=1)

    tl = result.timeline
    table = _event_table(f"Property {property_id} timeline")
    table.add_column("Importance")
    for event in tl.events:
        table.add_row(
            str(event.display_order),
            f"{event.timestamp:%Y-%m-%d %H:%M}",
            event.type.value,
            event.title,
            event.source.name,
            event.importance.value,
        )
    console.print(table)
    console.print(
        f"Page {tl.pagination.page} · {tl.pagination.total} event(s) total"
        + (" · more available" if tl.pagination.has_more else "")
    )


@app.command()  # type: ignore[misc]
def properties(file: EventFile) -> None:
    """List the properties found in a file with their event counts."""
    service = _load_service(file)
    table = Table(title="Properties")
    table.add_column("Property", style="cyan")
    table.add_column("Events", justify="right")
    table.add_column("Last event")
    for property_id in service.property_ids():
        history = service.get_property_history(property_id)
        if history is None:
            continue
        table.add_row(
            property_id, str(history.total_events), f"{history.last_event_date:%Y-%m-%d %H:%M}"
        )
    console.print(table)


@app.command()  # type: ignore[misc]
def search(
    file: EventFile,
    keywords: Annotated[str | None, typer.Option("--keywords", "-k")] = None,
    property_id: Annotated[str | None, typer.Option("--property", "-p")] = None,
    event_type: Annotated[
        list[HistoryEventType] | None, typer.Option("--type", "-t", help="Repeatable.")
    ] = None,
    tag: Annotated[list[str] | None, typer.Option("--tag", help="Repeatable.")] = None,
    limit: Annotated[int, typer.Option(min=1)] = 20,
) -> None:
    """Search events across properties and print facets."""
    service = _load_service(file)
    query = HistorySearchQuery(
        property_id=property_id,
        event_types=event_type or [],
        tags=tag or [],
        keywords=keywords,
    )
    result = service.search_events(query, page=1, limit=limit)

    table = _event_table(f"{result.total} matching event(s)")
    table.add_column("Property")
    for idx, event in enumerate(result.events, start=1):
        table.add_row(
            str(idx),
            f"{event.timestamp:%Y-%m-%d %H:%M}",
            event.type.value,
            event.title,
            event.source.name,
            event.property_id,
        )
    console.print(table)

    facets = result.facets
    lines = [
        "[bold]Types:[/bold] " + ", ".join(f"{k}={v}" for k, v in facets.event_types.items()),
        "[bold]Sources:[/bold] " + ", ".join(f"{k}={v}" for k, v in facets.sources.items()),
        "[bold]Dates:[/bold] " + ", ".join(f"{k}={v}" for k, v in facets.date_ranges.items()),
    ]
    console.print(Panel("\n".join(lines), title="Facets", border_style="blue"))


@app.command()  # type: ignore[misc]
def analytics(file: EventFile, property_id: PropertyOpt) -> None:
    """Show analytics and insights for one property."""
    service = _load_service(file, property_id)
    result = service.get_history_analytics(property_id)
    if result is None:
        console.print(f"[bold red]❌ No history for property {property_id}[/bold red]")
        raise typer.Exit(code=1)

    metrics = result.key_metrics
    bench = result.market_comparison
    table = Table(title=f"Property {property_id} analytics")
    table.add_column("Metric")
    table.add_column("Property", justify="right")
    table.add_column("Market", justify="right")
    table.add_row("Total events", str(result.total_events), "")
    table.add_row("Days on market", str(metrics.days_on_market), str(bench.average_days_on_market))
    table.add_row("Price changes", str(metrics.price_changes), str(bench.average_price_changes))
    table.add_row("Viewings", str(metrics.viewings), "")
    table.add_row("Status changes", str(metrics.status_changes), "")
    console.print(table)

    if result.timeline_insights:
        body = "\n".join(f" • {line}" for line in result.timeline_insights)
        console.print(Panel(body, title="Insights", border_style="green"))


@app.command()  # type: ignore[misc]
def export(
    file: EventFile,
    property_id: PropertyOpt,
    fmt: Annotated[
        str, typer.Option("--format", "-f", help=f"One of: {', '.join(EXPORT_FORMATS)}.")
    ] = "json",
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Target file (default: suggested name).")
    ] = None,
    include_metadata: Annotated[
        bool, typer.Option("--metadata/--no-metadata", help="Keep event metadata in JSON.")
    ] = True,
) -> None:
    """Export a property's full timeline to JSON, CSV or PDF."""
    service = _load_service(file, property_id)
    try:
        exported = service.export_timeline(
            property_id, TimelineExportOptions(format=fmt, include_metadata=include_metadata)
        )
    except HistoryError as e:
        console.print(f"[bold red]❌ Export Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    target = output or Path(exported.filename)
    target.write_bytes(exported.content)
    console.print(
        Panel(
            f"Saved to: [link=file://{target.resolve()}]{target}[/link]",
            title=exported.content_type,
            border_style="green",
        )
    )


if __name__ == "__main__":
    app()
