"""Typer CLI: surfcast spots, timeline, detect."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="surfcast",
    help="Surf forecast scoring and swell alert detection",
    no_args_is_help=True,
)
console = Console()


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        console.print(f"[red]Cannot read {path}: {exc.strerror or exc}[/red]")
        raise typer.Exit(code=1)
    except json.JSONDecodeError as exc:
        console.print(f"[red]{path} is not valid JSON: {exc}[/red]")
        raise typer.Exit(code=1)


def _parse_now(now: Optional[str]) -> datetime:
    from surfcast.ingest import parse_timestamp

    if now is None:
        return datetime.now(timezone.utc)
    parsed = parse_timestamp(now)
    if parsed is None:
        console.print(f"[red]Invalid --now timestamp: {now}[/red]")
        raise typer.Exit(code=1)
    return parsed


def _load_inputs(paths: list[Path], now: datetime) -> list:
    from surfcast.ingest import load_spot_input
    from surfcast.spots.profiles import get_spot_profile

    inputs = []
    for path in paths:
        data = _read_json(path)
        if not isinstance(data, dict):
            console.print(f"[red]{path} must hold a JSON object[/red]")
            raise typer.Exit(code=1)
        try:
            spot_input = load_spot_input(data, now)
        except ValueError as exc:
            console.print(f"[red]{path}: {exc}[/red]")
            raise typer.Exit(code=1)
        if get_spot_profile(spot_input.spot) is None:
            console.print(f"[red]Unknown spot '{spot_input.spot}' in {path}[/red]")
            raise typer.Exit(code=1)
        inputs.append(spot_input)
    return inputs


@app.command()
def spots() -> None:
    """List the known surf spots."""
    from surfcast.spots.profiles import all_spot_profiles

    table = Table(title="Surf Spots", show_lines=True)
    table.add_column("Key", no_wrap=True)
    table.add_column("Name")
    table.add_column("Swell window")
    table.add_column("Bathymetry", justify="right")
    table.add_column("Tide station")
    table.add_column("Status", no_wrap=True)

    for p in all_spot_profiles():
        table.add_row(
            p.key,
            p.name,
            f"{p.ideal_swell_dir_min:.0f}-{p.ideal_swell_dir_max:.0f}°",
            f"{p.bathymetry_factor:g}",
            p.tide_station_id or "-",
            "[dim]coming soon[/dim]" if p.coming_soon else "[green]active[/green]",
        )

    console.print(table)


@app.command()
def timeline(
    input_file: Path = typer.Argument(help="JSON file with one spot's points, tides and verification"),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json, csv",
    ),
    now: Optional[str] = typer.Option(
        None, "--now",
        help="Reference time (ISO-8601), defaults to the current time",
    ),
) -> None:
    """Score a spot's forecast hour by hour."""
    from surfcast.confidence.agreement import confidence_badge_text
    from surfcast.formatters import format_timeline_csv, format_timeline_json, format_timeline_table
    from surfcast.pipeline import build_forecasts

    reference = _parse_now(now)
    inputs = _load_inputs([input_file], reference)

    forecasts = asyncio.run(build_forecasts(inputs, reference))
    forecast = next(iter(forecasts.values()), None)
    if forecast is None:
        console.print("[red]Could not score the spot.[/red]")
        raise typer.Exit(code=1)

    if output == "json":
        console.print(format_timeline_json(forecast.timeline))
    elif output == "csv":
        console.print(format_timeline_csv(forecast.timeline))
    else:
        levels = [a.confidence for a in forecast.annotated] if forecast.annotated else None
        format_timeline_table(forecast.timeline, forecast.profile, console, levels)
        badge = confidence_badge_text(forecast.summary.overall)
        if badge:
            console.print(f"[bold]{badge}[/bold] ({forecast.summary.total_with_data} hour(s) compared)")
        if forecast.discrepancy.has_large_discrepancy:
            console.print(
                f"[yellow]Models disagree by up to {forecast.discrepancy.max_diff_ft:.1f}ft "
                f"over the next 48h[/yellow]"
            )
        if forecast.model_selection is not None:
            console.print(f"[dim]{forecast.model_selection.reason}[/dim]")


@app.command()
def detect(
    input_files: list[Path] = typer.Argument(help="One JSON file per spot"),
    alerts_file: Path = typer.Option(
        ..., "--alerts", "-a",
        help="JSON file holding a list of alerts",
    ),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json, csv",
    ),
    now: Optional[str] = typer.Option(
        None, "--now",
        help="Reference time (ISO-8601), defaults to the current time",
    ),
) -> None:
    """Scan spot forecasts for swell windows matching alerts."""
    from surfcast.formatters import format_swells_csv, format_swells_json, format_swells_table
    from surfcast.ingest import alert_from_dict
    from surfcast.pipeline import run_pipeline

    reference = _parse_now(now)
    inputs = _load_inputs(input_files, reference)

    raw_alerts = _read_json(alerts_file)
    if not isinstance(raw_alerts, list):
        console.print(f"[red]{alerts_file} must hold a JSON list of alerts[/red]")
        raise typer.Exit(code=1)
    try:
        alerts = [alert_from_dict(a) for a in raw_alerts if isinstance(a, dict)]
    except ValueError as exc:
        console.print(f"[red]{alerts_file}: {exc}[/red]")
        raise typer.Exit(code=1)

    _, detected = asyncio.run(run_pipeline(inputs, alerts, reference))

    if output == "json":
        console.print(format_swells_json(detected))
    elif output == "csv":
        console.print(format_swells_csv(detected))
    else:
        format_swells_table(detected, console)


if __name__ == "__main__":
    app()
