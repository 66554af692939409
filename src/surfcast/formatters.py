"""Output formatters for timelines and detected swells: Rich table, JSON, CSV."""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table

from surfcast.alerts.models import DetectedSwell
from surfcast.confidence.agreement import ConfidenceLevel, confidence_badge_text
from surfcast.forecast.models import ForecastTimelineResult
from surfcast.spots.profiles import SpotProfile


def _score_color(score: int) -> str:
    if score >= 76:
        return "green"
    if score >= 60:
        return "cyan"
    if score >= 40:
        return "yellow"
    return "red"


def _fmt(value: float | None, spec: str = ".1f", suffix: str = "") -> str:
    if value is None:
        return "-"
    return f"{value:{spec}}{suffix}"


def timeline_row(result: ForecastTimelineResult) -> dict[str, object]:
    """Flat, JSON-friendly view of one timeline point."""
    breaking = result.breaking
    return {
        "forecast_timestamp": result.forecast_timestamp.isoformat(),
        "hours_out": result.hours_out,
        "quality_score": result.quality_score,
        "wave_height_ft": result.wave_height_ft,
        "period_s": result.period_s,
        "wind_type": result.wind_type.value if result.wind_type else None,
        "wind_speed_mph": result.wind_speed_mph,
        "wind_gusts_mph": result.wind_gusts_mph,
        "tide_height_ft": result.tide.height_ft if result.tide else None,
        "tide_phase": result.tide.phase.value if result.tide else None,
        "confidence_band": result.quality.confidence_band.value,
        "usability_intermediate": result.quality.usability_intermediate,
        "usability_advanced": result.quality.usability_advanced,
        "breaking_height_label": breaking.breaking_height_label if breaking else None,
        "rating": breaking.rating if breaking else None,
        "dominant_swell": result.dominant_swell.label if result.dominant_swell else None,
    }


def format_timeline_table(
    timeline: list[ForecastTimelineResult],
    profile: SpotProfile,
    console: Console | None = None,
    confidence: list[ConfidenceLevel | None] | None = None,
) -> None:
    """Print a spot timeline as a Rich table in the spot's local time."""
    if console is None:
        console = Console()

    if not timeline:
        console.print(f"[yellow]No forecast points for {profile.name}.[/yellow]")
        return

    table = Table(
        title=f"{profile.name} Forecast",
        caption=f"Generated at {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}",
    )
    table.add_column("Local time", width=16)
    table.add_column("Score", justify="right", width=5)
    table.add_column("Surf", justify="right", width=7)
    table.add_column("Rating", width=12)
    table.add_column("Period", justify="right", width=6)
    table.add_column("Wind", width=14)
    table.add_column("Tide", width=12)
    table.add_column("Conf", width=8)
    if confidence is not None:
        table.add_column("Models", width=18)

    for i, r in enumerate(timeline):
        color = _score_color(r.quality_score)
        label = r.breaking.breaking_height_label if r.breaking else _fmt(r.wave_height_ft, suffix="ft")
        wind = "-"
        if r.wind_speed_mph is not None:
            wind = f"{r.wind_speed_mph}mph {r.wind_type.value if r.wind_type else ''}".strip()
        tide = f"{r.tide.height_ft:.1f}ft {r.tide.phase.value}" if r.tide else "-"
        row = [
            r.forecast_timestamp.astimezone(profile.tz).strftime("%a %m/%d %H:%M"),
            f"[{color}]{r.quality_score}[/{color}]",
            label,
            r.breaking.rating if r.breaking else "-",
            _fmt(r.period_s, ".0f", "s"),
            wind,
            tide,
            r.quality.confidence_band.value,
        ]
        if confidence is not None:
            level = confidence[i] if i < len(confidence) else None
            row.append(confidence_badge_text(level) or (level.value if level else "-"))
        table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]{len(timeline)} point(s) total[/dim]")


def format_timeline_json(timeline: list[ForecastTimelineResult]) -> str:
    return json.dumps([timeline_row(r) for r in timeline], indent=2)


def format_timeline_csv(timeline: list[ForecastTimelineResult]) -> str:
    output = io.StringIO()
    rows = [timeline_row(r) for r in timeline]
    if not rows:
        return ""
    writer = csv.DictWriter(output, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)
    return output.getvalue()


def format_swells_table(swells: list[DetectedSwell], console: Console | None = None) -> None:
    """Print detected swell windows sorted by start time."""
    if console is None:
        console = Console()

    if not swells:
        console.print("[yellow]No swell windows match the alert.[/yellow]")
        return

    table = Table(title="Detected Swells", show_lines=True)
    table.add_column("Alert", justify="right", width=6)
    table.add_column("Spot", width=14)
    table.add_column("Start (UTC)", width=16)
    table.add_column("End (UTC)", width=16)
    table.add_column("Peak", justify="right", width=6)
    table.add_column("Peak score", justify="right", width=10)
    table.add_column("Avg score", justify="right", width=9)
    table.add_column("Avg period", justify="right", width=10)
    table.add_column("Hours", justify="right", width=5)

    for s in sorted(swells, key=lambda s: (s.swell_start_time, s.spot_key)):
        color = _score_color(s.peak_quality_score)
        table.add_row(
            str(s.alert_id),
            s.spot_key,
            s.swell_start_time.astimezone(timezone.utc).strftime("%m/%d %H:%M"),
            s.swell_end_time.astimezone(timezone.utc).strftime("%m/%d %H:%M"),
            f"{s.peak_wave_height_ft:.1f}ft",
            f"[{color}]{s.peak_quality_score}[/{color}]",
            str(s.avg_quality_score),
            f"{s.avg_period_s}s",
            str(len(s.conditions)),
        )

    console.print(table)
    console.print(f"\n[dim]{len(swells)} window(s) total[/dim]")


def format_swells_json(swells: list[DetectedSwell]) -> str:
    return json.dumps(
        [
            {
                "alert_id": s.alert_id,
                "user_id": s.user_id,
                "spot_key": s.spot_key,
                "swell_start_time": s.swell_start_time.isoformat(),
                "swell_end_time": s.swell_end_time.isoformat(),
                "peak_wave_height_ft": s.peak_wave_height_ft,
                "peak_quality_score": s.peak_quality_score,
                "avg_quality_score": s.avg_quality_score,
                "avg_period_s": s.avg_period_s,
                "conditions": [
                    {
                        "timestamp": c.timestamp.isoformat(),
                        "wave_height_ft": c.wave_height_ft,
                        "period_s": c.period_s,
                        "wind_type": c.wind_type,
                        "quality_score": c.quality_score,
                    }
                    for c in s.conditions
                ],
            }
            for s in sorted(swells, key=lambda s: (s.swell_start_time, s.spot_key))
        ],
        indent=2,
    )


def format_swells_csv(swells: list[DetectedSwell]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([
        "alert_id", "user_id", "spot_key", "swell_start_time", "swell_end_time",
        "peak_wave_height_ft", "peak_quality_score", "avg_quality_score", "avg_period_s",
        "hours",
    ])
    for s in sorted(swells, key=lambda s: (s.swell_start_time, s.spot_key)):
        writer.writerow([
            s.alert_id, s.user_id, s.spot_key, s.swell_start_time.isoformat(),
            s.swell_end_time.isoformat(), s.peak_wave_height_ft, s.peak_quality_score,
            s.avg_quality_score, s.avg_period_s, len(s.conditions),
        ])
    return output.getvalue()
