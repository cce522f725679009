from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from adapters.filesystem.shift_repository import (
    FileSystemLayoutRepository,
    FileSystemShiftRecordRepository,
)
from app.config import UnknownProfileError, load_settings
from app.layout_wiring import build_layout_engine
from domain.models import DAY_LABELS, ShiftRecord, WeekLayout, format_minutes_label
from domain.ports.layout import LayoutRequest
from domain.services.filter_records import ScheduleFilter
from domain.services.normalize_intervals import IntervalNormalizer

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_records(input_path: Path) -> List[ShiftRecord]:
    if not input_path.exists():
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemShiftRecordRepository().load(input_path)
    except (ValidationError, ValueError) as exc:
        console.print(f"[red]Invalid shift records file:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command("layout")
def layout(
    input_path: Path = typer.Argument(..., help="JSON file with shift records."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write layout JSON here."),
    day: str = typer.Option("All", help="Visible day: All, M, T, W, R or F."),
    zoom: float = typer.Option(1.0, help="Zoom multiplier, clamped to the configured bounds."),
    profile: Optional[str] = typer.Option(None, help="Layout profile name."),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
    owner: List[str] = typer.Option([], help="Only show these owner ids."),
    building: List[str] = typer.Option([], help="Only show shifts in these buildings."),
    job_title: List[str] = typer.Option([], help="Only show these job titles."),
) -> None:
    try:
        settings = load_settings(config_path)
    except FileNotFoundError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc
    records = _load_records(input_path)
    try:
        engine = build_layout_engine(settings, profile)
    except UnknownProfileError as exc:
        console.print(f"[red]{escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc

    request = LayoutRequest(
        records=records,
        day_view=day,
        zoom=zoom,
        filters=ScheduleFilter(owner_ids=owner, buildings=building, job_titles=job_title),
    )
    week = engine.build_layout(request)

    if output is not None:
        FileSystemLayoutRepository().save(week, output)
        console.print(f"[green]Wrote[/] {output}")
    else:
        _print_summary(week)

    if week.diagnostics.rejected_count:
        console.print(
            f"[yellow]{week.diagnostics.rejected_count} record(s) rejected;"
            " run validate for details.[/]"
        )


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="JSON file with shift records."),
) -> None:
    records = _load_records(input_path)
    result = IntervalNormalizer().normalize(records)
    if not result.rejected:
        console.print(f"[green]All {len(result.intervals)} record(s) valid:[/] {input_path}")
        return

    table = Table(title=f"Rejected records in {input_path.name}")
    table.add_column("#", justify="right")
    table.add_column("Reason")
    table.add_column("Owner")
    table.add_column("Day")
    table.add_column("Start")
    table.add_column("End")
    for item in result.rejected:
        table.add_row(
            str(item.index),
            item.reason.value,
            item.record.owner_id,
            item.record.day,
            item.record.start,
            item.record.end,
        )
    console.print(table)
    console.print(
        f"[red]{len(result.rejected)} of {len(records)} record(s) rejected.[/]"
    )
    raise typer.Exit(code=1)


def _print_summary(week: WeekLayout) -> None:
    scale = week.scale
    console.print(
        f"Visible {format_minutes_label(scale.min_start)} - {format_minutes_label(scale.max_end)},"
        f" {scale.pixels_per_hour} px/hour (zoom {scale.zoom:g})"
    )
    table = Table()
    table.add_column("Day")
    table.add_column("Owner")
    table.add_column("Time")
    table.add_column("Column", justify="right")
    table.add_column("Font", justify="right")
    for day, entries in week.days.items():
        for entry in entries:
            table.add_row(
                DAY_LABELS[day],
                entry.interval.label.name or entry.owner_id,
                f"{format_minutes_label(entry.interval.start_minute)}"
                f" - {format_minutes_label(entry.interval.end_minute)}",
                f"{entry.column_index + 1}/{entry.column_count}",
                str(entry.font_tier),
            )
    console.print(table)


if __name__ == "__main__":
    app()
