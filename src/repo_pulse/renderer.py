"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ActivityStats, AnalysisResult, format_date

CSV_HEADER = ["period", "date", "commits", "additions", "deletions", "net_lines", "files_changed"]


def format_number(n: int) -> str:
    return f"{n:,}"


def _make_bar(value: int, maximum: int, width: int = 20) -> str:
    filled = round(value / maximum * width) if maximum > 0 else 0
    return "\u2588" * filled + "\u2591" * (width - filled)


def _net_text(n: int) -> Text:
    style = "green" if n > 0 else "red" if n < 0 else "dim"
    return Text(format_number(n), style=style)


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console(stderr=True).print(f"Saved to {output_file}")


def build_stats_table(result: AnalysisResult) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Period")
    table.add_column("Commits", justify="right")
    table.add_column("+Lines", justify="right", style="green")
    table.add_column("-Lines", justify="right", style="red")
    table.add_column("Net", justify="right")
    table.add_column("Files", justify="right")

    for s in result.stats:
        table.add_row(
            s.label,
            format_number(s.commits),
            format_number(s.additions),
            format_number(s.deletions),
            _net_text(s.net_lines),
            format_number(s.files_changed),
        )

    total = result.total
    table.add_section()
    table.add_row(
        Text("TOTAL", style="bold"),
        format_number(total.commits),
        format_number(total.additions),
        format_number(total.deletions),
        _net_text(total.net_lines),
        format_number(total.files_changed),
    )
    return table


def build_activity_table(activity: ActivityStats) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Weekday")
    table.add_column("Bar")
    table.add_column("Commits", justify="right")
    peak = max(activity.weekday, default=0)
    for label, count in zip(activity.weekday_labels(), activity.weekday):
        table.add_row(label, _make_bar(count, peak), format_number(count))
    return table


def render_report(
    result: AnalysisResult,
    activity: ActivityStats | None = None,
    output_file: str | None = None,
) -> None:
    """Render an AnalysisResult to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    console.print(Panel(
        Text(
            f"repo-pulse: {result.repository}\n"
            f"{str(result.period).capitalize()} | {format_date(result.start)} ~ {format_date(result.end)}",
            justify="center",
        ),
        style="bold cyan",
    ))
    console.print()

    console.print(build_stats_table(result))
    console.print()

    if activity is not None and activity.total > 0:
        console.print("[bold]Activity by Weekday[/bold]")
        console.print(build_activity_table(activity))
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(result: AnalysisResult, output_file: str | None = None) -> None:
    """Render an AnalysisResult as JSON."""
    content = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(result: AnalysisResult, output_file: str | None = None) -> None:
    """Render period buckets as CSV."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in result.stats:
        writer.writerow([
            s.label,
            format_date(s.date),
            s.commits,
            s.additions,
            s.deletions,
            s.net_lines,
            s.files_changed,
        ])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")
