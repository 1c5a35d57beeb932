"""Interactive terminal dashboard.

Charts are plain rich renderables; the loop reads one key at a time with
``click.getchar`` and redraws. State transitions are pure so they can be
tested without a terminal.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from enum import Enum

import click
from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ActivityStats, AnalysisResult, PeriodStats, format_date
from .renderer import format_number

BAR_WIDTH = 30


class ChartType(Enum):
    COMMITS = "Commits"
    FILES_CHANGED = "Files Changed"
    ADD_DEL = "Add/Del"
    WEEKDAY = "Weekday"
    HOUR = "Hour"

    @property
    def title(self) -> str:
        return self.value

    def next(self) -> ChartType:
        members = list(ChartType)
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> ChartType:
        members = list(ChartType)
        return members[(members.index(self) - 1) % len(members)]


PERIOD_CHARTS = frozenset({ChartType.COMMITS, ChartType.FILES_CHANGED, ChartType.ADD_DEL})

QUIT_KEYS = {"q", "Q", "\x1b", "\x03"}
NEXT_KEYS = {"l", "\t", "\x1b[C", "\xe0M", "\x00M"}
PREV_KEYS = {"h", "\x1b[Z", "\x1b[D", "\xe0K", "\x00K"}
SCROLL_UP_KEYS = {"k", "\x1b[A", "\xe0H", "\x00H"}
SCROLL_DOWN_KEYS = {"j", "\x1b[B", "\xe0P", "\x00P"}
TOGGLE_KEYS = {"m"}

# header, hint and panel borders
CHROME_ROWS = 6


@dataclass(frozen=True)
class DashboardState:
    """View state of the dashboard.

    ``scroll_offset`` counts buckets hidden at the recent end: 0 shows the
    latest data, larger values scroll back in time.
    """

    chart: ChartType = ChartType.COMMITS
    single_metric: bool = False
    scroll_offset: int = 0
    data_len: int = 0

    @property
    def can_scroll(self) -> bool:
        if self.single_metric:
            return self.chart in PERIOD_CHARTS
        return True

    def handle_key(self, key: str) -> DashboardState | None:
        """Next state for *key*, or ``None`` when the dashboard should close."""
        if key in QUIT_KEYS:
            return None
        if key in NEXT_KEYS:
            return replace(self, chart=self.chart.next())
        if key in PREV_KEYS:
            return replace(self, chart=self.chart.prev())
        if key in SCROLL_UP_KEYS:
            if not self.can_scroll or self.data_len == 0:
                return self
            return replace(self, scroll_offset=min(self.scroll_offset + 1, self.data_len - 1))
        if key in SCROLL_DOWN_KEYS:
            if not self.can_scroll:
                return self
            return replace(self, scroll_offset=max(self.scroll_offset - 1, 0))
        if key in TOGGLE_KEYS:
            return replace(self, single_metric=not self.single_metric, scroll_offset=0)
        return self


def visible_stats(stats: Sequence[PeriodStats], scroll_offset: int = 0, rows: int | None = None) -> list[PeriodStats]:
    """The slice of *stats* to draw, ending *scroll_offset* buckets before the latest."""
    total = len(stats)
    end = total - min(scroll_offset, max(total - 1, 0))
    start = max(end - rows, 0) if rows else 0
    return list(stats[start:end])


def _bar(value: int, peak: int, style: str) -> Text:
    filled = round(value / peak * BAR_WIDTH) if peak > 0 else 0
    return Text("\u2588" * filled, style=style)


def _bar_chart(title: str, labels: Sequence[str], values: Sequence[int], style: str) -> Panel:
    table = Table.grid(padding=(0, 1))
    table.add_column(justify="right", style="dim")
    table.add_column()
    table.add_column(justify="right")
    peak = max(values, default=0)
    for label, value in zip(labels, values):
        table.add_row(label, _bar(value, peak, style), format_number(value))
    return Panel(table, title=title, border_style="cyan")


def _add_del_chart(stats: Sequence[PeriodStats]) -> Panel:
    table = Table.grid(padding=(0, 1))
    table.add_column(justify="right")
    table.add_column(justify="right")
    table.add_column(style="dim")
    table.add_column()
    table.add_column(justify="right")
    peak = max((max(s.additions, s.deletions) for s in stats), default=0)
    for s in stats:
        table.add_row(
            format_number(s.deletions),
            _bar(s.deletions, peak, "red"),
            s.label,
            _bar(s.additions, peak, "green"),
            format_number(s.additions),
        )
    return Panel(table, title=ChartType.ADD_DEL.title, border_style="cyan")


def build_chart(
    chart: ChartType,
    result: AnalysisResult,
    activity: ActivityStats,
    scroll_offset: int = 0,
    rows: int | None = None,
) -> Panel:
    stats = visible_stats(result.stats, scroll_offset, rows)
    labels = [s.label for s in stats]
    if chart is ChartType.COMMITS:
        return _bar_chart(chart.title, labels, [s.commits for s in stats], "cyan")
    if chart is ChartType.FILES_CHANGED:
        return _bar_chart(chart.title, labels, [s.files_changed for s in stats], "yellow")
    if chart is ChartType.ADD_DEL:
        return _add_del_chart(stats)
    if chart is ChartType.WEEKDAY:
        return _bar_chart(chart.title, activity.weekday_labels(), activity.weekday, "magenta")
    return _bar_chart(chart.title, activity.hour_labels(), activity.hourly, "blue")


def _header(result: AnalysisResult) -> Text:
    total = result.total
    return Text(
        f"{result.repository} | {result.period} | {format_date(result.start)} ~ {format_date(result.end)}"
        f" | commits {format_number(total.commits)}"
        f" | +{format_number(total.additions)} -{format_number(total.deletions)}"
        f" | net {format_number(total.net_lines)}",
        style="bold",
    )


def build_view(
    result: AnalysisResult,
    activity: ActivityStats,
    state: DashboardState,
    rows: int | None = None,
) -> RenderableType:
    if state.single_metric:
        body: RenderableType = build_chart(state.chart, result, activity, state.scroll_offset, rows)
        hint = "h/l or arrows: switch chart  j/k: scroll  m: show all  q: quit"
    else:
        body = Columns([build_chart(c, result, activity, state.scroll_offset, rows) for c in ChartType])
        hint = "j/k: scroll  m: single chart  q: quit"
    return Group(_header(result), body, Text(hint, style="dim"))


def run_dashboard(
    result: AnalysisResult,
    activity: ActivityStats,
    single_metric: bool = False,
    console: Console | None = None,
    getchar: Callable[[], str] = click.getchar,
) -> None:
    """Draw the dashboard until the user quits."""
    console = console or Console()
    state: DashboardState | None = DashboardState(single_metric=single_metric, data_len=len(result.stats))
    while state is not None:
        rows = max(console.size.height - CHROME_ROWS, 1)
        console.clear()
        console.print(build_view(result, activity, state, rows))
        state = state.handle_key(getchar())
