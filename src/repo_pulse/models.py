"""Data models for repo-pulse."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum

from .zones import Clock, TimeZoneMode

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
# upper bound accepted from the command line and config file
MAX_DAYS = 36_500


def format_date(d: date) -> str:
    """``YYYY-MM-DD``, zero-padded for every year."""
    return d.isoformat()


class Period(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def parse(cls, value: str) -> Period:
        return cls(value.strip().lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Days:
    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Days must be non-negative, got {self.value}")

    def __int__(self) -> int:
        return self.value


class DayIterator:
    """Restartable ascending iteration over the dates of an inclusive range."""

    def __init__(self, start: date, end: date) -> None:
        self._start = start
        self._end = end

    def __iter__(self) -> Iterator[date]:
        current = self._start
        while current <= self._end:
            yield current
            if current == self._end:
                return
            current += timedelta(days=1)

    def __len__(self) -> int:
        return max((self._end - self._start).days + 1, 0)


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start, end]`` window of calendar dates.

    An inverted range (``start > end``) is allowed and contains no days.
    """

    start: date
    end: date

    @classmethod
    def last_n_days(
        cls,
        days: Days | int,
        tz: TimeZoneMode | None = None,
        now: Clock | None = None,
    ) -> DateRange:
        """Range ending today (in *tz*, at *now*) and starting *days* earlier.

        The start never goes past ``date.min``.
        """
        if not isinstance(days, Days):
            days = Days(days)
        end = (tz or TimeZoneMode.utc()).today(now)
        span = min(days.value, (end - date.min).days)
        return cls(end - timedelta(days=span), end)

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def __contains__(self, d: date) -> bool:
        return self.contains(d)

    def iter_days(self) -> DayIterator:
        return DayIterator(self.start, self.end)

    @property
    def is_empty(self) -> bool:
        return self.start > self.end


@dataclass(frozen=True)
class PeriodStats:
    """Aggregated commit statistics for one bucket (day, week, month or year).

    ``date`` is the bucket's anchor, used for ordering only. ``net_lines`` is
    derived from the counters and can never drift from them.
    """

    label: str
    date: date
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    files_changed: int = 0

    @classmethod
    def for_day(cls, d: date) -> PeriodStats:
        return cls(label=format_date(d), date=d)

    @classmethod
    def with_label(cls, d: date, label: str) -> PeriodStats:
        return cls(label=label, date=d)

    @property
    def net_lines(self) -> int:
        return self.additions - self.deletions

    def add_commit(self, additions: int, deletions: int, files_changed: int) -> PeriodStats:
        """Return this bucket with one more commit folded in."""
        return replace(
            self,
            commits=self.commits + 1,
            additions=self.additions + additions,
            deletions=self.deletions + deletions,
            files_changed=self.files_changed + files_changed,
        )

    def merge(self, other: PeriodStats) -> PeriodStats:
        """Field-wise sum; label and anchor date are kept from ``self``."""
        return replace(
            self,
            commits=self.commits + other.commits,
            additions=self.additions + other.additions,
            deletions=self.deletions + other.deletions,
            files_changed=self.files_changed + other.files_changed,
        )

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "date": format_date(self.date),
            "commits": self.commits,
            "additions": self.additions,
            "deletions": self.deletions,
            "net_lines": self.net_lines,
            "files_changed": self.files_changed,
        }


@dataclass(frozen=True)
class TotalStats:
    commits: int = 0
    additions: int = 0
    deletions: int = 0
    files_changed: int = 0

    @classmethod
    def from_periods(cls, periods: Iterable[PeriodStats]) -> TotalStats:
        commits = additions = deletions = files_changed = 0
        for p in periods:
            commits += p.commits
            additions += p.additions
            deletions += p.deletions
            files_changed += p.files_changed
        return cls(commits, additions, deletions, files_changed)

    @property
    def net_lines(self) -> int:
        return self.additions - self.deletions

    def to_dict(self) -> dict:
        return {
            "commits": self.commits,
            "additions": self.additions,
            "deletions": self.deletions,
            "net_lines": self.net_lines,
            "files_changed": self.files_changed,
        }


@dataclass
class AnalysisResult:
    repository: str
    period: str
    start: date
    end: date
    stats: list[PeriodStats] = field(default_factory=list)

    @property
    def total(self) -> TotalStats:
        return TotalStats.from_periods(self.stats)

    def to_dict(self) -> dict:
        return {
            "repository": self.repository,
            "period": str(self.period),
            "from": format_date(self.start),
            "to": format_date(self.end),
            "stats": [s.to_dict() for s in self.stats],
            "total": self.total.to_dict(),
        }


@dataclass
class ActivityStats:
    """Commit counts per weekday (index 0 = Monday) and per hour of day."""

    weekday: list[int] = field(default_factory=lambda: [0] * 7)
    hourly: list[int] = field(default_factory=lambda: [0] * 24)

    @staticmethod
    def weekday_labels() -> tuple[str, ...]:
        return WEEKDAY_LABELS

    @staticmethod
    def hour_labels() -> list[str]:
        return [str(h) for h in range(24)]

    def record(self, weekday: int, hour: int) -> None:
        self.weekday[weekday] += 1
        self.hourly[hour] += 1

    @property
    def total(self) -> int:
        return sum(self.weekday)

    def to_dict(self) -> dict:
        return {"weekday": list(self.weekday), "hourly": list(self.hourly)}
