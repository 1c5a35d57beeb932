"""Aggregate commit records into period buckets and activity histograms."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Sequence
from datetime import date
from functools import reduce

from .git.diff import CommitRecord
from .models import ActivityStats, AnalysisResult, DateRange, Period, PeriodStats
from .zones import TimeZoneMode

logger = logging.getLogger(__name__)

DailyBuckets = dict[date, PeriodStats]


def _fold_commit(
    buckets: DailyBuckets,
    commit: CommitRecord,
    *,
    date_range: DateRange,
    extensions: Sequence[str] | None,
    tz: TimeZoneMode,
) -> DailyBuckets:
    day = tz.date_naive(commit.timestamp)
    if not date_range.contains(day):
        logger.debug("Ignoring commit %s dated %s outside %s..%s", commit.id, day, date_range.start, date_range.end)
        return buckets
    additions, deletions, files_changed = commit.diff.filtered(extensions)
    current = buckets.get(day) or PeriodStats.for_day(day)
    buckets[day] = current.add_commit(additions, deletions, files_changed)
    return buckets


def collect_daily(
    commits: Iterable[CommitRecord],
    date_range: DateRange,
    extensions: Sequence[str] | None = None,
    tz: TimeZoneMode | None = None,
) -> list[PeriodStats]:
    """One bucket per calendar day of *date_range*, ascending, gaps zero-filled."""
    tz = tz or TimeZoneMode.utc()

    def step(buckets: DailyBuckets, commit: CommitRecord) -> DailyBuckets:
        return _fold_commit(buckets, commit, date_range=date_range, extensions=extensions, tz=tz)

    buckets = reduce(step, commits, {})
    for day in date_range.iter_days():
        if day not in buckets:
            buckets[day] = PeriodStats.for_day(day)
    return sorted(buckets.values(), key=lambda s: s.date)


def _regroup(
    daily: Iterable[PeriodStats],
    key_fn: Callable[[date], Hashable],
    label_fn: Callable[[date], str],
) -> list[PeriodStats]:
    # Insertion order of the dict records first encounter, so the anchor of a
    # bucket is the first daily date merged into it.
    grouped: dict[Hashable, PeriodStats] = {}
    for stat in daily:
        key = key_fn(stat.date)
        bucket = grouped.get(key)
        if bucket is None:
            bucket = PeriodStats.with_label(stat.date, label_fn(stat.date))
        grouped[key] = bucket.merge(stat)
    return sorted(grouped.values(), key=lambda s: s.date)


def _iso_week_key(d: date) -> tuple[int, int]:
    iso = d.isocalendar()
    return iso[0], iso[1]


def aggregate_by_week(daily: Iterable[PeriodStats]) -> list[PeriodStats]:
    return _regroup(
        daily,
        _iso_week_key,
        lambda d: "{}-W{:02d}".format(*_iso_week_key(d)),
    )


def aggregate_by_month(daily: Iterable[PeriodStats]) -> list[PeriodStats]:
    return _regroup(daily, lambda d: (d.year, d.month), lambda d: f"{d.year}-{d.month:02d}")


def aggregate_by_year(daily: Iterable[PeriodStats]) -> list[PeriodStats]:
    return _regroup(daily, lambda d: d.year, lambda d: str(d.year))


_AGGREGATORS: dict[Period, Callable[[Iterable[PeriodStats]], list[PeriodStats]]] = {
    Period.WEEKLY: aggregate_by_week,
    Period.MONTHLY: aggregate_by_month,
    Period.YEARLY: aggregate_by_year,
}


def aggregate(daily: list[PeriodStats], period: Period) -> list[PeriodStats]:
    """Re-key date-sorted daily buckets into *period* buckets."""
    if period == Period.DAILY:
        return daily
    return _AGGREGATORS[period](daily)


def collect_stats(
    repository: str,
    commits: Iterable[CommitRecord],
    date_range: DateRange,
    period: Period = Period.DAILY,
    extensions: Sequence[str] | None = None,
    tz: TimeZoneMode | None = None,
) -> AnalysisResult:
    """Group *commits* by *period* inside *date_range*.

    Commits are bucketed by their date in *tz* (UTC when omitted). With an
    extension filter, each commit still counts once but only matching files
    contribute lines and files. Days without commits appear with zero values.
    """
    period = Period(period)
    daily = collect_daily(commits, date_range, extensions, tz)
    stats = aggregate(daily, period)
    logger.debug("Collected %d %s buckets for %s", len(stats), period, repository)
    return AnalysisResult(
        repository=repository,
        period=str(period),
        start=date_range.start,
        end=date_range.end,
        stats=stats,
    )


def collect_activity_stats(
    commits: Iterable[CommitRecord],
    tz: TimeZoneMode | None = None,
    date_range: DateRange | None = None,
) -> ActivityStats:
    """Count commits per weekday (Monday first) and per hour, in *tz*.

    With *date_range*, commits dated outside it are skipped the same way
    :func:`collect_stats` skips them.
    """
    tz = tz or TimeZoneMode.utc()
    activity = ActivityStats()
    for commit in commits:
        local = tz.zoned_datetime(commit.timestamp)
        if date_range is not None and not date_range.contains(local.date()):
            continue
        activity.record(local.weekday(), local.hour)
    return activity
