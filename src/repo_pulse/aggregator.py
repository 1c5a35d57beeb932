"""Helpers that reshape already-aggregated period buckets."""

from __future__ import annotations

from collections.abc import Iterable

from .models import PeriodStats


def filter_non_zero(stats: Iterable[PeriodStats]) -> list[PeriodStats]:
    """Drop buckets without commits."""
    return [s for s in stats if s.commits > 0]


def merge_stats(*series: Iterable[PeriodStats]) -> list[PeriodStats]:
    """Merge several bucket lists by label, ascending by anchor date.

    When two buckets share a label the earlier anchor date is kept.
    """
    merged: dict[str, PeriodStats] = {}
    for stats in series:
        for s in stats:
            existing = merged.get(s.label)
            if existing is None:
                merged[s.label] = s
            elif s.date < existing.date:
                merged[s.label] = s.merge(existing)
            else:
                merged[s.label] = existing.merge(s)
    return sorted(merged.values(), key=lambda s: s.date)


def running_totals(stats: Iterable[PeriodStats]) -> list[PeriodStats]:
    """Cumulative counters, one entry per input bucket, labels unchanged."""
    out: list[PeriodStats] = []
    acc: PeriodStats | None = None
    for s in stats:
        if acc is None:
            acc = s
        else:
            acc = PeriodStats.with_label(s.date, s.label).merge(acc).merge(s)
        out.append(acc)
    return out
