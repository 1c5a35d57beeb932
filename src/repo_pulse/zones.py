"""Time zone handling for date bucketing.

A :class:`TimeZoneMode` is a per-run value that decides which calendar day
and wall-clock hour an absolute commit instant belongs to. Nothing in the
aggregation code reads the host zone or the clock directly; callers pass a
mode (and, where "today" matters, a clock) explicitly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import InvalidTimezoneError

Clock = Callable[[], datetime]

LOCAL = "local"
UTC = "utc"
NAMED = "named"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(instant: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant


@dataclass(frozen=True)
class TimeZoneMode:
    kind: str
    zone: ZoneInfo | None = None

    @classmethod
    def local(cls) -> TimeZoneMode:
        return cls(LOCAL)

    @classmethod
    def utc(cls) -> TimeZoneMode:
        return cls(UTC)

    @classmethod
    def named(cls, key: str) -> TimeZoneMode:
        return cls.parse(key)

    @classmethod
    def parse(cls, value: str) -> TimeZoneMode:
        """Parse ``local``, ``utc`` (any case) or an IANA zone name."""
        normalized = (value or "").strip()
        if normalized.lower() == LOCAL:
            return cls(LOCAL)
        if normalized.lower() == UTC:
            return cls(UTC)
        if not normalized:
            raise InvalidTimezoneError(value)
        try:
            zone = ZoneInfo(normalized)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise InvalidTimezoneError(value) from exc
        return cls(NAMED, zone)

    @property
    def name(self) -> str:
        if self.kind == NAMED and self.zone is not None:
            return self.zone.key
        return self.kind

    def zoned_datetime(self, instant: datetime) -> datetime:
        """Convert *instant* to wall-clock time in this zone.

        The UTC offset is resolved for each instant, so two timestamps in the
        same zone can carry different offsets across a DST change.
        """
        instant = ensure_aware(instant)
        if self.kind == LOCAL:
            return instant.astimezone()
        if self.kind == NAMED and self.zone is not None:
            return instant.astimezone(self.zone)
        return instant.astimezone(timezone.utc)

    def date_naive(self, instant: datetime) -> date:
        """Calendar date of *instant* as observed in this zone."""
        return self.zoned_datetime(instant).date()

    def today(self, now: Clock | None = None) -> date:
        clock = now or utc_now
        return self.date_naive(clock())

    def __str__(self) -> str:
        return self.name
