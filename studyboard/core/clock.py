# ============================================================================
# Reference Clock
# ============================================================================
"""
Calendar helpers pinned to the reference timezone.

Every "today", "yesterday" and streak boundary is computed in a fixed,
DST-free UTC offset (UTC-3 by default) so that two clients in different
locales always bucket activity into the same calendar day.
"""
from typing import Callable, Optional
from datetime import date, datetime, timedelta, timezone

from studyboard.config import get_settings

ISO_DATE_FORMAT = "%Y-%m-%d"


def to_iso(day: date) -> str:
    """Format a calendar date as YYYY-MM-DD"""
    return day.strftime(ISO_DATE_FORMAT)


def from_iso(value: str) -> date:
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


class ReferenceClock:
    """Supplies the current date in the reference timezone"""

    def __init__(
        self,
        utc_offset_hours: Optional[int] = None,
        now_fn: Optional[Callable[[], datetime]] = None
    ):
        if utc_offset_hours is None:
            utc_offset_hours = get_settings().REFERENCE_UTC_OFFSET_HOURS
        self.tz = timezone(timedelta(hours=utc_offset_hours))
        self._now_fn = now_fn

    def now(self) -> datetime:
        if self._now_fn is None:
            return datetime.now(self.tz)
        current = self._now_fn()
        # Naive datetimes from the injected source are read as UTC
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current.astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()

    def today_iso(self) -> str:
        return to_iso(self.today())


class FixedClock(ReferenceClock):
    """Clock frozen on a given reference-timezone calendar date"""

    def __init__(self, today: date):
        super().__init__(utc_offset_hours=get_settings().REFERENCE_UTC_OFFSET_HOURS)
        self._today = today

    def now(self) -> datetime:
        return datetime(self._today.year, self._today.month, self._today.day, 12, 0, tzinfo=self.tz)


_default_clock: Optional[ReferenceClock] = None


def get_clock() -> ReferenceClock:
    """Shared clock used when callers do not inject one"""
    global _default_clock
    if _default_clock is None:
        _default_clock = ReferenceClock()
    return _default_clock
