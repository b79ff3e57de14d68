"""
Business-day clock.

Riders work past midnight, so "today" rolls over at 06:00 local time rather
than at midnight: 2025-05-30 03:00 KST still belongs to business day
2025-05-29.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from riderscan.config import settings


class BusinessClock:
    """Base clock. Subclasses provide `now()`; `today()` applies the rollover."""

    def __init__(self, rollover_hour: Optional[int] = None):
        self.rollover_hour = settings.DAY_ROLLOVER_HOUR if rollover_hour is None else rollover_hour

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return (self.now() - timedelta(hours=self.rollover_hour)).date()

    def is_today(self, day: date) -> bool:
        return day == self.today()


class SystemBusinessClock(BusinessClock):
    """Reads the system clock in a fixed regional offset (KST by default)."""

    def __init__(self, utc_offset_hours: Optional[int] = None, rollover_hour: Optional[int] = None):
        super().__init__(rollover_hour)
        offset = settings.UTC_OFFSET_HOURS if utc_offset_hours is None else utc_offset_hours
        self.tz = timezone(timedelta(hours=offset))

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedBusinessClock(BusinessClock):
    """Always reports the same instant. Used by tests and replays."""

    def __init__(self, fixed_now: datetime, rollover_hour: Optional[int] = None):
        super().__init__(rollover_hour)
        self.fixed_now = fixed_now

    def now(self) -> datetime:
        return self.fixed_now
