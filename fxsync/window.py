from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .utils import to_utc_naive

DEFAULT_WINDOW_DAYS = 7


@dataclass(frozen=True)
class SyncWindow:
    """
    Inclusive calendar-day range in the reference timezone.
    """

    date_from: date
    date_to: date
    tz_name: str = "UTC"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.tz_name)

    def bounds(self) -> Tuple[datetime, datetime]:
        """
        Naive UTC instants for date_from 00:00:00 and date_to 23:59:59.999999 (local).
        """
        start = datetime.combine(self.date_from, time.min, tzinfo=self.tz)
        end = datetime.combine(self.date_to, time.max, tzinfo=self.tz)
        return to_utc_naive(start), to_utc_naive(end)

    def local_day(self, kickoff_utc: datetime) -> date:
        if kickoff_utc.tzinfo is None:
            kickoff_utc = kickoff_utc.replace(tzinfo=timezone.utc)
        return kickoff_utc.astimezone(self.tz).date()

    def contains_day(self, day: date) -> bool:
        return self.date_from <= day <= self.date_to

    def contains(self, kickoff_utc: datetime) -> bool:
        return self.contains_day(self.local_day(kickoff_utc))

    def __str__(self) -> str:
        return f"{self.date_from.isoformat()}..{self.date_to.isoformat()} ({self.tz_name})"


def compute_window(
    tz_name: str,
    days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> SyncWindow:
    tz = ZoneInfo(tz_name)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    today = current.astimezone(tz).date()
    return SyncWindow(date_from=today, date_to=today + timedelta(days=days), tz_name=tz_name)
