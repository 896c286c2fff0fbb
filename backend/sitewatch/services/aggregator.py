"""Rollup statistics over a target's check history."""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from ..models.target import STATUS_DOWN, STATUS_UP
from ..utils.db_utils import utcnow

NO_DATA = "NoData"
DEFAULT_WINDOW_DAYS = 30


@dataclass
class DailyStatus:
    """Rolled-up status for one calendar day."""
    date: date
    status: str  # Up, Down, NoData


@dataclass
class UptimeSummary:
    """Rollups for a trailing window of days."""
    uptime_percent: float
    avg_latency_ms: float
    total_checks: int = 0
    daily_statuses: List[DailyStatus] = field(default_factory=list)


def window_start(window_days: int, now: Optional[datetime] = None) -> datetime:
    """Midnight of the oldest day in the window."""
    now = now or utcnow()
    first_day = now.date() - timedelta(days=window_days - 1)
    return datetime.combine(first_day, datetime.min.time())


def summarize(records: Iterable, window_days: int = DEFAULT_WINDOW_DAYS, now: Optional[datetime] = None) -> UptimeSummary:
    """Summarize check records over the trailing ``window_days`` calendar days.

    Records only need ``created_at``, ``status`` and ``latency_ms``; those
    outside ``[today - (window_days - 1), today]`` are ignored.

    - uptime is 100% when the window holds no records
    - average latency skips records without a latency and is 0 if none have one
    - a single Down record marks its whole day Down
    """
    if window_days < 1:
        raise ValueError("window_days must be at least 1")

    now = now or utcnow()
    today = now.date()
    first_day = today - timedelta(days=window_days - 1)

    in_window = [r for r in records if first_day <= r.created_at.date() <= today]

    total = len(in_window)
    up_count = sum(1 for r in in_window if r.status == STATUS_UP)
    uptime_percent = 100.0 if total == 0 else 100.0 * up_count / total

    latencies = [r.latency_ms for r in in_window if r.latency_ms is not None]
    avg_latency_ms = sum(latencies) / len(latencies) if latencies else 0

    by_day = {}
    for record in in_window:
        by_day.setdefault(record.created_at.date(), []).append(record.status)

    daily_statuses = []
    for offset in range(window_days):
        day = first_day + timedelta(days=offset)
        statuses = by_day.get(day)
        if not statuses:
            status = NO_DATA
        elif STATUS_DOWN in statuses:
            status = STATUS_DOWN
        else:
            status = STATUS_UP
        daily_statuses.append(DailyStatus(date=day, status=status))

    return UptimeSummary(
        uptime_percent=uptime_percent,
        avg_latency_ms=avg_latency_ms,
        total_checks=total,
        daily_statuses=daily_statuses,
    )
