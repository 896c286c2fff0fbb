"""Due-check evaluation for monitored targets."""
import math
from datetime import datetime


def is_due(target, now: datetime) -> bool:
    """Return True when ``target`` should be checked at ``now``.

    ``target`` needs ``last_checked_at`` and ``interval_seconds``. A target
    that was never checked is always due.
    """
    if target.last_checked_at is None:
        return True
    elapsed = (now - target.last_checked_at).total_seconds()
    return elapsed >= target.interval_seconds


def seconds_until_due(target, now: datetime) -> int:
    """Whole seconds until the next check is due, 0 if it already is."""
    if is_due(target, now):
        return 0
    elapsed = (now - target.last_checked_at).total_seconds()
    return max(math.ceil(target.interval_seconds - elapsed), 0)
