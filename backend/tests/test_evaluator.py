"""Tests for the due-check evaluator."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import pytest

from sitewatch.services.evaluator import is_due, seconds_until_due

NOW = datetime(2024, 6, 1, 12, 0, 0)


@dataclass
class Target:
    interval_seconds: int
    last_checked_at: Optional[datetime] = None


class TestIsDue:
    """Tests for is_due."""

    def test_never_checked_is_due(self) -> None:
        assert is_due(Target(interval_seconds=60), NOW) is True

    def test_due_after_interval_elapsed(self) -> None:
        """Interval 60s, last check 90s ago."""
        target = Target(interval_seconds=60, last_checked_at=NOW - timedelta(seconds=90))
        assert is_due(target, NOW) is True

    def test_due_exactly_at_interval(self) -> None:
        target = Target(interval_seconds=60, last_checked_at=NOW - timedelta(seconds=60))
        assert is_due(target, NOW) is True

    def test_not_due_before_interval(self) -> None:
        target = Target(interval_seconds=60, last_checked_at=NOW - timedelta(seconds=59, milliseconds=999))
        assert is_due(target, NOW) is False

    def test_not_due_right_after_check(self) -> None:
        target = Target(interval_seconds=30, last_checked_at=NOW)
        assert is_due(target, NOW) is False

    @pytest.mark.parametrize("interval", [30, 60, 300, 3600])
    def test_matches_elapsed_rule(self, interval: int) -> None:
        for elapsed in (0, interval - 1, interval, interval + 1):
            target = Target(interval_seconds=interval, last_checked_at=NOW - timedelta(seconds=elapsed))
            assert is_due(target, NOW) is (elapsed >= interval)


class TestSecondsUntilDue:
    """Tests for seconds_until_due."""

    def test_zero_when_due(self) -> None:
        assert seconds_until_due(Target(interval_seconds=60), NOW) == 0

    def test_rounds_up_partial_seconds(self) -> None:
        target = Target(interval_seconds=60, last_checked_at=NOW - timedelta(seconds=10, milliseconds=500))
        assert seconds_until_due(target, NOW) == 50
