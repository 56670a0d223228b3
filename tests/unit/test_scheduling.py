"""Unit tests for maintenance scheduling helpers"""
from datetime import datetime

from lastheard.services.maintenance import seconds_until


class TestSecondsUntil:
    """Delay until the next daily directory refresh"""

    def test_later_today(self):
        now = datetime(2024, 6, 1, 1, 0, 0)
        assert seconds_until(2, 0, now=now) == 3600

    def test_already_past_rolls_to_tomorrow(self):
        now = datetime(2024, 6, 1, 3, 0, 0)
        assert seconds_until(2, 0, now=now) == 23 * 3600

    def test_exactly_now_rolls_to_tomorrow(self):
        now = datetime(2024, 6, 1, 2, 0, 0)
        assert seconds_until(2, 0, now=now) == 24 * 3600

    def test_minutes_and_seconds(self):
        now = datetime(2024, 6, 1, 1, 59, 30)
        assert seconds_until(2, 0, now=now) == 30

    def test_month_rollover(self):
        now = datetime(2024, 6, 30, 23, 0, 0)
        assert seconds_until(2, 30, now=now) == 3.5 * 3600
