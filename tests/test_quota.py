"""
Tests for the process-wide daily quota.
"""

import threading
from datetime import date
from unittest.mock import MagicMock

import pytest

from profilefinder.identity import Identity
from profilefinder.models import ResolutionResult
from profilefinder.quota import DailyQuota


class TestDailyQuota:
    """Test daily search counting."""

    def test_reserves_until_limit(self):
        quota = DailyQuota(2)
        assert quota.check_and_reserve() is True
        assert quota.check_and_reserve() is True
        assert quota.check_and_reserve() is False
        assert quota.count == 2

    def test_resets_on_date_rollover(self):
        today = [date(2024, 5, 1)]
        quota = DailyQuota(1, today_fn=lambda: today[0])
        assert quota.check_and_reserve()
        assert not quota.check_and_reserve()

        today[0] = date(2024, 5, 2)

        assert quota.count == 0
        assert quota.check_and_reserve()

    def test_snapshot(self):
        quota = DailyQuota(500, today_fn=lambda: date(2024, 5, 1))
        quota.check_and_reserve()
        assert quota.snapshot() == {"date": "2024-05-01", "count": 1, "limit": 500}

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            DailyQuota(0)

    def test_concurrent_reservations_are_exact(self):
        quota = DailyQuota(20)
        granted = []
        lock = threading.Lock()

        def reserve():
            ok = quota.check_and_reserve()
            with lock:
                granted.append(ok)

        threads = [threading.Thread(target=reserve) for _ in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert granted.count(True) == 20
        assert quota.count == 20

    def test_record_logs_progress(self):
        logger = MagicMock()
        quota = DailyQuota(5, logger=logger)
        quota.check_and_reserve()

        quota.record(ResolutionResult(identity=Identity.create("Sam Schalkwijk")))

        message = logger.info.call_args[0][0]
        assert message == "Processed 1/5 searches today"
        assert logger.info.call_args[1]["found"] is False
