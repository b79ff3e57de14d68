from datetime import datetime, timedelta, timezone

import pytest

from riderscan.utils.clock import FixedBusinessClock

KST = timezone(timedelta(hours=9))


@pytest.fixture
def clock():
    """Business day 2025-06-01."""
    return FixedBusinessClock(datetime(2025, 6, 1, 12, 0, tzinfo=KST), rollover_hour=6)


@pytest.fixture
def debug():
    return {'patterns_matched': {}, 'defaults_applied': []}
