from datetime import date, datetime, timedelta

import pytest

from day_tracker.storage import TimesheetStore
from day_tracker.timestamps import TimeStamp

DAY = date(2024, 3, 4)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, hours: int, minutes: int) -> None:
        self.now = self.now.replace(hour=hours, minute=minutes)

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def ts(value: str) -> TimeStamp:
    return TimeStamp.from_string(value)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 4, 9, 0))


@pytest.fixture
def store(tmp_path, clock):
    return TimesheetStore(tmp_path, clock=clock)
