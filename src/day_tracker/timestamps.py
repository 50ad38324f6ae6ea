"""Wall-clock time of day and signed minute durations."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

from .errors import InvalidTimeStamp, MalformedTimestamp

MINUTES_PER_DAY = 24 * 60

_TIMESTAMP_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")


@dataclass(frozen=True, order=True, slots=True)
class TimeStamp:
    """A time of day with minute resolution."""

    hours: int
    minutes: int

    def __post_init__(self) -> None:
        if not 0 <= self.hours < 24 or not 0 <= self.minutes < 60:
            raise InvalidTimeStamp(
                f"{self.hours}:{self.minutes} is not a valid time of day"
            )

    @classmethod
    def from_string(cls, value: str) -> "TimeStamp":
        match = _TIMESTAMP_PATTERN.fullmatch(value)
        if match is None:
            raise MalformedTimestamp(f"The string '{value}' is not a valid timestamp")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def from_datetime(cls, value: datetime) -> "TimeStamp":
        return cls(value.hour, value.minute)

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def __sub__(self, other: "TimeStamp") -> "TimeDuration":
        if not isinstance(other, TimeStamp):
            return NotImplemented
        return TimeDuration(self.total_minutes - other.total_minutes)

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


@dataclass(frozen=True, order=True, slots=True)
class TimeDuration:
    """Signed number of minutes.

    Negative values show up when differencing against a target (overtime) or
    when two timestamps are subtracted in the wrong order.
    """

    minutes: int = 0

    @classmethod
    def zero(cls) -> "TimeDuration":
        return cls(0)

    @classmethod
    def from_timedelta(cls, value: timedelta) -> "TimeDuration":
        return cls(int(value.total_seconds() // 60))

    def __add__(self, other: "TimeDuration") -> "TimeDuration":
        if not isinstance(other, TimeDuration):
            return NotImplemented
        return TimeDuration(self.minutes + other.minutes)

    def __radd__(self, other: object) -> "TimeDuration":
        # Lets sum() start from the integer 0.
        if other == 0:
            return self
        return NotImplemented

    def __sub__(self, other: "TimeDuration") -> "TimeDuration":
        if not isinstance(other, TimeDuration):
            return NotImplemented
        return TimeDuration(self.minutes - other.minutes)

    def __neg__(self) -> "TimeDuration":
        return TimeDuration(-self.minutes)

    def __bool__(self) -> bool:
        return self.minutes != 0

    @property
    def sign(self) -> str:
        return "-" if self.minutes < 0 else ""

    def hour_fraction(self) -> str:
        return f"{self.sign}{abs(self.minutes) / 60:.2f}"

    def composite(self) -> str:
        return f"{self} ({self.hour_fraction()}h)"

    def __str__(self) -> str:
        hours, minutes = divmod(abs(self.minutes), 60)
        return f"{self.sign}{hours:02d}:{minutes:02d}"
