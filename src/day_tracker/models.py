"""Domain models for recorded activities and their serialized stamp events."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import InvalidActivityName, MalformedStampEvent
from .timestamps import TimeDuration, TimeStamp

ACTIVITY_NAME_NON_SPECIFIC_WORK = "Work (Non-specific)"
ACTIVITY_NAME_LEAVE = "Leave"
ACTIVITY_NAME_BREAK = "Break"

RESERVED_ACTIVITY_NAMES = frozenset(
    {ACTIVITY_NAME_NON_SPECIFIC_WORK, ACTIVITY_NAME_LEAVE, ACTIVITY_NAME_BREAK}
)

MAX_ACTIVITY_NAME_LENGTH = 70


class BreakState(Enum):
    """Whether a non-work span has a confirmed end."""

    CONFIRMED = ACTIVITY_NAME_BREAK
    IN_PROGRESS = ACTIVITY_NAME_LEAVE

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Activity:
    """A closed, contiguous block of time spent in a single activity.

    ``label`` is only set for work activities. Non-work spans derive their
    name from their break state.
    """

    is_work: bool
    label: Optional[str]
    time_start: TimeStamp
    time_end: TimeStamp

    @property
    def is_open(self) -> bool:
        return False

    @property
    def break_state(self) -> Optional[BreakState]:
        return None if self.is_work else BreakState.CONFIRMED

    @property
    def name(self) -> str:
        if self.is_work:
            return self.label
        return BreakState.CONFIRMED.label

    @property
    def duration(self) -> TimeDuration:
        return self.time_end - self.time_start


@dataclass(frozen=True, slots=True)
class OpenActivity:
    """The activity currently in progress; it has no end yet."""

    is_work: bool
    label: Optional[str]
    time_start: TimeStamp

    @property
    def is_open(self) -> bool:
        return True

    @property
    def time_end(self) -> None:
        return None

    @property
    def break_state(self) -> Optional[BreakState]:
        return None if self.is_work else BreakState.IN_PROGRESS

    @property
    def name(self) -> str:
        if self.is_work:
            return self.label
        return BreakState.IN_PROGRESS.label

    def close(self, time_end: TimeStamp) -> Activity:
        return Activity(
            is_work=self.is_work,
            label=self.label,
            time_start=self.time_start,
            time_end=time_end,
        )


AnyActivity = Union[Activity, OpenActivity]


def work_activity(
    name: str, time_start: TimeStamp, time_end: Optional[TimeStamp] = None
) -> AnyActivity:
    if time_end is None:
        return OpenActivity(is_work=True, label=name, time_start=time_start)
    return Activity(is_work=True, label=name, time_start=time_start, time_end=time_end)


def leave_activity(
    time_start: TimeStamp, time_end: Optional[TimeStamp] = None
) -> AnyActivity:
    if time_end is None:
        return OpenActivity(is_work=False, label=None, time_start=time_start)
    return Activity(is_work=False, label=None, time_start=time_start, time_end=time_end)


def validate_activity_name(name: str) -> str:
    """Return ``name`` if it can be recorded as a work activity.

    The name has to fit on one timesheet line and read back unchanged.
    Leave and Break stay reserved for non-work spans.
    """
    if not name.strip():
        raise InvalidActivityName("Activity names must not be empty")
    if name != name.strip():
        raise InvalidActivityName(f"Activity name {name!r} has surrounding whitespace")
    if not name.isprintable():
        raise InvalidActivityName(f"Activity name {name!r} must be a single line of printable text")
    if len(name) > MAX_ACTIVITY_NAME_LENGTH:
        raise InvalidActivityName(
            f"Activity name is longer than {MAX_ACTIVITY_NAME_LENGTH} characters: {name!r}"
        )
    if name in (ACTIVITY_NAME_LEAVE, ACTIVITY_NAME_BREAK):
        raise InvalidActivityName(f"'{name}' is reserved for time away from work")
    return name


def merge_key(activity: AnyActivity) -> tuple[bool, Optional[str]]:
    """Adjacent activities with equal keys describe one span."""
    return (activity.is_work, activity.label if activity.is_work else None)


@dataclass(frozen=True, slots=True)
class Begin:
    """Start of a work activity."""

    timestamp: TimeStamp
    name: str

    def __str__(self) -> str:
        return f"{self.timestamp} - Begin [{self.name}]"


@dataclass(frozen=True, slots=True)
class Leave:
    """Start of a non-work span."""

    timestamp: TimeStamp

    def __str__(self) -> str:
        return f"{self.timestamp} - Leave"


StampEvent = Union[Begin, Leave]

_BEGIN_PATTERN = re.compile(r"([0-9]{2}:[0-9]{2}) - Begin \[(.+)\]")
_LEAVE_PATTERN = re.compile(r"([0-9]{2}:[0-9]{2}) - Leave")


def parse_stamp_event(line: str) -> StampEvent:
    """Parse a single timesheet line such as ``09:00 - Begin [Emails]``."""
    text = line.strip()
    match = _BEGIN_PATTERN.fullmatch(text)
    if match:
        return Begin(TimeStamp.from_string(match.group(1)), match.group(2))
    match = _LEAVE_PATTERN.fullmatch(text)
    if match:
        return Leave(TimeStamp.from_string(match.group(1)))
    raise MalformedStampEvent(f"The string '{line}' is not a valid stamp event")
