"""Activity bookkeeping for a single calendar day."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from .errors import DayRolloverError, DuplicateActivity, DuplicateLeave
from .models import (
    ACTIVITY_NAME_LEAVE,
    ACTIVITY_NAME_NON_SPECIFIC_WORK,
    Activity,
    AnyActivity,
    Begin,
    Leave,
    OpenActivity,
    StampEvent,
    merge_key,
    validate_activity_name,
)
from .timestamps import MINUTES_PER_DAY, TimeDuration, TimeStamp

if TYPE_CHECKING:
    from .storage import FileSnapshot

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def cleanup_activities(activities: Iterable[AnyActivity]) -> list[AnyActivity]:
    """Normalize an ordered activity list.

    Closed activities of zero length are dropped, then adjacent activities
    describing the same thing are merged in a single left-to-right pass. All
    non-work spans share one merge key, so consecutive breaks collapse into
    one. Whether a non-work span reads "Break" or "Leave" follows from it
    being closed or open, which the merge preserves.
    """
    kept = [
        activity
        for activity in activities
        if activity.is_open or activity.duration.minutes != 0
    ]

    merged: list[AnyActivity] = []
    for activity in kept:
        if merged and merge_key(merged[-1]) == merge_key(activity):
            merged[-1] = _absorb(merged[-1], activity)
            continue
        merged.append(activity)
    return merged


def _absorb(earlier: AnyActivity, later: AnyActivity) -> AnyActivity:
    if later.is_open:
        return OpenActivity(
            is_work=earlier.is_work, label=earlier.label, time_start=earlier.time_start
        )
    return Activity(
        is_work=earlier.is_work,
        label=earlier.label,
        time_start=earlier.time_start,
        time_end=later.time_end,
    )


def activities_from_stamp_events(events: Iterable[StampEvent]) -> list[AnyActivity]:
    """Fold stamp events into activities; the last one stays open."""
    result: list[AnyActivity] = []
    current: Optional[OpenActivity] = None
    for event in events:
        if isinstance(event, Begin):
            if current is not None:
                if current.is_work and current.label == event.name:
                    raise DuplicateActivity(
                        f"Got a duplicate activity '{event.name}' at {event.timestamp}"
                    )
                result.append(current.close(event.timestamp))
            current = OpenActivity(is_work=True, label=event.name, time_start=event.timestamp)
        elif isinstance(event, Leave):
            if current is not None:
                if not current.is_work:
                    raise DuplicateLeave(f"Got a duplicate leave activity at {event.timestamp}")
                result.append(current.close(event.timestamp))
            current = OpenActivity(is_work=False, label=None, time_start=event.timestamp)
        else:
            raise TypeError(f"Unsupported stamp event {event!r}")
    if current is not None:
        result.append(current)
    return cleanup_activities(result)


def stamp_events_from_activities(activities: Iterable[AnyActivity]) -> list[StampEvent]:
    events: list[StampEvent] = []
    for activity in activities:
        if activity.is_work:
            events.append(Begin(activity.time_start, activity.name))
        else:
            events.append(Leave(activity.time_start))
    return events


class DayEntry:
    """The canonical activity sequence of one day and its duration queries.

    Closed activities live in an ordered history; the activity in progress,
    if any, is held separately and always follows the history.
    """

    def __init__(
        self,
        day: date,
        activities: Iterable[AnyActivity] = (),
        *,
        clock: Clock = datetime.now,
    ) -> None:
        self.date = day
        self.clock = clock
        self.last_write: Optional["FileSnapshot"] = None
        self._history: list[Activity] = []
        self._current: Optional[OpenActivity] = None
        self._assign(cleanup_activities(activities))

    @classmethod
    def fresh(cls, day: date, *, clock: Clock = datetime.now) -> "DayEntry":
        """Entry checked in now with non-specific work."""
        start = TimeStamp.from_datetime(clock())
        activity = OpenActivity(
            is_work=True, label=ACTIVITY_NAME_NON_SPECIFIC_WORK, time_start=start
        )
        return cls(day, [activity], clock=clock)

    @classmethod
    def from_stamp_events(
        cls, day: date, events: Iterable[StampEvent], *, clock: Clock = datetime.now
    ) -> "DayEntry":
        return cls(day, activities_from_stamp_events(events), clock=clock)

    def _assign(self, activities: Sequence[AnyActivity]) -> None:
        history: list[Activity] = []
        current: Optional[OpenActivity] = None
        for index, activity in enumerate(activities):
            if isinstance(activity, OpenActivity):
                if index != len(activities) - 1:
                    raise ValueError(
                        f"Only the last activity may be open, got one at {activity.time_start}"
                    )
                current = activity
            else:
                history.append(activity)
        self._history = history
        self._current = current

    @property
    def activities(self) -> list[AnyActivity]:
        result: list[AnyActivity] = list(self._history)
        if self._current is not None:
            result.append(self._current)
        return result

    @property
    def current_activity(self) -> Optional[AnyActivity]:
        if self._current is not None:
            return self._current
        return self._history[-1] if self._history else None

    def to_stamp_events(self) -> list[StampEvent]:
        return stamp_events_from_activities(self.activities)

    def now(self) -> TimeStamp:
        return TimeStamp.from_datetime(self.clock())

    def duration_of(self, activity: AnyActivity) -> TimeDuration:
        if isinstance(activity, Activity):
            return activity.duration
        now = self.clock()
        if now.date() > self.date:
            # Open activities of a past day end at its midnight.
            return TimeDuration(MINUTES_PER_DAY - activity.time_start.total_minutes)
        return TimeStamp.from_datetime(now) - activity.time_start

    def start_activity(self, name: str, is_work: bool = True) -> bool:
        """Close the activity in progress and begin ``name`` now.

        Returns ``False`` without touching the entry when the requested
        activity is already in progress.
        """
        if is_work:
            validate_activity_name(name)
        now = self.clock()
        if now.date() != self.date:
            raise DayRolloverError(
                f"Cannot start '{name}' on {now.date():%Y-%m-%d} in the entry for "
                f"{self.date:%Y-%m-%d}"
            )

        requested_key = (is_work, name if is_work else None)
        current = self._current
        if current is not None and merge_key(current) == requested_key:
            logger.debug("Activity '%s' is already in progress; ignoring.", current.name)
            return False

        timestamp = TimeStamp.from_datetime(now)
        activities: list[AnyActivity] = list(self._history)
        if current is not None:
            activities.append(current.close(timestamp))
        activities.append(
            OpenActivity(is_work=is_work, label=name if is_work else None, time_start=timestamp)
        )
        self._assign(cleanup_activities(activities))
        logger.debug("Started '%s' at %s", self.activities[-1].name, timestamp)
        return True

    def leave(self) -> bool:
        return self.start_activity(ACTIVITY_NAME_LEAVE, is_work=False)

    def is_currently_working(self) -> bool:
        current = self.current_activity
        return current.is_work if current is not None else False

    def first_checkin_time(self) -> Optional[TimeStamp]:
        activities = self.activities
        return activities[0].time_start if activities else None

    def _sum(self, activities: Iterable[AnyActivity]) -> TimeDuration:
        return sum((self.duration_of(activity) for activity in activities), TimeDuration.zero())

    def get_work_duration_total(self) -> TimeDuration:
        return self._sum(a for a in self.activities if a.is_work)

    def get_work_duration_specific(self) -> TimeDuration:
        return self._sum(
            a
            for a in self.activities
            if a.is_work and a.name != ACTIVITY_NAME_NON_SPECIFIC_WORK
        )

    def get_work_duration_non_specific(self) -> TimeDuration:
        return self._sum(
            a
            for a in self.activities
            if a.is_work and a.name == ACTIVITY_NAME_NON_SPECIFIC_WORK
        )

    def get_break_duration(self) -> TimeDuration:
        """Confirmed breaks only; a leave in progress does not count."""
        return self._sum(a for a in self.activities if not a.is_work and not a.is_open)

    def get_leave_duration(self) -> Optional[TimeDuration]:
        if self.current_activity is None or self.is_currently_working():
            return None
        return self._sum(a for a in self.activities if not a.is_work and a.is_open)

    def get_non_work_duration(self) -> TimeDuration:
        return self._sum(a for a in self.activities if not a.is_work)

    def get_remaining_work_duration(self, target: TimeDuration) -> TimeDuration:
        """Work left until ``target``; negative once in overtime."""
        return target - self.get_work_duration_total()

    def get_activity_durations(self) -> dict[str, TimeDuration]:
        totals: defaultdict[str, TimeDuration] = defaultdict(TimeDuration.zero)
        for activity in self.activities:
            if not activity.is_work:
                continue
            totals[activity.name] += self.duration_of(activity)
        return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))

    def __repr__(self) -> str:
        return f"DayEntry(date={self.date!r}, activities={self.activities!r})"
