from datetime import datetime

import pytest

from conftest import DAY, FakeClock, ts
from day_tracker.day_entry import (
    DayEntry,
    activities_from_stamp_events,
    cleanup_activities,
    stamp_events_from_activities,
)
from day_tracker.errors import DayRolloverError, DuplicateActivity, DuplicateLeave, InvalidActivityName
from day_tracker.models import (
    ACTIVITY_NAME_BREAK,
    ACTIVITY_NAME_LEAVE,
    ACTIVITY_NAME_NON_SPECIFIC_WORK,
    Begin,
    Leave,
    leave_activity,
    work_activity,
)
from day_tracker.timestamps import TimeDuration

NON_SPECIFIC = ACTIVITY_NAME_NON_SPECIFIC_WORK


def sample_day():
    return [
        work_activity(NON_SPECIFIC, ts("09:00"), ts("11:00")),
        work_activity("ProjectX", ts("11:00"), ts("12:00")),
        leave_activity(ts("12:00"), ts("12:30")),
        work_activity(NON_SPECIFIC, ts("12:30"), ts("17:00")),
    ]


def test_cleanup_merges_adjacent_duplicates():
    result = cleanup_activities(
        [work_activity("A", ts("09:00"), ts("10:00")), work_activity("A", ts("10:00"), ts("10:30"))]
    )
    assert result == [work_activity("A", ts("09:00"), ts("10:30"))]


def test_cleanup_drops_zero_length_activities():
    result = cleanup_activities(
        [work_activity("A", ts("09:00"), ts("09:00")), work_activity("B", ts("09:00"), ts("10:00"))]
    )
    assert result == [work_activity("B", ts("09:00"), ts("10:00"))]


def test_cleanup_keeps_open_activity_of_zero_length():
    result = cleanup_activities([work_activity("A", ts("08:00"), ts("09:00")), work_activity("B", ts("09:00"))])
    assert result[-1] == work_activity("B", ts("09:00"))


def test_cleanup_merges_after_removing_gap():
    result = cleanup_activities(
        [
            work_activity("A", ts("09:00"), ts("10:00")),
            work_activity("B", ts("10:00"), ts("10:00")),
            work_activity("A", ts("10:00")),
        ]
    )
    assert result == [work_activity("A", ts("09:00"))]


def test_cleanup_merges_consecutive_breaks_into_open_leave():
    result = cleanup_activities(
        [
            work_activity("A", ts("09:00"), ts("10:00")),
            leave_activity(ts("10:00"), ts("10:15")),
            leave_activity(ts("10:15")),
        ]
    )
    assert result == [work_activity("A", ts("09:00"), ts("10:00")), leave_activity(ts("10:00"))]
    assert result[-1].name == ACTIVITY_NAME_LEAVE


def test_cleanup_is_idempotent():
    activities = [
        work_activity("A", ts("08:00"), ts("08:00")),
        work_activity("B", ts("08:00"), ts("09:00")),
        work_activity("B", ts("09:00"), ts("10:00")),
        leave_activity(ts("10:00"), ts("10:30")),
        leave_activity(ts("10:30"), ts("11:00")),
        work_activity("C", ts("11:00")),
    ]
    once = cleanup_activities(activities)
    assert cleanup_activities(once) == once


def test_reconstruction_from_events():
    events = [
        Begin(ts("09:00"), NON_SPECIFIC),
        Begin(ts("10:00"), "Emails"),
        Leave(ts("12:00")),
        Begin(ts("12:45"), NON_SPECIFIC),
        Leave(ts("17:00")),
    ]
    activities = activities_from_stamp_events(events)

    assert [a.name for a in activities] == [
        NON_SPECIFIC,
        "Emails",
        ACTIVITY_NAME_BREAK,
        NON_SPECIFIC,
        ACTIVITY_NAME_LEAVE,
    ]
    assert activities[2].time_end == ts("12:45")
    assert activities[-1].is_open


def test_reconstruction_rejects_duplicate_begin():
    with pytest.raises(DuplicateActivity):
        activities_from_stamp_events([Begin(ts("09:00"), "A"), Begin(ts("10:00"), "A")])


def test_reconstruction_rejects_duplicate_leave():
    with pytest.raises(DuplicateLeave):
        activities_from_stamp_events([Begin(ts("09:00"), "A"), Leave(ts("10:00")), Leave(ts("11:00"))])


def test_round_trip_through_stamp_events():
    activities = sample_day() + [leave_activity(ts("17:00"))]
    events = stamp_events_from_activities(activities)
    assert activities_from_stamp_events(events) == activities


def test_duration_aggregation(clock):
    entry = DayEntry(DAY, sample_day(), clock=clock)

    assert entry.get_work_duration_total() == TimeDuration(7 * 60 + 30)
    assert entry.get_work_duration_specific() == TimeDuration(60)
    assert entry.get_work_duration_non_specific() == TimeDuration(6 * 60 + 30)
    assert entry.get_break_duration() == TimeDuration(30)
    assert entry.get_non_work_duration() == TimeDuration(30)
    assert entry.get_remaining_work_duration(TimeDuration(8 * 60)) == TimeDuration(30)
    assert entry.get_remaining_work_duration(TimeDuration(7 * 60)) == TimeDuration(-30)


def test_activity_durations_sorted_descending(clock):
    entry = DayEntry(
        DAY,
        [
            work_activity("A", ts("09:00"), ts("09:30")),
            work_activity("B", ts("09:30"), ts("10:00")),
            work_activity("C", ts("10:00"), ts("11:00")),
            leave_activity(ts("11:00"), ts("13:00")),
            work_activity("A", ts("13:00"), ts("13:15")),
        ],
        clock=clock,
    )
    durations = entry.get_activity_durations()

    assert list(durations.items()) == [
        ("C", TimeDuration(60)),
        ("A", TimeDuration(45)),
        ("B", TimeDuration(30)),
    ]


def test_activity_durations_ties_keep_first_occurrence(clock):
    entry = DayEntry(
        DAY,
        [work_activity("B", ts("09:00"), ts("09:30")), work_activity("A", ts("09:30"), ts("10:00"))],
        clock=clock,
    )
    assert list(entry.get_activity_durations()) == ["B", "A"]


def test_open_activity_measured_until_now(clock):
    clock.set(10, 15)
    entry = DayEntry(DAY, [work_activity("A", ts("09:00"))], clock=clock)
    assert entry.get_work_duration_total() == TimeDuration(75)


def test_open_activity_of_past_day_ends_at_midnight():
    clock = FakeClock(datetime(2024, 3, 5, 8, 0))
    entry = DayEntry(DAY, [work_activity("A", ts("22:30"))], clock=clock)
    assert entry.get_work_duration_total() == TimeDuration(90)


def test_leave_duration(clock):
    clock.set(12, 20)
    entry = DayEntry(
        DAY,
        [work_activity("A", ts("09:00"), ts("12:00")), leave_activity(ts("12:00"))],
        clock=clock,
    )
    assert entry.get_leave_duration() == TimeDuration(20)
    assert entry.get_break_duration() == TimeDuration.zero()
    assert entry.get_non_work_duration() == TimeDuration(20)


def test_leave_duration_none_while_working_or_empty(clock):
    assert DayEntry(DAY, clock=clock).get_leave_duration() is None
    assert DayEntry(DAY, [work_activity("A", ts("09:00"))], clock=clock).get_leave_duration() is None


def test_queries_on_empty_entry(clock):
    entry = DayEntry(DAY, clock=clock)
    assert entry.current_activity is None
    assert not entry.is_currently_working()
    assert entry.first_checkin_time() is None
    assert entry.get_work_duration_total() == TimeDuration.zero()
    assert entry.get_activity_durations() == {}


def test_fresh_entry_starts_with_non_specific_work(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    assert entry.activities == [work_activity(NON_SPECIFIC, ts("09:00"))]
    assert entry.is_currently_working()
    assert entry.first_checkin_time() == ts("09:00")


def test_start_activity_closes_current(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.set(10, 0)
    assert entry.start_activity("Emails")
    clock.set(10, 30)
    assert entry.leave()

    assert entry.activities == [
        work_activity(NON_SPECIFIC, ts("09:00"), ts("10:00")),
        work_activity("Emails", ts("10:00"), ts("10:30")),
        leave_activity(ts("10:30")),
    ]
    assert entry.current_activity.name == ACTIVITY_NAME_LEAVE
    assert not entry.is_currently_working()


def test_start_same_activity_is_a_no_op(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.set(10, 0)
    entry.start_activity("Emails")
    clock.set(10, 30)

    assert not entry.start_activity("Emails")
    assert entry.activities == [
        work_activity(NON_SPECIFIC, ts("09:00"), ts("10:00")),
        work_activity("Emails", ts("10:00")),
    ]

    entry.leave()
    assert not entry.leave()


def test_switching_within_the_same_minute_leaves_no_trace(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.set(10, 0)
    entry.start_activity("Emails")
    entry.start_activity(NON_SPECIFIC)

    assert entry.activities == [work_activity(NON_SPECIFIC, ts("09:00"))]


def test_returning_from_leave_confirms_break(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.set(12, 0)
    entry.leave()
    clock.set(12, 45)
    entry.start_activity(NON_SPECIFIC)

    assert [a.name for a in entry.activities] == [NON_SPECIFIC, ACTIVITY_NAME_BREAK, NON_SPECIFIC]
    assert entry.get_break_duration() == TimeDuration(45)


def test_start_activity_after_day_ended_fails(clock):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.advance(days=1)
    with pytest.raises(DayRolloverError):
        entry.start_activity("Emails")


def test_only_last_activity_may_be_open(clock):
    with pytest.raises(ValueError):
        DayEntry(DAY, [work_activity("A", ts("09:00")), work_activity("B", ts("10:00"), ts("11:00"))], clock=clock)


@pytest.mark.parametrize("name", ["", "A\nB", "x" * 200, ACTIVITY_NAME_BREAK])
def test_start_activity_rejects_unstorable_names(clock, name):
    entry = DayEntry.fresh(DAY, clock=clock)
    clock.set(10, 0)
    with pytest.raises(InvalidActivityName):
        entry.start_activity(name)
    assert entry.activities == [work_activity(NON_SPECIFIC, ts("09:00"))]
