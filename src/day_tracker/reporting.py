"""Report rendering and console output for day entries."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

from .models import AnyActivity
from .timestamps import TimeDuration

if TYPE_CHECKING:
    from .day_entry import DayEntry
    from .storage import TimesheetStore


def format_report_date(day: date) -> str:
    return f"{day:%A} {day.day:>2}. {day:%b} ({day:%d.%m.%Y})"


def format_activity(entry: "DayEntry", activity: AnyActivity) -> str:
    end = str(activity.time_end) if activity.time_end is not None else "<now>"
    return (
        f"{activity.time_start} - {end} "
        f"[{entry.duration_of(activity)}] - [{activity.name}]"
    )


def _percent(part: TimeDuration, total: TimeDuration) -> int:
    if total.minutes <= 0:
        return 0
    return round(100 * part.minutes / total.minutes)


def render_durations_summary(
    entry: "DayEntry", work_target: Optional[TimeDuration] = None
) -> str:
    total = entry.get_work_duration_total()
    specific = entry.get_work_duration_specific()
    non_specific = entry.get_work_duration_non_specific()
    percent_specific = _percent(specific, total)
    percent_non_specific = 100 - percent_specific if total.minutes > 0 else 0

    lines = [
        f"Total work duration:            {total} (100%)",
        f"  - Activities (from list):     {specific} ({percent_specific:>3}%)",
        f"  - Activities (non-specific):  {non_specific} ({percent_non_specific:>3}%)",
        f"Total break duration:           {entry.get_break_duration()}",
    ]
    leave_duration = entry.get_leave_duration()
    if leave_duration is not None:
        lines.append(f"Time since last leave:          {leave_duration}")
    else:
        lines.append("")
    if work_target is not None:
        remaining = entry.get_remaining_work_duration(work_target)
        lines.append(f"Work target:                    {work_target.composite()}")
        if remaining.minutes >= 0:
            lines.append(f"Remaining work time:            {remaining.composite()}")
        else:
            lines.append(f"Overtime:                       {(-remaining).composite()}")
    return "\n".join(lines) + "\n"


def render_report(entry: "DayEntry", work_target: Optional[TimeDuration] = None) -> str:
    lines = [f"Report for {format_report_date(entry.date)}", "", ""]

    lines += ["Activity Durations:", "=====================", ""]
    for name, duration in entry.get_activity_durations().items():
        lines.append(f"{duration} - {name}")

    lines += ["", "-------------", ""]
    lines.append(render_durations_summary(entry, work_target))

    lines += ["Detailed Activity List:", "=========================", ""]
    lines.extend(format_activity(entry, activity) for activity in entry.activities)
    return "\n".join(lines) + "\n"


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, store: "TimesheetStore") -> None:
        self.store = store

    def print_daily_summary(self) -> None:
        entry = self.store.load_or_create()
        current = entry.current_activity

        print(f"Summary for {format_report_date(entry.date)}")
        print("-" * 40)
        if current is None:
            print("Not checked in yet.")
            return
        print(f"You started at {entry.first_checkin_time()}")
        state = "working on" if entry.is_currently_working() else "away:"
        print(f"Currently {state} {current.name} since {current.time_start}")
        print()
        print(render_durations_summary(entry, self.store.work_target), end="")

        top_entries = list(entry.get_activity_durations().items())
        if top_entries:
            print()
            print("Top activities:")
            for name, duration in top_entries[:5]:
                print(f"  {name:<30} {duration.composite()}")

    def print_report(self) -> None:
        entry = self.store.load_or_create()
        print(render_report(entry, self.store.work_target), end="")
