"""Plain-text timesheet storage for day entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence

from .day_entry import Clock, DayEntry
from .errors import (
    InvalidTimeStamp,
    MalformedStampEvent,
    MalformedTimesheet,
    MalformedTimestamp,
    OutOfOrderStampEvent,
    StorageError,
)
from .models import StampEvent, parse_stamp_event
from .paths import (
    get_database_dir,
    report_path_default,
    report_path_for_date,
    timesheet_path_default,
    timesheet_path_for_date,
)
from .reporting import render_report
from .timestamps import TimeDuration

logger = logging.getLogger(__name__)

DATE_FORMAT_TIMESHEET = "Timesheet for %Y-%m-%d"
TIMESHEET_SEPARATOR = "------------------------"

DEFAULT_WORK_TARGET = TimeDuration(8 * 60)


@dataclass(frozen=True, slots=True)
class FileSnapshot:
    """Modification time of a file as last written by this process."""

    path: Path
    modified_ns: int

    @classmethod
    def take(cls, path: Path) -> "FileSnapshot":
        return cls(path=Path(path), modified_ns=_modified_ns(path))

    def is_outdated(self) -> bool:
        return _modified_ns(self.path) != self.modified_ns


def _modified_ns(path: Path) -> int:
    try:
        return Path(path).stat().st_mtime_ns
    except OSError as exc:
        raise StorageError(f"Could not read modification time of '{path}' - {exc}") from exc


def read_text(path: Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Could not read '{path}' - {exc}") from exc


def write_text(path: Path, content: str) -> None:
    try:
        Path(path).write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Could not write to '{path}' - {exc}") from exc


def render_timesheet(entry: DayEntry) -> str:
    lines = [entry.date.strftime(DATE_FORMAT_TIMESHEET), TIMESHEET_SEPARATOR, ""]
    lines.extend(str(event) for event in entry.to_stamp_events())
    return "\n".join(lines) + "\n"


def parse_timesheet(text: str, source: str = "<timesheet>") -> tuple[date, list[StampEvent]]:
    """Return the header date and the stamp events of a timesheet."""
    lines = [
        (number, line.strip())
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip() and not line.startswith("---")
    ]
    if not lines:
        raise MalformedTimesheet(f"Found empty timesheet at '{source}'")

    header_number, header = lines[0]
    try:
        day = datetime.strptime(header, DATE_FORMAT_TIMESHEET).date()
    except ValueError as exc:
        raise MalformedTimesheet(
            f"{source}:{header_number}: first line of timesheet is not a valid date: {header!r}"
        ) from exc

    events: list[StampEvent] = []
    for number, line in lines[1:]:
        try:
            events.append(parse_stamp_event(line))
        except (MalformedStampEvent, MalformedTimestamp, InvalidTimeStamp) as exc:
            raise type(exc)(f"{source}:{number}: {exc}") from exc
    check_chronological(events, source)
    return day, events


def check_chronological(events: Sequence[StampEvent], source: str = "<timesheet>") -> None:
    for previous, event in zip(events, events[1:]):
        if not previous.timestamp < event.timestamp:
            raise OutOfOrderStampEvent(
                f"{source}: found stamp event '{event}' that does not begin after the "
                f"previous event at {previous.timestamp}"
            )


class TimesheetStore:
    """Reads and writes the timesheet and report files of a data directory."""

    def __init__(
        self,
        data_dir: Path,
        *,
        clock: Clock = datetime.now,
        work_target: TimeDuration = DEFAULT_WORK_TARGET,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.clock = clock
        self.work_target = work_target

    @property
    def timesheet_path(self) -> Path:
        return timesheet_path_default(self.data_dir)

    def today(self) -> date:
        return self.clock().date()

    def create_empty(self) -> DayEntry:
        entry = DayEntry(self.today(), clock=self.clock)
        self.write_back(entry)
        return entry

    def load_or_create(self) -> DayEntry:
        today = self.today()
        entry: Optional[DayEntry] = None
        if self.timesheet_path.exists():
            loaded = self.load_from_file(self.timesheet_path)
            if loaded.date == today:
                entry = loaded
            else:
                logger.info(
                    "Timesheet at %s is for %s; starting a new day.",
                    self.timesheet_path,
                    loaded.date,
                )
        if entry is None:
            entry = DayEntry.fresh(today, clock=self.clock)
            logger.info("Checked in at %s.", entry.first_checkin_time())
        self.write_back(entry)
        return entry

    def load_from_file(self, path: Path) -> DayEntry:
        day, events = parse_timesheet(read_text(path), source=str(path))
        return DayEntry.from_stamp_events(day, events, clock=self.clock)

    def hotreload_external_changes(self, entry: DayEntry) -> DayEntry:
        """Return the entry on disk when someone else changed it, else ``entry``."""
        path = self.timesheet_path
        if not path.exists():
            raise StorageError(f"Timesheet '{path}' disappeared")
        if entry.last_write is not None and not entry.last_write.is_outdated():
            return entry
        logger.info("Detected external changes in %s; reloading.", path)
        reloaded = self.load_from_file(path)
        self.write_back(reloaded)
        return reloaded

    def write_back(self, entry: DayEntry) -> None:
        database_dir = get_database_dir(self.data_dir)
        try:
            database_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not create path '{database_dir}' - {exc}") from exc

        timesheet = render_timesheet(entry)
        write_text(self.timesheet_path, timesheet)
        write_text(timesheet_path_for_date(self.data_dir, entry.date), timesheet)
        entry.last_write = FileSnapshot.take(self.timesheet_path)

        report = render_report(entry, self.work_target)
        write_text(report_path_for_date(self.data_dir, entry.date), report)
        write_text(report_path_default(self.data_dir), report)
        logger.debug("Wrote timesheet and report for %s.", entry.date)

