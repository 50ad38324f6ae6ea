"""Interactive terminal session that switches activities on key presses."""

from __future__ import annotations

import logging
import os
import sys
import time
from datetime import datetime
from typing import Optional, Sequence, TextIO

import typer

from .config import TrackerSettings
from .day_entry import DayEntry
from .models import ACTIVITY_NAME_NON_SPECIFIC_WORK
from .reporting import format_activity, format_report_date, render_durations_summary
from .storage import TimesheetStore

logger = logging.getLogger(__name__)

LEAVE_KEY = "l"
ESCAPE = "\x1b"
QUIT_KEYS = frozenset({"q", "Q", ESCAPE, "\x03"})
CLEAR_SCREEN = "\x1b[2J\x1b[H"


class PosixKeyReader:
    """Reads single key presses from a terminal in cbreak mode.

    Escape sequences sent by arrow and function keys are dropped as a whole,
    so only a lone Esc press reaches the session.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream or sys.stdin
        self._saved_attributes: Optional[list] = None
        self._pending: list[str] = []

    def __enter__(self) -> "PosixKeyReader":
        import termios
        import tty

        fd = self._stream.fileno()
        self._saved_attributes = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        return self

    def __exit__(self, *exc_info: object) -> None:
        import termios

        if self._saved_attributes is not None:
            termios.tcsetattr(self._stream.fileno(), termios.TCSADRAIN, self._saved_attributes)
            self._saved_attributes = None

    def read_key(self, timeout: float) -> Optional[str]:
        import select

        if self._pending:
            return self._pending.pop(0)
        fd = self._stream.fileno()
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return None
        data = os.read(fd, 64).decode("utf-8", errors="ignore")
        if data.startswith(ESCAPE) and len(data) > 1:
            logger.debug("Ignoring escape sequence %r.", data)
            return None
        self._pending.extend(data)
        return self._pending.pop(0) if self._pending else None


class WindowsKeyReader:
    """Polls the Windows console for key presses."""

    def __enter__(self) -> "WindowsKeyReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None

    def read_key(self, timeout: float) -> Optional[str]:
        import msvcrt  # type: ignore[import-not-found]

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if msvcrt.kbhit():
                return msvcrt.getwch()
            time.sleep(0.05)
        return None


def terminal_key_reader():
    if os.name == "nt":
        return WindowsKeyReader()
    return PosixKeyReader()


class TrackerSession:
    """Keeps today's entry in sync with key presses, the clock and the disk."""

    def __init__(
        self,
        store: TimesheetStore,
        activity_names: Sequence[str],
        settings: TrackerSettings,
        key_reader=None,
    ) -> None:
        self.store = store
        self.activity_names = list(activity_names)
        self.settings = settings
        self._key_reader = key_reader
        self.entry: DayEntry = store.load_or_create()
        self._last_flush_time: datetime = store.clock()

    def run_forever(self) -> None:
        reader = self._key_reader or terminal_key_reader()
        try:
            with reader:
                self._run_loop(reader)
        except KeyboardInterrupt:
            logger.info("Session interrupted; writing remaining changes.")
        finally:
            self._shutdown()

    def handle_key(self, key: str) -> bool:
        """Apply a key press; returns ``False`` when the session should end."""
        if key in QUIT_KEYS:
            return False
        self._roll_over_if_needed()
        if key.lower() == LEAVE_KEY:
            self.toggle_leave()
        elif key.isdigit() and 1 <= int(key) <= len(self.activity_names):
            self.toggle_activity(self.activity_names[int(key) - 1])
        else:
            logger.debug("Ignoring key %r.", key)
        return True

    def toggle_activity(self, name: str) -> None:
        current = self.entry.current_activity
        if current is not None and current.is_work and current.name == name:
            changed = self.entry.start_activity(ACTIVITY_NAME_NON_SPECIFIC_WORK)
        else:
            changed = self.entry.start_activity(name)
        if changed:
            self._write_back()

    def toggle_leave(self) -> None:
        if self.entry.is_currently_working():
            changed = self.entry.leave()
        else:
            changed = self.entry.start_activity(ACTIVITY_NAME_NON_SPECIFIC_WORK)
        if changed:
            self._write_back()

    def tick(self) -> None:
        if self._roll_over_if_needed():
            return
        self.entry = self.store.hotreload_external_changes(self.entry)
        if self.store.clock() - self._last_flush_time >= self.settings.flush_interval:
            self._write_back()

    def render_screen(self) -> str:
        entry = self.entry
        lines = [f"Today is {format_report_date(entry.date)}", ""]
        current = entry.current_activity
        for index, name in enumerate(self.activity_names, start=1):
            marker = "*" if current is not None and current.is_work and current.name == name else " "
            lines.append(f" {marker} [{index}] {name}")
        on_leave = current is not None and not current.is_work
        lines.append(f" {'*' if on_leave else ' '} [{LEAVE_KEY}] Leave / back to work")
        lines.append("")
        lines.extend(format_activity(entry, activity) for activity in entry.activities)
        lines.append("")
        lines.append(render_durations_summary(entry, self.settings.work_target_duration))
        lines.append("Press 1-9 to toggle an activity, l to leave, q to quit.")
        return "\n".join(lines)

    def _roll_over_if_needed(self) -> bool:
        today = self.store.clock().date()
        if today == self.entry.date:
            return False
        logger.info("Day changed from %s to %s; starting a new day.", self.entry.date, today)
        self.store.write_back(self.entry)
        self.entry = self.store.load_or_create()
        self._last_flush_time = self.store.clock()
        return True

    def _write_back(self) -> None:
        self.store.write_back(self.entry)
        self._last_flush_time = self.store.clock()

    def _draw(self) -> None:
        typer.echo(CLEAR_SCREEN, nl=False)
        typer.echo(self.render_screen())

    def _run_loop(self, reader) -> None:
        logger.info("Starting tracker session; writing to %s", self.store.data_dir)
        timeout = self.settings.poll_interval.total_seconds()
        while True:
            self._draw()
            key = reader.read_key(timeout)
            self.tick()
            if key is not None and not self.handle_key(key):
                break

    def _shutdown(self) -> None:
        self.store.write_back(self.entry)
        logger.info("Tracker stopped.")
