"""Configuration models and helpers for the day tracker."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .errors import ConfigError, InvalidActivityName, StorageError
from .models import RESERVED_ACTIVITY_NAMES, validate_activity_name
from .paths import get_activity_names_path, get_legacy_activity_names_path
from .timestamps import TimeDuration

logger = logging.getLogger(__name__)

MAX_ACTIVITY_COUNT = 9

EXAMPLE_ACTIVITY_NAMES_TEXT = """\
# Welcome to the day tracker!
#
# List the activities you want to track below, one per line. The first nine
# are mapped to the keys 1-9 in the interactive tracker. Lines starting with
# '#' are ignored. Names may be at most 70 characters long.
Emails
Meetings
Code review
"""


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the interactive tracker."""

    poll_interval: timedelta = timedelta(seconds=1)
    flush_interval: timedelta = timedelta(minutes=1)
    work_target: timedelta = timedelta(hours=8)

    @classmethod
    def from_options(
        cls,
        target_hours: float = 8.0,
        poll_seconds: float = 1.0,
        flush_minutes: float | None = None,
    ) -> "TrackerSettings":
        return cls(
            poll_interval=timedelta(seconds=poll_seconds),
            flush_interval=timedelta(minutes=flush_minutes if flush_minutes is not None else 1.0),
            work_target=timedelta(hours=target_hours),
        )

    @property
    def work_target_duration(self) -> TimeDuration:
        return TimeDuration.from_timedelta(self.work_target)


def ensure_activity_names_file(data_dir: Path) -> Path:
    """Return the activity names file, creating or migrating it if needed."""
    path = get_activity_names_path(data_dir)
    if path.exists():
        return path

    legacy_path = get_legacy_activity_names_path(data_dir)
    try:
        if legacy_path.exists():
            legacy_path.rename(path)
            logger.info("Migrated activity names from %s to %s.", legacy_path, path)
        else:
            path.write_text(EXAMPLE_ACTIVITY_NAMES_TEXT, encoding="utf-8")
            logger.info("Created example activity names file at %s.", path)
    except OSError as exc:
        raise StorageError(f"Could not prepare '{path}' - {exc}") from exc
    return path


def parse_activity_names(text: str, source: str = "<activities>") -> list[str]:
    names: list[str] = []
    for number, raw_line in enumerate(text.splitlines(), start=1):
        name = raw_line.strip()
        if not name or name.startswith("#"):
            continue
        try:
            validate_activity_name(name)
        except InvalidActivityName as exc:
            raise ConfigError(f"{source}:{number}: {exc}") from exc
        if name in RESERVED_ACTIVITY_NAMES:
            raise ConfigError(f"{source}:{number}: '{name}' is a reserved activity name")
        if name in names:
            raise ConfigError(f"{source}:{number}: duplicate activity name '{name}'")
        names.append(name)

    if len(names) > MAX_ACTIVITY_COUNT:
        logger.warning(
            "%s lists %d activities; only the first %d are used.",
            source,
            len(names),
            MAX_ACTIVITY_COUNT,
        )
    return names[:MAX_ACTIVITY_COUNT]


def load_activity_names(data_dir: Path) -> list[str]:
    path = ensure_activity_names_file(data_dir)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Could not read '{path}' - {exc}") from exc
    return parse_activity_names(text, source=str(path))
