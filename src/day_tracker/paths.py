"""Helpers for locating application directories and per-day files."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "DayTracker"
APP_AUTHOR = "DayTracker"

DATE_FORMAT_DATABASE = "%Y_%m_%d__%b_%A"


def get_data_dir(override: Optional[Path] = None) -> Path:
    """Return the base directory for persistent data."""
    if override is not None:
        path = Path(override)
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_log_path(data_dir: Path) -> Path:
    return Path(data_dir) / "day_tracker.log"


def get_database_dir(data_dir: Path) -> Path:
    return Path(data_dir) / "database"


def get_activity_names_path(data_dir: Path) -> Path:
    return Path(data_dir) / "activities.txt"


def get_legacy_activity_names_path(data_dir: Path) -> Path:
    return Path(data_dir) / "tasks.txt"


def date_key(day: date) -> str:
    return day.strftime(DATE_FORMAT_DATABASE)


def timesheet_path_default(data_dir: Path) -> Path:
    return Path(data_dir) / "today__timesheet.txt"


def timesheet_path_for_date(data_dir: Path, day: date) -> Path:
    return get_database_dir(data_dir) / f"{date_key(day)}__timesheet.txt"


def report_path_default(data_dir: Path) -> Path:
    return Path(data_dir) / "today__report.txt"


def report_path_for_date(data_dir: Path, day: date) -> Path:
    return get_database_dir(data_dir) / f"{date_key(day)}__report.txt"
