"""Command-line interface for the day tracker."""

from __future__ import annotations

import logging
from functools import wraps
from pathlib import Path
from typing import Callable, Optional

import typer

from .config import TrackerSettings, load_activity_names
from .errors import InvalidActivityName, TrackerError
from .models import (
    ACTIVITY_NAME_BREAK,
    ACTIVITY_NAME_LEAVE,
    ACTIVITY_NAME_NON_SPECIFIC_WORK,
    validate_activity_name,
)
from .paths import get_data_dir, get_log_path
from .reporting import SummaryPrinter
from .storage import TimesheetStore

logger = logging.getLogger(__name__)

app = typer.Typer(help="Day-based activity and working time tracker.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

DEFAULT_TARGET_HOURS = 8.0


def _fail_on_tracker_error(command: Callable) -> Callable:
    @wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except TrackerError as exc:
            logger.debug("Command failed.", exc_info=True)
            typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
            raise typer.Exit(code=1) from exc

    return wrapper


def _open_store(data_dir: Optional[Path], target_hours: float) -> TimesheetStore:
    settings = TrackerSettings.from_options(target_hours=target_hours)
    return TimesheetStore(get_data_dir(data_dir), work_target=settings.work_target_duration)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


@app.command()
@_fail_on_tracker_error
def track(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
    target_hours: float = typer.Option(
        DEFAULT_TARGET_HOURS,
        "--target-hours",
        min=0.0,
        max=24.0,
        help="Daily working time target in hours.",
    ),
    poll_seconds: float = typer.Option(
        1.0,
        "--poll-interval",
        min=0.1,
        help="Seconds to wait for a key press before refreshing the screen.",
    ),
    flush_minutes: float = typer.Option(
        1.0,
        "--flush-interval",
        min=0.1,
        help="Minutes between periodic rewrites of the timesheet and report.",
    ),
) -> None:
    """Run the interactive tracker until you quit with 'q'."""
    from .session import TrackerSession

    directory = get_data_dir(data_dir)
    _log_to_file(get_log_path(directory))
    settings = TrackerSettings.from_options(
        target_hours=target_hours, poll_seconds=poll_seconds, flush_minutes=flush_minutes
    )
    store = TimesheetStore(directory, work_target=settings.work_target_duration)
    session = TrackerSession(store, load_activity_names(directory), settings)
    session.run_forever()


@app.command()
@_fail_on_tracker_error
def start(
    name: str = typer.Argument(
        ACTIVITY_NAME_NON_SPECIFIC_WORK, help="Activity to begin now."
    ),
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
) -> None:
    """Begin an activity now (non-specific work by default)."""
    if name in (ACTIVITY_NAME_LEAVE, ACTIVITY_NAME_BREAK):
        raise typer.BadParameter("use the 'leave' command to go on leave", param_hint="NAME")
    try:
        validate_activity_name(name)
    except InvalidActivityName as exc:
        raise typer.BadParameter(str(exc), param_hint="NAME") from exc
    store = _open_store(data_dir, DEFAULT_TARGET_HOURS)
    entry = store.load_or_create()
    if entry.start_activity(name):
        store.write_back(entry)
        typer.echo(f"Started '{name}' at {entry.now()}.")
    else:
        typer.echo(f"'{name}' is already in progress.")


@app.command()
@_fail_on_tracker_error
def leave(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
) -> None:
    """Check out now; the time counts as a break once you come back."""
    store = _open_store(data_dir, DEFAULT_TARGET_HOURS)
    entry = store.load_or_create()
    if entry.leave():
        store.write_back(entry)
        typer.echo(f"Left at {entry.now()}.")
    else:
        typer.echo("You are already away.")


@app.command()
@_fail_on_tracker_error
def status(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
    target_hours: float = typer.Option(
        DEFAULT_TARGET_HOURS,
        "--target-hours",
        min=0.0,
        max=24.0,
        help="Daily working time target in hours.",
    ),
) -> None:
    """Print the duration summary for today."""
    SummaryPrinter(_open_store(data_dir, target_hours)).print_daily_summary()


@app.command()
@_fail_on_tracker_error
def report(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
    target_hours: float = typer.Option(
        DEFAULT_TARGET_HOURS,
        "--target-hours",
        min=0.0,
        max=24.0,
        help="Daily working time target in hours.",
    ),
) -> None:
    """Print today's full report."""
    SummaryPrinter(_open_store(data_dir, target_hours)).print_report()


@app.command()
@_fail_on_tracker_error
def activities(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        path_type=Path,
        help="Directory holding timesheets, reports and the activity list.",
    ),
) -> None:
    """List the configured activities and their keys."""
    names = load_activity_names(get_data_dir(data_dir))
    if not names:
        typer.echo("No activities configured.")
        return
    for index, name in enumerate(names, start=1):
        typer.echo(f"[{index}] {name}")


def _log_to_file(path: Path) -> None:
    """Send log records to ``path`` so they do not disturb the screen."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
