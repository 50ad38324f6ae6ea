"""Exceptions raised by the day tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every error the tracker reports to the user."""


class InvalidTimeStamp(TrackerError, ValueError):
    """Hours or minutes are outside of a single day."""


class MalformedTimestamp(TrackerError, ValueError):
    """Text is not a zero-padded ``HH:MM`` timestamp."""


class MalformedStampEvent(TrackerError, ValueError):
    """A timesheet line is neither a ``Begin`` nor a ``Leave`` event."""


class MalformedTimesheet(TrackerError, ValueError):
    """A timesheet file does not have the expected overall shape."""


class OutOfOrderStampEvent(TrackerError):
    """Stamp events are not in strictly increasing time order."""


class DuplicateActivity(TrackerError):
    """The same activity was begun twice in a row."""


class DuplicateLeave(TrackerError):
    """A leave event follows another leave event."""


class DayRolloverError(TrackerError):
    """A day entry was mutated after its calendar day ended."""


class StorageError(TrackerError):
    """A file could not be read, written or created."""


class ConfigError(TrackerError):
    """The activity names file contains an invalid entry."""


class InvalidActivityName(TrackerError, ValueError):
    """An activity name cannot be stored as a single timesheet entry."""
