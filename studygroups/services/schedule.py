"""
Schedule window parsing.

A group's schedule is stored as text, e.g. "2025-01-01 - 2025-01-31".
The window starts at midnight of the first date and runs through the
last moment of the second date.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

from studygroups.exceptions import MalformedScheduleError
from studygroups.models import ScheduleWindow

SCHEDULE_DELIMITER = " - "
SCHEDULE_DATE_FORMAT = "%Y-%m-%d"
SESSION_DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def _parse_date(token: str, schedule: str) -> date:
    try:
        return datetime.strptime(token.strip(), SCHEDULE_DATE_FORMAT).date()
    except ValueError:
        raise MalformedScheduleError(schedule, f"{token.strip()!r} is not a YYYY-MM-DD date")


def parse_schedule_window(schedule: Optional[str]) -> ScheduleWindow:
    """
    Parse a group schedule string into an inclusive window.

    Args:
        schedule: Two YYYY-MM-DD dates joined by " - "

    Returns:
        ScheduleWindow from start-of-day to end-of-day

    Raises:
        MalformedScheduleError: If the string does not hold exactly two
            parseable dates, or the start date is after the end date
    """
    if not schedule or not schedule.strip():
        raise MalformedScheduleError(schedule, "schedule is empty")

    tokens = schedule.split(SCHEDULE_DELIMITER)
    if len(tokens) != 2:
        raise MalformedScheduleError(
            schedule, f"expected two dates separated by {SCHEDULE_DELIMITER!r}"
        )

    start_date = _parse_date(tokens[0], schedule)
    end_date = _parse_date(tokens[1], schedule)

    if start_date > end_date:
        raise MalformedScheduleError(schedule, "start date is after end date")

    return ScheduleWindow(
        start=datetime.combine(start_date, time.min),
        end=datetime.combine(end_date, time.max),
    )


def format_schedule_window(start_date: date, end_date: date) -> str:
    """Build the canonical schedule string for two dates."""
    return (
        f"{start_date.strftime(SCHEDULE_DATE_FORMAT)}"
        f"{SCHEDULE_DELIMITER}"
        f"{end_date.strftime(SCHEDULE_DATE_FORMAT)}"
    )


def parse_session_datetime(text: str) -> datetime:
    """
    Parse a session date-time.

    Accepts "YYYY-MM-DD HH:MM" or any ISO-8601 date-time.

    Raises:
        ValueError: If the text matches neither form
    """
    value = text.strip()
    try:
        return datetime.strptime(value, SESSION_DATETIME_FORMAT)
    except ValueError:
        pass
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def to_wall_clock(moment: datetime) -> datetime:
    """Naive UTC wall-clock for aware values; naive values pass through."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)
