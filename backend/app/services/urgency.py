"""
Deadline urgency.

Works on calendar dates only. "Today" is the vessel's local date, so a
classification never changes during the day because of the time of day.
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

# Deadlines from today up to this many days ahead are DUE_SOON
DEFAULT_DUE_SOON_DAYS = 3


class UrgencyLevel(str, Enum):
    NONE = "NONE"
    ON_TRACK = "ON_TRACK"
    DUE_SOON = "DUE_SOON"
    OVERDUE = "OVERDUE"


def local_today(timezone_name: str, now: Optional[datetime] = None) -> date:
    """The current calendar date in `timezone_name` (e.g. "Europe/Monaco")."""
    tz = ZoneInfo(timezone_name)
    if now is None:
        return datetime.now(tz).date()
    return now.astimezone(tz).date()


def _calendar_date(value, name: str) -> date:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise TypeError(f"{name} must be a calendar date, not {type(value).__name__}")
    return value


def classify_deadline(
    deadline: Optional[date],
    today: date,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> UrgencyLevel:
    if due_soon_days < 0:
        raise ValueError("due_soon_days must not be negative")
    today = _calendar_date(today, "today")
    if deadline is None:
        return UrgencyLevel.NONE
    deadline = _calendar_date(deadline, "deadline")

    if deadline < today:
        return UrgencyLevel.OVERDUE
    if deadline <= today + timedelta(days=due_soon_days):
        return UrgencyLevel.DUE_SOON
    return UrgencyLevel.ON_TRACK
