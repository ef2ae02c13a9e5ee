"""
Calendar overlay: which color each calendar day shows for a set of trips.

Overlapping trips never blend. Trips are taken earliest start date first
(creation time breaks exact ties) and the first trip to cover a day keeps it.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Sequence

from backend.app.db.models import TripType
from backend.app.services.color_preferences import (
    NEUTRAL_COLOR,
    ColorDimension,
    ColorPreferences,
)

ON_COLOR_TEXT = "#FFFFFF"
ON_NEUTRAL_TEXT = "#0D0D0D"


class OverlayMode(str, Enum):
    TYPE = "type"
    DEPARTMENT = "department"


@dataclass(frozen=True)
class DayMarking:
    day: date
    is_range_start: bool
    is_range_end: bool
    color: str
    text_color: str

    def __post_init__(self):
        # datetime is a date subclass; a marking is for a calendar day only
        if not isinstance(self.day, date) or isinstance(self.day, datetime):
            raise ValueError(f"DayMarking needs a calendar date, got {self.day!r}")

    @classmethod
    def for_iso_day(cls, iso_day: str, **kwargs) -> "DayMarking":
        """Build from "YYYY-MM-DD"; malformed strings raise ValueError."""
        return cls(day=date.fromisoformat(iso_day), **kwargs)


_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(trip) -> datetime:
    created = getattr(trip, "created_at", None) or _EARLIEST
    # Naive creation times are UTC
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created


def overlay_order(trips: Iterable) -> List:
    """
    Trips in the order they claim days: start date, then creation time.
    Stable, so trips tied on both keep their input order.
    """
    return sorted(trips, key=lambda t: (t.start_date, _created_key(t)))


def trip_color(trip, mode: OverlayMode, preferences: ColorPreferences) -> str:
    if OverlayMode(mode) is OverlayMode.DEPARTMENT and trip.department:
        return preferences.color_for(ColorDimension.DEPARTMENT, trip.department)
    return preferences.color_for(ColorDimension.TRIP_TYPE, trip.type)


def resolve_day_markings(
    trips: Sequence,
    mode: OverlayMode,
    preferences: ColorPreferences,
    visible_types: Iterable[TripType],
) -> Dict[date, DayMarking]:
    """
    Map each covered calendar day to its marking.

    Trips whose type is not in `visible_types` are ignored completely: they
    neither claim nor block a day. A day no visible trip covers is absent
    from the result.
    """
    visible = {TripType(t) for t in visible_types}
    markings: Dict[date, DayMarking] = {}

    for trip in overlay_order(t for t in trips if TripType(t.type) in visible):
        color = trip_color(trip, mode, preferences)
        text_color = ON_NEUTRAL_TEXT if color == NEUTRAL_COLOR else ON_COLOR_TEXT

        day = trip.start_date
        while day <= trip.end_date:
            if day not in markings:
                markings[day] = DayMarking(
                    day=day,
                    is_range_start=day == trip.start_date,
                    is_range_end=day == trip.end_date,
                    color=color,
                    text_color=text_color,
                )
            day += timedelta(days=1)

    return markings
