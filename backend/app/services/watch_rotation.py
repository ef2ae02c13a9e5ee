"""
Draft watch rotation.

Builds the slot list for a watch timetable before it is published. Nothing here
touches the store: the caller reviews the draft and then publishes it through
WatchTimetableRepository.
"""
import math
from datetime import datetime, time
from typing import List, Optional, Sequence, Tuple

from backend.app.core.exceptions import ValidationError
from backend.app.schemas.watch import CrewMember, TimetableSlot

DEFAULT_TOTAL_RUNNING_HOURS = 36
DEFAULT_REST_HOURS = 8


# Helper to parse a single time string with various formats
def parse_single_time_string(t_str: Optional[str]) -> Optional[time]:
    if not t_str:
        return None

    t_str = t_str.strip().lower().replace("midnight", "12:00 am").replace("noon", "12:00 pm")
    formats = [
        "%I:%M %p",  # 07:00 am
        "%I:%M%p",   # 07:00am
        "%H:%M",     # 19:00
        "%I %p",     # 7 pm
        "%I%p",      # 7pm
    ]

    for fmt in formats:
        try:
            return datetime.strptime(t_str, fmt).time()
        except ValueError:
            continue
    return None


def format_clock(hours_from_start: float, start: time) -> str:
    """Wall-clock "HH:MM" for a point `hours_from_start` after `start`."""
    minutes = start.hour * 60 + start.minute + round(hours_from_start * 60)
    return f"{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def default_watch_interval(crew_count: int, total_running_hours: float, rest_hours: float) -> float:
    # A lone watchkeeper stands the whole passage
    if crew_count <= 1:
        return total_running_hours
    return max(1, math.ceil(rest_hours / (crew_count - 1)))


def generate_watch_slots(
    crew: Sequence[CrewMember],
    start_time: str,
    total_running_hours: float = DEFAULT_TOTAL_RUNNING_HOURS,
    rest_hours: float = DEFAULT_REST_HOURS,
    watch_interval_hours: Optional[float] = None,
) -> Tuple[float, List[TimetableSlot]]:
    """
    Rotate `crew` through watches covering `total_running_hours`.

    The next crew member in rotation who has finished their rest takes the
    next watch. If nobody has, the one who is free soonest takes it and the
    watch starts when they become free. The final watch is cut short at the
    end of the running time.

    Returns the watch interval used and the slots in order.
    """
    if total_running_hours <= 0:
        raise ValidationError("Total running time must be positive", field="total_running_hours")
    if rest_hours < 0:
        raise ValidationError("Hours of rest must not be negative", field="rest_hours")
    if watch_interval_hours is not None and watch_interval_hours <= 0:
        raise ValidationError("Watch interval must be positive", field="watch_interval_hours")

    start = parse_single_time_string(start_time)
    if start is None:
        raise ValidationError(f"Could not read start time '{start_time}'", field="start_time")

    if watch_interval_hours is None:
        watch_interval_hours = default_watch_interval(len(crew), total_running_hours, rest_hours)

    slots: List[TimetableSlot] = []
    if not crew:
        return watch_interval_hours, slots

    available_at = [0.0] * len(crew)
    current = 0.0
    next_index = 0

    while current < total_running_hours:
        assigned = None
        for offset in range(len(crew)):
            idx = (next_index + offset) % len(crew)
            if available_at[idx] <= current:
                assigned = idx
                break

        if assigned is None:
            assigned = min(range(len(crew)), key=lambda i: available_at[i])
            current = available_at[assigned]
            if current >= total_running_hours:
                break
        next_index = (assigned + 1) % len(crew)

        shift_end = min(current + watch_interval_hours, total_running_hours)
        member = crew[assigned]
        slots.append(TimetableSlot(
            crew_id=member.id,
            crew_name=member.name,
            crew_position=member.position,
            start_time_str=format_clock(current, start),
            end_time_str=format_clock(shift_end, start),
            duration_hours=round(shift_end - current, 2),
        ))
        available_at[assigned] = shift_end + rest_hours
        current = shift_end

    return watch_interval_hours, slots
