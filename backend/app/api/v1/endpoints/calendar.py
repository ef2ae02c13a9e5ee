from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
from datetime import date
from zoneinfo import ZoneInfoNotFoundError

from backend.app.api.v1.errors import to_http_error
from backend.app.core.config import Settings
from backend.app.core.dependencies import (
    get_color_preference_repository,
    get_settings,
    get_trip_repository,
)
from backend.app.core.exceptions import SchedulingError
from backend.app.db.models import TripType
from backend.app.schemas.calendar import CalendarRead, DayMarkingRead, UrgencyRead
from backend.app.services.calendar_overlay import OverlayMode, resolve_day_markings
from backend.app.services.color_preferences import ColorPreferenceRepository, ColorPreferenceStore
from backend.app.services.trips import TripRepository
from backend.app.services.urgency import classify_deadline, local_today

router = APIRouter()

# --- Endpoints ---

@router.get("/vessels/{vessel_id}/calendar", response_model=CalendarRead)
async def get_calendar(
    vessel_id: str,
    mode: OverlayMode = OverlayMode.TYPE,
    types: Optional[List[TripType]] = Query(default=None),
    start: Optional[date] = None,
    end: Optional[date] = None,
    trips: TripRepository = Depends(get_trip_repository),
    color_repository: ColorPreferenceRepository = Depends(get_color_preference_repository),
):
    """Per-day calendar markings. Omitting `types` shows every trip type."""
    visible_types = types or list(TripType)
    store = ColorPreferenceStore(color_repository, vessel_id)

    try:
        if start or end:
            vessel_trips = await trips.list_in_range(vessel_id, start, end)
        else:
            vessel_trips = await trips.list_by_vessel(vessel_id)
        await store.refresh()
    except SchedulingError as e:
        raise to_http_error(e)

    markings = resolve_day_markings(vessel_trips, mode, store.snapshot(), visible_types)
    if start or end:
        markings = {
            day: m for day, m in markings.items()
            if (start is None or start <= day) and (end is None or day <= end)
        }

    return CalendarRead(
        vessel_id=vessel_id,
        mode=mode.value,
        markings=[
            DayMarkingRead(
                day=m.day,
                is_range_start=m.is_range_start,
                is_range_end=m.is_range_end,
                color=m.color,
                text_color=m.text_color,
            )
            for day, m in sorted(markings.items())
        ],
    )

@router.get("/urgency", response_model=UrgencyRead)
def get_urgency(
    deadline: Optional[date] = None,
    today: Optional[date] = None,
    tz: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """Classify a deadline against today in the vessel's timezone."""
    if today is None:
        try:
            today = local_today(tz or settings.DEFAULT_VESSEL_TIMEZONE)
        except (ZoneInfoNotFoundError, ValueError):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown timezone '{tz}'",
            )

    return UrgencyRead(
        deadline=deadline,
        today=today,
        due_soon_days=settings.DUE_SOON_DAYS,
        level=classify_deadline(deadline, today, settings.DUE_SOON_DAYS),
    )
