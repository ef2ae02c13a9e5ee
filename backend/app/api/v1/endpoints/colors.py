from fastapi import APIRouter, Depends

from backend.app.api.v1.errors import to_http_error
from backend.app.core.dependencies import get_color_preference_repository
from backend.app.core.exceptions import SchedulingError
from backend.app.schemas.colors import ColorPreferencesRead, SetColorRequest
from backend.app.services.color_preferences import (
    ColorDimension,
    ColorPreferenceRepository,
    ColorPreferences,
    ColorPreferenceStore,
    format_color_value,
)

router = APIRouter()

def _to_read(prefs: ColorPreferences) -> ColorPreferencesRead:
    return ColorPreferencesRead(
        vessel_id=prefs.vessel_id,
        trip_types={k: format_color_value(v) for k, v in prefs.trip_types.items()},
        departments={k: format_color_value(v) for k, v in prefs.departments.items()},
        effective_trip_types=prefs.effective(ColorDimension.TRIP_TYPE),
        effective_departments=prefs.effective(ColorDimension.DEPARTMENT),
    )

# --- Endpoints ---

@router.get("/vessels/{vessel_id}/colors", response_model=ColorPreferencesRead)
async def get_colors(
    vessel_id: str,
    repository: ColorPreferenceRepository = Depends(get_color_preference_repository),
):
    store = ColorPreferenceStore(repository, vessel_id)
    try:
        await store.refresh()
    except SchedulingError as e:
        raise to_http_error(e)
    return _to_read(store.snapshot())

@router.put("/vessels/{vessel_id}/colors/{dimension}/{key}", response_model=ColorPreferencesRead)
async def set_color(
    vessel_id: str,
    dimension: ColorDimension,
    key: str,
    request: SetColorRequest,
    repository: ColorPreferenceRepository = Depends(get_color_preference_repository),
):
    """Set one key to a color, to "none" (explicitly no color), or null (back to default)."""
    store = ColorPreferenceStore(repository, vessel_id)
    try:
        prefs = await store.set_color(dimension, key, request.color)
    except SchedulingError as e:
        raise to_http_error(e)
    return _to_read(prefs)
