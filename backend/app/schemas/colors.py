from typing import Dict, Optional
from pydantic import BaseModel

class ColorPreferencesRead(BaseModel):
    """
    Stored overrides plus the colors the calendar will actually use.

    In `trip_types` / `departments` a missing key is unset and `"none"` is the
    explicit no-color choice.
    """
    vessel_id: str
    trip_types: Dict[str, str]
    departments: Dict[str, str]
    effective_trip_types: Dict[str, str]
    effective_departments: Dict[str, str]

class SetColorRequest(BaseModel):
    # A "#RRGGBB" color, "none" for explicitly no color, or null to clear
    color: Optional[str] = None
