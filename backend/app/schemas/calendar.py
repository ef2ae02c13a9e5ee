from typing import List, Optional
from datetime import date
from pydantic import BaseModel

from backend.app.services.urgency import UrgencyLevel

class DayMarkingRead(BaseModel):
    day: date
    is_range_start: bool
    is_range_end: bool
    color: str
    text_color: str

class CalendarRead(BaseModel):
    vessel_id: str
    mode: str
    markings: List[DayMarkingRead]

class UrgencyRead(BaseModel):
    deadline: Optional[date] = None
    today: date
    due_soon_days: int
    level: UrgencyLevel
