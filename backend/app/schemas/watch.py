from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field

class TimetableSlot(BaseModel):
    crew_id: str
    crew_name: str
    crew_position: Optional[str] = None
    start_time_str: str  # "06:00"
    end_time_str: str    # "10:00"
    duration_hours: float

class WatchTimetableMetadata(BaseModel):
    watch_title: str
    for_date: date
    start_time: str  # "06:00"
    start_location: Optional[str] = None
    destination: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None

class PublishTimetableRequest(WatchTimetableMetadata):
    slots: List[TimetableSlot]

class UpdateTimetableRequest(PublishTimetableRequest):
    # When set, the update is rejected unless the stored version still matches
    expected_version: Optional[int] = None

class WatchTimetableRead(WatchTimetableMetadata):
    id: int
    vessel_id: str
    slots: List[TimetableSlot]
    created_at: datetime
    updated_at: datetime
    version: int

# --- Draft generation ---

class CrewMember(BaseModel):
    id: str
    name: str
    position: Optional[str] = None

class GenerateRotationRequest(BaseModel):
    crew: List[CrewMember]
    start_time: str = "06:00"
    total_running_hours: float = Field(default=36, gt=0)
    rest_hours: float = Field(default=8, ge=0)
    watch_interval_hours: Optional[float] = Field(default=None, gt=0)

class GenerateRotationResponse(BaseModel):
    watch_interval_hours: float
    slots: List[TimetableSlot]

# --- Printable pages ---

class ReportHeaderRead(BaseModel):
    title: str
    for_date: date
    start_time: str
    start_location: Optional[str] = None
    destination: Optional[str] = None

class ReportPageRead(BaseModel):
    header: ReportHeaderRead
    rows: List[TimetableSlot]
    page_number: int
    page_count: int
    footer: Optional[str] = None
