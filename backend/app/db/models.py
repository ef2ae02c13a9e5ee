from typing import Optional, List
from datetime import date, datetime, timezone
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

# --- Enumerations ---

class TripType(str, Enum):
    GUEST = "GUEST"
    BOSS = "BOSS"
    DELIVERY = "DELIVERY"
    YARD_PERIOD = "YARD_PERIOD"

class Department(str, Enum):
    BRIDGE = "BRIDGE"
    ENGINEERING = "ENGINEERING"
    EXTERIOR = "EXTERIOR"
    INTERIOR = "INTERIOR"
    GALLEY = "GALLEY"

# --- Calendar ---

class Trip(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    vessel_id: str = Field(index=True)
    type: TripType = Field(index=True)
    title: str
    start_date: date = Field(index=True)
    end_date: date  # inclusive
    department: Optional[Department] = None  # colors the trip in department mode
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

class VesselColorPreference(SQLModel, table=True):
    """
    One row per vessel, one column per tracked key.

    NULL means "use the system default"; the stored value "none" means the
    key was explicitly set to no color.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    vessel_id: str = Field(unique=True, index=True)

    # Trip types
    guest_color: Optional[str] = None
    boss_color: Optional[str] = None
    delivery_color: Optional[str] = None
    yard_period_color: Optional[str] = None

    # Departments
    bridge_color: Optional[str] = None
    engineering_color: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    galley_color: Optional[str] = None

    updated_at: datetime = Field(default_factory=utc_now)

# --- Watch Keeping ---

class WatchTimetable(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    vessel_id: str = Field(index=True)
    watch_title: str
    for_date: date = Field(index=True)
    start_time: str  # "06:00"
    start_location: Optional[str] = None
    destination: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = 1

    slots: List["WatchTimetableSlot"] = Relationship(
        back_populates="timetable",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "WatchTimetableSlot.position",
        },
    )

class WatchTimetableSlot(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    timetable_id: int = Field(foreign_key="watchtimetable.id", index=True)
    position: int  # order within the timetable, 0-based

    crew_id: str
    crew_name: str
    crew_position: Optional[str] = None
    start_time_str: str
    end_time_str: str
    duration_hours: float

    timetable: WatchTimetable = Relationship(back_populates="slots")
