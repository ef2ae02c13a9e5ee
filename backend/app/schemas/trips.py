from typing import Optional
from datetime import date, datetime
from pydantic import BaseModel, model_validator

from backend.app.db.models import TripType, Department

class TripInput(BaseModel):
    type: TripType
    title: str
    start_date: date
    end_date: date  # inclusive
    department: Optional[Department] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

class TripRead(BaseModel):
    id: int
    vessel_id: str
    type: TripType
    title: str
    start_date: date
    end_date: date
    department: Optional[Department] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
