from functools import lru_cache
from fastapi import Depends
from sqlalchemy.engine import Engine
from .config import Settings
from backend.app.db.session import get_engine
from backend.app.services.color_preferences import ColorPreferenceRepository
from backend.app.services.trips import TripRepository
from backend.app.services.watch_timetables import WatchTimetableRepository

@lru_cache()
def get_settings():
    return Settings()

def get_trip_repository(engine: Engine = Depends(get_engine)) -> TripRepository:
    return TripRepository(engine)

def get_color_preference_repository(engine: Engine = Depends(get_engine)) -> ColorPreferenceRepository:
    return ColorPreferenceRepository(engine)

def get_watch_timetable_repository(engine: Engine = Depends(get_engine)) -> WatchTimetableRepository:
    return WatchTimetableRepository(engine)
