from fastapi import APIRouter
from backend.app.api.v1.endpoints import calendar, colors, trips, watch_timetables

api_router = APIRouter()
api_router.include_router(trips.router, tags=["trips"])
api_router.include_router(colors.router, tags=["colors"])
api_router.include_router(calendar.router, tags=["calendar"])
api_router.include_router(watch_timetables.router, tags=["watch-timetables"])
