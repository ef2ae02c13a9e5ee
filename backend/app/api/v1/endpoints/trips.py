from fastapi import APIRouter, Depends, status
from typing import List, Optional
from datetime import date

from backend.app.api.v1.errors import to_http_error
from backend.app.core.dependencies import get_trip_repository
from backend.app.core.exceptions import SchedulingError
from backend.app.schemas.trips import TripInput, TripRead
from backend.app.services.trips import TripRepository

router = APIRouter(
    responses={404: {"description": "Not found"}},
)

# --- Endpoints ---

@router.get("/vessels/{vessel_id}/trips", response_model=List[TripRead])
async def list_trips(
    vessel_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    trips: TripRepository = Depends(get_trip_repository),
):
    try:
        if start or end:
            return await trips.list_in_range(vessel_id, start, end)
        return await trips.list_by_vessel(vessel_id)
    except SchedulingError as e:
        raise to_http_error(e)

@router.post("/vessels/{vessel_id}/trips", response_model=TripRead, status_code=status.HTTP_201_CREATED)
async def create_trip(
    vessel_id: str,
    request: TripInput,
    trips: TripRepository = Depends(get_trip_repository),
):
    try:
        return await trips.create(vessel_id, request)
    except SchedulingError as e:
        raise to_http_error(e)

@router.get("/trips/{trip_id}", response_model=TripRead)
async def get_trip(
    trip_id: int,
    trips: TripRepository = Depends(get_trip_repository),
):
    try:
        return await trips.get(trip_id)
    except SchedulingError as e:
        raise to_http_error(e)

@router.put("/trips/{trip_id}", response_model=TripRead)
async def update_trip(
    trip_id: int,
    request: TripInput,
    trips: TripRepository = Depends(get_trip_repository),
):
    try:
        return await trips.update(trip_id, request)
    except SchedulingError as e:
        raise to_http_error(e)

@router.delete("/trips/{trip_id}")
async def delete_trip(
    trip_id: int,
    trips: TripRepository = Depends(get_trip_repository),
):
    try:
        await trips.delete(trip_id)
    except SchedulingError as e:
        raise to_http_error(e)
    return {"message": f"Deleted trip {trip_id}"}
