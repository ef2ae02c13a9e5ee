from fastapi import APIRouter, Depends, status
from typing import List

from backend.app.api.v1.errors import to_http_error
from backend.app.core.config import Settings
from backend.app.core.dependencies import get_settings, get_watch_timetable_repository
from backend.app.core.exceptions import SchedulingError
from backend.app.schemas.watch import (
    GenerateRotationRequest,
    GenerateRotationResponse,
    PublishTimetableRequest,
    ReportHeaderRead,
    ReportPageRead,
    UpdateTimetableRequest,
    WatchTimetableMetadata,
    WatchTimetableRead,
)
from backend.app.services.report_paginator import header_for_timetable, paginate_slots
from backend.app.services.watch_rotation import generate_watch_slots
from backend.app.services.watch_timetables import WatchTimetableRepository

router = APIRouter(
    responses={404: {"description": "Not found"}},
)

def _metadata(request: PublishTimetableRequest) -> WatchTimetableMetadata:
    return WatchTimetableMetadata(**request.model_dump(include=set(WatchTimetableMetadata.model_fields)))

# --- Endpoints ---

@router.get("/vessels/{vessel_id}/watch-timetables", response_model=List[WatchTimetableRead])
async def list_watch_timetables(
    vessel_id: str,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
):
    try:
        return await timetables.get_by_vessel(vessel_id)
    except SchedulingError as e:
        raise to_http_error(e)

@router.post(
    "/vessels/{vessel_id}/watch-timetables",
    response_model=WatchTimetableRead,
    status_code=status.HTTP_201_CREATED,
)
async def publish_watch_timetable(
    vessel_id: str,
    request: PublishTimetableRequest,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
):
    try:
        return await timetables.publish(vessel_id, _metadata(request), request.slots)
    except SchedulingError as e:
        raise to_http_error(e)

@router.post("/vessels/{vessel_id}/watch-timetables/generate", response_model=GenerateRotationResponse)
def generate_watch_rotation(vessel_id: str, request: GenerateRotationRequest):
    """Draft slots for review. Nothing is stored until the draft is published."""
    try:
        interval, slots = generate_watch_slots(
            request.crew,
            request.start_time,
            total_running_hours=request.total_running_hours,
            rest_hours=request.rest_hours,
            watch_interval_hours=request.watch_interval_hours,
        )
    except SchedulingError as e:
        raise to_http_error(e)
    return GenerateRotationResponse(watch_interval_hours=interval, slots=slots)

@router.get("/watch-timetables/{timetable_id}", response_model=WatchTimetableRead)
async def get_watch_timetable(
    timetable_id: int,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
):
    try:
        return await timetables.get_by_id(timetable_id)
    except SchedulingError as e:
        raise to_http_error(e)

@router.put("/watch-timetables/{timetable_id}", response_model=WatchTimetableRead)
async def update_watch_timetable(
    timetable_id: int,
    request: UpdateTimetableRequest,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
):
    try:
        return await timetables.update(
            timetable_id,
            _metadata(request),
            request.slots,
            expected_version=request.expected_version,
        )
    except SchedulingError as e:
        raise to_http_error(e)

@router.delete("/watch-timetables/{timetable_id}")
async def delete_watch_timetable(
    timetable_id: int,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
):
    try:
        await timetables.delete(timetable_id)
    except SchedulingError as e:
        raise to_http_error(e)
    return {"message": f"Deleted watch timetable {timetable_id}"}

@router.get("/watch-timetables/{timetable_id}/pages", response_model=List[ReportPageRead])
async def get_watch_timetable_pages(
    timetable_id: int,
    timetables: WatchTimetableRepository = Depends(get_watch_timetable_repository),
    settings: Settings = Depends(get_settings),
):
    """Printable pages for an external renderer: header repeated on every page."""
    try:
        timetable = await timetables.get_by_id(timetable_id)
    except SchedulingError as e:
        raise to_http_error(e)

    header = header_for_timetable(timetable)
    pages = paginate_slots(timetable.slots, header, capacity=settings.SLOTS_PER_PAGE)
    return [
        ReportPageRead(
            header=ReportHeaderRead(
                title=page.header.title,
                for_date=page.header.for_date,
                start_time=page.header.start_time,
                start_location=page.header.start_location,
                destination=page.header.destination,
            ),
            rows=list(page.rows),
            page_number=page.page_number,
            page_count=page.page_count,
            footer=page.footer,
        )
        for page in pages
    ]
