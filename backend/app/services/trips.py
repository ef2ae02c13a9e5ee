import logging
from datetime import date
from typing import List, Optional

from sqlmodel import Session, select

from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.db.models import Trip, utc_now
from backend.app.db.repository import SessionRepository
from backend.app.schemas.trips import TripInput, TripRead

logger = logging.getLogger(__name__)


def validate_trip(data: TripInput):
    if not data.title or not data.title.strip():
        raise ValidationError("Trip title is required", field="title")
    if data.start_date > data.end_date:
        raise ValidationError("Trip cannot end before it starts", field="end_date")


def _apply(row: Trip, data: TripInput):
    row.type = data.type
    row.title = data.title.strip()
    row.start_date = data.start_date
    row.end_date = data.end_date
    row.department = data.department
    row.notes = (data.notes or "").strip() or None


def _to_read(row: Trip) -> TripRead:
    return TripRead.model_validate(row, from_attributes=True)


class TripRepository(SessionRepository):
    """Trips feed the calendar overlay; reads come back ordered for it."""

    def _ordered(self, query):
        return query.order_by(Trip.start_date, Trip.created_at, Trip.id)

    async def list_by_vessel(self, vessel_id: str) -> List[TripRead]:
        def work(session: Session) -> List[TripRead]:
            rows = session.exec(self._ordered(select(Trip).where(Trip.vessel_id == vessel_id))).all()
            return [_to_read(row) for row in rows]

        return await self._run("Load trips", work)

    async def list_in_range(
        self, vessel_id: str, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[TripRead]:
        """Trips overlapping [start, end]. A missing bound leaves that side open."""
        if start and end and start > end:
            raise ValidationError("Range start must not be after range end", field="start")

        def work(session: Session) -> List[TripRead]:
            query = select(Trip).where(Trip.vessel_id == vessel_id)
            if end is not None:
                query = query.where(Trip.start_date <= end)
            if start is not None:
                query = query.where(Trip.end_date >= start)
            rows = session.exec(self._ordered(query)).all()
            return [_to_read(row) for row in rows]

        return await self._run("Load trips in range", work)

    async def get(self, trip_id: int) -> TripRead:
        def work(session: Session) -> TripRead:
            row = session.get(Trip, trip_id)
            if row is None:
                raise NotFoundError("Trip", trip_id)
            return _to_read(row)

        return await self._run("Load trip", work)

    async def create(self, vessel_id: str, data: TripInput) -> TripRead:
        validate_trip(data)

        def work(session: Session) -> TripRead:
            now = utc_now()
            row = Trip(vessel_id=vessel_id, created_by=data.created_by, created_at=now, updated_at=now)
            _apply(row, data)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_read(row)

        trip = await self._run("Create trip", work)
        logger.info("Created %s trip %s for vessel %s", trip.type.value, trip.id, vessel_id)
        return trip

    async def update(self, trip_id: int, data: TripInput) -> TripRead:
        """Full replace of the editable fields."""
        validate_trip(data)

        def work(session: Session) -> TripRead:
            row = session.get(Trip, trip_id)
            if row is None:
                raise NotFoundError("Trip", trip_id)
            _apply(row, data)
            row.updated_at = utc_now()
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_read(row)

        return await self._run("Update trip", work)

    async def delete(self, trip_id: int) -> None:
        def work(session: Session) -> None:
            row = session.get(Trip, trip_id)
            if row is None:
                raise NotFoundError("Trip", trip_id)
            session.delete(row)
            session.commit()

        await self._run("Delete trip", work)
        logger.info("Deleted trip %s", trip_id)
