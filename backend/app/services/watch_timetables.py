"""
Watch timetable publication lifecycle.

DRAFT (caller only) -> PUBLISHED -> EDITED (same id, full replace) -> DELETED.

A timetable's metadata and its slot rows are always written in one commit, so
no reader sees metadata without its slots or the other way round. Updates
replace everything and keep no history. Without `expected_version` two
editors racing on one id are last-write-wins and the slower edit is lost;
passing the version read earlier turns that into a ConflictError.
"""
import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import update
from sqlmodel import Session, select

from backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from backend.app.db.models import WatchTimetable, WatchTimetableSlot, utc_now
from backend.app.db.repository import SessionRepository
from backend.app.schemas.watch import TimetableSlot, WatchTimetableMetadata, WatchTimetableRead

logger = logging.getLogger(__name__)


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text.strip() or None


def validate_timetable(metadata: WatchTimetableMetadata, slots: Sequence[TimetableSlot]):
    if not metadata.watch_title or not metadata.watch_title.strip():
        raise ValidationError("Watch title is required", field="watch_title")
    if not metadata.start_time or not metadata.start_time.strip():
        raise ValidationError("Start time is required", field="start_time")
    for index, slot in enumerate(slots):
        if not slot.crew_id or not slot.crew_name.strip():
            raise ValidationError(f"Slot {index + 1} has no crew member", field="slots")
        if slot.duration_hours < 0:
            raise ValidationError(f"Slot {index + 1} has a negative duration", field="slots")


def _apply_metadata(row: WatchTimetable, metadata: WatchTimetableMetadata):
    row.watch_title = metadata.watch_title.strip()
    row.for_date = metadata.for_date
    row.start_time = metadata.start_time.strip()
    row.start_location = _clean(metadata.start_location)
    row.destination = _clean(metadata.destination)
    row.notes = _clean(metadata.notes)


def _slot_rows(slots: Sequence[TimetableSlot]) -> List[WatchTimetableSlot]:
    return [
        WatchTimetableSlot(
            position=position,
            crew_id=slot.crew_id,
            crew_name=slot.crew_name.strip(),
            crew_position=_clean(slot.crew_position),
            start_time_str=slot.start_time_str,
            end_time_str=slot.end_time_str,
            duration_hours=slot.duration_hours,
        )
        for position, slot in enumerate(slots)
    ]


def _claim_version(session: Session, timetable_id: int, version: int) -> bool:
    """Move the stored version from `version` to `version + 1` in one statement."""
    table = WatchTimetable.__table__
    result = session.connection().execute(
        update(table)
        .where(table.c.id == timetable_id)
        .where(table.c.version == version)
        .values(version=version + 1)
    )
    return result.rowcount == 1


def _stored_version(session: Session, timetable_id: int) -> Optional[int]:
    table = WatchTimetable.__table__
    return session.connection().execute(
        select(table.c.version).where(table.c.id == timetable_id)
    ).scalar()


def _to_read(row: WatchTimetable) -> WatchTimetableRead:
    return WatchTimetableRead(
        id=row.id,
        vessel_id=row.vessel_id,
        watch_title=row.watch_title,
        for_date=row.for_date,
        start_time=row.start_time,
        start_location=row.start_location,
        destination=row.destination,
        notes=row.notes,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
        slots=[
            TimetableSlot(
                crew_id=s.crew_id,
                crew_name=s.crew_name,
                crew_position=s.crew_position,
                start_time_str=s.start_time_str,
                end_time_str=s.end_time_str,
                duration_hours=s.duration_hours,
            )
            for s in row.slots
        ],
    )


class WatchTimetableRepository(SessionRepository):

    async def publish(
        self,
        vessel_id: str,
        metadata: WatchTimetableMetadata,
        slots: Sequence[TimetableSlot],
    ) -> WatchTimetableRead:
        validate_timetable(metadata, slots)

        def work(session: Session) -> WatchTimetableRead:
            now = utc_now()
            row = WatchTimetable(
                vessel_id=vessel_id,
                created_by=metadata.created_by,
                created_at=now,
                updated_at=now,
            )
            _apply_metadata(row, metadata)
            row.slots = _slot_rows(slots)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_read(row)

        published = await self._run("Publish watch timetable", work)
        logger.info(
            "Published watch timetable %s for vessel %s on %s (%d slots)",
            published.id, vessel_id, published.for_date, len(published.slots),
        )
        return published

    async def update(
        self,
        timetable_id: int,
        metadata: WatchTimetableMetadata,
        slots: Sequence[TimetableSlot],
        expected_version: Optional[int] = None,
    ) -> WatchTimetableRead:
        """Replace metadata and the whole slot list. Nothing of the old version survives."""
        validate_timetable(metadata, slots)

        def work(session: Session) -> WatchTimetableRead:
            row = session.get(WatchTimetable, timetable_id)
            if row is None:
                raise NotFoundError("Watch timetable", timetable_id)
            if expected_version is not None:
                if row.version != expected_version:
                    raise ConflictError("Watch timetable", timetable_id, expected_version, row.version)
                # Another editor may have saved since the read above
                if not _claim_version(session, timetable_id, expected_version):
                    current = _stored_version(session, timetable_id)
                    if current is None:
                        raise NotFoundError("Watch timetable", timetable_id)
                    raise ConflictError("Watch timetable", timetable_id, expected_version, current)
                row.version = expected_version + 1
            else:
                row.version += 1

            _apply_metadata(row, metadata)
            # Assigning a new collection orphans, and so deletes, every old slot row
            row.slots = _slot_rows(slots)
            row.updated_at = utc_now()
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_read(row)

        updated = await self._run("Update watch timetable", work)
        logger.info(
            "Replaced watch timetable %s (version %d, %d slots)",
            timetable_id, updated.version, len(updated.slots),
        )
        return updated

    async def delete(self, timetable_id: int) -> None:
        def work(session: Session) -> None:
            row = session.get(WatchTimetable, timetable_id)
            if row is None:
                raise NotFoundError("Watch timetable", timetable_id)
            session.delete(row)
            session.commit()

        await self._run("Delete watch timetable", work)
        logger.info("Deleted watch timetable %s", timetable_id)

    async def get_by_id(self, timetable_id: int) -> WatchTimetableRead:
        def work(session: Session) -> WatchTimetableRead:
            row = session.get(WatchTimetable, timetable_id)
            if row is None:
                raise NotFoundError("Watch timetable", timetable_id)
            return _to_read(row)

        return await self._run("Load watch timetable", work)

    async def get_by_vessel(self, vessel_id: str) -> List[WatchTimetableRead]:
        """All timetables of a vessel, latest date first."""
        def work(session: Session) -> List[WatchTimetableRead]:
            rows = session.exec(
                select(WatchTimetable)
                .where(WatchTimetable.vessel_id == vessel_id)
                .order_by(WatchTimetable.for_date.desc(), WatchTimetable.id.desc())
            ).all()
            return [_to_read(row) for row in rows]

        return await self._run("Load watch timetables", work)

    async def get_by_vessel_in_range(
        self, vessel_id: str, start: date, end: date
    ) -> List[WatchTimetableRead]:
        """Timetables dated within [start, end], earliest first."""
        if start > end:
            raise ValidationError("Range start must not be after range end", field="start")

        def work(session: Session) -> List[WatchTimetableRead]:
            rows = session.exec(
                select(WatchTimetable)
                .where(WatchTimetable.vessel_id == vessel_id)
                .where(WatchTimetable.for_date >= start)
                .where(WatchTimetable.for_date <= end)
                .order_by(WatchTimetable.for_date, WatchTimetable.id)
            ).all()
            return [_to_read(row) for row in rows]

        return await self._run("Load watch timetables in range", work)
