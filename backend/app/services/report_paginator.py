"""
Splits a timetable's slots into printable pages.

Each page repeats the full header so a single printed sheet still says which
watch, day and route it belongs to. Rendering the pages is somebody else's job.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

# Rows that fit on one A4 page
SLOTS_PER_PAGE = 30


@dataclass(frozen=True)
class ReportHeader:
    title: str
    for_date: date
    start_time: str
    start_location: Optional[str] = None
    destination: Optional[str] = None


@dataclass(frozen=True)
class ReportPage:
    header: ReportHeader
    rows: Tuple
    page_number: int  # 1-based
    page_count: int

    @property
    def footer(self) -> Optional[str]:
        if self.page_count <= 1:
            return None
        return f"Page {self.page_number} of {self.page_count}"


def header_for_timetable(timetable) -> ReportHeader:
    return ReportHeader(
        title=timetable.watch_title,
        for_date=timetable.for_date,
        start_time=timetable.start_time,
        start_location=timetable.start_location,
        destination=timetable.destination,
    )


def paginate_slots(
    slots: Sequence,
    header: ReportHeader,
    capacity: int = SLOTS_PER_PAGE,
) -> List[ReportPage]:
    """
    Page i holds slots[i*capacity:(i+1)*capacity]. An empty slot list still
    produces one page carrying the header, so an export is never blank.
    """
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValueError(f"capacity must be a positive integer, got {capacity!r}")

    chunks = [tuple(slots[i:i + capacity]) for i in range(0, len(slots), capacity)]
    if not chunks:
        chunks = [()]

    return [
        ReportPage(header=header, rows=chunk, page_number=index + 1, page_count=len(chunks))
        for index, chunk in enumerate(chunks)
    ]
