import pytest
from datetime import date, datetime, timedelta, timezone

from backend.app.services.urgency import (
    DEFAULT_DUE_SOON_DAYS,
    UrgencyLevel,
    classify_deadline,
    local_today,
)

TODAY = date(2025, 3, 10)


class TestClassifyDeadline:

    def test_no_deadline(self):
        assert classify_deadline(None, TODAY) == UrgencyLevel.NONE

    def test_yesterday_is_overdue(self):
        assert classify_deadline(TODAY - timedelta(days=1), TODAY) == UrgencyLevel.OVERDUE

    def test_today_is_due_soon(self):
        assert classify_deadline(TODAY, TODAY) == UrgencyLevel.DUE_SOON

    def test_window_edges(self):
        last_due_soon = TODAY + timedelta(days=DEFAULT_DUE_SOON_DAYS)
        assert classify_deadline(last_due_soon, TODAY) == UrgencyLevel.DUE_SOON
        assert classify_deadline(last_due_soon + timedelta(days=1), TODAY) == UrgencyLevel.ON_TRACK

    def test_custom_window(self):
        deadline = TODAY + timedelta(days=7)
        assert classify_deadline(deadline, TODAY, due_soon_days=7) == UrgencyLevel.DUE_SOON
        assert classify_deadline(deadline, TODAY, due_soon_days=6) == UrgencyLevel.ON_TRACK

    def test_zero_window_only_today_is_due_soon(self):
        assert classify_deadline(TODAY, TODAY, due_soon_days=0) == UrgencyLevel.DUE_SOON
        assert classify_deadline(TODAY + timedelta(days=1), TODAY, due_soon_days=0) == UrgencyLevel.ON_TRACK

    def test_rejects_instants(self):
        with pytest.raises(TypeError):
            classify_deadline(datetime(2025, 3, 12, 8, 0), TODAY)
        with pytest.raises(TypeError):
            classify_deadline(date(2025, 3, 12), datetime(2025, 3, 10, 23, 59))

    def test_rejects_negative_window(self):
        with pytest.raises(ValueError):
            classify_deadline(TODAY, TODAY, due_soon_days=-1)


class TestLocalToday:

    def test_uses_vessel_calendar_date(self):
        # 23:30 UTC on the 10th is already the 11th in Sydney and still the 10th in New York
        instant = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)

        assert local_today("UTC", now=instant) == date(2025, 3, 10)
        assert local_today("Australia/Sydney", now=instant) == date(2025, 3, 11)
        assert local_today("America/New_York", now=instant) == date(2025, 3, 10)

    def test_same_local_day_gives_same_level(self):
        deadline = date(2025, 3, 10)
        morning = datetime(2025, 3, 10, 0, 5, tzinfo=timezone.utc)
        night = datetime(2025, 3, 10, 23, 55, tzinfo=timezone.utc)

        assert classify_deadline(deadline, local_today("UTC", now=morning)) == \
            classify_deadline(deadline, local_today("UTC", now=night))


def test_urgency_api(client):
    resp = client.get("/api/v1/urgency", params={"deadline": "2025-03-09", "today": "2025-03-10"})
    assert resp.status_code == 200
    assert resp.json()["level"] == "OVERDUE"

    resp = client.get("/api/v1/urgency", params={"today": "2025-03-10"})
    assert resp.json()["level"] == "NONE"

    resp = client.get("/api/v1/urgency", params={"deadline": "2025-03-09", "tz": "Not/AZone"})
    assert resp.status_code == 422
