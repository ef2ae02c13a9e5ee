import asyncio
import threading

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, select

from backend.app.core.exceptions import PersistenceError, ValidationError
from backend.app.db.models import Department, TripType, VesselColorPreference
from backend.app.services import color_preferences
from backend.app.services.color_preferences import (
    DEFAULT_COLORS,
    NEUTRAL_COLOR,
    NO_COLOR,
    ColorDimension,
    ColorPreferenceRepository,
    ColorPreferences,
    ColorPreferenceStore,
    get_effective_color,
)
from backend.tests.factories import VESSEL_ID


class TestGetEffectiveColor:

    def test_no_color_and_unset_are_distinct(self):
        overrides = {"ENGINEERING": NO_COLOR}
        defaults = DEFAULT_COLORS[ColorDimension.DEPARTMENT]

        engineering = get_effective_color(ColorDimension.DEPARTMENT, Department.ENGINEERING, overrides, defaults)
        bridge = get_effective_color(ColorDimension.DEPARTMENT, Department.BRIDGE, overrides, defaults)

        assert engineering == NEUTRAL_COLOR
        assert bridge == defaults["BRIDGE"]

    def test_absent_key_uses_dimension_defaults(self):
        assert get_effective_color(ColorDimension.TRIP_TYPE, TripType.GUEST, {}) == "#10B981"
        assert get_effective_color(ColorDimension.DEPARTMENT, "GALLEY", {}) == "#10B981"

    def test_override_wins_over_default(self):
        color = get_effective_color(ColorDimension.TRIP_TYPE, "BOSS", {"BOSS": "#EC4899"})
        assert color == "#EC4899"

    def test_explicit_defaults_are_used(self):
        color = get_effective_color(ColorDimension.TRIP_TYPE, "BOSS", {}, {"BOSS": "#000000"})
        assert color == "#000000"

    def test_keys_match_case_insensitively(self):
        assert get_effective_color(ColorDimension.DEPARTMENT, "bridge", {}) == "#3B82F6"
        assert get_effective_color(ColorDimension.TRIP_TYPE, "boss", {"BOSS": NO_COLOR}) == NEUTRAL_COLOR

    def test_unknown_key_is_rejected(self):
        with pytest.raises(ValidationError):
            get_effective_color(ColorDimension.TRIP_TYPE, "CHARTER", {})

    def test_snapshot_effective_map_covers_every_key(self):
        prefs = ColorPreferences(vessel_id=VESSEL_ID, departments={"INTERIOR": NO_COLOR})

        effective = prefs.effective(ColorDimension.DEPARTMENT)

        assert set(effective) == {d.value for d in Department}
        assert effective["INTERIOR"] == NEUTRAL_COLOR


class TestColorPreferenceRepository:

    @pytest.mark.asyncio
    async def test_unconfigured_vessel_has_no_overrides(self, color_repository):
        prefs = await color_repository.get(VESSEL_ID)

        assert prefs.trip_types == {}
        assert prefs.departments == {}

    @pytest.mark.asyncio
    async def test_no_color_survives_a_round_trip(self, color_repository, engine):
        await color_repository.set_color(VESSEL_ID, ColorDimension.DEPARTMENT, "ENGINEERING", NO_COLOR)

        prefs = await color_repository.get(VESSEL_ID)

        assert prefs.departments["ENGINEERING"] is NO_COLOR
        assert "BRIDGE" not in prefs.departments
        assert prefs.color_for(ColorDimension.DEPARTMENT, "ENGINEERING") == NEUTRAL_COLOR
        assert prefs.color_for(ColorDimension.DEPARTMENT, "BRIDGE") == "#3B82F6"

        # Stored as a value of its own, not as NULL
        with Session(engine) as session:
            row = session.exec(
                select(VesselColorPreference).where(VesselColorPreference.vessel_id == VESSEL_ID)
            ).one()
            assert row.engineering_color == "none"
            assert row.bridge_color is None

    @pytest.mark.asyncio
    async def test_single_key_upserts_keep_other_keys(self, color_repository):
        await color_repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "GUEST", "#ec4899")
        prefs = await color_repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "BOSS", "#6366F1")

        assert prefs.trip_types == {"GUEST": "#EC4899", "BOSS": "#6366F1"}

    @pytest.mark.asyncio
    async def test_clearing_returns_key_to_default(self, color_repository):
        await color_repository.set_color(VESSEL_ID, ColorDimension.DEPARTMENT, "GALLEY", NO_COLOR)
        prefs = await color_repository.set_color(VESSEL_ID, ColorDimension.DEPARTMENT, "GALLEY", None)

        assert "GALLEY" not in prefs.departments
        assert prefs.color_for(ColorDimension.DEPARTMENT, "GALLEY") == "#10B981"

    @pytest.mark.asyncio
    async def test_vessels_are_isolated(self, color_repository):
        await color_repository.set_color("vessel-a", ColorDimension.TRIP_TYPE, "GUEST", "#111111")

        other = await color_repository.get("vessel-b")

        assert other.trip_types == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("dimension, key, value", [
        (ColorDimension.TRIP_TYPE, "GUEST", "green"),
        (ColorDimension.TRIP_TYPE, "GUEST", "#12345"),
        (ColorDimension.TRIP_TYPE, "CHARTER", "#123456"),
        ("weather", "GUEST", "#123456"),
    ])
    async def test_rejects_bad_input_before_writing(self, color_repository, dimension, key, value):
        with pytest.raises(ValidationError):
            await color_repository.set_color(VESSEL_ID, dimension, key, value)

        assert (await color_repository.get(VESSEL_ID)).trip_types == {}


class TestConcurrentFirstWrites:

    @pytest.mark.asyncio
    async def test_racing_first_writes_both_land(self, file_engine, monkeypatch):
        repository = ColorPreferenceRepository(file_engine)

        # Both writers see no row for the vessel before either inserts one
        both_loaded = threading.Barrier(2, timeout=10)
        load_row = color_preferences._load_row

        def load_then_wait_if_missing(session, vessel_id):
            row = load_row(session, vessel_id)
            if row is None:
                both_loaded.wait()
            return row

        monkeypatch.setattr(color_preferences, "_load_row", load_then_wait_if_missing)

        await asyncio.gather(
            repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "GUEST", "#111111"),
            repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "BOSS", "#222222"),
        )
        monkeypatch.undo()

        prefs = await repository.get(VESSEL_ID)
        assert prefs.trip_types == {"GUEST": "#111111", "BOSS": "#222222"}
        with Session(file_engine) as session:
            assert len(session.exec(select(VesselColorPreference)).all()) == 1


class FailingRepository:
    async def get(self, vessel_id):
        raise PersistenceError("Load color preferences")

    async def set_color(self, vessel_id, dimension, key, value):
        raise PersistenceError("Save color preference")


class TestColorPreferenceStore:

    def test_snapshot_requires_refresh(self, color_repository):
        store = ColorPreferenceStore(color_repository, VESSEL_ID)

        assert store.loaded is False
        with pytest.raises(RuntimeError):
            store.snapshot()

    @pytest.mark.asyncio
    async def test_refresh_loads_current_state(self, color_repository):
        await color_repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "DELIVERY", "#F97316")
        store = ColorPreferenceStore(color_repository, VESSEL_ID)

        await store.refresh()

        assert store.loaded is True
        assert store.snapshot().trip_types == {"DELIVERY": "#F97316"}

    @pytest.mark.asyncio
    async def test_set_color_updates_cache_after_write(self, color_repository):
        store = ColorPreferenceStore(color_repository, VESSEL_ID)
        await store.refresh()

        await store.set_color(ColorDimension.DEPARTMENT, "EXTERIOR", NO_COLOR)

        assert store.snapshot().departments == {"EXTERIOR": NO_COLOR}
        assert (await color_repository.get(VESSEL_ID)).departments == {"EXTERIOR": NO_COLOR}

    @pytest.mark.asyncio
    async def test_failed_write_leaves_cache_untouched(self, color_repository):
        await color_repository.set_color(VESSEL_ID, ColorDimension.TRIP_TYPE, "GUEST", "#111111")
        store = ColorPreferenceStore(color_repository, VESSEL_ID)
        await store.refresh()
        before = store.snapshot()

        store.repository = FailingRepository()
        with pytest.raises(PersistenceError):
            await store.set_color(ColorDimension.TRIP_TYPE, "GUEST", "#222222")

        assert store.snapshot() is before
        assert store.snapshot().trip_types == {"GUEST": "#111111"}


def test_colors_api(client: TestClient):
    resp = client.put(
        f"/api/v1/vessels/{VESSEL_ID}/colors/department/ENGINEERING",
        json={"color": "none"},
    )
    assert resp.status_code == 200, resp.text

    resp = client.get(f"/api/v1/vessels/{VESSEL_ID}/colors")
    assert resp.status_code == 200
    data = resp.json()
    assert data["departments"] == {"ENGINEERING": "none"}
    assert data["effective_departments"]["ENGINEERING"] == NEUTRAL_COLOR
    assert data["effective_departments"]["BRIDGE"] == "#3B82F6"
    assert data["trip_types"] == {}

    resp = client.put(
        f"/api/v1/vessels/{VESSEL_ID}/colors/trip_type/GUEST",
        json={"color": "not-a-color"},
    )
    assert resp.status_code == 422
