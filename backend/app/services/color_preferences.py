"""
Per-vessel color preferences for trip types and departments.

Every key is in one of three states:

- unset: the vessel never configured it, the system default applies
- a color: "#RRGGBB"
- NO_COLOR: the vessel explicitly chose no distinguishing color

Unset and NO_COLOR are different values everywhere: in the database row
(NULL vs "none"), in `ColorPreferences` (absent key vs `NO_COLOR`) and in the
API (missing key vs "none").
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from backend.app.core.exceptions import ValidationError
from backend.app.db.models import Department, TripType, VesselColorPreference, utc_now
from backend.app.db.repository import SessionRepository

logger = logging.getLogger(__name__)


class _NoColor(Enum):
    NO_COLOR = "none"

    def __repr__(self):
        return "NO_COLOR"


NO_COLOR = _NoColor.NO_COLOR

ColorValue = Union[str, _NoColor]

# How NO_COLOR renders on a calendar day
NEUTRAL_COLOR = "#D1D5DB"


class ColorDimension(str, Enum):
    TRIP_TYPE = "trip_type"
    DEPARTMENT = "department"


DEFAULT_COLORS: Dict[ColorDimension, Dict[str, str]] = {
    ColorDimension.TRIP_TYPE: {
        TripType.GUEST.value: "#10B981",
        TripType.BOSS.value: "#3B82F6",
        TripType.DELIVERY.value: "#F59E0B",
        TripType.YARD_PERIOD.value: "#0D9488",
    },
    ColorDimension.DEPARTMENT: {
        Department.BRIDGE.value: "#3B82F6",
        Department.ENGINEERING.value: "#EF4444",
        Department.EXTERIOR.value: "#0EA5E9",
        Department.INTERIOR.value: "#8B5CF6",
        Department.GALLEY.value: "#10B981",
    },
}

# Key -> column on VesselColorPreference
_COLUMNS: Dict[ColorDimension, Dict[str, str]] = {
    ColorDimension.TRIP_TYPE: {
        TripType.GUEST.value: "guest_color",
        TripType.BOSS.value: "boss_color",
        TripType.DELIVERY.value: "delivery_color",
        TripType.YARD_PERIOD.value: "yard_period_color",
    },
    ColorDimension.DEPARTMENT: {
        Department.BRIDGE.value: "bridge_color",
        Department.ENGINEERING.value: "engineering_color",
        Department.EXTERIOR.value: "exterior_color",
        Department.INTERIOR.value: "interior_color",
        Department.GALLEY.value: "galley_color",
    },
}

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def get_effective_color(
    dimension: ColorDimension,
    key: str,
    overrides: Mapping[str, ColorValue],
    defaults: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Return the color to render for `key`.

    An entry in `overrides` always wins, including an explicit NO_COLOR, which
    renders as NEUTRAL_COLOR. Only a key absent from `overrides` falls back to
    `defaults` (the system defaults of `dimension` when not given). Keys are
    matched case-insensitively; a key `defaults` does not know is rejected.
    """
    key = _key_value(key).upper()
    if key in overrides:
        value = overrides[key]
        return NEUTRAL_COLOR if value is NO_COLOR else value
    if defaults is None:
        defaults = DEFAULT_COLORS[ColorDimension(dimension)]
    if key not in defaults:
        raise ValidationError(f"Unknown {ColorDimension(dimension).value} key '{key}'", field="key")
    return defaults[key]


@dataclass(frozen=True)
class ColorPreferences:
    """Snapshot of one vessel's overrides. Absent keys are unset."""
    vessel_id: str
    trip_types: Dict[str, ColorValue] = field(default_factory=dict)
    departments: Dict[str, ColorValue] = field(default_factory=dict)

    def overrides_for(self, dimension: ColorDimension) -> Dict[str, ColorValue]:
        if ColorDimension(dimension) is ColorDimension.TRIP_TYPE:
            return self.trip_types
        return self.departments

    def color_for(self, dimension: ColorDimension, key: str) -> str:
        return get_effective_color(dimension, key, self.overrides_for(dimension))

    def effective(self, dimension: ColorDimension) -> Dict[str, str]:
        return {
            key: self.color_for(dimension, key)
            for key in DEFAULT_COLORS[ColorDimension(dimension)]
        }


def _key_value(key) -> str:
    return key.value if isinstance(key, Enum) else str(key)


def parse_color_value(raw: Optional[str]) -> Optional[ColorValue]:
    """Turn API/stored text into a color, NO_COLOR or None (unset)."""
    if raw is None:
        return None
    if isinstance(raw, _NoColor):
        return raw
    text = raw.strip()
    if text.lower() == NO_COLOR.value:
        return NO_COLOR
    if not _HEX_COLOR.match(text):
        raise ValidationError(f"'{raw}' is not a #RRGGBB color or 'none'", field="color")
    return text.upper()


def format_color_value(value: ColorValue) -> str:
    return NO_COLOR.value if value is NO_COLOR else value


def _column_for(dimension, key) -> str:
    try:
        dimension = ColorDimension(dimension)
    except ValueError:
        raise ValidationError(f"Unknown color dimension '{dimension}'", field="dimension")
    column = _COLUMNS[dimension].get(_key_value(key).upper())
    if column is None:
        raise ValidationError(f"Unknown {dimension.value} key '{_key_value(key)}'", field="key")
    return column


def _row_to_preferences(vessel_id: str, row: Optional[VesselColorPreference]) -> ColorPreferences:
    prefs = ColorPreferences(vessel_id=vessel_id)
    if row is None:
        return prefs
    for dimension, columns in _COLUMNS.items():
        target = prefs.overrides_for(dimension)
        for key, column in columns.items():
            stored = getattr(row, column)
            if stored is not None:
                target[key] = parse_color_value(stored)
    return prefs


def _load_row(session: Session, vessel_id: str) -> Optional[VesselColorPreference]:
    return session.exec(
        select(VesselColorPreference).where(VesselColorPreference.vessel_id == vessel_id)
    ).first()


def _write_key(session: Session, row: VesselColorPreference, column: str, stored: Optional[str]):
    setattr(row, column, stored)
    row.updated_at = utc_now()
    session.add(row)
    session.commit()


class ColorPreferenceRepository(SessionRepository):
    """One VesselColorPreference row per vessel, written one key at a time."""

    async def get(self, vessel_id: str) -> ColorPreferences:
        def work(session: Session) -> ColorPreferences:
            row = _load_row(session, vessel_id)
            return _row_to_preferences(vessel_id, row)

        return await self._run("Load color preferences", work)

    async def set_color(
        self,
        vessel_id: str,
        dimension: ColorDimension,
        key: str,
        value: Optional[ColorValue],
    ) -> ColorPreferences:
        """
        Upsert a single key. `value` is a color, NO_COLOR, or None to return the
        key to the system default.
        """
        column = _column_for(dimension, key)
        value = parse_color_value(value)
        stored = None if value is None else format_color_value(value)

        def work(session: Session) -> ColorPreferences:
            row = _load_row(session, vessel_id)
            if row is not None:
                _write_key(session, row, column, stored)
            else:
                try:
                    _write_key(session, VesselColorPreference(vessel_id=vessel_id), column, stored)
                except IntegrityError:
                    # Another writer created the vessel row first; update that one
                    session.rollback()
                    row = _load_row(session, vessel_id)
                    _write_key(session, row, column, stored)
            return _row_to_preferences(vessel_id, _load_row(session, vessel_id))

        prefs = await self._run("Save color preference", work)
        logger.info("Vessel %s: %s set to %s", vessel_id, column, stored or "default")
        return prefs


class ColorPreferenceStore:
    """
    Cached preferences for one vessel.

    Nothing is loaded implicitly: call `refresh()` before `snapshot()`. The
    cache only changes after the repository confirms a write.
    """

    def __init__(self, repository: ColorPreferenceRepository, vessel_id: str):
        self.repository = repository
        self.vessel_id = vessel_id
        self.loaded = False
        self._preferences: Optional[ColorPreferences] = None

    async def refresh(self) -> ColorPreferences:
        self._preferences = await self.repository.get(self.vessel_id)
        self.loaded = True
        return self._preferences

    def snapshot(self) -> ColorPreferences:
        if not self.loaded:
            raise RuntimeError(
                f"Color preferences for vessel {self.vessel_id} are not loaded; call refresh() first"
            )
        return self._preferences

    async def set_color(
        self,
        dimension: ColorDimension,
        key: str,
        value: Optional[ColorValue],
    ) -> ColorPreferences:
        self._preferences = await self.repository.set_color(self.vessel_id, dimension, key, value)
        self.loaded = True
        return self._preferences
