import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlmodel.pool import StaticPool

from backend.main import app
from backend.app.db.session import get_engine
from backend.app.services.color_preferences import ColorPreferenceRepository
from backend.app.services.trips import TripRepository
from backend.app.services.watch_timetables import WatchTimetableRepository


@pytest.fixture(name="engine")
def engine_fixture():
    # In-memory SQLite shared across worker threads
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()

@pytest.fixture(name="client")
def client_fixture(engine):
    def get_engine_override():
        return engine

    app.dependency_overrides[get_engine] = get_engine_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()

@pytest.fixture(name="trip_repository")
def trip_repository_fixture(engine):
    return TripRepository(engine)

@pytest.fixture(name="color_repository")
def color_repository_fixture(engine):
    return ColorPreferenceRepository(engine)

@pytest.fixture(name="timetable_repository")
def timetable_repository_fixture(engine):
    return WatchTimetableRepository(engine)


@pytest.fixture(name="file_engine")
def file_engine_fixture(tmp_path):
    # One connection per thread, so concurrent writers really contend for the file
    engine = create_engine(
        f"sqlite:///{tmp_path / 'scheduling.db'}",
        connect_args={"check_same_thread": False},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()
