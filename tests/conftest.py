"""Shared test fixtures."""
import json
from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from p2g.config import Settings
# Import all models so SQLModel.metadata knows about them
from p2g.models.sync import SyncStatus  # noqa: F401

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine. Tables recreated fresh for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="test_session")
def test_session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="settings")
def settings_fixture(tmp_path) -> Settings:
    """Settings rooted in a temp dir, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        peloton_email="rider@example.com",
        peloton_password="hunter2",
        data_directory=tmp_path / "data",
        garmin_tokens_dir=tmp_path / "garmin_session",
    )


@pytest.fixture
def peloton_workout() -> dict:
    return json.loads((FIXTURES_DIR / "peloton_workout.json").read_text())


@pytest.fixture
def peloton_samples() -> dict:
    return json.loads((FIXTURES_DIR / "peloton_performance_graph.json").read_text())


@pytest.fixture
def downloaded_workout(settings, peloton_workout, peloton_samples) -> Path:
    """The fixture workout placed in the working directory, as the download stage leaves it."""
    settings.working_directory.mkdir(parents=True, exist_ok=True)
    path = settings.working_directory / f"{peloton_workout['id']}.json"
    path.write_text(json.dumps({"workout": peloton_workout, "workout_samples": peloton_samples}))
    return path
