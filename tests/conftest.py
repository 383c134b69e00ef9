"""Shared test fixtures for the tracker."""

from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

from wwtracker.app import load_logic
from wwtracker.config import Config
from wwtracker.engine.settings import Settings
from wwtracker.engine.state import TrackerState
from wwtracker.engine.world import World


@pytest.fixture(scope="session")
def world() -> World:
    return load_logic()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def state(world: World) -> TrackerState:
    return TrackerState.default(world)


@pytest.fixture
def db_engine(tmp_path: Path):
    db_url = f"sqlite:///{tmp_path}/test.db"
    engine = create_engine(db_url)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    return Config(database_url=f"sqlite:///{tmp_path}/test.db", profile="test")
