"""Application wiring: logic data, database, and a progress report."""

from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine

from .config import Config
from .engine.loader import load_world
from .engine.logic import LogicCalculation
from .engine.settings import Settings
from .engine.state import TrackerState
from .engine.world import World
from .logging import get_logger
from .storage import ProgressStore

logger = get_logger(__name__)


def _get_data_path(config: Config | None = None) -> Path | Traversable:
    """Locate the logic data via importlib.resources unless overridden."""
    if config is not None and config.data_dir is not None:
        return config.data_dir
    return resources.files("wwtracker.data")


def load_logic(config: Config | None = None) -> World:
    """Load and validate the static logic data."""
    world = load_world(_get_data_path(config))
    logger.info(
        "logic_loaded",
        locations=sum(1 for _ in world.iter_locations()),
        macros=len(world.macros),
        items=len(world.item_maximums),
        dungeons=len(world.dungeons),
    )
    return world


def create_database(config: Config):
    engine = create_engine(config.database_url)
    SQLModel.metadata.create_all(engine)
    logger.debug("database_setup_complete")
    return engine


def load_progress(
    db_session: Session, world: World, config: Config
) -> tuple[Settings, TrackerState]:
    """Saved progress for the configured profile, or a fresh start."""
    saved = ProgressStore(db_session, config.profile).load(world)
    if saved is not None:
        return saved

    settings = Settings()
    logger.info("new_tracker_started", profile=config.profile)
    return settings, TrackerState.starting(world, settings)


def report(world: World, settings: Settings, state: TrackerState) -> dict:
    """Per-area counts and guaranteed keys for the given progress."""
    logic = LogicCalculation(state, settings)
    areas = {}
    for area in world.locations:
        counts = logic.location_counts(area, only_progress_locations=True)
        areas[area] = {
            "color": counts.color.value,
            "available": counts.num_available,
            "remaining": counts.num_remaining,
        }
    return {"areas": areas, "guaranteed_keys": dict(logic.guaranteed_keys)}
