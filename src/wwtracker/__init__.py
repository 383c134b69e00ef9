"""Logic tracker for The Wind Waker randomizer."""

from sqlmodel import Session

from .app import create_database, load_logic, load_progress, report
from .config import Config
from .logging import bind_profile, configure_logging, get_logger

__all__ = ["main", "Config", "load_logic", "report"]


def main() -> None:
    """Entry point: load the saved profile and log what is reachable."""
    config = Config.from_env()

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        json_logs=config.json_logs,
    )
    bind_profile(config.profile, config.logic_version)

    logger = get_logger(__name__)
    logger.info("application_starting", log_level=config.log_level)

    world = load_logic(config)
    engine = create_database(config)
    with Session(engine) as db_session:
        settings, state = load_progress(db_session, world, config)

    summary = report(world, settings, state)
    for area, counts in summary["areas"].items():
        logger.info("area_progress", area=area, **counts)
    logger.info("guaranteed_keys", **summary["guaranteed_keys"])
