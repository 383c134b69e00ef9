"""Configuration for the Wind Waker logic tracker."""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass
class Config:
    """Application configuration."""

    database_url: str = "sqlite:///./wwtracker.db"
    profile: str = "default"
    logic_version: str = "1.0.0"
    data_dir: Path | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        data_dir = os.getenv("WWTRACKER_DATA_DIR")
        log_file = os.getenv("WWTRACKER_LOG_FILE")

        return cls(
            database_url=os.getenv("WWTRACKER_DATABASE_URL", cls.database_url),
            profile=os.getenv("WWTRACKER_PROFILE", cls.profile),
            logic_version=os.getenv("WWTRACKER_LOGIC_VERSION", cls.logic_version),
            data_dir=Path(data_dir) if data_dir else None,
            log_level=os.getenv("WWTRACKER_LOG_LEVEL", cls.log_level),
            log_file=Path(log_file) if log_file else None,
            json_logs=os.getenv("WWTRACKER_JSON_LOGS", "").lower()
            in ("true", "1", "yes"),
        )
