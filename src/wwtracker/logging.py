"""Structured logging for the tracker."""

import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def join_location_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Collapse area and detail fields into one "<area> - <detail>" field."""
    if "area" in event_dict and "detail" in event_dict:
        area = event_dict.pop("area")
        detail = event_dict.pop("detail")
        event_dict["location"] = f"{area} - {detail}"
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_logs: bool = False,
) -> None:
    """Route structlog output to stdout or a file, as text or JSON lines."""
    stream = open(log_file, "a") if log_file else sys.stdout

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        join_location_processor,
        structlog.processors.TimeStamper(fmt="iso" if json_logs else "%H:%M:%S"),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            LEVELS.get(log_level.upper(), LEVELS["INFO"])
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def bind_profile(profile: str, logic_version: str) -> None:
    """Tag every following log line with the active save profile."""
    structlog.contextvars.bind_contextvars(profile=profile, logic_version=logic_version)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
