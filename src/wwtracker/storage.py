"""Saved progress as flat key-value pairs, and the database store for them.

Layout of one save:

    <item name>              "3"            one per item
    <area> - <detail>        "true"         one per location
    <exit name>              entrance name  one per randomizable exit
    <option key>             "false"        one per option
    flags                    comma-joined progress-location types
    version                  logic version the save was made with
"""

import datetime as dt
from collections.abc import Mapping

from sqlmodel import Session, select

from .engine.settings import Settings, SettingsError
from .engine.state import TrackerState, TrackerStateError
from .engine.world import World
from .logging import get_logger
from .models import ProgressEntry

logger = get_logger(__name__)

FLAGS_KEY = "flags"
VERSION_KEY = "version"


class ProgressDecodeError(ValueError):
    """A saved value could not be turned back into settings or state."""


def snapshot_entries(
    settings: Settings, state: TrackerState, version: str
) -> dict[str, str]:
    """Flatten settings and state into string key-value pairs."""
    world = state.world
    entries: dict[str, str] = {}

    for item_name in world.item_maximums:
        entries[item_name] = str(state.get_item_value(item_name))

    for location in world.iter_locations():
        is_checked = state.is_location_checked(location.area, location.detail)
        entries[location.full_name] = "true" if is_checked else "false"

    for exit_name in world.entrances:
        entries[exit_name] = state.get_entrance_for_exit(exit_name) or ""

    entries.update(settings.to_strings())
    entries[FLAGS_KEY] = ",".join(sorted(settings.flags))
    entries[VERSION_KEY] = version
    return entries


def _decode_flags(raw: str | None) -> frozenset[str] | None:
    if raw is None:
        return None
    return frozenset(flag for flag in raw.split(",") if flag)


def restore_from_entries(
    world: World, entries: Mapping[str, str]
) -> tuple[Settings, TrackerState]:
    """Rebuild settings and state; missing entries keep their starting values."""
    try:
        settings = Settings.from_strings(entries, _decode_flags(entries.get(FLAGS_KEY)))
    except SettingsError as exc:
        raise ProgressDecodeError(str(exc)) from exc

    state = TrackerState.starting(world, settings)
    try:
        for item_name in world.item_maximums:
            raw = entries.get(item_name)
            if raw is None:
                continue
            try:
                value = int(raw)
            except ValueError:
                raise ProgressDecodeError(
                    f"{item_name}: expected an integer, got {raw!r}"
                ) from None
            state = state.set_item_value(item_name, value)

        for location in world.iter_locations():
            raw = entries.get(location.full_name)
            if raw is None:
                continue
            if raw not in ("true", "false"):
                raise ProgressDecodeError(
                    f"{location.full_name}: expected true/false, got {raw!r}"
                )
            state = state.set_location_checked(location.area, location.detail, raw == "true")

        for exit_name in world.entrances:
            entrance_name = entries.get(exit_name)
            if entrance_name:
                state = state.set_entrance_for_exit(exit_name, entrance_name)
    except TrackerStateError as exc:
        raise ProgressDecodeError(str(exc)) from exc

    return settings, state


class ProgressStore:
    """Reads and writes one profile's saved progress."""

    def __init__(self, db_session: Session, profile: str):
        self.db_session = db_session
        self.profile = profile

    def _rows(self) -> list[ProgressEntry]:
        statement = select(ProgressEntry).where(ProgressEntry.profile == self.profile)
        return list(self.db_session.exec(statement).all())

    def entries(self) -> dict[str, str]:
        return {row.key: row.value for row in self._rows()}

    def load(self, world: World) -> tuple[Settings, TrackerState] | None:
        """Saved settings and state, or None when nothing was saved."""
        entries = self.entries()
        if not entries:
            logger.info("no_saved_progress", profile=self.profile)
            return None

        settings, state = restore_from_entries(world, entries)
        logger.debug(
            "progress_loaded",
            profile=self.profile,
            version=entries.get(VERSION_KEY),
            checked=len(state.checked),
        )
        return settings, state

    def save(self, settings: Settings, state: TrackerState, version: str) -> None:
        """Write every entry, replacing the values saved before."""
        now = dt.datetime.now(dt.UTC)
        existing = {row.key: row for row in self._rows()}

        for key, value in snapshot_entries(settings, state, version).items():
            row = existing.get(key)
            if row is None:
                self.db_session.add(
                    ProgressEntry(profile=self.profile, key=key, value=value, updated_at=now)
                )
            elif row.value != value:
                row.value = value
                row.updated_at = now

        self.db_session.commit()
        logger.debug(
            "progress_saved",
            profile=self.profile,
            version=version,
            checked=len(state.checked),
        )

    def reset(self) -> None:
        """Delete the profile's saved progress."""
        for row in self._rows():
            self.db_session.delete(row)
        self.db_session.commit()
        logger.info("progress_reset", profile=self.profile)
