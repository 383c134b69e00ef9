"""Immutable per-player tracker state.

Holds only strings, ints and bools keyed by name, with no World references,
so a state is cheap to copy and safe to hand to any number of logic
calculations. Every mutator returns a new TrackerState.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from .settings import Settings, SwordMode
from .world import World, location_name

SWORD = "Progressive Sword"
TRIFORCE_SHARD = "Triforce Shard"


class TrackerStateError(ValueError):
    """A mutation would break an invariant of the state."""


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class TrackerState:
    """Items, checked locations and entrance assignments for one seed."""

    world: World = field(repr=False, compare=False)
    # item name -> count; absent means 0
    items: Mapping[str, int] = field(default_factory=dict)
    # (area, detail) pairs the player has checked
    checked: frozenset[tuple[str, str]] = frozenset()
    # randomized exit -> entrance that leads to it
    entrances: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "items", _frozen(self.items))
        object.__setattr__(self, "entrances", _frozen(self.entrances))
        object.__setattr__(self, "checked", frozenset(self.checked))

    @classmethod
    def default(cls, world: World) -> "TrackerState":
        """An empty inventory with nothing checked."""
        return cls(world=world)

    @classmethod
    def starting(cls, world: World, settings: Settings) -> "TrackerState":
        """The inventory a seed starts with.

        startingGear is a bitfield over world.starting_gear; the sword mode
        and the number of starting triforce shards add to it.
        """
        items: dict[str, int] = {}
        for bit, name in enumerate(world.starting_gear):
            if settings.starting_gear & (1 << bit):
                items[name] = min(items.get(name, 0) + 1, world.max_count(name))

        if settings.sword_mode == SwordMode.START_WITH_SWORD:
            items[SWORD] = max(items.get(SWORD, 0), 1)
        elif settings.sword_mode == SwordMode.SWORDLESS:
            items.pop(SWORD, None)

        if settings.num_starting_triforce_shards:
            items[TRIFORCE_SHARD] = settings.num_starting_triforce_shards

        return cls(world=world, items=items)

    def get_item_value(self, item_name: str) -> int:
        return self.items.get(item_name, 0)

    def set_item_value(self, item_name: str, value: int) -> "TrackerState":
        maximum = self.world.max_count(item_name)
        if maximum is None:
            raise TrackerStateError(f"Unknown item {item_name!r}")
        if not 0 <= value <= maximum:
            raise TrackerStateError(
                f"{item_name!r} count must be between 0 and {maximum}, got {value}"
            )
        items = dict(self.items)
        if value:
            items[item_name] = value
        else:
            items.pop(item_name, None)
        return replace(self, items=items)

    def increment_item(self, item_name: str) -> "TrackerState":
        """Add one, wrapping back to 0 past the maximum."""
        maximum = self.world.max_count(item_name)
        if maximum is None:
            raise TrackerStateError(f"Unknown item {item_name!r}")
        value = self.get_item_value(item_name) + 1
        return self.set_item_value(item_name, 0 if value > maximum else value)

    def decrement_item(self, item_name: str) -> "TrackerState":
        """Remove one, wrapping to the maximum below 0."""
        maximum = self.world.max_count(item_name)
        if maximum is None:
            raise TrackerStateError(f"Unknown item {item_name!r}")
        value = self.get_item_value(item_name) - 1
        return self.set_item_value(item_name, maximum if value < 0 else value)

    def is_location_checked(self, area: str, detail: str) -> bool:
        return (area, detail) in self.checked

    def set_location_checked(
        self, area: str, detail: str, is_checked: bool
    ) -> "TrackerState":
        if not self.world.has_location(area, detail):
            raise TrackerStateError(f"Unknown location {location_name(area, detail)!r}")
        if is_checked:
            checked = self.checked | {(area, detail)}
        else:
            checked = self.checked - {(area, detail)}
        return replace(self, checked=checked)

    def toggle_location_checked(self, area: str, detail: str) -> "TrackerState":
        return self.set_location_checked(
            area, detail, not self.is_location_checked(area, detail)
        )

    def get_entrance_for_exit(self, exit_name: str) -> str | None:
        return self.entrances.get(exit_name)

    def set_entrance_for_exit(
        self, exit_name: str, entrance_name: str | None
    ) -> "TrackerState":
        """Record which entrance leads to an exit; None or "" clears it."""
        if exit_name not in self.world.entrances:
            raise TrackerStateError(f"Unknown exit {exit_name!r}")
        entrances = dict(self.entrances)
        if entrance_name:
            known = {e.entrance for e in self.world.entrances.values()}
            if entrance_name not in known:
                raise TrackerStateError(f"Unknown entrance {entrance_name!r}")
            entrances[exit_name] = entrance_name
        else:
            entrances.pop(exit_name, None)
        return replace(self, entrances=entrances)
