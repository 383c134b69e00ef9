"""Immutable logic data for the randomizer.

Loaded once from the package's JSON data files at startup and shared by every
tracker state and logic calculation.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from .requirements import Requirement


@dataclass(frozen=True)
class Location:
    """A check: where it is, what it needs, and what it vanilla-holds."""

    area: str
    detail: str
    need: Requirement
    reward: str | None = None
    types: tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return location_name(self.area, self.detail)


@dataclass(frozen=True)
class Dungeon:
    """A dungeon whose small and big keys stay inside it."""

    name: str
    abbreviation: str

    @property
    def small_key(self) -> str:
        return f"{self.abbreviation} Small Key"

    @property
    def big_key(self) -> str:
        return f"{self.abbreviation} Big Key"


@dataclass(frozen=True)
class Entrance:
    """A randomizable exit and the entrance that leads to it in vanilla."""

    exit: str
    entrance: str
    kind: str  # "dungeon" or "secret cave"


@dataclass(frozen=True)
class Chart:
    """The vanilla chart that reveals an island's sunken treasure."""

    island: str
    number: int
    chart: str
    chart_type: str  # "Treasure Chart" or "Triforce Chart"


@dataclass(frozen=True)
class World:
    """The complete logic data set."""

    item_maximums: dict[str, int] = field(default_factory=dict)
    starting_gear: tuple[str, ...] = ()
    locations: dict[str, dict[str, Location]] = field(default_factory=dict)
    macros: dict[str, Requirement] = field(default_factory=dict)
    dungeons: tuple[Dungeon, ...] = ()
    entrances: dict[str, Entrance] = field(default_factory=dict)
    charts: dict[str, Chart] = field(default_factory=dict)

    def location(self, area: str, detail: str) -> Location:
        """Look up a location; raises KeyError for unknown names."""
        try:
            return self.locations[area][detail]
        except KeyError:
            raise KeyError(location_name(area, detail)) from None

    def has_location(self, area: str, detail: str) -> bool:
        return detail in self.locations.get(area, {})

    def iter_locations(self) -> Iterator[Location]:
        for details in self.locations.values():
            yield from details.values()

    def dungeon_for_area(self, area: str) -> Dungeon | None:
        for dungeon in self.dungeons:
            if dungeon.name == area:
                return dungeon
        return None

    def max_count(self, item_name: str) -> int | None:
        return self.item_maximums.get(item_name)

    def with_locations(self, locations: dict[str, dict[str, dict]]) -> "World":
        """Return a copy whose location table is built from raw `need` strings."""
        from .loader import build_locations

        return World(
            item_maximums=self.item_maximums,
            starting_gear=self.starting_gear,
            locations=build_locations(locations, self.macros),
            macros=self.macros,
            dungeons=self.dungeons,
            entrances=self.entrances,
            charts=self.charts,
        )


def location_name(area: str, detail: str) -> str:
    """Canonical "<area> - <detail>" name used in requirements and saves."""
    return f"{area} - {detail}"
