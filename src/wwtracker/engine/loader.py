"""Load the logic JSON data files into a World object.

The data directory holds one file per table:

    items.json           item maximums and the starting-gear bit order
    dungeons.json        dungeons with dungeon-local keys
    macros.json          macro name -> requirement string
    item-locations.json  area -> detail -> {need, reward?, types?}
    entrances.json       randomizable exits and their vanilla entrances
    charts.json          island -> vanilla sunken-treasure chart

Every requirement string is parsed here, once. Data problems are reported as
LogicDataError before any evaluation happens.
"""

import json
from collections.abc import Iterator
from importlib.resources.abc import Traversable
from pathlib import Path

from .requirements import (
    And,
    HasAccessedOtherLocation,
    Item,
    Or,
    Requirement,
    RequirementParseError,
    parse_requirement,
)
from .world import Chart, Dungeon, Entrance, Location, World


class LogicDataError(ValueError):
    """The static logic data is inconsistent or malformed."""


def _read_json(data_path: Path | Traversable, name: str):
    return json.loads(data_path.joinpath(name).read_text(encoding="utf-8"))


def _parse(text: str, macro_names, context: str) -> Requirement:
    try:
        return parse_requirement(text, macro_names)
    except RequirementParseError as exc:
        raise LogicDataError(f"{context}: {exc}") from exc


def _parse_items(raw: dict) -> tuple[dict[str, int], tuple[str, ...]]:
    maximums = {}
    for name, maximum in raw["items"].items():
        if not isinstance(maximum, int) or maximum < 1:
            raise LogicDataError(f"Item {name!r} has invalid maximum {maximum!r}")
        maximums[name] = maximum

    starting_gear = tuple(raw.get("startingGear", []))
    for name in starting_gear:
        if name not in maximums:
            raise LogicDataError(f"Starting gear {name!r} is not a known item")
    return maximums, starting_gear


def _parse_macros(raw: dict[str, str]) -> dict[str, Requirement]:
    names = frozenset(raw)
    return {
        name: _parse(text, names, f"Macro {name!r}") for name, text in raw.items()
    }


def build_locations(
    raw: dict[str, dict[str, dict]], macro_names
) -> dict[str, dict[str, Location]]:
    """Parse an area -> detail -> {need, reward, types} mapping."""
    names = frozenset(macro_names)
    locations: dict[str, dict[str, Location]] = {}
    for area, details in raw.items():
        locations[area] = {}
        for detail, entry in details.items():
            if "need" not in entry:
                raise LogicDataError(f"Location {area} - {detail} has no 'need'")
            locations[area][detail] = Location(
                area=area,
                detail=detail,
                need=_parse(entry["need"], names, f"Location {area} - {detail}"),
                reward=entry.get("reward"),
                types=tuple(entry.get("types", ())),
            )
    return locations


def _parse_dungeons(raw: list[dict]) -> tuple[Dungeon, ...]:
    return tuple(Dungeon(name=d["name"], abbreviation=d["abbreviation"]) for d in raw)


def _parse_entrances(raw: list[dict]) -> dict[str, Entrance]:
    entrances = {}
    for entry in raw:
        if entry["kind"] not in ("dungeon", "secret cave"):
            raise LogicDataError(f"Entrance {entry['exit']!r} has unknown kind")
        entrances[entry["exit"]] = Entrance(
            exit=entry["exit"], entrance=entry["entrance"], kind=entry["kind"]
        )
    return entrances


def _parse_charts(raw: list[dict]) -> dict[str, Chart]:
    return {
        entry["island"]: Chart(
            island=entry["island"],
            number=entry["number"],
            chart=entry["chart"],
            chart_type=entry["chartType"],
        )
        for entry in raw
    }


def _walk(expr: Requirement) -> Iterator[Requirement]:
    yield expr
    if isinstance(expr, (And, Or)):
        for child in expr.children:
            yield from _walk(child)


def validate_world(world: World) -> None:
    """Check cross references between the tables.

    Every item named in a requirement must be a known item, every other
    location reference must exist, every dungeon's keys must be items, and
    every entrance must have an access macro.
    """
    expressions = [(f"Macro {name!r}", expr) for name, expr in world.macros.items()]
    expressions += [(f"Location {loc.full_name}", loc.need) for loc in world.iter_locations()]

    for context, expr in expressions:
        for node in _walk(expr):
            if isinstance(node, Item):
                maximum = world.max_count(node.name)
                if maximum is None:
                    raise LogicDataError(f"{context}: unknown item {node.name!r}")
                if node.count > maximum:
                    raise LogicDataError(
                        f"{context}: {node.name!r} x{node.count} exceeds maximum {maximum}"
                    )
            elif isinstance(node, HasAccessedOtherLocation):
                if not world.has_location(node.area, node.detail):
                    raise LogicDataError(
                        f"{context}: unknown location {node.area} - {node.detail}"
                    )

    for dungeon in world.dungeons:
        for key in (dungeon.small_key, dungeon.big_key):
            if world.max_count(key) is None:
                raise LogicDataError(f"Dungeon {dungeon.name!r} has no item {key!r}")

    for location in world.iter_locations():
        if location.reward is not None and world.max_count(location.reward) is None:
            raise LogicDataError(
                f"Location {location.full_name}: unknown reward {location.reward!r}"
            )

    for entrance in world.entrances.values():
        for name in (f"Can Access {entrance.exit}", f"Can Access {entrance.entrance}"):
            if name not in world.macros:
                raise LogicDataError(f"Entrance {entrance.exit!r} needs macro {name!r}")


def load_world(data_path: Path | Traversable) -> World:
    """Parse the logic data directory and return a validated World."""
    item_maximums, starting_gear = _parse_items(_read_json(data_path, "items.json"))
    macros = _parse_macros(_read_json(data_path, "macros.json"))

    world = World(
        item_maximums=item_maximums,
        starting_gear=starting_gear,
        locations=build_locations(_read_json(data_path, "item-locations.json"), macros),
        macros=macros,
        dungeons=_parse_dungeons(_read_json(data_path, "dungeons.json")),
        entrances=_parse_entrances(_read_json(data_path, "entrances.json")),
        charts=_parse_charts(_read_json(data_path, "charts.json")),
    )
    validate_world(world)
    return world
