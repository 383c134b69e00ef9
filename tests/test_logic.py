"""Tests for location availability."""

import pytest

from wwtracker.engine.logic import LocationColor, LogicCalculation
from wwtracker.engine.requirements import parse_requirement
from wwtracker.engine.settings import Settings, SwordMode
from wwtracker.engine.state import TrackerState
from wwtracker.engine.world import World

GANONDORF_ALL = (
    "Triforce Shard x8 & Progressive Sword x4 & Progressive Bow x3"
    " & Boomerang & Grappling Hook & Hookshot"
)


def _single_location(world: World, area: str, detail: str, need: str) -> TrackerState:
    return TrackerState.default(world.with_locations({area: {detail: {"need": need}}}))


def _ganondorf_items(state: TrackerState) -> TrackerState:
    return (
        state.set_item_value("Triforce Shard", 1)
        .set_item_value("Progressive Sword", 1)
        .set_item_value("Grappling Hook", 1)
    )


def test_checked_location_is_available(world: World):
    state = _single_location(
        world, "Outset Island", "Savage Labyrinth - Floor 30", "Deku Leaf & Grappling Hook"
    ).set_location_checked("Outset Island", "Savage Labyrinth - Floor 30", True)
    logic = LogicCalculation(state, Settings())
    assert logic.is_location_available("Outset Island", "Savage Labyrinth - Floor 30")


def test_every_checked_location_is_available(state: TrackerState, world: World):
    for location in world.iter_locations():
        checked = state.set_location_checked(location.area, location.detail, True)
        logic = LogicCalculation(checked, Settings(sword_mode=SwordMode.SWORDLESS))
        assert logic.is_location_available(location.area, location.detail)
        assert logic.items_remaining_for_location(location.area, location.detail) == 0


def test_location_requirements_met(world: World):
    state = (
        _single_location(
            world, "Outset Island", "Savage Labyrinth - Floor 30", "Deku Leaf & Grappling Hook"
        )
        .set_item_value("Grappling Hook", 1)
        .set_item_value("Deku Leaf", 1)
    )
    logic = LogicCalculation(state, Settings())
    assert logic.is_location_available("Outset Island", "Savage Labyrinth - Floor 30")


def test_location_requirements_not_met(world: World):
    state = _single_location(
        world, "Outset Island", "Savage Labyrinth - Floor 30", "Deku Leaf & Grappling Hook"
    ).set_item_value("Deku Leaf", 1)
    logic = LogicCalculation(state, Settings())
    assert not logic.is_location_available("Outset Island", "Savage Labyrinth - Floor 30")


def test_unlocked_drc_location_available_by_default(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    assert logic.is_location_available("Dragon Roost Cavern", "Boarded Up Chest")
    assert not logic.is_location_available("Dragon Roost Cavern", "Rat Room")


def test_items_remaining_for_checked_location(world: World):
    state = _single_location(
        world, "Outset Island", "Savage Labyrinth - Floor 30", "Deku Leaf & Grappling Hook"
    ).set_location_checked("Outset Island", "Savage Labyrinth - Floor 30", True)
    logic = LogicCalculation(state, Settings())
    assert logic.items_remaining_for_location("Outset Island", "Savage Labyrinth - Floor 30") == 0


def test_items_remaining_when_all_items_required(world: World):
    state = _ganondorf_items(
        _single_location(world, "Ganon's Tower", "Defeat Ganondorf", GANONDORF_ALL)
    )
    logic = LogicCalculation(state, Settings())
    assert logic.items_remaining_for_location("Ganon's Tower", "Defeat Ganondorf") == 15


def test_items_remaining_takes_cheapest_alternative(world: World):
    # Or takes its cheapest child here; a total of 7 would contradict that.
    need = GANONDORF_ALL.replace("&", "|")
    state = _ganondorf_items(_single_location(world, "Ganon's Tower", "Defeat Ganondorf", need))
    logic = LogicCalculation(state, Settings())
    # Grappling Hook is already owned, so one alternative needs nothing.
    assert logic.items_remaining_for_location("Ganon's Tower", "Defeat Ganondorf") == 0

    without_hook = state.set_item_value("Grappling Hook", 0)
    logic = LogicCalculation(without_hook, Settings())
    assert logic.items_remaining_for_location("Ganon's Tower", "Defeat Ganondorf") == 1


def test_items_remaining_counts_guaranteed_keys(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    # One DRC small key is guaranteed, so only the second one is missing.
    assert logic.items_remaining_for_location("Dragon Roost Cavern", "Rat Room") == 1


def test_small_keys_strictly_required(world: World):
    state = _single_location(
        world,
        "Dragon Roost Cavern",
        "Big Key Chest",
        "DRC Small Key x1 & Grappling Hook & (DRC Small Key x4 | Deku Leaf | Progressive Bow x2)",
    )
    logic = LogicCalculation(state, Settings())
    assert logic.small_keys_required_for_location("Dragon Roost Cavern", "Big Key Chest") == 1


@pytest.mark.parametrize(
    ("need", "expected"),
    [
        ("Nothing", 0),
        ("Grappling Hook", 0),
        ("DRC Small Key x1", 1),
        ("Grappling Hook & Deku Leaf & DRC Small Key x2 & DRC Big Key", 2),
    ],
)
def test_small_keys_required_for_location(world: World, need: str, expected: int):
    state = _single_location(world, "Dragon Roost Cavern", "First Room", need)
    logic = LogicCalculation(state, Settings())
    assert logic.small_keys_required_for_location("Dragon Roost Cavern", "First Room") == expected


@pytest.mark.parametrize(
    ("need", "items", "expected"),
    [
        ("Nothing", (), True),
        ("Grappling Hook & DRC Big Key", (), False),
        ("DRC Small Key x1", (), True),
        ("DRC Small Key x1 & Grappling Hook & Deku Leaf", ("Grappling Hook", "Deku Leaf"), True),
        (
            "DRC Small Key x1 & Grappling Hook & (DRC Small Key x4 | Deku Leaf | Progressive Bow x2)",
            ("Grappling Hook",),
            True,
        ),
    ],
)
def test_non_key_requirements_met_for_location(world: World, need, items, expected):
    state = _single_location(world, "Dragon Roost Cavern", "First Room", need)
    for name in items:
        state = state.set_item_value(name, 1)
    logic = LogicCalculation(state, Settings())
    assert logic.non_key_requirements_met_for_location("Dragon Roost Cavern", "First Room") is expected


def test_non_key_requirements_met_when_checked(state: TrackerState):
    state = state.set_location_checked("Dragon Roost Cavern", "Gohma Heart Container", True)
    logic = LogicCalculation(state, Settings())
    assert logic.non_key_requirements_met_for_location("Dragon Roost Cavern", "Gohma Heart Container")


def test_is_requirement_met_uses_guaranteed_keys(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    assert logic.is_requirement_met(parse_requirement("DRC Small Key x1"))
    assert not logic.is_requirement_met(parse_requirement("DRC Small Key x2"))


def test_location_counts_default(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    counts = logic.location_counts("Windfall Island")
    assert counts.num_remaining == 6
    # Both Tingle gifts and Zunari need nothing.
    assert counts.num_available == 3
    assert counts.color == LocationColor.PARTIAL


def test_location_counts_only_progress_locations(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    counts = logic.location_counts("Windfall Island", only_progress_locations=True)
    assert (counts.num_available, counts.num_remaining) == (2, 2)
    assert counts.color == LocationColor.AVAILABLE


def test_location_counts_unavailable(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    counts = logic.location_counts("Wind Temple")
    assert counts.num_available == 0
    assert counts.num_remaining == 4
    assert counts.color == LocationColor.UNAVAILABLE


def test_location_counts_disable_logic(state: TrackerState):
    logic = LogicCalculation(state, Settings())
    counts = logic.location_counts("Wind Temple", disable_logic=True)
    assert (counts.num_available, counts.num_remaining) == (4, 4)


def test_location_counts_skip_checked(state: TrackerState, world: World):
    for detail in world.locations["Forest Haven"]:
        state = state.set_location_checked("Forest Haven", detail, True)
    counts = LogicCalculation(state, Settings()).location_counts("Forest Haven")
    assert (counts.num_available, counts.num_remaining) == (0, 0)
    assert counts.color == LocationColor.AVAILABLE


def test_untyped_locations_are_progress(world: World, state: TrackerState):
    logic = LogicCalculation(state, Settings(flags=frozenset()))
    assert logic.is_progress_location(world.location("Ganon's Tower", "Defeat Ganondorf"))
    assert not logic.is_progress_location(world.location("Dragon Roost Cavern", "First Room"))


def test_chart_for_island(state: TrackerState):
    vanilla = LogicCalculation(state, Settings())
    assert vanilla.chart_for_island("Dragon Roost Island") == ("Triforce Chart 6", "Triforce Chart")
    randomized = LogicCalculation(state, Settings(randomize_charts=True))
    assert randomized.chart_for_island("Dragon Roost Island") == (
        "Chart for Island 13",
        "Triforce Chart",
    )


def test_location_counts_split_dungeon_and_sea(state: TrackerState):
    state = state.set_item_value("Grappling Hook", 1).set_item_value("Treasure Chart 22", 1)
    logic = LogicCalculation(state, Settings())

    dungeon = logic.location_counts("Tower of the Gods", is_dungeon=True)
    assert (dungeon.num_available, dungeon.num_remaining) == (0, 6)
    assert dungeon.color == LocationColor.UNAVAILABLE

    sea = logic.location_counts("Tower of the Gods", is_dungeon=False)
    assert (sea.num_available, sea.num_remaining) == (1, 1)
    assert sea.color == LocationColor.AVAILABLE

    merged = logic.location_counts("Tower of the Gods")
    assert (merged.num_available, merged.num_remaining) == (1, 7)
    assert merged.color == LocationColor.PARTIAL


def test_sunken_triforce_flag_enables_triforce_chart_treasures(world: World, state: TrackerState):
    logic = LogicCalculation(state, Settings(flags=frozenset({"Sunken Triforce"})))
    assert logic.is_progress_location(world.location("Dragon Roost Island", "Sunken Treasure"))
    assert not logic.is_progress_location(world.location("Windfall Island", "Sunken Treasure"))
    assert not logic.is_progress_location(world.location("Tower of the Gods", "Sunken Treasure"))


def test_sunken_triforce_flag_ignored_with_randomized_charts(world: World, state: TrackerState):
    logic = LogicCalculation(
        state, Settings(randomize_charts=True, flags=frozenset({"Sunken Triforce"}))
    )
    assert not logic.is_progress_location(world.location("Dragon Roost Island", "Sunken Treasure"))
