"""Guaranteed dungeon keys.

Dungeon keys stay inside their dungeon, so once a key-holding chest is
reachable the player is bound to collect that key whether or not they have
logged it. For each dungeon this module finds the least fixpoint of:

    reachable = checked locations
              + locations whose non-key needs are met and whose strictly
                required small keys fit within the guaranteed count
    guaranteed[kind] = max(logged, #reachable locations holding that key)

Counts only grow and are capped by each key's maximum, so the loop ends
after at most one pass per key-holding location.
"""

from collections.abc import Callable, Mapping

from ..logging import get_logger
from .evaluator import RequirementEvaluator
from .settings import Settings
from .state import TrackerState
from .world import Dungeon, Location

logger = get_logger(__name__)

EvaluatorFactory = Callable[[Mapping[str, int]], RequirementEvaluator]


def empty_key_table(dungeons) -> dict[str, int]:
    table = {}
    for dungeon in dungeons:
        table[dungeon.small_key] = 0
        table[dungeon.big_key] = 0
    return table


def reachable_locations(
    evaluator: RequirementEvaluator,
    locations: list[Location],
    dungeon: Dungeon,
    small_keys: int,
) -> set[tuple[str, str]]:
    """Locations of the dungeon reachable with `small_keys` small keys."""
    state = evaluator.state
    reachable = set()
    for location in locations:
        if state.is_location_checked(location.area, location.detail):
            reachable.add((location.area, location.detail))
        elif (
            evaluator.non_key_requirements_met(location.need)
            and evaluator.small_keys_required(location.need, dungeon.small_key)
            <= small_keys
        ):
            reachable.add((location.area, location.detail))
    return reachable


def _guaranteed_for_dungeon(
    dungeon: Dungeon, state: TrackerState, make_evaluator: EvaluatorFactory
) -> tuple[int, int]:
    world = state.world
    locations = list(world.locations.get(dungeon.name, {}).values())
    small_rewards = {
        (loc.area, loc.detail) for loc in locations if loc.reward == dungeon.small_key
    }
    big_rewards = {
        (loc.area, loc.detail) for loc in locations if loc.reward == dungeon.big_key
    }
    max_small = world.max_count(dungeon.small_key) or 0
    max_big = world.max_count(dungeon.big_key) or 0

    small = state.get_item_value(dungeon.small_key)
    big = state.get_item_value(dungeon.big_key)
    passes = 0
    while True:
        passes += 1
        evaluator = make_evaluator({dungeon.small_key: small, dungeon.big_key: big})
        reachable = reachable_locations(evaluator, locations, dungeon, small)
        new_small = max(small, min(len(reachable & small_rewards), max_small))
        new_big = max(big, min(len(reachable & big_rewards), max_big))
        if (new_small, new_big) == (small, big):
            break
        small, big = new_small, new_big

    for area, detail in sorted(reachable & (small_rewards | big_rewards)):
        logger.debug("key_location_reachable", area=area, detail=detail)

    logger.debug(
        "guaranteed_keys_computed",
        dungeon=dungeon.name,
        small_keys=small,
        big_keys=big,
        passes=passes,
    )
    return small, big


def compute_guaranteed_keys(
    state: TrackerState, settings: Settings, make_evaluator: EvaluatorFactory
) -> dict[str, int]:
    """Return a fresh "<DUNGEON> Small/Big Key" -> count table.

    make_evaluator builds an evaluator over `state` that treats the given
    key counts as obtained. With key lunacy every count is 0.
    """
    dungeons = state.world.dungeons
    table = empty_key_table(dungeons)
    if settings.key_lunacy:
        return table

    for dungeon in dungeons:
        small, big = _guaranteed_for_dungeon(dungeon, state, make_evaluator)
        table[dungeon.small_key] = small
        table[dungeon.big_key] = big
    return table
