"""Location availability for one tracker state.

LogicCalculation is what the presentation layer talks to. It is built fresh
for every TrackerState: construction resolves macros for the settings and
entrances, then computes the guaranteed-key table once.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .evaluator import RequirementEvaluator
from .keys import compute_guaranteed_keys
from .macros import MacroResolver
from .settings import Settings
from .state import TrackerState
from .world import Location

DUNGEON = "Dungeon"
SUNKEN_TREASURE = "Sunken Treasure"
SUNKEN_TRIFORCE = "Sunken Triforce"
TRIFORCE_CHART = "Triforce Chart"


class LocationColor(str, Enum):
    UNAVAILABLE = "unavailable"
    PARTIAL = "partial"
    AVAILABLE = "available"


@dataclass(frozen=True)
class LocationCounts:
    color: LocationColor
    num_available: int
    num_remaining: int


class LogicCalculation:
    """Reachability queries over one (state, settings) pair."""

    def __init__(self, state: TrackerState, settings: Settings):
        self.state = state
        self.settings = settings
        self.world = state.world
        self.resolver = MacroResolver.for_state(self.world, settings, state.entrances)
        self._guaranteed_keys = compute_guaranteed_keys(
            state, settings, self._evaluator_with_keys
        )
        self.evaluator = self._evaluator_with_keys(self._guaranteed_keys)

    def _evaluator_with_keys(self, key_counts: Mapping[str, int]) -> RequirementEvaluator:
        return RequirementEvaluator(self.state, self.resolver, key_counts)

    @property
    def guaranteed_keys(self) -> Mapping[str, int]:
        return MappingProxyType(self._guaranteed_keys)

    def is_requirement_met(self, expr) -> bool:
        return self.evaluator.is_satisfied(expr)

    def small_keys_required_for_location(self, area: str, detail: str) -> int:
        """Small keys strictly needed for a location of a dungeon; 0 elsewhere."""
        dungeon = self.world.dungeon_for_area(area)
        if dungeon is None:
            return 0
        location = self.world.location(area, detail)
        return self.evaluator.small_keys_required(location.need, dungeon.small_key)

    def non_key_requirements_met_for_location(self, area: str, detail: str) -> bool:
        if self.state.is_location_checked(area, detail):
            return True
        location = self.world.location(area, detail)
        return self.evaluator.non_key_requirements_met(location.need)

    def is_location_available(self, area: str, detail: str) -> bool:
        if self.state.is_location_checked(area, detail):
            return True
        if not self.non_key_requirements_met_for_location(area, detail):
            return False

        dungeon = self.world.dungeon_for_area(area)
        if dungeon is None:
            return True
        # Logged keys still count under key lunacy, where no key is guaranteed.
        return (
            self.small_keys_required_for_location(area, detail)
            <= self.evaluator.item_count(dungeon.small_key)
        )

    def items_remaining_for_location(self, area: str, detail: str) -> int:
        """Item deficits for a location, counting guaranteed keys as obtained."""
        if self.state.is_location_checked(area, detail):
            return 0
        location = self.world.location(area, detail)
        return self.evaluator.items_remaining(location.need)

    def is_progress_location(self, location: Location) -> bool:
        """Whether every type of the location is enabled in the seed's flags.

        The "Sunken Triforce" flag enables only the sunken treasures whose
        vanilla chart is a Triforce Chart.
        """
        flags = self.settings.flags
        if SUNKEN_TRIFORCE in flags and self._holds_triforce_shard(location):
            flags = flags | {SUNKEN_TREASURE}
        return all(kind in flags for kind in location.types)

    def _holds_triforce_shard(self, location: Location) -> bool:
        if SUNKEN_TREASURE not in location.types or self.settings.randomize_charts:
            return False
        chart = self.world.charts.get(location.area)
        return chart is not None and chart.chart_type == TRIFORCE_CHART

    def location_counts(
        self,
        area: str,
        is_dungeon: bool | None = None,
        only_progress_locations: bool = False,
        disable_logic: bool = False,
    ) -> LocationCounts:
        """Available and remaining unchecked locations of an area.

        is_dungeon=True counts only the area's dungeon locations, False only
        the others, and None all of them.
        """
        num_available = 0
        num_remaining = 0
        for location in self.world.locations.get(area, {}).values():
            if is_dungeon is not None and (DUNGEON in location.types) != is_dungeon:
                continue
            if only_progress_locations and not self.is_progress_location(location):
                continue
            if self.state.is_location_checked(location.area, location.detail):
                continue
            num_remaining += 1
            if disable_logic or self.is_location_available(location.area, location.detail):
                num_available += 1

        if num_available == num_remaining:
            color = LocationColor.AVAILABLE
        elif num_available == 0:
            color = LocationColor.UNAVAILABLE
        else:
            color = LocationColor.PARTIAL
        return LocationCounts(color, num_available, num_remaining)

    def chart_for_island(self, island: str) -> tuple[str, str]:
        """(chart item name, chart type) that leads to an island's treasure."""
        chart = self.world.charts[island]
        if self.settings.randomize_charts:
            return f"Chart for Island {chart.number}", chart.chart_type
        return chart.chart, chart.chart_type
