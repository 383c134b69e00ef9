"""Recursive evaluation of requirement expressions against a TrackerState.

One RequirementEvaluator is bound to one state and one set of key counts,
so it memoizes other-location lookups for its whole lifetime. Anything that
changes the counts (the guaranteed-key fixpoint, a new state) builds a new
evaluator.
"""

from collections.abc import Callable, Mapping

from .macros import MacroCycleError
from .requirements import (
    And,
    HasAccessedOtherLocation,
    Impossible,
    Item,
    MacroRef,
    Nothing,
    Or,
    Requirement,
)
from .state import TrackerState

# Larger than the total need of any real location, so it only wins a min()
# when every alternative is impossible.
IMPOSSIBLE_REMAINING = 10_000

MacroLookup = Callable[[str], Requirement]


class RequirementEvaluator:
    """Answers "is this met" and "how far away is this" for one state."""

    def __init__(
        self,
        state: TrackerState,
        resolve_macro: MacroLookup,
        key_counts: Mapping[str, int] | None = None,
    ):
        self.state = state
        self.world = state.world
        self.resolve_macro = resolve_macro
        self.key_counts = dict(key_counts or {})
        self._small_keys = frozenset(d.small_key for d in self.world.dungeons)
        self._memo: dict[tuple, object] = {}
        self._in_progress: set[tuple] = set()
        # bumped whenever the cycle guard answers; results that saw it are not cached
        self._guard_hits = 0
        self._expanding: set[str] = set()

    def item_count(self, item_name: str) -> int:
        """Logged count, raised to the key count this evaluator was given."""
        return max(self.state.get_item_value(item_name), self.key_counts.get(item_name, 0))

    def is_satisfied(self, expr: Requirement) -> bool:
        return self._met(expr, ignore_small_keys=False)

    def non_key_requirements_met(self, expr: Requirement) -> bool:
        """Like is_satisfied, but every dungeon small key counts as obtained."""
        return self._met(expr, ignore_small_keys=True)

    def items_remaining(self, expr: Requirement) -> int:
        """Number of item deficits between this state and meeting expr."""
        match expr:
            case Nothing():
                return 0
            case Impossible():
                return IMPOSSIBLE_REMAINING
            case Item(name=name, count=count):
                return max(0, count - self.item_count(name))
            case And(children=children):
                return min(
                    IMPOSSIBLE_REMAINING,
                    sum(self.items_remaining(child) for child in children),
                )
            case Or(children=children):
                return min(self.items_remaining(child) for child in children)
            case MacroRef(name=name):
                return self._through_macro(name, self.items_remaining)
            case HasAccessedOtherLocation(area=area, detail=detail):
                return self._other_location(
                    ("remaining",), area, detail, self.items_remaining,
                    checked=0, reentrant=IMPOSSIBLE_REMAINING,
                )
        raise TypeError(f"Not a requirement: {expr!r}")

    def small_keys_required(self, expr: Requirement, small_key: str) -> int:
        """Small keys of one dungeon that expr needs on every way of meeting it.

        Only Item nodes for that key count; And sums, Or takes the cheapest
        alternative.
        """
        match expr:
            case Nothing():
                return 0
            case Impossible():
                return IMPOSSIBLE_REMAINING
            case Item(name=name, count=count):
                return count if name == small_key else 0
            case And(children=children):
                return min(
                    IMPOSSIBLE_REMAINING,
                    sum(self.small_keys_required(child, small_key) for child in children),
                )
            case Or(children=children):
                return min(self.small_keys_required(child, small_key) for child in children)
            case MacroRef(name=name):
                return self._through_macro(
                    name, lambda sub: self.small_keys_required(sub, small_key)
                )
            case HasAccessedOtherLocation(area=area, detail=detail):
                return self._other_location(
                    ("small_keys", small_key), area, detail,
                    lambda need: self.small_keys_required(need, small_key),
                    checked=0, reentrant=IMPOSSIBLE_REMAINING,
                )
        raise TypeError(f"Not a requirement: {expr!r}")

    def _met(self, expr: Requirement, ignore_small_keys: bool) -> bool:
        match expr:
            case Nothing():
                return True
            case Impossible():
                return False
            case Item(name=name, count=count):
                if ignore_small_keys and name in self._small_keys:
                    return True
                return self.item_count(name) >= count
            case And(children=children):
                return all(self._met(child, ignore_small_keys) for child in children)
            case Or(children=children):
                return any(self._met(child, ignore_small_keys) for child in children)
            case MacroRef(name=name):
                return self._through_macro(
                    name, lambda sub: self._met(sub, ignore_small_keys)
                )
            case HasAccessedOtherLocation(area=area, detail=detail):
                return self._other_location(
                    ("met", ignore_small_keys), area, detail,
                    lambda need: self._met(need, ignore_small_keys),
                    checked=True, reentrant=False,
                )
        raise TypeError(f"Not a requirement: {expr!r}")

    def _through_macro(self, name: str, evaluate: Callable):
        if name in self._expanding:
            raise MacroCycleError(f"Macro {name!r} expands to itself")
        expr = self.resolve_macro(name)
        self._expanding.add(name)
        try:
            return evaluate(expr)
        finally:
            self._expanding.discard(name)

    def _other_location(
        self, mode: tuple, area: str, detail: str, evaluate: Callable, checked, reentrant
    ):
        """Evaluate another location's requirement, memoized per mode.

        A location already being evaluated further up the stack gives the
        conservative `reentrant` answer instead of recursing forever. That
        answer only holds for the current query, so anything computed from it
        stays out of the memo.
        """
        if self.state.is_location_checked(area, detail):
            return checked

        key = (*mode, area, detail)
        if key in self._memo:
            return self._memo[key]
        if key in self._in_progress:
            self._guard_hits += 1
            return reentrant

        need = self.world.location(area, detail).need
        expanding = self._expanding
        self._expanding = set()
        guard_hits = self._guard_hits
        self._in_progress.add(key)
        try:
            result = evaluate(need)
        finally:
            self._in_progress.discard(key)
            self._expanding = expanding
        if self._guard_hits == guard_hits:
            self._memo[key] = result
        return result
