"""Macro lookup, including the settings- and entrance-dependent tweaks.

Macros are never pre-expanded. The evaluator asks a MacroResolver for a
name each time it meets a MacroRef, and the resolver answers from the
overrides computed for the current settings and entrances before falling
back to the static table.
"""

from collections.abc import Mapping

from .requirements import IMPOSSIBLE, NOTHING, Item, MacroRef, Requirement, parse_requirement
from .settings import Settings, SwordMode
from .world import World

SWORDLESS_GANONDORF = "Skull Hammer & Progressive Bow x2 & Progressive Shield x1"


class UnknownMacroError(KeyError):
    """A MacroRef names a macro that is not defined."""


class MacroCycleError(RecursionError):
    """A macro expands to itself along the path being evaluated."""


def settings_tweaks(world: World, settings: Settings) -> dict[str, Requirement]:
    """Overrides that depend only on the seed's options."""
    names = world.macros.keys()
    tweaks: dict[str, Requirement] = {}

    if settings.sword_mode == SwordMode.SWORDLESS:
        tweaks["Has Any Sword"] = IMPOSSIBLE
        tweaks["Has Any Master Sword"] = IMPOSSIBLE
        tweaks["Can Defeat Ganondorf"] = parse_requirement(SWORDLESS_GANONDORF, names)

    if settings.skip_rematch_bosses:
        tweaks["Can Defeat Rematch Bosses"] = NOTHING

    if settings.randomize_charts:
        for chart in world.charts.values():
            name = f"Chart for Island {chart.number}"
            tweaks[name] = Item(name)

    return tweaks


def entrance_tweaks(
    world: World, settings: Settings, entrances: Mapping[str, str]
) -> dict[str, Requirement]:
    """Overrides for "Can Access <exit>" of every randomized exit.

    The exit is reachable through whichever entrance the player has recorded
    for it; with no entrance recorded yet it is unreachable.
    """
    mode = settings.randomize_entrances
    tweaks: dict[str, Requirement] = {}
    for entrance in world.entrances.values():
        if entrance.kind == "dungeon" and not mode.dungeons:
            continue
        if entrance.kind == "secret cave" and not mode.secret_caves:
            continue
        assigned = entrances.get(entrance.exit)
        if assigned:
            tweaks[f"Can Access {entrance.exit}"] = MacroRef(f"Can Access {assigned}")
        else:
            tweaks[f"Can Access {entrance.exit}"] = IMPOSSIBLE
    return tweaks


class MacroResolver:
    """Pure name -> expression lookup for one (settings, entrances) pair."""

    def __init__(
        self,
        macros: Mapping[str, Requirement],
        overrides: Mapping[str, Requirement] | None = None,
    ):
        self.macros = macros
        self.overrides = dict(overrides or {})

    @classmethod
    def for_state(
        cls, world: World, settings: Settings, entrances: Mapping[str, str]
    ) -> "MacroResolver":
        overrides = settings_tweaks(world, settings)
        overrides.update(entrance_tweaks(world, settings, entrances))
        return cls(world.macros, overrides)

    def __call__(self, name: str) -> Requirement:
        if name in self.overrides:
            return self.overrides[name]
        try:
            return self.macros[name]
        except KeyError:
            raise UnknownMacroError(name) from None

    def __contains__(self, name: str) -> bool:
        return name in self.overrides or name in self.macros
