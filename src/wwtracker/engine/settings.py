"""Randomizer options that influence logic.

Every option is declared once in OPTIONS with its persisted key, its type and
its default, so decoding never has to guess a value's type at runtime.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum


class SwordMode(str, Enum):
    START_WITH_SWORD = "Start with Sword"
    RANDOMIZED_SWORD = "Randomized Sword"
    SWORDLESS = "Swordless"


class EntranceRandomization(str, Enum):
    DISABLED = "Disabled"
    DUNGEONS = "Dungeons"
    SECRET_CAVES = "Secret Caves"
    SEPARATELY = "Dungeons & Secret Caves (Separately)"
    TOGETHER = "Dungeons & Secret Caves (Together)"

    @property
    def dungeons(self) -> bool:
        return self in (
            EntranceRandomization.DUNGEONS,
            EntranceRandomization.SEPARATELY,
            EntranceRandomization.TOGETHER,
        )

    @property
    def secret_caves(self) -> bool:
        return self in (
            EntranceRandomization.SECRET_CAVES,
            EntranceRandomization.SEPARATELY,
            EntranceRandomization.TOGETHER,
        )


class SettingsError(ValueError):
    """An option value could not be decoded."""


@dataclass(frozen=True)
class Option:
    """Schema entry: attribute name, persisted key and value type."""

    attr: str
    key: str
    kind: type


OPTIONS: tuple[Option, ...] = (
    Option("key_lunacy", "keyLunacy", bool),
    Option("num_starting_triforce_shards", "numStartingTriforceShards", int),
    Option("race_mode", "raceMode", bool),
    Option("randomize_charts", "randomizeCharts", bool),
    Option("skip_rematch_bosses", "skipRematchBosses", bool),
    Option("starting_gear", "startingGear", int),
    Option("sword_mode", "swordMode", SwordMode),
    Option("randomize_entrances", "randomizeEntrances", EntranceRandomization),
)

# Progress-location types the randomizer enables unless told otherwise.
DEFAULT_FLAGS = frozenset({"Dungeon", "Great Fairy", "Free Gift", "Tingle Chest"})


@dataclass(frozen=True)
class Settings:
    """Read-only options for one seed."""

    key_lunacy: bool = False
    num_starting_triforce_shards: int = 0
    race_mode: bool = False
    randomize_charts: bool = False
    skip_rematch_bosses: bool = True
    starting_gear: int = 0
    sword_mode: SwordMode = SwordMode.START_WITH_SWORD
    randomize_entrances: EntranceRandomization = EntranceRandomization.DISABLED
    flags: frozenset[str] = field(default=DEFAULT_FLAGS)

    def __post_init__(self):
        if not 0 <= self.num_starting_triforce_shards <= 8:
            raise SettingsError(
                f"numStartingTriforceShards must be 0-8, got {self.num_starting_triforce_shards}"
            )
        if self.starting_gear < 0:
            raise SettingsError(f"startingGear must be >= 0, got {self.starting_gear}")

    def with_options(self, **changes) -> "Settings":
        return replace(self, **changes)

    def to_strings(self) -> dict[str, str]:
        """Stringify every option under its persisted key."""
        values = {}
        for option in OPTIONS:
            value = getattr(self, option.attr)
            if option.kind is bool:
                values[option.key] = "true" if value else "false"
            elif option.kind is int:
                values[option.key] = str(value)
            else:
                values[option.key] = value.value
        return values

    @classmethod
    def from_strings(
        cls, values: Mapping[str, str], flags: frozenset[str] | None = None
    ) -> "Settings":
        """Decode stringified options; keys that are absent keep their defaults."""
        decoded = {}
        for option in OPTIONS:
            raw = values.get(option.key)
            if raw is None:
                continue
            decoded[option.attr] = _decode(option, raw)
        if flags is not None:
            decoded["flags"] = frozenset(flags)
        return cls(**decoded)


def _decode(option: Option, raw: str):
    if option.kind is bool:
        if raw not in ("true", "false"):
            raise SettingsError(f"{option.key}: expected true/false, got {raw!r}")
        return raw == "true"
    if option.kind is int:
        try:
            return int(raw)
        except ValueError:
            raise SettingsError(f"{option.key}: expected an integer, got {raw!r}") from None
    try:
        return option.kind(raw)
    except ValueError:
        raise SettingsError(f"{option.key}: unknown value {raw!r}") from None
