"""Requirement expressions and the parser for the logic files' mini-language.

A requirement string looks like:

    DRC Small Key x1 & Grappling Hook & (Deku Leaf | Progressive Bow x2)

``&`` binds tighter than ``|``; parentheses group. A bare name is either a
macro (if it is a known macro name) or an item. ``Name xN`` asks for N of
a progressive item. ``Has Accessed Other Location "Area - Detail"`` refers to
another location's own requirement.
"""

import re
from dataclasses import dataclass
from functools import lru_cache


class RequirementParseError(ValueError):
    """A requirement string does not follow the grammar."""

    def __init__(self, text: str, position: int, reason: str):
        super().__init__(f"{reason} at position {position} in {text!r}")
        self.text = text
        self.position = position
        self.reason = reason


@dataclass(frozen=True)
class Nothing:
    """Always satisfied."""


@dataclass(frozen=True)
class Impossible:
    """Never satisfied."""


@dataclass(frozen=True)
class Item:
    name: str
    count: int = 1


@dataclass(frozen=True)
class And:
    children: tuple["Requirement", ...]


@dataclass(frozen=True)
class Or:
    children: tuple["Requirement", ...]


@dataclass(frozen=True)
class HasAccessedOtherLocation:
    area: str
    detail: str


@dataclass(frozen=True)
class MacroRef:
    name: str


Requirement = (
    Nothing | Impossible | Item | And | Or | HasAccessedOtherLocation | MacroRef
)

NOTHING = Nothing()
IMPOSSIBLE = Impossible()

OTHER_LOCATION_PREFIX = "Has Accessed Other Location"

_TOKEN_RE = re.compile(
    r"""\s*(?:
        (?P<op>[()&|])
      | (?P<other>Has\ Accessed\ Other\ Location\s*"(?P<location>[^"]*)")
      | (?P<name>[^()&|"]+)
    )""",
    re.VERBOSE,
)
_COUNT_RE = re.compile(r"^(?P<name>.+?)\s+x(?P<count>\d+)$")


def _tokenize(text: str) -> list[tuple[str, str, int]]:
    """Split text into (kind, value, position) tokens."""
    tokens = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise RequirementParseError(text, pos, "Unexpected character")
        if match.group("op"):
            tokens.append(("op", match.group("op"), match.start("op")))
        elif match.group("other") is not None:
            tokens.append(("other", match.group("location"), match.start("other")))
        else:
            name = match.group("name").strip()
            tokens.append(("name", name, match.start("name")))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, text: str, macro_names: frozenset[str]):
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0
        self.macro_names = macro_names

    def _peek(self) -> tuple[str, str, int] | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _position(self) -> int:
        token = self._peek()
        return token[2] if token else len(self.text)

    def _accept_op(self, op: str) -> bool:
        token = self._peek()
        if token and token[0] == "op" and token[1] == op:
            self.index += 1
            return True
        return False

    def parse(self) -> Requirement:
        if not self.tokens:
            raise RequirementParseError(self.text, 0, "Empty requirement")
        expr = self._parse_or()
        if self._peek() is not None:
            raise RequirementParseError(self.text, self._position(), "Unexpected token")
        return expr

    def _parse_or(self) -> Requirement:
        children = [self._parse_and()]
        while self._accept_op("|"):
            children.append(self._parse_and())
        return children[0] if len(children) == 1 else Or(tuple(children))

    def _parse_and(self) -> Requirement:
        children = [self._parse_atom()]
        while self._accept_op("&"):
            children.append(self._parse_atom())
        return children[0] if len(children) == 1 else And(tuple(children))

    def _parse_atom(self) -> Requirement:
        token = self._peek()
        if token is None:
            raise RequirementParseError(self.text, len(self.text), "Unexpected end")

        kind, value, position = token
        if kind == "op":
            if value != "(":
                raise RequirementParseError(self.text, position, f"Unexpected {value!r}")
            self.index += 1
            expr = self._parse_or()
            if not self._accept_op(")"):
                raise RequirementParseError(self.text, self._position(), "Expected ')'")
            return expr

        self.index += 1
        if kind == "other":
            area, sep, detail = value.partition(" - ")
            if not sep or not area.strip() or not detail.strip():
                raise RequirementParseError(
                    self.text, position, "Expected \"Area - Detail\" location name"
                )
            return HasAccessedOtherLocation(area.strip(), detail.strip())
        return self._name_to_requirement(value, position)

    def _name_to_requirement(self, name: str, position: int) -> Requirement:
        if name.startswith(OTHER_LOCATION_PREFIX):
            raise RequirementParseError(self.text, position, "Expected quoted location")
        if name == "Nothing":
            return NOTHING
        if name == "Impossible":
            return IMPOSSIBLE
        if name in self.macro_names:
            return MacroRef(name)

        match = _COUNT_RE.match(name)
        if match:
            count = int(match.group("count"))
            if count < 1:
                raise RequirementParseError(self.text, position, "Item count must be positive")
            return Item(match.group("name"), count)
        return Item(name)


@lru_cache(maxsize=4096)
def _parse_cached(text: str, macro_names: frozenset[str]) -> Requirement:
    return _Parser(text, macro_names).parse()


def parse_requirement(text: str, macro_names=frozenset()) -> Requirement:
    """Parse a requirement string into an expression tree.

    Raises RequirementParseError for malformed input.
    """
    return _parse_cached(text, frozenset(macro_names))


def format_requirement(expr: Requirement) -> str:
    """Render an expression back into the requirement language."""
    match expr:
        case Nothing():
            return "Nothing"
        case Impossible():
            return "Impossible"
        case Item(name=name, count=1):
            return name
        case Item(name=name, count=count):
            return f"{name} x{count}"
        case MacroRef(name=name):
            return name
        case HasAccessedOtherLocation(area=area, detail=detail):
            return f'{OTHER_LOCATION_PREFIX} "{area} - {detail}"'
        case And(children=children):
            return " & ".join(_format_child(child) for child in children)
        case Or(children=children):
            return " | ".join(_format_child(child) for child in children)
    raise TypeError(f"Not a requirement: {expr!r}")


def _format_child(expr: Requirement) -> str:
    text = format_requirement(expr)
    return f"({text})" if isinstance(expr, (And, Or)) else text
