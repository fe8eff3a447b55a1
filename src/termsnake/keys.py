# keys.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from .game import Direction


class IntentKind(Enum):
    SET_DIRECTION = "set_direction"
    QUIT = "quit"
    RESTART = "restart"
    NOOP = "noop"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    direction: Optional[Direction] = None


NOOP = Intent(IntentKind.NOOP)
QUIT = Intent(IntentKind.QUIT)
RESTART = Intent(IntentKind.RESTART)


def set_direction(direction: Direction) -> Intent:
    return Intent(IntentKind.SET_DIRECTION, direction)


# Letter keys, lower-cased before lookup
LETTER_INTENTS: Dict[str, Intent] = {
    "w": set_direction(Direction.UP),
    "s": set_direction(Direction.DOWN),
    "a": set_direction(Direction.LEFT),
    "d": set_direction(Direction.RIGHT),
    "q": QUIT,
    "r": RESTART,
}


@dataclass(frozen=True)
class KeyScheme:
    """
    How a terminal spells arrow keys: a prefix code followed by one code
    naming the arrow.
    """
    prefixes: FrozenSet[int] = frozenset()
    arrows: Dict[int, Direction] = field(default_factory=dict)


def map_key(
    code: Optional[int],
    lookahead: Optional[int] = None,
    scheme: KeyScheme = KeyScheme(),
) -> Intent:
    """
    Translate a raw key code into an intent.

    `lookahead` is only consulted when `code` is one of the scheme's arrow
    prefixes; anything unrecognised maps to NOOP.
    """
    if code is None:
        return NOOP

    if code in scheme.prefixes:
        direction = scheme.arrows.get(lookahead) if lookahead is not None else None
        return set_direction(direction) if direction is not None else NOOP

    if not 0 <= code < 128:
        return NOOP
    return LETTER_INTENTS.get(chr(code).lower(), NOOP)
