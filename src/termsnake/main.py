# main.py
import logging
import time
from typing import Callable, Iterator, Optional

import numpy as np  # type: ignore

from .config import CFG, FAREWELL
from .game import GameState, new_game_state, reset_game, step_game
from .keys import Intent, IntentKind, map_key
from .render import draw_game
from .terminal import Terminal, select_driver

logger = logging.getLogger(__name__)


def poll_intents(term: Terminal) -> Iterator[Intent]:
    """Yield one intent per key waiting on the terminal; never blocks."""
    while term.key_available():
        code = term.read_key()
        if code is None:
            return
        lookahead = term.read_key() if code in term.scheme.prefixes else None
        yield map_key(code, lookahead, term.scheme)


def apply_intent(term: Terminal, state: GameState, intent: Intent) -> bool:
    """Apply a single intent. Return False to quit."""
    if intent.kind is IntentKind.QUIT:
        return False
    if intent.kind is IntentKind.SET_DIRECTION:
        # committed (or rejected as a reversal) on the next tick
        state.pending = intent.direction
    elif intent.kind is IntentKind.RESTART and state.game_over:
        reset_game(state)
        term.clear_screen()
        logger.debug("restarted")
    return True


def run(
    term: Terminal,
    state: GameState,
    tick_ms: int = CFG.tick_ms,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll input, advance, render, sleep; until a quit key. Returns the exit code."""
    term.clear_screen()
    draw_game(term, state)

    running = True
    while running:
        # 1) input
        for intent in poll_intents(term):
            running = apply_intent(term, state, intent)
            if not running:
                break
        if not running:
            break

        # 2) update
        if not state.game_over:
            if not step_game(state):
                logger.debug("game over with score %d", state.score)

        # 3) render
        draw_game(term, state)
        sleep(tick_ms / 1000.0)

    term.write(FAREWELL)
    return 0


def main(rng: Optional[np.random.Generator] = None) -> int:
    term = select_driver()
    state = new_game_state(rng if rng is not None else np.random.default_rng(CFG.seed))
    with term.enter_raw_mode():
        try:
            return run(term, state)
        except KeyboardInterrupt:
            term.write(FAREWELL)
            return 0


if __name__ == "__main__":
    raise SystemExit(main())
