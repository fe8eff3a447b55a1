# render.py
import numpy as np  # type: ignore

from .config import (
    HEAD, BODY, FOOD, EMPTY, CORNER, H_EDGE, V_EDGE,
    STATUS_HINT, GAME_OVER_HINT,
)
from .game import GameState
from .terminal import Terminal


def status_line(state: GameState) -> str:
    line = f"Score: {state.score}{STATUS_HINT}"
    if state.game_over:
        line += GAME_OVER_HINT
    return line


def render_frame(state: GameState) -> str:
    """
    Full-frame text for the current state: the bordered board followed by
    the status line. Each row ends with a newline.
    """
    w, h = state.width, state.height
    canvas = np.full((h + 2, w + 2), EMPTY, dtype="<U1")

    # border
    canvas[0, :] = canvas[-1, :] = H_EDGE
    canvas[:, 0] = canvas[:, -1] = V_EDGE
    canvas[0, 0] = canvas[0, -1] = canvas[-1, 0] = canvas[-1, -1] = CORNER

    # body, food, then head on top (shifted by one for the border)
    for x, y in state.snake[1:]:
        canvas[y + 1, x + 1] = BODY
    if state.food is not None:
        canvas[state.food.y + 1, state.food.x + 1] = FOOD
    if state.snake:
        hx, hy = state.head
        canvas[hy + 1, hx + 1] = HEAD

    rows = ["".join(row) for row in canvas]
    rows.append(status_line(state))
    return "\n".join(rows) + "\n"


def draw_game(term: Terminal, state: GameState) -> None:
    # Repaint in place from the top-left corner; a full clear would flicker
    term.move_cursor_home()
    term.write(render_frame(state))
