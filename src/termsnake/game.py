# game.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional

import numpy as np  # type: ignore

from .config import GRID_W, GRID_H, CFG


# ---------- Geometry ----------
class Position(NamedTuple):
    x: int
    y: int


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]


OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


def is_opposite(a: Direction, b: Direction) -> bool:
    return OPPOSITE[a] is b


def next_head(head: Position, direction: Direction) -> Position:
    return Position(head.x + direction.dx, head.y + direction.dy)


def in_bounds(pos: Position, width: int, height: int) -> bool:
    return 0 <= pos.x < width and 0 <= pos.y < height


# ---------- Helpers ----------
def spawn_food(
    snake: Iterable[Position],
    width: int,
    height: int,
    rng: np.random.Generator,
    attempts: Optional[int] = None,
) -> Optional[Position]:
    """
    Pick a uniformly random cell not covered by the snake.

    Draws over the whole grid first; after `attempts` misses it scans for the
    free cells and picks one of those instead, so a crowded board still
    terminates. Returns None when the snake covers every cell.
    """
    occupied = set(snake)
    if attempts is None:
        attempts = CFG.spawn_attempts

    for _ in range(attempts):
        cell = Position(int(rng.integers(width)), int(rng.integers(height)))
        if cell not in occupied:
            return cell

    free = [
        Position(x, y)
        for y in range(height)
        for x in range(width)
        if (x, y) not in occupied
    ]
    if not free:
        return None
    return free[int(rng.integers(len(free)))]


# ---------- State ----------
@dataclass
class GameState:
    rng: np.random.Generator
    width: int = GRID_W
    height: int = GRID_H
    snake: List[Position] = field(default_factory=list)  # head at index 0
    direction: Direction = Direction.RIGHT
    pending: Direction = Direction.RIGHT                   # requested, not yet applied
    food: Optional[Position] = None
    score: int = 0
    game_over: bool = False

    @property
    def head(self) -> Position:
        return self.snake[0]


def new_game_state(
    rng: Optional[np.random.Generator] = None,
    width: int = GRID_W,
    height: int = GRID_H,
) -> GameState:
    if width < 2 or height < 1 or width * height < 3:
        raise ValueError(f"board {width}x{height} is too small for a snake")
    if rng is None:
        rng = np.random.default_rng(CFG.seed)
    state = GameState(rng=rng, width=width, height=height)
    reset_game(state)
    return state


def reset_game(state: GameState) -> None:
    """Put the two-cell snake in the middle heading right, with fresh food."""
    cx, cy = state.width // 2, state.height // 2
    state.snake = [Position(cx, cy), Position(cx - 1, cy)]
    state.direction = Direction.RIGHT
    state.pending = Direction.RIGHT
    state.score = 0
    state.game_over = False
    state.food = spawn_food(state.snake, state.width, state.height, state.rng)


# ---------- Update ----------
def step_game(state: GameState) -> bool:
    """
    Advance the game by one tick.
    Does nothing once the game is over. Returns True while the snake is alive.
    """
    if state.game_over:
        return False

    # A 180° request would drive the head through the neck; ignore it.
    if not is_opposite(state.direction, state.pending):
        state.direction = state.pending

    new_head = next_head(state.head, state.direction)

    # Wall collision: the snake stays where it is
    if not in_bounds(new_head, state.width, state.height):
        state.game_over = True
        return False

    state.snake.insert(0, new_head)

    if new_head == state.food:
        state.score += 1
        state.food = spawn_food(state.snake, state.width, state.height, state.rng)
        if state.food is None:
            # Board is full; nothing left to eat
            state.game_over = True
    else:
        state.snake.pop()

    # Self collision, checked against the body after the tail has moved
    if new_head in state.snake[1:]:
        state.game_over = True

    return not state.game_over
