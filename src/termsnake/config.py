from dataclasses import dataclass
from typing import Optional

# ----- Grid & timing -----
GRID_W, GRID_H = 30, 20
TICK_MS = 120

# ----- Glyphs -----
HEAD = "O"
BODY = "o"
FOOD = "*"
EMPTY = " "
CORNER = "+"
H_EDGE = "-"
V_EDGE = "|"

# ----- ANSI control sequences -----
CURSOR_HOME = "\x1b[H"
CLEAR_SCREEN = "\x1b[2J" + CURSOR_HOME

# ----- Status line -----
STATUS_HINT = "   (WASD / Arrow keys)  Quit: Q"
GAME_OVER_HINT = "   GAME OVER! Press R to restart."
FAREWELL = "\nBye.\n"

# ----- Tunables -----
@dataclass
class Config:
    seed: Optional[int] = None   # None -> fresh entropy every run
    tick_ms: int = TICK_MS
    spawn_attempts: int = 64     # random draws before scanning for a free cell

CFG = Config()
