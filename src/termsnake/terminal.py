# terminal.py
"""
Terminal drivers.

A driver owns the terminal for the lifetime of the game: it switches input
into unbuffered, no-echo mode, answers "is a key waiting?" without blocking,
hands out raw key codes and writes frames. One implementation per platform;
`select_driver()` picks it once and nothing else in the program looks at the
platform again.
"""
from __future__ import annotations

import atexit
import logging
import os
import select
import signal
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

from .config import CLEAR_SCREEN, CURSOR_HOME
from .game import Direction
from .keys import KeyScheme

if sys.platform == "win32":
    import ctypes
    import msvcrt
else:
    import termios
    import tty

logger = logging.getLogger(__name__)

ESC = 0x1B
# Codes outside the byte range, so nothing typed can collide with them
ARROW_PREFIX = 0x100  # a cursor key; its final byte follows
UNMAPPED = 0x101      # an escape sequence with no meaning here
SEQUENCE_INTRODUCERS = (ord("["), ord("O"))  # CSI and SS3
MAX_SEQUENCE_PARAMS = 16
ESCAPE_WAIT = 0.025   # seconds to wait for the rest of an escape sequence
STDIN_FILENO = 0


class Terminal:
    """Platform-neutral part of a driver: scoped raw mode and output."""

    scheme = KeyScheme()

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out if out is not None else sys.stdout
        self._held = False

    @contextmanager
    def enter_raw_mode(self) -> Iterator["Terminal"]:
        """
        Hold the terminal in raw mode for the duration of the block.
        Prior settings come back on every way out, including interpreter exit.
        """
        self._acquire()
        self._held = True
        atexit.register(self.restore)
        try:
            yield self
        finally:
            self.restore()

    def restore(self) -> None:
        if not self._held:
            return
        self._held = False
        atexit.unregister(self.restore)
        self._release()

    def _acquire(self) -> None:
        pass

    def _release(self) -> None:
        pass

    # ----- input -----
    def key_available(self) -> bool:
        raise NotImplementedError

    def read_key(self) -> Optional[int]:
        raise NotImplementedError

    # ----- output -----
    def write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def clear_screen(self) -> None:
        self.write(CLEAR_SCREEN)

    def move_cursor_home(self) -> None:
        self.write(CURSOR_HOME)


def _exit_on_signal(signum, frame):
    raise SystemExit(128 + signum)


class PosixTerminal(Terminal):
    """
    termios-based driver. Reads are polled with a zero-timeout select, so the
    descriptor itself stays blocking and stdout (which usually shares it) is
    unaffected.
    """

    scheme = KeyScheme(
        prefixes=frozenset({ARROW_PREFIX}),
        arrows={
            ord("A"): Direction.UP,
            ord("B"): Direction.DOWN,
            ord("C"): Direction.RIGHT,
            ord("D"): Direction.LEFT,
        },
    )

    def __init__(self, in_fd: Optional[int] = None, out: Optional[TextIO] = None):
        super().__init__(out)
        self.fd = STDIN_FILENO if in_fd is None else in_fd
        self._pushback: list[int] = []
        self._sequence: Optional[list[int]] = None
        self._saved_attrs = None
        self._saved_sigterm = None

    def _acquire(self) -> None:
        try:
            self._saved_attrs = termios.tcgetattr(self.fd)
            tty.setcbreak(self.fd, termios.TCSAFLUSH)
        except (termios.error, OSError) as exc:
            self._saved_attrs = None
            logger.debug("raw mode unavailable on fd %s: %s", self.fd, exc)

        try:
            self._saved_sigterm = signal.signal(signal.SIGTERM, _exit_on_signal)
        except ValueError:
            # signal handlers can only be installed from the main thread
            self._saved_sigterm = None
            logger.debug("SIGTERM handler not installed outside the main thread")

    def _release(self) -> None:
        if self._saved_attrs is not None:
            try:
                termios.tcsetattr(self.fd, termios.TCSAFLUSH, self._saved_attrs)
            except (termios.error, OSError) as exc:
                logger.debug("could not restore terminal settings: %s", exc)
            self._saved_attrs = None

        if self._saved_sigterm is not None:
            signal.signal(signal.SIGTERM, self._saved_sigterm)
            self._saved_sigterm = None

    def _byte_ready(self, timeout: float = 0) -> bool:
        if self._pushback:
            return True
        readable, _, _ = select.select([self.fd], [], [], timeout)
        return bool(readable)

    def key_available(self) -> bool:
        return self._byte_ready()

    def _read_byte(self) -> Optional[int]:
        if self._pushback:
            return self._pushback.pop()
        if not self._byte_ready():
            return None
        data = os.read(self.fd, 1)
        return data[0] if data else None

    def read_key(self) -> Optional[int]:
        """
        Next key code, or None when nothing (or only part of an escape
        sequence) is waiting. A plain cursor key comes back as ARROW_PREFIX
        followed by its final byte; any other escape sequence is UNMAPPED.
        """
        if self._sequence is None:
            code = self._read_byte()
            if code != ESC or not self._byte_ready(ESCAPE_WAIT):
                return code
            follow = self._read_byte()
            if follow not in SEQUENCE_INTRODUCERS:
                if follow is not None:
                    self._pushback.append(follow)
                return code
            self._sequence = []
        return self._finish_sequence()

    def _finish_sequence(self) -> Optional[int]:
        # Parameter bytes until a final byte in 0x40-0x7E
        while self._byte_ready(ESCAPE_WAIT):
            byte = self._read_byte()
            if byte is None:
                break
            if 0x40 <= byte <= 0x7E:
                params, self._sequence = self._sequence, None
                if not params and byte in self.scheme.arrows:
                    self._pushback.append(byte)
                    return ARROW_PREFIX
                return UNMAPPED
            self._sequence.append(byte)
            if len(self._sequence) > MAX_SEQUENCE_PARAMS:
                self._sequence = None
                return UNMAPPED
        # rest of the sequence has not arrived; pick it up on the next read
        return None


class WindowsTerminal(Terminal):
    """msvcrt-based driver; arrow keys arrive as 0 or 224 followed by a scan code."""

    scheme = KeyScheme(
        prefixes=frozenset({0, 224}),
        arrows={
            72: Direction.UP,
            80: Direction.DOWN,
            75: Direction.LEFT,
            77: Direction.RIGHT,
        },
    )

    STD_OUTPUT_HANDLE = -11
    ENABLE_VIRTUAL_TERMINAL_PROCESSING = 0x0004

    def __init__(self, out: Optional[TextIO] = None):
        super().__init__(out)
        self._handle = None
        self._saved_mode = None

    def _acquire(self) -> None:
        # getch() neither echoes nor waits for Enter; only ANSI output needs enabling
        try:
            kernel32 = ctypes.windll.kernel32
            handle = kernel32.GetStdHandle(self.STD_OUTPUT_HANDLE)
            mode = ctypes.c_ulong()
            if not kernel32.GetConsoleMode(handle, ctypes.byref(mode)):
                logger.debug("GetConsoleMode failed; output is not a console")
                return
            kernel32.SetConsoleMode(handle, mode.value | self.ENABLE_VIRTUAL_TERMINAL_PROCESSING)
            self._handle, self._saved_mode = handle, mode.value
        except (AttributeError, OSError) as exc:
            logger.debug("virtual terminal processing unavailable: %s", exc)

    def _release(self) -> None:
        if self._saved_mode is not None:
            ctypes.windll.kernel32.SetConsoleMode(self._handle, self._saved_mode)
            self._handle, self._saved_mode = None, None

    def key_available(self) -> bool:
        return bool(msvcrt.kbhit())

    def read_key(self) -> Optional[int]:
        if not msvcrt.kbhit():
            return None
        return msvcrt.getch()[0]


def select_driver() -> Terminal:
    if sys.platform == "win32":
        return WindowsTerminal()
    return PosixTerminal()
