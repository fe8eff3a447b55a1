import io
import os
import signal
import sys

import pytest

from termsnake.game import Direction
from termsnake.keys import NOOP, QUIT, set_direction
from termsnake.main import poll_intents
from termsnake.terminal import ARROW_PREFIX, ESC, PosixTerminal, select_driver

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX driver")


@pytest.fixture
def pipe():
    r, w = os.pipe()
    yield r, w
    for fd in (r, w):
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.fixture
def term(pipe) -> PosixTerminal:
    return PosixTerminal(in_fd=pipe[0], out=io.StringIO())


def test_nothing_waiting_reads_none(term) -> None:
    assert term.key_available() is False
    assert term.read_key() is None


def test_reads_plain_bytes_in_order(term, pipe) -> None:
    os.write(pipe[1], b"wq")

    assert term.key_available() is True
    assert term.read_key() == ord("w")
    assert term.read_key() == ord("q")
    assert term.key_available() is False


def test_ansi_arrow_folds_into_prefix_plus_final_byte(term, pipe) -> None:
    os.write(pipe[1], b"\x1b[D")

    assert term.read_key() == ARROW_PREFIX
    assert term.read_key() == ord("D")


def test_escape_followed_by_a_letter_keeps_both(term, pipe) -> None:
    os.write(pipe[1], b"\x1bw")

    assert term.read_key() == ESC
    assert term.key_available() is True
    assert term.read_key() == ord("w")


def test_lone_escape(term, pipe) -> None:
    os.write(pipe[1], b"\x1b")

    assert term.read_key() == ESC
    assert term.read_key() is None


def test_closed_input_reads_none(term, pipe) -> None:
    os.close(pipe[1])

    assert term.read_key() is None
    assert list(poll_intents(term)) == []


def test_poll_intents_maps_arrows_and_letters(term, pipe) -> None:
    os.write(pipe[1], b"\x1b[Aq")

    intents = list(poll_intents(term))

    assert intents[0].direction is Direction.UP
    assert intents[1] == QUIT


def test_application_mode_arrow_steers_the_same_way(term, pipe) -> None:
    os.write(pipe[1], b"\x1bOD")

    intents = list(poll_intents(term))

    assert [i.direction for i in intents] == [Direction.LEFT]


def test_modified_arrow_is_ignored_rather_than_read_as_letters(term, pipe) -> None:
    """Ctrl-Up carries parameters; none of its bytes may turn the snake."""
    os.write(pipe[1], b"\x1b[1;5A")

    intents = list(poll_intents(term))

    assert intents == [NOOP]
    assert term.key_available() is False


def test_other_escape_sequences_are_ignored(term, pipe) -> None:
    os.write(pipe[1], b"\x1bOP\x1b[3~d")

    intents = list(poll_intents(term))

    assert intents == [NOOP, NOOP, set_direction(Direction.RIGHT)]


def test_arrow_split_across_reads_is_reassembled(term, pipe) -> None:
    os.write(pipe[1], b"\x1b[")
    assert list(poll_intents(term)) == []

    os.write(pipe[1], b"A")
    intents = list(poll_intents(term))

    assert [i.direction for i in intents] == [Direction.UP]


def test_utf8_continuation_byte_does_not_swallow_the_next_key(term, pipe) -> None:
    # "ћ" is d1 9b; 0x9b is the 8-bit CSI byte
    os.write(pipe[1], "ћ".encode() + b"q")

    intents = list(poll_intents(term))

    assert intents == [NOOP, NOOP, QUIT]


def test_raw_mode_on_a_non_tty_degrades_quietly(term) -> None:
    before = signal.getsignal(signal.SIGTERM)

    with term.enter_raw_mode() as held:
        assert held is term
        assert signal.getsignal(signal.SIGTERM) is not before

    assert signal.getsignal(signal.SIGTERM) == before
    term.restore()  # already released; a second restore is a no-op


def test_sigterm_inside_raw_mode_unwinds_through_restore(term) -> None:
    before = signal.getsignal(signal.SIGTERM)

    with pytest.raises(SystemExit) as excinfo:
        with term.enter_raw_mode():
            signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)

    assert excinfo.value.code == 128 + signal.SIGTERM
    assert signal.getsignal(signal.SIGTERM) == before


def test_screen_control_sequences(term) -> None:
    term.clear_screen()
    term.move_cursor_home()

    assert term.out.getvalue() == "\x1b[2J\x1b[H\x1b[H"


def test_select_driver_picks_posix() -> None:
    assert isinstance(select_driver(), PosixTerminal)
