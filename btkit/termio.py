"""Terminal control: raw input mode, cursor movement and screen handling."""

from __future__ import annotations

import os
import struct
import sys
import time
from enum import IntEnum
from typing import Optional, TextIO

try:
    import fcntl
    import termios
except ImportError:  # pragma: no cover - non-POSIX platforms
    fcntl = None
    termios = None

CLEAR_SCREEN = "\033[2J"
CURSOR_HOME = "\033[H"
BEEP = "\a"
SCREEN_SAVE = "\033[?47h"
SCREEN_RESTORE = "\033[?47l"
CURSOR_SAVE = "\033[s"
CURSOR_RESTORE = "\033[u"
CURSOR_HIDE = "\033[?25l"
CURSOR_SHOW = "\033[?25h"
CURSOR_POSITION_QUERY = "\033[6n"
_POLL_INTERVAL = 0.05


class Color(IntEnum):
    """VT100 foreground color codes."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7


def parse_cursor_row(response: str) -> int:
    """Extract the row from a cursor position report such as ESC[12;40R."""
    row = 0
    for char in response:
        if char in ("\033", "["):
            continue
        if "0" <= char <= "9":
            row = row * 10 + int(char)
        if char in (";", "R", "\0"):
            break
    return row


def _fileno(stream) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class Terminal:
    """A terminal attached to an input and an output stream."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        clear_screen: bool = False,
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.clear_screen = bool(clear_screen)
        self.foreground_color = Color.BLUE
        self._saved_attrs = None

    def __enter__(self) -> "Terminal":
        self.init_terminal()
        return self

    def __exit__(self, *exc_info) -> None:
        self.restore_terminal()

    def _write(self, text: str) -> None:
        self._stdout.write(text)

    def init_terminal(self) -> None:
        """Turn off echo and line buffering; save and clear the screen if asked."""
        self._set_raw()
        if self.clear_screen:
            self._write(CURSOR_SAVE + SCREEN_SAVE + CLEAR_SCREEN + CURSOR_HOME + CURSOR_HIDE)

    def restore_terminal(self) -> None:
        """Undo what init_terminal changed."""
        if self.clear_screen:
            self._write(SCREEN_RESTORE + CURSOR_SHOW + CURSOR_RESTORE)
        self._restore_mode()

    def _set_raw(self) -> None:
        fd = _fileno(self._stdin)
        if termios is None or fd is None:
            return
        try:
            attrs = termios.tcgetattr(fd)
            saved = list(attrs)
            attrs[3] &= ~(termios.ICANON | termios.ECHO)
            termios.tcsetattr(fd, termios.TCSAFLUSH, attrs)
        except termios.error:
            return
        self._saved_attrs = saved

    def _restore_mode(self) -> None:
        fd = _fileno(self._stdin)
        if self._saved_attrs is None or termios is None or fd is None:
            return
        try:
            termios.tcsetattr(fd, termios.TCSANOW, self._saved_attrs)
        except termios.error:
            return
        self._saved_attrs = None

    def _size(self) -> os.terminal_size:
        fd = _fileno(self._stdout)
        if fd is None:
            return os.terminal_size((0, 0))
        try:
            return os.get_terminal_size(fd)
        except OSError:
            return os.terminal_size((0, 0))

    def get_rows(self) -> int:
        """Number of rows in the terminal window, 0 if unknown."""
        return self._size().lines

    def get_cols(self) -> int:
        """Number of columns in the terminal window, 0 if unknown."""
        return self._size().columns

    def get_cursor_row(self) -> int:
        """Ask the terminal for the cursor position and return its row."""
        self._write(CURSOR_POSITION_QUERY)
        self.refresh()
        fd = _fileno(self._stdin)
        if fd is not None:
            response = os.read(fd, 10).decode("ascii", errors="replace")
        else:
            response = self._stdin.read(10)
        return parse_cursor_row(response)

    def move_cursor(self, y: int, x: int) -> None:
        """Move the cursor to row ``y``, column ``x``."""
        self._write(f"\033[{y};{x}H")

    def refresh(self) -> None:
        """Flush pending output."""
        self._stdout.flush()

    def clear_input(self) -> None:
        """Discard input already waiting on the input stream."""
        fd = _fileno(self._stdin)
        if fd is None or fcntl is None or termios is None:
            return
        try:
            raw = fcntl.ioctl(fd, termios.FIONREAD, b"\0\0\0\0")
        except OSError:
            return
        pending = struct.unpack("i", raw)[0]
        if pending > 0:
            os.read(fd, pending)

    def get_char(self) -> str:
        """Wait for and return one character of input."""
        while not (char := self._stdin.read(1)):
            time.sleep(_POLL_INTERVAL)
        return char

    def show_cursor(self) -> None:
        self._write(CURSOR_SHOW)

    def beep(self) -> None:
        self._write(BEEP)

    def set_foreground_color(self, name: str) -> None:
        """Set the foreground color by name; unknown names select blue."""
        try:
            self.foreground_color = Color[name.upper()] if name.islower() else Color.BLUE
        except KeyError:
            self.foreground_color = Color.BLUE