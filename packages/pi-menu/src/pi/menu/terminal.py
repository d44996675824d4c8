"""Terminal abstraction for the menu's interactive surface.

Candidates arrive on stdin and the result leaves on stdout, so the menu
talks to the user through the controlling terminal (``/dev/tty``) instead.
``TtyTerminal`` puts it in raw mode and enables bracketed paste, SGR mouse
reporting and (when the terminal answers the query) the Kitty keyboard
protocol.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import re
import signal
import termios
import tty
from typing import Callable, Protocol

from pi.menu.input_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START, InputBuffer

logger = logging.getLogger(__name__)

TTY_PATH = "/dev/tty"

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

# Button presses, any-motion tracking, SGR encoding
_MOUSE_ENABLE = "\x1b[?1000h\x1b[?1003h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l\x1b[?1000l"

_KITTY_QUERY = "\x1b[?u"
_KITTY_ENABLE = "\x1b[>1u"
_KITTY_DISABLE = "\x1b[<u"

_KITTY_RESPONSE_RE = re.compile(r"^\x1b\[\?(\d+)u$")

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_LINE = "\x1b[2K\r"
_CLEAR_FROM_CURSOR = "\x1b[0J"
_CURSOR_UP_FMT = "\x1b[{}A"
_CURSOR_DOWN_FMT = "\x1b[{}B"


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def move_by(self, lines: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_line(self) -> None: ...

    def clear_from_cursor(self) -> None: ...


class TtyTerminal:
    """Terminal backed by the controlling tty.

    ``on_input`` receives one complete key sequence, mouse report or text
    character per call; a bracketed paste arrives as a single call, still
    wrapped in its paste markers.
    """

    def __init__(self, path: str = TTY_PATH) -> None:
        self._path = path
        self._fd: int | None = None
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._kitty_protocol_active = False
        self._input_buffer: InputBuffer | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._reader_active = False
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None

    @property
    def kitty_protocol_active(self) -> bool:
        return self._kitty_protocol_active

    @property
    def columns(self) -> int:
        try:
            return os.get_terminal_size(self._require_fd()).columns
        except (ValueError, OSError):
            return 80

    @property
    def rows(self) -> int:
        try:
            return os.get_terminal_size(self._require_fd()).lines
        except (ValueError, OSError):
            return 24

    # -- start / stop -------------------------------------------------------

    def open(self) -> None:
        """Open the tty. Raises ``OSError`` when there is no controlling terminal."""
        if self._fd is None:
            self._fd = os.open(self._path, os.O_RDWR | os.O_NOCTTY)
            logger.debug("opened %s as fd %d", self._path, self._fd)

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Enter raw mode, enable paste and mouse reporting, start reading."""
        self.open()
        fd = self._require_fd()
        self._input_handler = on_input
        self._resize_handler = on_resize

        self._original_termios = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._raw_write(_BRACKETED_PASTE_ENABLE + _MOUSE_ENABLE)

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._setup_input_buffer()
        self._start_reader()
        self._raw_write(_KITTY_QUERY)

    def stop(self) -> None:
        """Restore the terminal exactly as it was found and close it."""
        if self._fd is None:
            return
        self._raw_write(_MOUSE_DISABLE + _BRACKETED_PASTE_DISABLE)
        if self._kitty_protocol_active:
            self._raw_write(_KITTY_DISABLE)
            self._kitty_protocol_active = False

        if self._input_buffer is not None:
            self._input_buffer.clear()
            self._input_buffer = None

        self._remove_reader()

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        if self._original_termios is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        os.close(self._fd)
        self._fd = None
        self._input_handler = None
        self._resize_handler = None

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        self._raw_write(data)

    def move_by(self, lines: int) -> None:
        """Move the cursor up (negative) or down (positive) by *lines*."""
        if lines < 0:
            self._raw_write(_CURSOR_UP_FMT.format(-lines))
        elif lines > 0:
            self._raw_write(_CURSOR_DOWN_FMT.format(lines))

    def hide_cursor(self) -> None:
        self._raw_write(_HIDE_CURSOR)

    def show_cursor(self) -> None:
        self._raw_write(_SHOW_CURSOR)

    def clear_line(self) -> None:
        self._raw_write(_CLEAR_LINE)

    def clear_from_cursor(self) -> None:
        self._raw_write(_CLEAR_FROM_CURSOR)

    # -- input --------------------------------------------------------------

    def _setup_input_buffer(self) -> None:
        self._input_buffer = InputBuffer(timeout=0.01)

        def _on_buffer_data(data: str) -> None:
            if _KITTY_RESPONSE_RE.match(data):
                self._kitty_protocol_active = True
                self._raw_write(_KITTY_ENABLE)
                logger.debug("kitty keyboard protocol enabled")
                return
            if self._input_handler is not None:
                self._input_handler(data)

        def _on_buffer_paste(data: str) -> None:
            if self._input_handler is not None:
                self._input_handler(BRACKETED_PASTE_START + data + BRACKETED_PASTE_END)

        self._input_buffer.on_data = _on_buffer_data
        self._input_buffer.on_paste = _on_buffer_paste

    def _start_reader(self) -> None:
        if self._reader_active:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("no running event loop; terminal input disabled")
            return
        loop.add_reader(self._require_fd(), self._on_readable)
        self._reader_active = True

    def _remove_reader(self) -> None:
        if not self._reader_active:
            return
        try:
            asyncio.get_running_loop().remove_reader(self._require_fd())
        except RuntimeError:
            pass
        self._reader_active = False

    def _on_readable(self) -> None:
        try:
            raw = os.read(self._require_fd(), 4096)
        except OSError as e:
            logger.debug("tty read failed: %s", e)
            return
        if not raw:
            return
        data = self._decoder.decode(raw)
        if not data:
            return
        if self._input_buffer is not None:
            self._input_buffer.process(data)
        elif self._input_handler is not None:
            self._input_handler(data)

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        handler = self._resize_handler
        if handler is None:
            return
        # Wake the selector so the resize is handled promptly
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            handler()
        else:
            loop.call_soon_threadsafe(handler)

    # -- helpers ------------------------------------------------------------

    def _require_fd(self) -> int:
        if self._fd is None:
            raise ValueError("terminal is not open")
        return self._fd

    def _raw_write(self, data: str) -> None:
        if self._fd is None:
            return
        encoded = data.encode("utf-8")
        try:
            while encoded:
                written = os.write(self._fd, encoded)
                encoded = encoded[written:]
        except OSError as e:
            logger.debug("tty write failed: %s", e)
