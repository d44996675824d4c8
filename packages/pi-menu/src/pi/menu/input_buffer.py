"""Split raw terminal input into complete sequences and paste payloads.

Reads from the terminal arrive in arbitrary chunks: an escape sequence can be
cut in half, several keys can arrive together, and a bracketed paste can span
many reads. :class:`InputBuffer` reassembles them and emits one complete key
sequence (or one paste payload) per callback.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete"]


def sequence_status(data: str) -> SequenceStatus:
    """Classify *data*, which starts with ESC, as a whole sequence or a prefix."""
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    # CSI: parameters and intermediates, then a final byte in 0x40-0x7E
    if introducer == "[":
        if len(data) < 3:
            return "incomplete"
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    # OSC, DCS, APC: terminated by BEL or ST
    if introducer in "]P_":
        if data.endswith("\x07") and introducer == "]":
            return "complete"
        return "complete" if data.endswith(f"{ESC}\\") else "incomplete"

    # SS3: exactly one more character
    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # Meta: ESC followed by any single character
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an incomplete remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if sequence_status(buffer[pos:end]) == "complete":
                sequences.append(buffer[pos:end])
                pos = end
                break
            if end >= len(buffer):
                return sequences, buffer[pos:]
            end += 1

    return sequences, ""


class InputBuffer:
    """Buffers terminal input and emits complete sequences.

    A lone ESC is ambiguous (escape key or start of a sequence), so an
    incomplete remainder is flushed as-is after *timeout* seconds when an
    event loop is available, and immediately otherwise.
    """

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer = ""
        self._timeout = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._paste_buffer: str | None = None

        self.on_data: Callable[[str], None] | None = None
        self.on_paste: Callable[[str], None] | None = None

    @property
    def pending(self) -> str:
        return self._buffer

    @property
    def in_paste(self) -> bool:
        return self._paste_buffer is not None

    def process(self, data: str) -> None:
        self._cancel_timeout()

        if self._paste_buffer is not None:
            self._paste_buffer += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            sequences, _ = split_sequences(self._buffer[:start])
            self._emit(sequences)
            self._paste_buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        self._emit(sequences)

        if self._buffer:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._emit(self.flush())
            else:
                self._timeout_handle = loop.call_later(self._timeout, self._on_timeout)

    def flush(self) -> list[str]:
        """Give up on the pending remainder and return it as one sequence."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        pending, self._buffer = self._buffer, ""
        return [pending]

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""
        self._paste_buffer = None

    def _finish_paste(self) -> None:
        assert self._paste_buffer is not None
        end = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        content = self._paste_buffer[:end]
        remaining = self._paste_buffer[end + len(BRACKETED_PASTE_END) :]
        self._paste_buffer = None
        if self.on_paste is not None:
            self.on_paste(content)
        if remaining:
            self.process(remaining)

    def _emit(self, sequences: list[str]) -> None:
        if self.on_data is None:
            return
        for sequence in sequences:
            self.on_data(sequence)

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        self._emit(self.flush())

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
