"""Query text buffer: UTF-8 bytes with a rune-aligned byte cursor.

The buffer stores the query exactly as typed (raw UTF-8) so that cursor
arithmetic stays in bytes. Every mutation goes through :meth:`TextBuffer.insert`
(or the truncation in :meth:`TextBuffer.delete_to_end`) and fires the
``on_change`` listener, which is how the session recomputes matches.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 8191

_CONTINUATION_MASK = 0xC0
_CONTINUATION_BITS = 0x80

_SPACE = ord(" ")
_SLASH = ord("/")


def _is_continuation(byte: int) -> bool:
    return byte & _CONTINUATION_MASK == _CONTINUATION_BITS


class TextBuffer:
    """Fixed-capacity query buffer with UTF-8 aware cursor motion."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._text = bytearray()
        self._cursor: int = 0
        self._capacity = capacity

        self.on_change: Callable[[], None] | None = None

    # -- accessors ---------------------------------------------------------

    @property
    def raw(self) -> bytes:
        return bytes(self._text)

    @property
    def text(self) -> str:
        return self._text.decode("utf-8", errors="replace")

    @property
    def text_before_cursor(self) -> str:
        return self._text[: self._cursor].decode("utf-8", errors="replace")

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def at_start(self) -> bool:
        return self._cursor == 0

    @property
    def at_end(self) -> bool:
        return self._cursor >= len(self._text)

    def __len__(self) -> int:
        return len(self._text)

    # -- cursor motion -----------------------------------------------------

    def next_rune(self, direction: int) -> int:
        """Return the offset of the rune boundary next to the cursor.

        *direction* is ``+1`` or ``-1``. Continuation bytes are skipped; the
        result is clamped to the buffer, so malformed input never escapes it.
        """
        n = self._cursor + direction
        while 0 < n < len(self._text) and _is_continuation(self._text[n]):
            n += direction
        return max(0, min(n, len(self._text)))

    def set_cursor(self, position: int) -> None:
        """Move the cursor, snapping back to the nearest rune boundary."""
        position = max(0, min(position, len(self._text)))
        while 0 < position < len(self._text) and _is_continuation(self._text[position]):
            position -= 1
        self._cursor = position

    def move_left(self) -> bool:
        if self.at_start:
            return False
        self._cursor = self.next_rune(-1)
        return True

    def move_right(self) -> bool:
        if self.at_end:
            return False
        self._cursor = self.next_rune(+1)
        return True

    # -- mutation ----------------------------------------------------------

    def insert(self, data: bytes | str, n: int | None = None) -> bool:
        """Insert ``n`` bytes of *data* at the cursor, or delete ``-n`` bytes.

        A positive count inserts, a negative count removes the bytes that end
        at the cursor. Returns ``False`` when the result would exceed the
        capacity; the buffer is left untouched in that case.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        if n is None:
            n = len(data)

        if n > 0:
            chunk = bytes(data[:n])
            n = len(chunk)
        else:
            chunk = b""
            n = max(n, -self._cursor)

        if len(self._text) + n > self._capacity:
            logger.debug(
                "dropping %d byte insert: buffer holds %d of %d",
                n,
                len(self._text),
                self._capacity,
            )
            return False

        if n > 0:
            self._text[self._cursor : self._cursor] = chunk
        elif n < 0:
            del self._text[self._cursor + n : self._cursor]
        self._cursor += n
        self._notify()
        return True

    def set_text(self, value: str) -> None:
        """Replace the whole content and put the cursor at the end."""
        encoded = value.encode("utf-8")
        if len(encoded) > self._capacity:
            end = self._capacity
            while end > 0 and _is_continuation(encoded[end]):
                end -= 1
            encoded = encoded[:end]
        self._text = bytearray(encoded)
        self._cursor = len(self._text)
        self._notify()

    def delete_left(self) -> bool:
        if self.at_start:
            return False
        return self.insert(b"", self.next_rune(-1) - self._cursor)

    def delete_right(self) -> bool:
        if self.at_end:
            return False
        self._cursor = self.next_rune(+1)
        return self.delete_left()

    def delete_word(self) -> bool:
        """Delete trailing spaces left of the cursor, then one word.

        A word ends at a space or a path separator, so ``/usr/lo`` loses only
        ``lo``.
        """
        changed = False
        while not self.at_start and self._text[self.next_rune(-1)] == _SPACE:
            changed = self.delete_left() or changed
        while not self.at_start and self._text[self.next_rune(-1)] not in (_SPACE, _SLASH):
            changed = self.delete_left() or changed
        return changed

    def delete_to_start(self) -> bool:
        return self.insert(b"", -self._cursor)

    def delete_to_end(self) -> bool:
        del self._text[self._cursor :]
        self._notify()
        return True

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
