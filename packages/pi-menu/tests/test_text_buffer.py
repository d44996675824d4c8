"""Tests for pi.menu.text_buffer -- the UTF-8 query buffer."""

from __future__ import annotations

from pi.menu.text_buffer import DEFAULT_CAPACITY, TextBuffer


def _buffer(text: str = "", cursor: int | None = None, capacity: int = DEFAULT_CAPACITY) -> TextBuffer:
    buf = TextBuffer(capacity)
    buf.insert(text)
    if cursor is not None:
        buf.set_cursor(cursor)
    return buf


class TestInsert:
    """insert() places bytes at the cursor and respects the capacity."""

    def test_insert_at_end(self) -> None:
        buf = _buffer("ab")
        assert buf.insert("c")
        assert buf.text == "abc"
        assert buf.cursor == 3

    def test_insert_in_middle(self) -> None:
        buf = _buffer("ac", cursor=1)
        buf.insert("b")
        assert buf.text == "abc"
        assert buf.cursor == 2

    def test_cursor_counts_bytes(self) -> None:
        buf = _buffer("héllo")
        assert buf.raw == "héllo".encode("utf-8")
        assert buf.cursor == 6
        assert len(buf) == 6

    def test_partial_count(self) -> None:
        buf = TextBuffer()
        buf.insert(b"abcdef", 3)
        assert buf.text == "abc"

    def test_negative_count_deletes_before_cursor(self) -> None:
        buf = _buffer("hello")
        buf.insert(b"", -2)
        assert buf.text == "hel"
        assert buf.cursor == 3

    def test_negative_count_clamped_to_cursor(self) -> None:
        buf = _buffer("hello", cursor=2)
        buf.insert(b"", -10)
        assert buf.text == "llo"
        assert buf.cursor == 0

    def test_overflow_is_refused(self) -> None:
        buf = _buffer("abc", capacity=4)
        assert not buf.insert("de")
        assert buf.text == "abc"
        assert buf.cursor == 3

    def test_fill_to_capacity(self) -> None:
        buf = _buffer("abc", capacity=4)
        assert buf.insert("d")
        assert buf.text == "abcd"

    def test_default_capacity(self) -> None:
        assert TextBuffer().capacity == 8191


class TestChangeNotification:
    """on_change fires after every accepted mutation."""

    def test_insert_notifies(self) -> None:
        calls: list[int] = []
        buf = TextBuffer()
        buf.on_change = lambda: calls.append(1)
        buf.insert("a")
        assert len(calls) == 1

    def test_zero_count_still_notifies(self) -> None:
        calls: list[int] = []
        buf = TextBuffer()
        buf.on_change = lambda: calls.append(1)
        buf.insert(b"", 0)
        assert len(calls) == 1

    def test_refused_insert_does_not_notify(self) -> None:
        calls: list[int] = []
        buf = TextBuffer(1)
        buf.on_change = lambda: calls.append(1)
        buf.insert("ab")
        assert calls == []

    def test_cursor_motion_does_not_notify(self) -> None:
        calls: list[int] = []
        buf = _buffer("abc")
        buf.on_change = lambda: calls.append(1)
        buf.move_left()
        buf.set_cursor(0)
        assert calls == []


class TestRuneMotion:
    """Cursor motion never stops inside a multi-byte character."""

    def test_move_left_skips_continuation_bytes(self) -> None:
        buf = _buffer("aé")
        assert buf.cursor == 3
        assert buf.move_left()
        assert buf.cursor == 1

    def test_move_right_skips_continuation_bytes(self) -> None:
        buf = _buffer("éa", cursor=0)
        assert buf.move_right()
        assert buf.cursor == 2

    def test_move_left_at_start(self) -> None:
        buf = _buffer("abc", cursor=0)
        assert not buf.move_left()
        assert buf.cursor == 0

    def test_move_right_at_end(self) -> None:
        buf = _buffer("abc")
        assert not buf.move_right()
        assert buf.cursor == 3

    def test_next_rune_clamps(self) -> None:
        buf = _buffer("a", cursor=0)
        assert buf.next_rune(-1) == 0
        buf.set_cursor(1)
        assert buf.next_rune(+1) == 1

    def test_next_then_previous_rune_returns_to_start(self) -> None:
        text = "aé€😀b"
        boundaries = [0, 1, 3, 6, 10, 11]
        buf = _buffer(text)
        assert len(buf) == len(text.encode("utf-8")) == boundaries[-1]
        for start, following in zip(boundaries, boundaries[1:]):
            buf.set_cursor(start)
            assert buf.next_rune(+1) == following
            buf.set_cursor(following)
            assert buf.next_rune(-1) == start

    def test_set_cursor_snaps_to_boundary(self) -> None:
        buf = _buffer("aé")
        buf.set_cursor(2)
        assert buf.cursor == 1

    def test_set_cursor_clamps(self) -> None:
        buf = _buffer("abc")
        buf.set_cursor(99)
        assert buf.cursor == 3
        buf.set_cursor(-5)
        assert buf.cursor == 0

    def test_text_before_cursor(self) -> None:
        buf = _buffer("héllo", cursor=3)
        assert buf.text_before_cursor == "hé"


class TestDeletion:
    """Character, word and line deletion."""

    def test_delete_left_removes_whole_rune(self) -> None:
        buf = _buffer("aé")
        assert buf.delete_left()
        assert buf.text == "a"
        assert buf.cursor == 1

    def test_delete_left_at_start(self) -> None:
        buf = _buffer("abc", cursor=0)
        assert not buf.delete_left()
        assert buf.text == "abc"

    def test_delete_right(self) -> None:
        buf = _buffer("abc", cursor=1)
        assert buf.delete_right()
        assert buf.text == "ac"
        assert buf.cursor == 1

    def test_delete_right_at_end(self) -> None:
        buf = _buffer("abc")
        assert not buf.delete_right()
        assert buf.text == "abc"

    def test_delete_word(self) -> None:
        buf = _buffer("foo bar")
        assert buf.delete_word()
        assert buf.text == "foo "

    def test_delete_word_skips_trailing_spaces(self) -> None:
        buf = _buffer("foo bar  ")
        buf.delete_word()
        assert buf.text == "foo "

    def test_delete_word_stops_at_slash(self) -> None:
        buf = _buffer("cd /usr/lo")
        buf.delete_word()
        assert buf.text == "cd /usr/"

    def test_delete_word_only_left_of_cursor(self) -> None:
        buf = _buffer("foo bar", cursor=5)
        buf.delete_word()
        assert buf.text == "foo ar"
        assert buf.cursor == 4

    def test_delete_to_start(self) -> None:
        buf = _buffer("hello", cursor=2)
        assert buf.delete_to_start()
        assert buf.text == "llo"
        assert buf.cursor == 0

    def test_delete_to_end(self) -> None:
        buf = _buffer("hello", cursor=2)
        assert buf.delete_to_end()
        assert buf.text == "he"
        assert buf.cursor == 2


class TestSetText:
    """set_text() replaces the content and moves the cursor to the end."""

    def test_replaces_content(self) -> None:
        buf = _buffer("abc", cursor=1)
        buf.set_text("xyz!")
        assert buf.text == "xyz!"
        assert buf.cursor == 4

    def test_truncates_at_rune_boundary(self) -> None:
        buf = TextBuffer(4)
        buf.set_text("aéé")
        assert buf.text == "aé"
        assert buf.cursor == 3
