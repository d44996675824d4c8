"""Tests for pi.menu.input_buffer -- reassembling terminal input."""

from __future__ import annotations

import asyncio

import pytest

from pi.menu.input_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    InputBuffer,
    sequence_status,
    split_sequences,
)


class Collector:
    """Collects emitted data/paste events for assertions."""

    def __init__(self) -> None:
        self.data: list[str] = []
        self.pastes: list[str] = []

    def on_data(self, d: str) -> None:
        self.data.append(d)

    def on_paste(self, d: str) -> None:
        self.pastes.append(d)


def make_buffer(timeout: float = 0.01) -> tuple[InputBuffer, Collector]:
    buf = InputBuffer(timeout=timeout)
    col = Collector()
    buf.on_data = col.on_data
    buf.on_paste = col.on_paste
    return buf, col


class TestSequenceStatus:
    """sequence_status() tells whole sequences from prefixes."""

    @pytest.mark.parametrize(
        "data",
        ["\x1b[A", "\x1b[1;5A", "\x1b[5~", "\x1b[<0;10;3M", "\x1bOA", "\x1ba", "\x1b]0;t\x07"],
    )
    def test_complete(self, data: str) -> None:
        assert sequence_status(data) == "complete"

    @pytest.mark.parametrize("data", ["\x1b", "\x1b[", "\x1b[1;5", "\x1bO", "\x1b]0;title"])
    def test_incomplete(self, data: str) -> None:
        assert sequence_status(data) == "incomplete"


class TestSplitSequences:
    """split_sequences() separates keys and keeps the unfinished tail."""

    def test_plain_text_splits_per_character(self) -> None:
        assert split_sequences("ab") == (["a", "b"], "")

    def test_mixed(self) -> None:
        assert split_sequences("a\x1b[Ab") == (["a", "\x1b[A", "b"], "")

    def test_incomplete_tail(self) -> None:
        assert split_sequences("a\x1b[1;") == (["a"], "\x1b[1;")


class TestProcessWithoutLoop:
    """Outside an event loop a dangling ESC is flushed at once."""

    def test_emits_complete_sequences(self) -> None:
        buf, col = make_buffer()
        buf.process("x\x1b[B")
        assert col.data == ["x", "\x1b[B"]

    def test_lone_escape_flushed(self) -> None:
        buf, col = make_buffer()
        buf.process("\x1b")
        assert col.data == ["\x1b"]
        assert buf.pending == ""


class TestProcessWithLoop:
    """Inside an event loop a split sequence is reassembled."""

    @pytest.mark.asyncio
    async def test_split_sequence_reassembled(self) -> None:
        buf, col = make_buffer()
        buf.process("\x1b[")
        assert col.data == []
        assert buf.pending == "\x1b["
        buf.process("A")
        assert col.data == ["\x1b[A"]

    @pytest.mark.asyncio
    async def test_lone_escape_flushed_after_timeout(self) -> None:
        buf, col = make_buffer(timeout=0.01)
        buf.process("\x1b")
        assert col.data == []
        await asyncio.sleep(0.05)
        assert col.data == ["\x1b"]


class TestBracketedPaste:
    """Bracketed paste content is delivered as one payload."""

    def test_paste_in_one_chunk(self) -> None:
        buf, col = make_buffer()
        buf.process(f"a{BRACKETED_PASTE_START}hello\nworld{BRACKETED_PASTE_END}b")
        assert col.pastes == ["hello\nworld"]
        assert col.data == ["a", "b"]

    def test_paste_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}hel")
        assert buf.in_paste
        buf.process(f"lo{BRACKETED_PASTE_END}")
        assert not buf.in_paste
        assert col.pastes == ["hello"]

    def test_escape_sequences_inside_paste_are_not_keys(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}\x1b[A{BRACKETED_PASTE_END}")
        assert col.pastes == ["\x1b[A"]
        assert col.data == []

    def test_clear_drops_paste(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}abc")
        buf.clear()
        assert not buf.in_paste
        buf.process("x")
        assert col.data == ["x"]
        assert col.pastes == []
