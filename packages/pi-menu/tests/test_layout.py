"""Tests for pi.menu.layout -- boxes for the render sink."""

from __future__ import annotations

from pi.menu.candidates import CandidateStore
from pi.menu.layout import build_layout, flow_budget, input_field_width
from pi.menu.navigation import Command, NavigationStateMachine, Session
from pi.menu.width import CellMeasurer

MEASURE = CellMeasurer()


def _flow_session(texts: list[str], menu_width: int = 30) -> tuple[Session, int]:
    store = CandidateStore(texts)
    input_width = input_field_width(store, menu_width, MEASURE)
    session = Session(
        store,
        layout="flow",
        budget=flow_budget(menu_width, input_width, MEASURE),
        measure=MEASURE,
    )
    return session, input_width


class TestLineLayout:
    """Input on its own row, one candidate per row."""

    def test_rows(self) -> None:
        session = Session(CandidateStore(["apple", "banana", "cherry"]), budget=2)
        layout = build_layout(session, 20, MEASURE)
        assert layout.height == 3
        assert layout.width == 20

        (field,) = layout.boxes_with_role("input")
        assert (field.x, field.y, field.width) == (0, 0, 20)

        items = layout.boxes_with_role("item")
        assert [(b.y, b.text, b.index) for b in items] == [(1, "apple", 0), (2, "banana", 1)]
        assert [b.highlighted for b in items] == [True, False]

    def test_bottom_puts_input_last(self) -> None:
        session = Session(CandidateStore(["apple", "banana", "cherry"]), budget=2)
        layout = build_layout(session, 20, MEASURE, bottom=True)
        (field,) = layout.boxes_with_role("input")
        assert field.y == 2
        assert [b.y for b in layout.boxes_with_role("item")] == [0, 1]
        assert layout.cursor_y == 2

    def test_cursor_follows_text(self) -> None:
        session = Session(CandidateStore(["apple"]), budget=1)
        session.buffer.insert("ap")
        layout = build_layout(session, 20, MEASURE)
        assert (layout.cursor_x, layout.cursor_y) == (3, 0)

    def test_height_is_fixed_when_few_matches(self) -> None:
        session = Session(CandidateStore(["apple", "banana"]), budget=5)
        session.buffer.insert("ban")
        layout = build_layout(session, 20, MEASURE)
        assert layout.height == 6
        assert len(layout.boxes_with_role("item")) == 1


class TestFlowLayout:
    """Everything on one row with page indicators."""

    def test_all_fit(self) -> None:
        session, input_width = _flow_session(["aa", "bb", "cc", "dd"])
        assert input_width == 4
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        assert layout.height == 1
        items = layout.boxes_with_role("item")
        assert [(b.x, b.width, b.text) for b in items] == [
            (7, 4, "aa"),
            (11, 4, "bb"),
            (15, 4, "cc"),
            (19, 4, "dd"),
        ]
        assert layout.boxes_with_role("prevIndicator") == []
        assert layout.boxes_with_role("nextIndicator") == []

    def test_next_indicator_flush_right(self) -> None:
        session, input_width = _flow_session([f"x{i}" for i in range(8)])
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        assert len(layout.boxes_with_role("item")) == 5
        (indicator,) = layout.boxes_with_role("nextIndicator")
        assert (indicator.x, indicator.text) == (27, ">")

    def test_prev_indicator_after_flip(self) -> None:
        session, input_width = _flow_session([f"x{i}" for i in range(8)])
        NavigationStateMachine(session).handle(Command("pageDown"))
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        (indicator,) = layout.boxes_with_role("prevIndicator")
        assert (indicator.x, indicator.text) == (4, "<")
        assert [b.index for b in layout.boxes_with_role("item")] == [5, 6, 7]

    def test_no_matches_input_takes_full_width(self) -> None:
        session, input_width = _flow_session(["aa", "bb"])
        session.buffer.insert("zz")
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        assert len(layout.boxes) == 1
        assert layout.boxes[0].width == 30

    def test_hit_test(self) -> None:
        session, input_width = _flow_session(["aa", "bb"])
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        hit = layout.hit_test(12, 0)
        assert hit is not None and hit.text == "bb" and hit.index == 1
        assert layout.hit_test(1, 0).role == "input"
        assert layout.hit_test(29, 0) is None
        assert layout.hit_test(1, 1) is None

    def test_empty_prev_slot_hits_input(self) -> None:
        session, input_width = _flow_session(["aa", "bb"])
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        (field,) = layout.boxes_with_role("input")
        assert field.width == input_width
        assert layout.hit_test(input_width + 1, 0).role == "input"
        assert layout.hit_test(input_width + 3, 0).role == "item"

    def test_prev_indicator_hit_after_flip(self) -> None:
        session, input_width = _flow_session([f"x{i}" for i in range(8)])
        NavigationStateMachine(session).handle(Command("pageDown"))
        layout = build_layout(session, 30, MEASURE, input_width=input_width)
        assert layout.hit_test(input_width + 1, 0).role == "prevIndicator"
        assert layout.hit_test(input_width - 1, 0).role == "input"


class TestSizing:
    """Input field width and flow budget."""

    def test_input_width_capped_at_a_third(self) -> None:
        store = CandidateStore(["x" * 40, "y"])
        assert input_field_width(store, 30, MEASURE) == 10

    def test_input_width_without_candidates(self) -> None:
        assert input_field_width(CandidateStore([]), 30, MEASURE) == 0

    def test_flow_budget(self) -> None:
        assert flow_budget(80, 20, MEASURE) == 80 - 20 - 3 - 3
