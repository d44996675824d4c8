"""Layout of the menu: the instructions handed to a render sink.

A :class:`MenuLayout` is a list of :class:`Box` records in cell coordinates
(input field, visible candidates, ``<``/``>`` page indicators) plus the text
cursor position. Line layout puts the input on its own row with one
candidate per row below (or above, with ``bottom``). Flow layout puts
everything on one row: the input field, ``<``, the page, and ``>`` flush
right.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

from pi.menu.candidates import CandidateStore
from pi.menu.navigation import Session
from pi.menu.width import CellMeasurer

BoxRole = Literal["input", "item", "prevIndicator", "nextIndicator"]

PREV_INDICATOR = "<"
NEXT_INDICATOR = ">"


@dataclass(frozen=True)
class Box:
    x: int
    y: int
    width: int
    text: str
    role: BoxRole
    highlighted: bool = False
    index: int | None = None
    # Clickable width when it differs from the painted width
    hit_width: int | None = None

    def contains(self, x: int, y: int) -> bool:
        reach = self.width if self.hit_width is None else self.hit_width
        return y == self.y and self.x <= x < self.x + reach


@dataclass
class MenuLayout:
    width: int
    height: int
    boxes: list[Box] = field(default_factory=list)
    cursor_x: int = 0
    cursor_y: int = 0

    def hit_test(self, x: int, y: int) -> Box | None:
        for box in self.boxes:
            if box.contains(x, y):
                return box
        return None

    def boxes_with_role(self, role: BoxRole) -> list[Box]:
        return [b for b in self.boxes if b.role == role]


class RenderSink(Protocol):
    """Paints a layout. Called whenever the session asks for a redraw."""

    def paint(self, layout: MenuLayout) -> None: ...


def input_field_width(
    candidates: CandidateStore, menu_width: int, measure: CellMeasurer
) -> int:
    """Input field width in flow layout: the widest candidate, at most a third."""
    widest = candidates.widest
    width = measure(widest.text) if widest is not None else 0
    return min(width, menu_width // 3)


def flow_budget(menu_width: int, input_width: int, measure: CellMeasurer) -> int:
    """Cells left for candidates once the input and both indicators are placed."""
    return menu_width - (
        input_width + measure(PREV_INDICATOR) + measure(NEXT_INDICATOR)
    )


def build_layout(
    session: Session,
    menu_width: int,
    measure: CellMeasurer,
    *,
    input_width: int = 0,
    bottom: bool = False,
) -> MenuLayout:
    if session.window.mode == "lines":
        return _build_line_layout(session, menu_width, measure, bottom)
    return _build_flow_layout(session, menu_width, measure, input_width)


def _cursor_offset(session: Session, measure: CellMeasurer) -> int:
    prefix = session.buffer.text_before_cursor
    return measure.upto(prefix, len(prefix))


def _build_line_layout(
    session: Session, menu_width: int, measure: CellMeasurer, bottom: bool
) -> MenuLayout:
    rows = session.window.budget
    layout = MenuLayout(width=menu_width, height=rows + 1)
    input_row = rows if bottom else 0
    first_item_row = 0 if bottom else 1

    layout.boxes.append(
        Box(x=0, y=input_row, width=menu_width, text=session.buffer.text, role="input")
    )
    for offset, index in enumerate(session.window.page_range()):
        layout.boxes.append(
            Box(
                x=0,
                y=first_item_row + offset,
                width=menu_width,
                text=session.matches[index].text,
                role="item",
                highlighted=index == session.selected,
                index=index,
            )
        )

    layout.cursor_x = min(_cursor_offset(session, measure), menu_width - 1)
    layout.cursor_y = input_row
    return layout


def _build_flow_layout(
    session: Session, menu_width: int, measure: CellMeasurer, input_width: int
) -> MenuLayout:
    layout = MenuLayout(width=menu_width, height=1)
    window = session.window

    field_width = input_width if session.matches else menu_width
    prev_width = measure(PREV_INDICATOR)
    # An empty "<" slot clicks like the input field
    hit_width = None
    if session.matches and window.prev_anchor is None:
        hit_width = field_width + prev_width
    layout.boxes.append(
        Box(
            x=0,
            y=0,
            width=field_width,
            text=session.buffer.text,
            role="input",
            hit_width=hit_width,
        )
    )
    layout.cursor_x = min(_cursor_offset(session, measure), max(field_width - 1, 0))

    if not session.matches:
        return layout

    next_width = measure(NEXT_INDICATOR)
    x = input_width
    if window.prev_anchor is not None:
        layout.boxes.append(
            Box(x=x, y=0, width=prev_width, text=PREV_INDICATOR, role="prevIndicator")
        )
    x += prev_width

    for index in window.page_range():
        text = session.matches[index].text
        w = min(measure(text), menu_width - x - next_width)
        if w <= 0:
            break
        layout.boxes.append(
            Box(
                x=x,
                y=0,
                width=w,
                text=text,
                role="item",
                highlighted=index == session.selected,
                index=index,
            )
        )
        x += w

    if window.next_anchor is not None:
        layout.boxes.append(
            Box(
                x=menu_width - next_width,
                y=0,
                width=next_width,
                text=NEXT_INDICATOR,
                role="nextIndicator",
            )
        )
    return layout
