"""Session state and the navigation state machine.

A :class:`Session` owns everything that changes while the menu is open: the
query buffer, the current match list, the page window and the selection.
:class:`NavigationStateMachine` interprets one :class:`Command` at a time
against that state. There is no explicit state enum; the state is the
``(cursor, selected, anchor)`` triple plus the session status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from pi.menu.candidates import Candidate, CandidateStore
from pi.menu.matcher import CaseMode, MatchEngine, MatchList
from pi.menu.page_window import LayoutMode, PageWindow, TextMeasurer
from pi.menu.text_buffer import DEFAULT_CAPACITY, TextBuffer

logger = logging.getLogger(__name__)

MenuAction = Literal[
    # Text input
    "insert",
    "paste",
    # Deletion
    "deleteLeft",
    "deleteRight",
    "deleteWord",
    "deleteToStart",
    "deleteToEnd",
    "clear",
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorHome",
    "cursorEnd",
    # Selection
    "selectPrev",
    "selectNext",
    "selectAt",
    "pageUp",
    "pageDown",
    "complete",
    # Termination
    "accept",
    "acceptAlternate",
    "acceptAt",
    "cancel",
]

SessionStatus = Literal["running", "accepted", "cancelled"]


@dataclass(frozen=True)
class Command:
    """One user command. ``data`` carries text, ``index`` a match position."""

    action: MenuAction
    data: bytes = b""
    index: int | None = None


class Session:
    """Explicit context for one menu session, from load to accept/cancel."""

    def __init__(
        self,
        candidates: CandidateStore,
        *,
        case_mode: CaseMode = "sensitive",
        layout: LayoutMode = "lines",
        budget: int = 10,
        measure: TextMeasurer | None = None,
        capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        self.candidates = candidates
        self.buffer = TextBuffer(capacity)
        self.engine = MatchEngine(candidates, case_mode)
        self.window = PageWindow(layout, budget, measure)
        self.matches: MatchList = MatchList()
        self.selected: int | None = None

        self.status: SessionStatus = "running"
        self.output: str | None = None

        self.buffer.on_change = self.refresh_matches
        self.refresh_matches()

    @property
    def running(self) -> bool:
        return self.status == "running"

    @property
    def selected_candidate(self) -> Candidate | None:
        if self.selected is None:
            return None
        return self.matches[self.selected]

    def refresh_matches(self) -> None:
        """Rebuild the match list and start again from its first page."""
        self.matches = self.engine.recompute(self.buffer.text)
        self.window.reset(self.matches)
        self.selected = self.window.anchor

    def set_budget(self, budget: int) -> None:
        self.window.set_budget(budget)
        if self.selected is not None and not self.window.contains(self.selected):
            self.selected = self.window.anchor

    def finish(self, status: SessionStatus, output: str | None = None) -> None:
        self.status = status
        self.output = output
        logger.info("session %s", status)


class NavigationStateMachine:
    """Applies commands to a :class:`Session` and asks for redraws.

    Each action has exactly one handler. A handler returns ``True`` when it
    changed the text, cursor or selection, in which case ``on_redraw`` fires.
    Commands that make no sense in context are ignored.
    """

    def __init__(
        self,
        session: Session,
        on_redraw: Callable[[], None] | None = None,
    ) -> None:
        self.session = session
        self.on_redraw = on_redraw
        self._handlers: dict[MenuAction, Callable[[Command], bool]] = {
            "insert": self._insert,
            "paste": self._paste,
            "deleteLeft": lambda _: self.session.buffer.delete_left(),
            "deleteRight": lambda _: self.session.buffer.delete_right(),
            "deleteWord": lambda _: self.session.buffer.delete_word(),
            "deleteToStart": lambda _: self.session.buffer.delete_to_start(),
            "deleteToEnd": lambda _: self.session.buffer.delete_to_end(),
            "clear": lambda _: self.session.buffer.delete_to_start(),
            "cursorLeft": self._cursor_left,
            "cursorRight": self._cursor_right,
            "cursorHome": self._cursor_home,
            "cursorEnd": self._cursor_end,
            "selectPrev": lambda _: self._select_prev(),
            "selectNext": lambda _: self._select_next(),
            "selectAt": self._select_at,
            "pageUp": lambda _: self._flip_page(self.session.window.flip_prev),
            "pageDown": lambda _: self._flip_page(self.session.window.flip_next),
            "complete": self._complete,
            "accept": self._accept,
            "acceptAlternate": self._accept_alternate,
            "acceptAt": self._accept_at,
            "cancel": self._cancel,
        }

    def handle(self, command: Command) -> None:
        if not self.session.running:
            return
        handler = self._handlers.get(command.action)
        if handler is None:
            logger.warning("ignoring unknown action %r", command.action)
            return
        if handler(command) and self.session.running:
            self._request_redraw()

    def _request_redraw(self) -> None:
        if self.on_redraw is not None:
            self.on_redraw()

    # -- text --------------------------------------------------------------

    def _insert(self, command: Command) -> bool:
        data = command.data
        if not data or data[0] < 0x20 or data[0] == 0x7F:
            return False
        return self.session.buffer.insert(data)

    def _paste(self, command: Command) -> bool:
        clean = command.data.replace(b"\r\n", b"\n").replace(b"\r", b"\n")
        line = clean.split(b"\n", 1)[0]
        self.session.buffer.insert(line)
        return True

    def _complete(self, command: Command) -> bool:
        candidate = self.session.selected_candidate
        if candidate is None:
            return False
        self.session.buffer.set_text(candidate.text)
        return True

    # -- cursor ------------------------------------------------------------

    def _cursor_left(self, command: Command) -> bool:
        buffer = self.session.buffer
        if not buffer.at_start:
            return buffer.move_left()
        if self.session.window.mode == "lines":
            return False
        return self._select_prev()

    def _cursor_right(self, command: Command) -> bool:
        buffer = self.session.buffer
        if not buffer.at_end:
            return buffer.move_right()
        if self.session.window.mode == "lines":
            return False
        return self._select_next()

    def _cursor_home(self, command: Command) -> bool:
        session = self.session
        if session.matches and session.selected != 0:
            session.window.show_first()
            session.selected = session.window.anchor
        else:
            session.buffer.set_cursor(0)
        return True

    def _cursor_end(self, command: Command) -> bool:
        session = self.session
        if not session.buffer.at_end:
            session.buffer.set_cursor(len(session.buffer))
            return True
        if session.window.next_anchor is not None:
            session.window.jump_to_last()
        session.selected = len(session.matches) - 1 if session.matches else None
        return True

    # -- selection ---------------------------------------------------------

    def _select_prev(self) -> bool:
        session = self.session
        if not session.selected:
            return False
        session.selected -= 1
        anchor = session.window.anchor
        if anchor is not None and session.selected < anchor:
            session.window.flip_prev()
        return True

    def _select_next(self) -> bool:
        session = self.session
        if session.selected is None or session.selected >= len(session.matches) - 1:
            return False
        session.selected += 1
        if session.selected == session.window.next_anchor:
            session.window.flip_next()
        return True

    def _select_at(self, command: Command) -> bool:
        session = self.session
        if not session.window.contains(command.index) or command.index == session.selected:
            return False
        session.selected = command.index
        return True

    def _flip_page(self, flip: Callable[[], bool]) -> bool:
        if not flip():
            return False
        self.session.selected = self.session.window.anchor
        return True

    # -- termination -------------------------------------------------------

    def _accept(self, command: Command) -> bool:
        session = self.session
        candidate = session.selected_candidate
        session.finish(
            "accepted",
            candidate.text if candidate is not None else session.buffer.text,
        )
        return True

    def _accept_alternate(self, command: Command) -> bool:
        self.session.finish("accepted", self.session.buffer.text)
        return True

    def _accept_at(self, command: Command) -> bool:
        session = self.session
        index = command.index
        if index is None or not 0 <= index < len(session.matches):
            return False
        session.finish("accepted", session.matches[index].text)
        return True

    def _cancel(self, command: Command) -> bool:
        self.session.finish("cancelled")
        return True
