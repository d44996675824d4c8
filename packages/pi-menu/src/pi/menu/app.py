"""The interactive menu: terminal input in, commands through, layout out.

``MenuApp`` owns one :class:`~pi.menu.navigation.Session`. Every complete
input sequence from the terminal becomes at most one
:class:`~pi.menu.navigation.Command` for the state machine; whenever the
machine reports a change, a repaint is scheduled on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import re

from pi.menu.candidates import CandidateStore
from pi.menu.config import MenuConfig
from pi.menu.input_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START
from pi.menu.keybindings import MenuKeybindingsManager
from pi.menu.keys import MouseEvent, is_text_input, parse_key, parse_mouse
from pi.menu.layout import (
    MenuLayout,
    build_layout,
    flow_budget,
    input_field_width,
)
from pi.menu.navigation import Command, NavigationStateMachine, Session
from pi.menu.paste import PasteProvider, SelectionSource
from pi.menu.renderer import ColorTheme, TerminalRenderer
from pi.menu.terminal import Terminal, TtyTerminal
from pi.menu.width import CellMeasurer

logger = logging.getLogger(__name__)

_CURSOR_POSITION_QUERY = "\x1b[6n"
_CURSOR_POSITION_RE = re.compile(r"^\x1b\[(\d+);(\d+)R$")

_PASTE_SOURCES: dict[str, SelectionSource] = {
    "pastePrimary": "primary",
    "pasteClipboard": "clipboard",
}


class MenuApp:
    """Runs one menu session on a terminal."""

    def __init__(
        self,
        candidates: CandidateStore,
        config: MenuConfig | None = None,
        terminal: Terminal | None = None,
        *,
        paste_provider: PasteProvider | None = None,
        measure: CellMeasurer | None = None,
    ) -> None:
        self.config = config or MenuConfig()
        self.terminal: Terminal = terminal if terminal is not None else TtyTerminal()
        self.measure = measure or CellMeasurer()
        self.keybindings = MenuKeybindingsManager(self.config.keybindings)
        self.paste_provider = paste_provider or PasteProvider(
            self.config.paste_command, self.config.clipboard_command
        )
        self.renderer = TerminalRenderer(self.terminal, ColorTheme(self.config.colors))

        self.session = Session(
            candidates,
            case_mode=self.config.case_mode,
            layout="lines" if self.config.lines > 0 else "flow",
            budget=max(self.config.lines, 1),
            measure=self.measure,
            capacity=self.config.capacity,
        )
        self.machine = NavigationStateMachine(self.session, on_redraw=self.request_render)

        self.menu_width = 0
        self.input_width = 0
        self.layout: MenuLayout | None = None

        self._origin_row: int | None = None
        self._position_query_pending = False
        self._render_requested = False
        self._started = False
        self._done: asyncio.Event | None = None
        self._tasks: set[asyncio.Task] = set()

    # -- lifecycle ----------------------------------------------------------

    def start(self) -> None:
        self.terminal.start(self.handle_input, self._on_resize)
        self._started = True
        self._update_geometry()
        self._position_query_pending = True
        self.terminal.write(_CURSOR_POSITION_QUERY)
        self.request_render()

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
        self.renderer.clear()
        self.terminal.stop()

    async def run(self) -> Session:
        """Show the menu until the user accepts or cancels."""
        self._done = asyncio.Event()
        self.start()
        try:
            await self._done.wait()
        finally:
            self.stop()
        return self.session

    # -- geometry and rendering ---------------------------------------------

    def _update_geometry(self) -> None:
        columns = self.terminal.columns
        rows = self.terminal.rows
        self.menu_width = max(min(self.config.width or columns, columns), 1)
        self.input_width = input_field_width(
            self.session.candidates, self.menu_width, self.measure
        )
        if self.session.window.mode == "lines":
            budget = min(self.config.lines, rows - 1)
        else:
            budget = flow_budget(self.menu_width, self.input_width, self.measure)
        self.session.set_budget(max(budget, 1))
        logger.debug(
            "geometry %dx%d: menu width %d, budget %d",
            columns,
            rows,
            self.menu_width,
            self.session.window.budget,
        )

    def _on_resize(self) -> None:
        if not self._started:
            return
        self._update_geometry()
        self.request_render()

    def request_render(self) -> None:
        """Schedule a repaint on the next loop tick; repeated calls coalesce."""
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._do_render()
        else:
            loop.call_soon(self._do_render)

    def _do_render(self) -> None:
        self._render_requested = False
        if not self._started or not self.session.running:
            return
        self.layout = build_layout(
            self.session,
            self.menu_width,
            self.measure,
            input_width=self.input_width,
            bottom=self.config.bottom,
        )
        self.renderer.paint(self.layout)

    # -- input --------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        if not self.session.running:
            return

        if self._position_query_pending:
            m = _CURSOR_POSITION_RE.match(data)
            if m:
                self._position_query_pending = False
                self._origin_row = int(m.group(1)) - 1
                return

        if data.startswith(BRACKETED_PASTE_START):
            text = data[len(BRACKETED_PASTE_START) :]
            if text.endswith(BRACKETED_PASTE_END):
                text = text[: -len(BRACKETED_PASTE_END)]
            self.dispatch(Command("paste", data=text.encode("utf-8")))
            return

        mouse = parse_mouse(data)
        if mouse is not None:
            self._handle_mouse(mouse)
            return

        action = self.keybindings.action_for(parse_key(data))
        if action in _PASTE_SOURCES:
            self.paste_selection(_PASTE_SOURCES[action])
        elif action is not None:
            self.dispatch(Command(action))
        elif is_text_input(data):
            self.dispatch(Command("insert", data=data.encode("utf-8")))
        else:
            logger.debug("ignoring input %r", data)

    def dispatch(self, command: Command) -> None:
        self.machine.handle(command)
        if not self.session.running and self._done is not None:
            self._done.set()

    def _block_origin(self) -> int | None:
        """Screen row of the menu's first row, once the terminal has reported it."""
        if self._origin_row is None or self.layout is None:
            return None
        return max(min(self._origin_row, self.terminal.rows - self.layout.height), 0)

    def _handle_mouse(self, event: MouseEvent) -> None:
        origin = self._block_origin()
        if origin is None or self.layout is None:
            return
        y = event.y - origin
        inside = 0 <= y < self.layout.height and 0 <= event.x < self.layout.width
        box = self.layout.hit_test(event.x, y) if inside else None

        if event.motion:
            if box is not None and box.role == "item":
                self.dispatch(Command("selectAt", index=box.index))
            return
        if not event.pressed:
            return

        if event.button == "wheelUp":
            self.dispatch(Command("pageUp"))
        elif event.button == "wheelDown":
            self.dispatch(Command("pageDown"))
        elif event.button == "middle":
            self.paste_selection("clipboard" if event.shift else "primary")
        elif event.button == "right" or not inside:
            self.dispatch(Command("cancel"))
        elif event.button == "left" and box is not None:
            if box.role == "input":
                self.dispatch(Command("clear"))
            elif box.role == "item":
                self.dispatch(Command("acceptAt", index=box.index))
            elif box.role == "prevIndicator":
                self.dispatch(Command("pageUp"))
            elif box.role == "nextIndicator":
                self.dispatch(Command("pageDown"))

    # -- selection paste ----------------------------------------------------

    def paste_selection(self, source: SelectionSource) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running event loop; cannot read the %s selection", source)
            return
        task = loop.create_task(self._paste_from(source))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _paste_from(self, source: SelectionSource) -> None:
        data = await self.paste_provider.read(source)
        if data is not None and self.session.running:
            self.dispatch(Command("paste", data=data))


async def run_menu(
    candidates: CandidateStore,
    config: MenuConfig | None = None,
    terminal: Terminal | None = None,
) -> Session:
    app = MenuApp(candidates, config, terminal)
    return await app.run()
