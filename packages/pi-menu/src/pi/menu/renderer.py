"""Paint a :class:`~pi.menu.layout.MenuLayout` onto a terminal.

The menu occupies a fixed block of rows starting where the cursor was when
the session began. Each paint moves back to the top row of the block,
rewrites every row and parks the cursor inside the input field.
"""

from __future__ import annotations

import logging
import re

from pi.menu.config import MenuColors
from pi.menu.layout import Box, MenuLayout
from pi.menu.terminal import Terminal
from pi.menu.width import pad_to_width, truncate_to_width

logger = logging.getLogger(__name__)

_RESET = "\x1b[0m"
_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Parse ``#rgb`` or ``#rrggbb``. Raises ``ValueError`` otherwise."""
    m = _HEX_COLOR_RE.match(value)
    if not m:
        raise ValueError(f"invalid color: {value!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


class ColorTheme:
    """SGR prefixes for the normal and selected color schemes."""

    def __init__(self, colors: MenuColors | None = None) -> None:
        colors = colors or MenuColors()
        defaults = MenuColors()
        self.normal = _scheme(
            _color_or_default(colors.normal_foreground, defaults.normal_foreground),
            _color_or_default(colors.normal_background, defaults.normal_background),
        )
        self.selected = _scheme(
            _color_or_default(colors.selected_foreground, defaults.selected_foreground),
            _color_or_default(colors.selected_background, defaults.selected_background),
        )

    def style(self, text: str, selected: bool = False) -> str:
        return (self.selected if selected else self.normal) + text + _RESET


def _color_or_default(value: str, default: str) -> tuple[int, int, int]:
    try:
        return hex_to_rgb(value)
    except ValueError:
        logger.warning("Ignoring invalid color %r, using %s", value, default)
        return hex_to_rgb(default)


def _scheme(fg: tuple[int, int, int], bg: tuple[int, int, int]) -> str:
    return "\x1b[38;2;{};{};{}m\x1b[48;2;{};{};{}m".format(*fg, *bg)


class TerminalRenderer:
    """Render sink that draws the menu as a block of terminal rows."""

    def __init__(
        self,
        terminal: Terminal,
        theme: ColorTheme | None = None,
        *,
        padding: int = 1,
    ) -> None:
        self.terminal = terminal
        self.theme = theme or ColorTheme()
        self.padding = padding
        self._cursor_row = 0
        self._height = 0
        self._paint_count = 0

    @property
    def paint_count(self) -> int:
        return self._paint_count

    def render_lines(self, layout: MenuLayout) -> list[str]:
        """Styled text of each row of *layout*, each exactly ``layout.width`` cells."""
        rows: list[list[Box]] = [[] for _ in range(layout.height)]
        for box in layout.boxes:
            if 0 <= box.y < layout.height:
                rows[box.y].append(box)

        lines: list[str] = []
        for boxes in rows:
            parts: list[str] = []
            x = 0
            for box in sorted(boxes, key=lambda b: b.x):
                if box.x > x:
                    parts.append(self.theme.style(" " * (box.x - x)))
                    x = box.x
                width = min(box.width, layout.width - x)
                if width <= 0:
                    break
                parts.append(self._paint_box(box, width))
                x += width
            if x < layout.width:
                parts.append(self.theme.style(" " * (layout.width - x)))
            lines.append("".join(parts))
        return lines

    def _paint_box(self, box: Box, width: int) -> str:
        pad = " " * self.padding
        if box.role == "input":
            text = pad_to_width(pad + box.text, width)
        else:
            text = pad_to_width(truncate_to_width(pad + box.text, width - self.padding) + pad, width)
        return self.theme.style(text, selected=box.highlighted)

    def paint(self, layout: MenuLayout) -> None:
        lines = self.render_lines(layout)
        out: list[str] = ["\x1b[?25l"]

        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r")

        for i, line in enumerate(lines):
            if i > 0:
                out.append("\r\n")
            out.append(line)
            out.append("\x1b[K")

        # Rows left over from a taller previous frame
        if self._height > len(lines):
            out.append("\r\n\x1b[J")
            last_row = len(lines)
        else:
            last_row = len(lines) - 1

        delta = last_row - layout.cursor_y
        if delta > 0:
            out.append(f"\x1b[{delta}A")
        elif delta < 0:
            out.append(f"\x1b[{-delta}B")
        out.append("\r")
        if layout.cursor_x > 0:
            out.append(f"\x1b[{layout.cursor_x}C")
        out.append("\x1b[?25h")

        self._cursor_row = layout.cursor_y
        self._height = len(lines)
        self._paint_count += 1
        self.terminal.write("".join(out))

    def clear(self) -> None:
        """Erase the menu block and leave the cursor where it started."""
        if self._height == 0:
            return
        out: list[str] = []
        if self._cursor_row > 0:
            out.append(f"\x1b[{self._cursor_row}A")
        out.append("\r\x1b[J")
        self.terminal.write("".join(out))
        self._cursor_row = 0
        self._height = 0
