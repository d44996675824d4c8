"""Terminal cell widths: the text-measurement oracle for layout.

Widths are measured per grapheme cluster with ``wcwidth``, after stripping
ANSI escape sequences. :class:`CellMeasurer` adds the padding a menu item is
drawn with, so page computations see the same widths the renderer paints.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

_STRIP_RE = re.compile(
    r"\x1b\[[0-9;]*[A-Za-z]"          # CSI
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"  # OSC
)

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 1024


def _grapheme_width(g: str) -> int:
    """Display width of one grapheme cluster.

    Emoji sequences (VS16, ZWJ, skin tones, regional indicators) are two
    cells; combining marks and format characters are zero.
    """
    if not g:
        return 0

    cp = ord(g[0])
    if len(g) == 1:
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        c = ord(ch)
        if c in (0xFE0F, 0x200D) or 0x1F3FB <= c <= 0x1F3FF or 0x1F1E6 <= c <= 0x1F1FF:
            return 2

    if cp >= 0x1F000 or 0x2600 <= cp <= 0x27BF:
        return 2

    category = unicodedata.category(g[0])
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(g[0]), 0)


def visible_width(text: str) -> int:
    """Number of terminal cells *text* occupies (tabs count as 3)."""
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text).replace("\t", "   ")
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def truncate_to_width(text: str, max_width: int, ellipsis: str = "") -> str:
    """Cut *text* at a grapheme boundary so it fits in *max_width* cells."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text

    target = max_width - visible_width(ellipsis)
    if target <= 0:
        return truncate_to_width(ellipsis, max_width)

    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if cols + w > target:
            break
        result.append(g)
        cols += w
    return "".join(result) + ellipsis


def pad_to_width(text: str, width: int) -> str:
    """Truncate or right-pad *text* to exactly *width* cells."""
    text = truncate_to_width(text, width)
    return text + " " * max(0, width - visible_width(text))


class CellMeasurer:
    """Measures menu text in terminal cells, including item padding.

    ``measurer(text)`` is the width of *text* drawn as an item (padding on
    both sides); ``measurer.upto(text, cursor)`` is the offset of a cursor
    placed after the first *cursor* characters of a padded field.
    """

    def __init__(self, padding: int = 1) -> None:
        self.padding = padding

    def __call__(self, text: str) -> int:
        return visible_width(text) + 2 * self.padding

    def upto(self, text: str, cursor: int) -> int:
        return self.padding + visible_width(text[:cursor])
