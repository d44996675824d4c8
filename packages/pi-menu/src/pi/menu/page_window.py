"""Page window: which slice of the match list fits on screen.

Positions are indices into the current match list. ``anchor`` is the first
visible match, ``next_anchor`` the first match of the following page and
``prev_anchor`` the first match of the preceding page; either neighbour is
``None`` when there is no such page.

In ``lines`` layout each match costs one row of a fixed row budget. In
``flow`` layout matches sit side by side and each costs its measured width,
capped at the whole budget so a single oversized match still gets a page.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Callable, Literal

from pi.menu.candidates import Candidate

LayoutMode = Literal["lines", "flow"]

TextMeasurer = Callable[[str], int]


class PageWindow:
    """Computes page boundaries over a match list under a layout budget."""

    def __init__(
        self,
        mode: LayoutMode,
        budget: int,
        measure: TextMeasurer | None = None,
    ) -> None:
        if mode == "flow" and measure is None:
            raise ValueError("flow layout needs a text measurer")
        self._mode: LayoutMode = mode
        self._budget = max(budget, 1)
        self._measure = measure
        self._items: Sequence[Candidate] = ()

        self.anchor: int | None = None
        self.next_anchor: int | None = None
        self.prev_anchor: int | None = None

    @property
    def mode(self) -> LayoutMode:
        return self._mode

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def items(self) -> Sequence[Candidate]:
        return self._items

    def page_range(self) -> range:
        if self.anchor is None:
            return range(0)
        end = self.next_anchor if self.next_anchor is not None else len(self._items)
        return range(self.anchor, end)

    def contains(self, index: int | None) -> bool:
        return index is not None and index in self.page_range()

    # -- recomputation triggers -------------------------------------------

    def reset(self, items: Sequence[Candidate]) -> None:
        """Start over on a new match list, anchored at its first match."""
        self._items = items
        self.anchor = 0 if items else None
        self.recompute()

    def set_budget(self, budget: int) -> None:
        self._budget = max(budget, 1)
        self.recompute()

    def show_first(self) -> None:
        self.anchor = 0 if self._items else None
        self.recompute()

    def flip_next(self) -> bool:
        if self.next_anchor is None:
            return False
        self.anchor = self.next_anchor
        self.recompute()
        return True

    def flip_prev(self) -> bool:
        if self.prev_anchor is None:
            return False
        self.anchor = self.prev_anchor
        self.recompute()
        return True

    def jump_to_last(self) -> None:
        """Show the last page, laid out backwards from the final match.

        The anchor is first pulled back one page from the final match, then
        walked forward until nothing is left over for a following page, so
        the last page is as full as the budget allows.
        """
        if not self._items:
            return
        self.anchor = len(self._items) - 1
        self.recompute()
        if self.prev_anchor is not None:
            self.anchor = self.prev_anchor
            self.recompute()
        while self.next_anchor is not None:
            self.anchor += 1
            self.recompute()

    def recompute(self) -> None:
        if self.anchor is None or not self._items:
            self.anchor = self.next_anchor = self.prev_anchor = None
            return

        anchor = self.anchor = min(self.anchor, len(self._items) - 1)

        used = 0
        nxt = anchor
        while nxt < len(self._items):
            used += self._cost(nxt)
            if used > self._budget:
                break
            nxt += 1
        if nxt == anchor:
            nxt += 1
        self.next_anchor = nxt if nxt < len(self._items) else None

        used = 0
        prev = anchor
        while prev > 0:
            used += self._cost(prev - 1)
            if used > self._budget:
                break
            prev -= 1
        self.prev_anchor = prev if prev < anchor else None

    def _cost(self, index: int) -> int:
        if self._mode == "lines":
            return 1
        assert self._measure is not None
        return min(self._measure(self._items[index].text), self._budget)
