"""Token matching: filter candidates and rank them into match tiers.

Every whitespace-separated token of the query must appear somewhere in a
candidate for it to match. Survivors are ranked by how they relate to the
first token only:

* ``exact``     -- the candidate equals the first token (or the query is empty)
* ``prefix``    -- the candidate starts with the first token
* ``substring`` -- anything else that contains every token

Within each tier candidates keep their input order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Callable, Literal, overload

from pi.menu.candidates import Candidate, CandidateStore

logger = logging.getLogger(__name__)

CaseMode = Literal["sensitive", "insensitive"]
MatchTier = Literal["exact", "prefix", "substring"]


def _identity(text: str) -> str:
    return text


@dataclass(frozen=True)
class Comparator:
    """Comparison strategy, chosen once per session from a :data:`CaseMode`."""

    mode: CaseMode
    fold: Callable[[str], str]


def get_comparator(mode: CaseMode) -> Comparator:
    if mode == "insensitive":
        return Comparator(mode=mode, fold=str.lower)
    if mode == "sensitive":
        return Comparator(mode=mode, fold=_identity)
    raise ValueError(f"Unknown case mode: {mode!r}")


def tokenize(text: str) -> list[str]:
    """Split *text* on whitespace, dropping empty tokens."""
    return text.split()


class MatchList(Sequence[Candidate]):
    """Matching candidates, ordered exact, then prefix, then substring."""

    def __init__(
        self,
        exact: Iterable[Candidate] = (),
        prefix: Iterable[Candidate] = (),
        substring: Iterable[Candidate] = (),
    ) -> None:
        exact = tuple(exact)
        prefix = tuple(prefix)
        substring = tuple(substring)
        self._items: tuple[Candidate, ...] = exact + prefix + substring
        self._prefix_start = len(exact)
        self._substring_start = len(exact) + len(prefix)

    @property
    def exact(self) -> tuple[Candidate, ...]:
        return self._items[: self._prefix_start]

    @property
    def prefix(self) -> tuple[Candidate, ...]:
        return self._items[self._prefix_start : self._substring_start]

    @property
    def substring(self) -> tuple[Candidate, ...]:
        return self._items[self._substring_start :]

    @property
    def texts(self) -> list[str]:
        return [c.text for c in self._items]

    def tier_of(self, index: int) -> MatchTier:
        if not 0 <= index < len(self._items):
            raise IndexError(index)
        if index < self._prefix_start:
            return "exact"
        if index < self._substring_start:
            return "prefix"
        return "substring"

    @overload
    def __getitem__(self, index: int) -> Candidate: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Candidate]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MatchList):
            return NotImplemented
        return (
            self._items == other._items
            and self._prefix_start == other._prefix_start
            and self._substring_start == other._substring_start
        )

    def __repr__(self) -> str:
        return (
            f"MatchList(exact={len(self.exact)}, prefix={len(self.prefix)}, "
            f"substring={len(self.substring)})"
        )


class MatchEngine:
    """Recomputes the match list for a query against a fixed candidate store.

    Folded candidate texts are computed once up front; each call to
    :meth:`recompute` is then a single pass over the store.
    """

    def __init__(
        self,
        candidates: CandidateStore,
        case_mode: CaseMode = "sensitive",
    ) -> None:
        self._candidates = candidates
        self._comparator = get_comparator(case_mode)
        self._folded = [self._comparator.fold(c.text) for c in candidates]

    @property
    def candidates(self) -> CandidateStore:
        return self._candidates

    @property
    def comparator(self) -> Comparator:
        return self._comparator

    def recompute(self, text: str) -> MatchList:
        tokens = [self._comparator.fold(t) for t in tokenize(text)]
        first = tokens[0] if tokens else ""

        exact: list[Candidate] = []
        prefix: list[Candidate] = []
        substring: list[Candidate] = []

        for candidate, folded in zip(self._candidates, self._folded):
            if not all(token in folded for token in tokens):
                continue
            if not tokens or folded == first:
                exact.append(candidate)
            elif folded.startswith(first):
                prefix.append(candidate)
            else:
                substring.append(candidate)

        matches = MatchList(exact, prefix, substring)
        logger.debug("query %r: %r", text, matches)
        return matches
