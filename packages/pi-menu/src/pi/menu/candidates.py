"""Candidate loading and the read-only candidate store."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import IO, overload

logger = logging.getLogger(__name__)


class CandidateLoadError(Exception):
    """The candidate list could not be loaded completely."""


@dataclass(frozen=True)
class Candidate:
    text: str
    index: int


class CandidateStore(Sequence[Candidate]):
    """Immutable, ordered collection of every candidate for a session."""

    def __init__(self, texts: Iterable[str] = ()) -> None:
        self._items: tuple[Candidate, ...] = tuple(
            Candidate(text=text, index=i) for i, text in enumerate(texts)
        )
        self._widest: Candidate | None = max(
            self._items,
            key=lambda c: len(c.text.encode("utf-8")),
            default=None,
        )

    @property
    def widest(self) -> Candidate | None:
        """Longest candidate by encoded length, used to size the input field."""
        return self._widest

    @property
    def texts(self) -> list[str]:
        return [c.text for c in self._items]

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

    def __repr__(self) -> str:
        return f"CandidateStore({len(self._items)} candidates)"


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def load_candidates(stream: IO[bytes] | IO[str]) -> CandidateStore:
    """Read one candidate per line from *stream* until it is exhausted.

    Byte streams are decoded as UTF-8 with replacement characters so that a
    stray invalid line never aborts the load.
    """
    texts: list[str] = []
    try:
        for line in stream:
            if isinstance(line, bytes):
                line = line.decode("utf-8", errors="replace")
            texts.append(_strip_newline(line))
        store = CandidateStore(texts)
    except MemoryError as exc:
        raise CandidateLoadError(
            f"cannot allocate memory for {len(texts) + 1} candidates"
        ) from exc

    logger.debug("loaded %d candidates", len(store))
    return store
