from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

from .errors import IndexOutOfRange


logger = logging.getLogger(__name__)


class LabelSet:
    """
    Ordered, immutable list of class labels.

    Index `i` of a classifier output corresponds to `labels[i]`. Duplicate names are
    allowed and stay distinct indices.
    """

    __slots__ = ("_labels",)

    def __init__(self, labels: Iterable[str] = ()) -> None:
        self._labels: Tuple[str, ...] = tuple(labels)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "LabelSet":
        """Build a label set from text lines, trimming whitespace and dropping blank lines."""
        return cls(stripped for stripped in (line.strip() for line in lines) if stripped)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LabelSet":
        with open(path, "r", encoding="utf-8") as f:
            labels = cls.from_lines(f)
        logger.info("Loaded %d labels from %s", len(labels), path)
        return labels

    def label(self, index: int) -> str:
        if not 0 <= index < len(self._labels):
            raise IndexOutOfRange(index, len(self._labels))
        return self._labels[index]

    def __getitem__(self, index: int) -> str:
        return self.label(index)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LabelSet):
            return self._labels == other._labels
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"LabelSet({list(self._labels)!r})"
