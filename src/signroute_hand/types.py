from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np


@dataclass(frozen=True)
class LandmarkPoint:
    """A single hand landmark: normalized x/y plus relative depth z."""

    x: float
    y: float
    z: float = 0.0


Hand = Sequence[LandmarkPoint]  # 21 points when complete, may be truncated
HandSet = List[Hand]  # 0, 1 or 2 hands in detector order


@dataclass(frozen=True, eq=False)
class ClassificationResult:
    """Per-label probabilities for one frame."""

    probabilities: np.ndarray = field(repr=False)

    @property
    def top_index(self) -> int:
        # np.argmax returns the first maximum, so ties go to the lowest index.
        return int(np.argmax(self.probabilities))

    @property
    def confidence(self) -> float:
        return float(self.probabilities[self.top_index])

    def __len__(self) -> int:
        return int(self.probabilities.shape[0])

    def as_dict(self, labels: Sequence[str]) -> Dict[str, float]:
        """
        Map label -> probability.

        Duplicate labels keep the last probability seen for that name.
        """
        return {name: float(p) for name, p in zip(labels, self.probabilities)}


@dataclass(frozen=True)
class VotingOutcome:
    """Result of one voting step; `index` is None when no class has a majority."""

    index: Optional[int]
    count: int = 0

    @property
    def resolved(self) -> bool:
        return self.index is not None


NO_DECISION = VotingOutcome(index=None, count=0)
