from __future__ import annotations

import enum
import logging
from collections import deque
from typing import Deque, Tuple

import numpy as np

from .types import NO_DECISION, VotingOutcome


logger = logging.getLogger(__name__)


DEFAULT_WINDOW_SIZE = 7
DEFAULT_CONFIDENCE_THRESHOLD = 0.70


class GatingPolicy(str, enum.Enum):
    """Where the confidence gate sits relative to the window push."""

    REJECT = "reject"  # low-confidence predictions never enter the window
    RECORD = "record"  # every prediction enters the window, gate applies to the decision


class TemporalVoter:
    """
    Majority vote over the last `window_size` confident top-1 predictions.

    A class is emitted once it holds at least `window_size // 2` entries of the window
    (3 of 7 by default). Ties between classes with the same count go to the lowest
    index.
    """

    def __init__(
        self,
        num_classes: int,
        window_size: int = DEFAULT_WINDOW_SIZE,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        gating: GatingPolicy = GatingPolicy.REJECT,
    ) -> None:
        if num_classes < 0:
            raise ValueError("num_classes must be >= 0")
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        self.num_classes = num_classes
        self.window_size = window_size
        self.confidence_threshold = confidence_threshold
        self.majority_threshold = window_size // 2
        self.gating = GatingPolicy(gating)
        self._window: Deque[int] = deque(maxlen=window_size)

    @property
    def window(self) -> Tuple[int, ...]:
        """Snapshot of the window, oldest first."""
        return tuple(self._window)

    def __len__(self) -> int:
        return len(self._window)

    def record_and_vote(self, top_index: int, top_confidence: float) -> VotingOutcome:
        if not 0 <= top_index < self.num_classes:
            logger.warning(
                "Ignoring class index %d outside label set of size %d", top_index, self.num_classes
            )
            return NO_DECISION

        # Model scores are float32; compare at that precision.
        confident = np.float32(top_confidence) >= np.float32(self.confidence_threshold)
        if not confident and self.gating is GatingPolicy.REJECT:
            logger.debug("Rejected idx=%d conf=%.3f below %.2f", top_index, top_confidence, self.confidence_threshold)
            return NO_DECISION

        # deque(maxlen=...) drops the oldest entry on overflow.
        self._window.append(top_index)

        if not confident:
            return NO_DECISION
        return self._resolve()

    def _resolve(self) -> VotingOutcome:
        counts = [0] * self.num_classes
        for idx in self._window:
            counts[idx] += 1

        best_idx = 0
        best_count = 0
        for i, count in enumerate(counts):
            if count > best_count:
                best_idx = i
                best_count = count

        logger.debug("Window=%s best idx=%d count=%d", list(self._window), best_idx, best_count)
        if best_count > 0 and best_count >= self.majority_threshold:
            return VotingOutcome(index=best_idx, count=best_count)
        return NO_DECISION
