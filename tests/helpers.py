from __future__ import annotations

from typing import List, Sequence

import numpy as np

from signroute_hand.labels import LabelSet
from signroute_hand.types import ClassificationResult, LandmarkPoint


def make_hand(n_points: int = 21, offset: float = 0.0) -> List[LandmarkPoint]:
    """Hand whose point i is (offset + i/100, offset + i/100 + 0.001, -i/1000)."""
    return [
        LandmarkPoint(x=offset + i / 100.0, y=offset + i / 100.0 + 0.001, z=-i / 1000.0)
        for i in range(n_points)
    ]


def peaked(num_classes: int, index: int, confidence: float) -> np.ndarray:
    """Probability vector with `confidence` at `index` and the rest spread evenly."""
    rest = (1.0 - confidence) / max(1, num_classes - 1)
    probs = np.full(num_classes, rest, dtype=np.float32)
    probs[index] = confidence
    return probs


class FakeClassifier:
    """Replays a scripted list of probability vectors or exceptions."""

    def __init__(self, labels: Sequence[str] = (), outputs=()) -> None:
        self._labels = LabelSet(labels)
        self.outputs = list(outputs)
        self.calls = []

    @property
    def labels(self) -> LabelSet:
        return self._labels

    @labels.setter
    def labels(self, value: Sequence[str]) -> None:
        self._labels = LabelSet(value)

    @property
    def available(self) -> bool:
        return len(self._labels) > 0

    def classify(self, vector):
        self.calls.append(vector)
        item = self.outputs.pop(0)
        if isinstance(item, Exception):
            raise item
        return ClassificationResult(probabilities=np.asarray(item, dtype=np.float32))
