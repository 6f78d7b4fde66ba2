from __future__ import annotations

import itertools
from collections import abc
from typing import Iterable, Optional, Tuple

import numpy as np

from .types import HandSet


MAX_HANDS = 2
POINTS_PER_HAND = 21
COORDS_PER_POINT = 3
SLOT_SIZE = POINTS_PER_HAND * COORDS_PER_POINT  # 63
FEATURE_SIZE = MAX_HANDS * SLOT_SIZE  # 126


def _point_xyz(point) -> Tuple[float, float, float]:
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y), float(getattr(point, "z", 0.0))
    coords = list(point)[:COORDS_PER_POINT]
    coords += [0.0] * (COORDS_PER_POINT - len(coords))
    return float(coords[0]), float(coords[1]), float(coords[2])


def _fill_slot(out: np.ndarray, slot: int, hand: Optional[Iterable]) -> None:
    if not isinstance(hand, abc.Iterable):
        return
    base = slot * SLOT_SIZE
    for i, point in enumerate(itertools.islice(hand, POINTS_PER_HAND)):
        try:
            xyz = _point_xyz(point)
        except (TypeError, ValueError, IndexError):
            continue  # unreadable point stays (0, 0, 0)
        offset = base + i * COORDS_PER_POINT
        out[offset:offset + COORDS_PER_POINT] = xyz


class FeatureEncoder:
    """
    Encodes up to two hands into a fixed 126-value feature vector.

    Slot 0 holds the first hand the detector returned and slot 1 the second; slot order
    follows the detector, not physical left/right. Each slot is 21 points of (x, y, z)
    in landmark order. Missing hands and missing trailing points are zero, extra hands
    and points past index 20 are ignored.
    """

    feature_size = FEATURE_SIZE

    def encode(self, hands: Optional[HandSet]) -> np.ndarray:
        out = np.zeros(FEATURE_SIZE, dtype=np.float32)
        if not isinstance(hands, abc.Iterable):
            return out
        for slot, hand in enumerate(itertools.islice(hands, MAX_HANDS)):
            _fill_slot(out, slot, hand)
        return out


def encode_hands(hands: Optional[HandSet]) -> np.ndarray:
    """Module-level shortcut for `FeatureEncoder().encode(hands)`."""
    return FeatureEncoder().encode(hands)
