from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import cv2

from .types import Hand
from .utils import bbox_from_points, to_pixel


HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1), (1, 2), (2, 3), (3, 4),
    # index
    (0, 5), (5, 6), (6, 7), (7, 8),
    # middle
    (5, 9), (9, 10), (10, 11), (11, 12),
    # ring
    (9, 13), (13, 14), (14, 15), (15, 16),
    # pinky
    (13, 17), (17, 18), (18, 19), (19, 20),
    # palm base
    (0, 17),
]

GREEN = (0, 255, 0)


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_hand(frame, hand: Hand, color=GREEN, radius: int = 4, thickness: int = 2):
    """Draw one hand's skeleton and points. Connections to missing points are skipped."""
    h, w = frame.shape[:2]
    pts = [to_pixel(p.x, p.y, w, h) for p in hand]

    for a, b in HAND_CONNECTIONS:
        if a < len(pts) and b < len(pts):
            cv2.line(frame, pts[a], pts[b], color, thickness, cv2.LINE_AA)
    for pt in pts:
        cv2.circle(frame, pt, radius, color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_hands(frame, hands: Sequence[Hand], slot_labels: bool = True):
    """
    Draw every detected hand onto a BGR frame in place.

    With `slot_labels` each hand is tagged with the feature slot it is encoded into.
    """
    h, w = frame.shape[:2]
    for slot, hand in enumerate(hands):
        if not hand:
            continue
        draw_hand(frame, hand)
        if slot_labels:
            x0, y0, _, _ = bbox_from_points(to_pixel(p.x, p.y, w, h) for p in hand)
            draw_text(frame, f"slot {slot}", (x0, max(12, y0 - 8)), scale=0.5, thickness=1)
    return frame


def draw_prediction(frame, label: Optional[str], org: Tuple[int, int] = (12, 28)):
    text = f"sign: {label}" if label else "sign: -"
    return draw_text(frame, text, org, scale=0.8)
