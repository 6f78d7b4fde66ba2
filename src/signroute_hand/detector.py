from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence

import cv2

from .drawing import draw_hands
from .errors import DetectorFailure
from .model_assets import ensure_hand_landmarker_task
from .types import Hand, HandSet, LandmarkPoint


logger = logging.getLogger(__name__)


def landmarks_to_hand(landmarks: Iterable[Any]) -> Hand:
    """Convert MediaPipe normalized landmarks (objects with x/y/z) to LandmarkPoints."""
    return [
        LandmarkPoint(x=float(lm.x), y=float(lm.y), z=float(getattr(lm, "z", 0.0)))
        for lm in landmarks
    ]


class _SolutionsBackend:
    """Legacy `mp.solutions.hands` backend."""

    name = "solutions"

    def __init__(self, mp, max_num_hands: int, min_detection_confidence: float, min_tracking_confidence: float) -> None:
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=True,
            max_num_hands=max_num_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def process(self, frame_rgb) -> List[Sequence[Any]]:
        results = self._hands.process(frame_rgb)
        return [hand.landmark for hand in (results.multi_hand_landmarks or [])]

    def close(self) -> None:
        self._hands.close()


class _TasksBackend:
    """
    MediaPipe Tasks HandLandmarker in IMAGE mode.

    Needs the `.task` model asset on disk; it is downloaded on first use.
    """

    name = "tasks"

    def __init__(self, mp, model_path: str, max_num_hands: int, min_detection_confidence: float, min_tracking_confidence: float) -> None:
        from mediapipe.tasks.python import BaseOptions  # type: ignore
        from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore

        options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=ensure_hand_landmarker_task(model_path)),
            running_mode=RunningMode.IMAGE,
            num_hands=max_num_hands,
            min_hand_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._mp = mp
        self._landmarker = HandLandmarker.create_from_options(options)

    def process(self, frame_rgb) -> List[Sequence[Any]]:
        image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect(image)
        return list(getattr(result, "hand_landmarks", None) or [])

    def close(self) -> None:
        self._landmarker.close()


def _create_backend(
    tasks_model_path: str,
    max_num_hands: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
):
    import mediapipe as mp  # type: ignore

    if hasattr(mp, "solutions"):
        return _SolutionsBackend(mp, max_num_hands, min_detection_confidence, min_tracking_confidence)
    return _TasksBackend(mp, tasks_model_path, max_num_hands, min_detection_confidence, min_tracking_confidence)


class HandLandmarkDetector:
    """
    Hand landmark detector using MediaPipe Hands.

    Input frames are expected as **BGR** images (OpenCV default). `detect()` returns
    the hands in MediaPipe's order, which does not track physical left/right.
    """

    def __init__(
        self,
        max_num_hands: int = 2,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
        backend=None,
    ) -> None:
        if backend is None:
            try:
                backend = _create_backend(
                    tasks_model_path=tasks_model_path,
                    max_num_hands=max_num_hands,
                    min_detection_confidence=min_detection_confidence,
                    min_tracking_confidence=min_tracking_confidence,
                )
            except (ImportError, RuntimeError, OSError) as e:
                raise RuntimeError(
                    "Could not initialize MediaPipe hand landmarker.\n"
                    f"Tasks model path: {tasks_model_path}"
                ) from e
        self._backend = backend
        self.max_num_hands = max_num_hands
        logger.info("Hand landmarker ready (backend=%s, max_hands=%d)", getattr(backend, "name", "custom"), max_num_hands)

    @classmethod
    def from_config(cls, config) -> "HandLandmarkDetector":
        return cls(
            max_num_hands=config.max_num_hands,
            min_detection_confidence=config.min_detection_confidence,
            min_tracking_confidence=config.min_tracking_confidence,
            tasks_model_path=config.hand_landmarker_path,
        )

    def close(self) -> None:
        if self._backend is not None:
            self._backend.close()
            self._backend = None

    def __enter__(self) -> "HandLandmarkDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> HandSet:
        if self._backend is None:
            raise DetectorFailure("Detector is closed")
        try:
            frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
            raw_hands = self._backend.process(frame_rgb)
        except Exception as e:
            raise DetectorFailure(f"Hand landmark detection failed: {e}") from e

        hands = [landmarks_to_hand(lm) for lm in raw_hands[: self.max_num_hands]]
        if hands:
            logger.debug("Hands detected: %d", len(hands))
        return hands

    def draw(self, frame_bgr, hands: Optional[HandSet]):
        return draw_hands(frame_bgr, hands or [])
