from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

from .classifier import Classifier
from .encoder import FeatureEncoder
from .errors import DetectorFailure, InferenceError, ModelUnavailable
from .types import HandSet
from .voter import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_WINDOW_SIZE, GatingPolicy, TemporalVoter


logger = logging.getLogger(__name__)


@runtime_checkable
class HandDetector(Protocol):
    def detect(self, frame_bgr) -> HandSet:
        """Return the hands found in a BGR frame; raise DetectorFailure on error."""
        ...


class PredictionPipeline:
    """
    Per-frame sign classification: encode -> classify -> vote.

    Each instance owns its own voting window. Not safe for concurrent `process_frame`
    calls; callers hand frames over one at a time.
    """

    def __init__(
        self,
        classifier: Classifier,
        encoder: Optional[FeatureEncoder] = None,
        detector: Optional[HandDetector] = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        gating: GatingPolicy = GatingPolicy.REJECT,
    ) -> None:
        self.classifier = classifier
        self.encoder = encoder or FeatureEncoder()
        self.detector = detector
        self._window_size = window_size
        self._confidence_threshold = confidence_threshold
        self._gating = GatingPolicy(gating)
        self._voter = self._new_voter(len(classifier.labels))
        self._current_label: Optional[str] = None

    @classmethod
    def from_config(cls, config, classifier: Classifier, detector: Optional[HandDetector] = None) -> "PredictionPipeline":
        return cls(
            classifier=classifier,
            detector=detector,
            window_size=config.window_size,
            confidence_threshold=config.confidence_threshold,
            gating=GatingPolicy(config.gating),
        )

    @property
    def voter(self) -> TemporalVoter:
        return self._voter

    def _new_voter(self, num_classes: int) -> TemporalVoter:
        return TemporalVoter(
            num_classes=num_classes,
            window_size=self._window_size,
            confidence_threshold=self._confidence_threshold,
            gating=self._gating,
        )

    def current_label(self) -> Optional[str]:
        """Most recent resolved label, or None if nothing has resolved yet."""
        return self._current_label

    def process_frame(self, hands: Optional[HandSet]) -> Optional[str]:
        """
        Run one frame of detected hands through the pipeline.

        Returns:
            The smoothed label for this frame, or None when there is no decision
        """
        if hands is None or len(hands) == 0:
            return None

        vector = self.encoder.encode(hands)
        try:
            result = self.classifier.classify(vector)
        except (ModelUnavailable, InferenceError) as e:
            logger.warning("Skipping frame, classifier failed: %s", e)
            return None

        labels = self.classifier.labels
        if len(labels) != self._voter.num_classes:
            logger.info("Label set size changed to %d, starting a new voting window", len(labels))
            self._voter = self._new_voter(len(labels))

        top_index = result.top_index
        confidence = result.confidence
        logger.debug("Predicted idx=%d conf=%.3f", top_index, confidence)

        outcome = self._voter.record_and_vote(top_index, confidence)
        if not outcome.resolved:
            return None

        label = labels.label(outcome.index)
        self._current_label = label
        return label

    def process_image(self, frame_bgr) -> Optional[str]:
        """Detect hands in a BGR frame, then run `process_frame` on them."""
        if self.detector is None:
            return self.process_frame([])
        try:
            hands = self.detector.detect(frame_bgr)
        except DetectorFailure as e:
            logger.warning("Detector failed, treating frame as empty: %s", e)
            hands = []
        return self.process_frame(hands)
