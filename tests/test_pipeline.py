"""
End-to-end tests for the per-frame prediction pipeline using a scripted classifier.
"""
import unittest
from unittest.mock import MagicMock

import numpy as np

from signroute_hand.config import PipelineConfig
from signroute_hand.errors import DetectorFailure, InferenceError, InvalidInputSize, ModelUnavailable
from signroute_hand.pipeline import PredictionPipeline
from signroute_hand.voter import GatingPolicy

from helpers import FakeClassifier, make_hand, peaked

LABELS = ["hello", "thanks", "yes", "no", "please", "sorry"]


class TestPredictionPipeline(unittest.TestCase):

    def setUp(self):
        self.hands = [make_hand()]

    def _pipeline(self, outputs, labels=LABELS, **kwargs):
        classifier = FakeClassifier(labels, outputs)
        return PredictionPipeline(classifier, **kwargs), classifier

    def test_empty_handset_skips_classifier(self):
        pipeline, classifier = self._pipeline([])
        self.assertIsNone(pipeline.process_frame([]))
        self.assertIsNone(pipeline.process_frame(None))
        self.assertIsNone(pipeline.process_frame(np.zeros((0, 21, 3), dtype=np.float32)))
        self.assertEqual(classifier.calls, [])

    def test_numpy_handset_is_encoded(self):
        pipeline, classifier = self._pipeline([peaked(6, 0, 0.95)])
        arr = np.full((1, 21, 3), 0.5, dtype=np.float32)
        pipeline.process_frame(arr)

        self.assertEqual(len(classifier.calls), 1)
        np.testing.assert_allclose(classifier.calls[0][:63], 0.5)
        self.assertFalse(classifier.calls[0][63:].any())

    def test_classifier_receives_126_vector(self):
        pipeline, classifier = self._pipeline([peaked(6, 0, 0.95)])
        pipeline.process_frame(self.hands)
        self.assertEqual(classifier.calls[0].shape, (126,))

    def test_stable_prediction_resolves(self):
        pipeline, _ = self._pipeline([peaked(6, 2, 0.95)] * 7)
        results = [pipeline.process_frame(self.hands) for _ in range(7)]

        self.assertEqual(results[-1], "yes")
        self.assertEqual(results[:2], [None, None])
        self.assertEqual(pipeline.current_label(), "yes")

    def test_switching_prediction(self):
        outputs = [peaked(6, 2, 0.95)] * 2 + [peaked(6, 5, 0.95)] * 5
        pipeline, _ = self._pipeline(outputs)
        results = [pipeline.process_frame(self.hands) for _ in range(7)]

        self.assertEqual(results[:4], [None, None, None, None])
        # index 5 reaches 3 votes on the fifth frame
        self.assertEqual(results[4:], ["sorry", "sorry", "sorry"])

    def test_low_confidence_frames_do_not_change_outcome(self):
        outputs = [peaked(6, 1, 0.95)] * 3 + [peaked(6, 4, 0.69)] * 3 + [peaked(6, 1, 0.95)]
        pipeline, _ = self._pipeline(outputs)
        results = [pipeline.process_frame(self.hands) for _ in range(7)]

        self.assertEqual(results[2], "thanks")
        self.assertEqual(results[3:6], [None, None, None])
        self.assertEqual(results[6], "thanks")
        self.assertEqual(pipeline.voter.window, (1, 1, 1, 1))

    def test_model_score_exactly_at_threshold_resolves(self):
        outputs = [np.array([0.70, 0.30], dtype=np.float32)] * 3
        pipeline, _ = self._pipeline(outputs, labels=["a", "b"])
        results = [pipeline.process_frame(self.hands) for _ in range(3)]

        self.assertEqual(results, [None, None, "a"])
        self.assertEqual(pipeline.voter.window, (0, 0, 0))

    def test_record_gating_counts_low_confidence_frames(self):
        outputs = [peaked(6, 4, 0.69)] * 3 + [peaked(6, 1, 0.95)]
        pipeline, _ = self._pipeline(outputs, gating=GatingPolicy.RECORD)
        results = [pipeline.process_frame(self.hands) for _ in range(4)]
        self.assertEqual(results, [None, None, None, "please"])

    def test_classifier_failure_keeps_history(self):
        outputs = [
            peaked(6, 3, 0.95),
            peaked(6, 3, 0.95),
            ModelUnavailable("not loaded"),
            InferenceError("backend"),
            peaked(6, 3, 0.95),
        ]
        pipeline, _ = self._pipeline(outputs)
        with self.assertLogs("signroute_hand.pipeline", level="WARNING"):
            results = [pipeline.process_frame(self.hands) for _ in range(5)]

        self.assertEqual(results, [None, None, None, None, "no"])
        self.assertEqual(pipeline.voter.window, (3, 3, 3))

    def test_invalid_input_size_propagates(self):
        pipeline, _ = self._pipeline([InvalidInputSize(126, 125)])
        with self.assertRaises(InvalidInputSize):
            pipeline.process_frame(self.hands)

    def test_current_label_survives_no_decision_frames(self):
        outputs = [peaked(6, 0, 0.95)] * 3 + [peaked(6, 0, 0.2)]
        pipeline, _ = self._pipeline(outputs)
        for _ in range(3):
            pipeline.process_frame(self.hands)
        self.assertIsNone(pipeline.process_frame(self.hands))
        self.assertIsNone(pipeline.process_frame([]))
        self.assertEqual(pipeline.current_label(), "hello")

    def test_instances_do_not_share_state(self):
        first, _ = self._pipeline([peaked(6, 2, 0.95)] * 3)
        second, _ = self._pipeline([peaked(6, 2, 0.95)])
        for _ in range(3):
            first.process_frame(self.hands)

        self.assertEqual(len(first.voter), 3)
        self.assertEqual(len(second.voter), 0)
        self.assertIsNone(second.process_frame(self.hands))
        self.assertIsNone(second.current_label())

    def test_out_of_range_top_index_is_no_decision(self):
        # Classifier returns more scores than there are labels.
        outputs = [np.array([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.99], dtype=np.float32)] * 3
        pipeline, _ = self._pipeline(outputs)
        with self.assertLogs("signroute_hand.voter", level="WARNING"):
            results = [pipeline.process_frame(self.hands) for _ in range(3)]
        self.assertEqual(results, [None, None, None])
        self.assertEqual(len(pipeline.voter), 0)

    def test_voter_rebuilt_when_labels_become_available(self):
        classifier = FakeClassifier([], [ModelUnavailable("not yet")])
        pipeline = PredictionPipeline(classifier)
        self.assertEqual(pipeline.voter.num_classes, 0)
        with self.assertLogs("signroute_hand.pipeline", level="WARNING"):
            self.assertIsNone(pipeline.process_frame(self.hands))

        classifier.labels = LABELS
        classifier.outputs = [peaked(6, 2, 0.95)] * 3
        results = [pipeline.process_frame(self.hands) for _ in range(3)]
        self.assertEqual(pipeline.voter.num_classes, 6)
        self.assertEqual(results[-1], "yes")

    def test_process_image_uses_detector(self):
        detector = MagicMock()
        detector.detect.return_value = self.hands
        classifier = FakeClassifier(LABELS, [peaked(6, 2, 0.95)] * 3)
        pipeline = PredictionPipeline(classifier, detector=detector)

        results = [pipeline.process_image(np.zeros((4, 4, 3), dtype=np.uint8)) for _ in range(3)]
        self.assertEqual(results[-1], "yes")
        self.assertEqual(detector.detect.call_count, 3)

    def test_detector_failure_is_empty_frame(self):
        detector = MagicMock()
        detector.detect.side_effect = DetectorFailure("camera glitch")
        pipeline, classifier = self._pipeline([])
        pipeline.detector = detector

        with self.assertLogs("signroute_hand.pipeline", level="WARNING"):
            self.assertIsNone(pipeline.process_image(np.zeros((4, 4, 3), dtype=np.uint8)))
        self.assertEqual(classifier.calls, [])

    def test_from_config(self):
        cfg = PipelineConfig(window_size=5, confidence_threshold=0.5, gating="record")
        pipeline = PredictionPipeline.from_config(cfg, classifier=FakeClassifier(LABELS))
        self.assertEqual(pipeline.voter.window_size, 5)
        self.assertEqual(pipeline.voter.majority_threshold, 2)
        self.assertAlmostEqual(pipeline.voter.confidence_threshold, 0.5)
        self.assertIs(pipeline.voter.gating, GatingPolicy.RECORD)


if __name__ == "__main__":
    unittest.main()
