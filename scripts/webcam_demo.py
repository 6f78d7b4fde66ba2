from __future__ import annotations

import argparse
import logging
import os
import platform
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from signroute_hand.classifier import TFLiteClassifier  # noqa: E402
from signroute_hand.config import load_config  # noqa: E402
from signroute_hand.detector import HandLandmarkDetector  # noqa: E402
from signroute_hand.drawing import draw_prediction  # noqa: E402
from signroute_hand.errors import DetectorFailure, ModelUnavailable  # noqa: E402
from signroute_hand.pipeline import PredictionPipeline  # noqa: E402
from signroute_hand.runtime import FrameThrottle, PredictionSlot  # noqa: E402


logger = logging.getLogger("signroute.webcam")


def main() -> int:
    ap = argparse.ArgumentParser(description="Webcam sign classification demo.")
    ap.add_argument("--config", default=None, help="YAML config file (default: built-in defaults)")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=640, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=480, help="Capture height (best effort)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every prediction")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)

    classifier = TFLiteClassifier()
    try:
        classifier.load(cfg.model_path, cfg.labels_path)
    except ModelUnavailable as e:
        # Keep running so landmarks are still drawn; every frame yields no decision.
        logger.error("Classifier unavailable: %s", e)

    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(args.camera, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        raise RuntimeError(f"Could not open camera index {args.camera}.")

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, args.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, args.height)

    throttle = FrameThrottle(cfg.throttle_interval_s)
    latest = PredictionSlot()

    with HandLandmarkDetector.from_config(cfg) as detector:
        pipeline = PredictionPipeline.from_config(cfg, classifier=classifier, detector=detector)
        hands = []
        while True:
            ok, frame = cap.read()
            if not ok:
                break

            if not args.no_mirror:
                frame = cv2.flip(frame, 1)

            if throttle.ready():
                try:
                    hands = detector.detect(frame)
                except DetectorFailure as e:
                    logger.warning("%s", e)
                    hands = []
                label = pipeline.process_frame(hands)
                if label is not None:
                    logger.info("Prediction: %s", label)
                latest.publish(label)

            frame = detector.draw(frame, hands)
            draw_prediction(frame, latest.get())

            cv2.imshow("signroute - sign classifier", frame)
            key = cv2.waitKey(1) & 0xFF
            if key in (ord("q"), 27):
                break

    cap.release()
    cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
