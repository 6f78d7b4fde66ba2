from __future__ import annotations

import argparse
import logging
import os
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
from signroute_hand.drawing import draw_text  # noqa: E402
from signroute_hand.encoder import FeatureEncoder  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Classify the sign in a single image.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--config", default=None, help="YAML config file (default: built-in defaults)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    cfg = load_config(args.config)

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    # A single image has no history to vote over, so print the raw distribution.
    classifier = TFLiteClassifier.from_files(cfg.model_path, cfg.labels_path)

    with HandLandmarkDetector.from_config(cfg) as detector:
        hands = detector.detect(frame)
        out = detector.draw(frame, hands)

    print(f"hands: {len(hands)}")
    if hands:
        result = classifier.classify(FeatureEncoder().encode(hands))
        top = classifier.labels[result.top_index]
        print(f"top: {top} ({result.confidence:.3f})")
        for name, p in sorted(result.as_dict(classifier.labels).items(), key=lambda kv: -kv[1])[:5]:
            print(f"  {name}: {p:.3f}")
        draw_text(out, f"{top} {result.confidence:.2f}", (12, 28), scale=0.8)

    ok = cv2.imwrite(args.out, out)
    if not ok:
        raise RuntimeError(f"Could not write output image: {args.out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
