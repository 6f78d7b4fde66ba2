"""
Pipeline configuration.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .voter import DEFAULT_CONFIDENCE_THRESHOLD, DEFAULT_WINDOW_SIZE, GatingPolicy


@dataclass
class PipelineConfig:
    """Settings for the detector, classifier and voting window."""

    # Voting
    window_size: int = DEFAULT_WINDOW_SIZE
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    gating: str = GatingPolicy.REJECT.value  # "reject" or "record"

    # Frame source
    throttle_interval_s: float = 0.1  # 10 classifications per second at most

    # Assets
    model_path: str = "models/sign_model.tflite"
    labels_path: str = "models/labels.txt"
    hand_landmarker_path: str = "models/hand_landmarker.task"

    # Detector
    max_num_hands: int = 2
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    def __post_init__(self):
        """Validate configuration."""
        if self.window_size <= 0:
            raise ValueError("window_size must be positive")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be within [0, 1]")
        try:
            self.gating = GatingPolicy(self.gating).value
        except ValueError:
            raise ValueError(f"gating must be one of {[p.value for p in GatingPolicy]}") from None
        if self.throttle_interval_s < 0:
            raise ValueError("throttle_interval_s must be >= 0")
        if not 1 <= self.max_num_hands <= 2:
            raise ValueError("max_num_hands must be 1 or 2")
        for name in ("min_detection_confidence", "min_tracking_confidence"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must be within [0, 1]")

    @property
    def majority_threshold(self) -> int:
        return self.window_size // 2

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to a YAML mapping of PipelineConfig fields. None returns defaults.

    Returns:
        PipelineConfig with file values applied over the defaults
    """
    if path is None:
        return PipelineConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")

    return PipelineConfig(**data)
