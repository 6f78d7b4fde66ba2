from .classifier import Classifier, TFLiteClassifier
from .config import PipelineConfig, load_config
from .encoder import FEATURE_SIZE, FeatureEncoder
from .errors import DetectorFailure, IndexOutOfRange, InferenceError, InvalidInputSize, ModelUnavailable
from .labels import LabelSet
from .pipeline import PredictionPipeline
from .types import ClassificationResult, LandmarkPoint, VotingOutcome
from .voter import GatingPolicy, TemporalVoter

__all__ = [
    "Classifier",
    "TFLiteClassifier",
    "PipelineConfig",
    "load_config",
    "FEATURE_SIZE",
    "FeatureEncoder",
    "DetectorFailure",
    "IndexOutOfRange",
    "InferenceError",
    "InvalidInputSize",
    "ModelUnavailable",
    "LabelSet",
    "PredictionPipeline",
    "ClassificationResult",
    "LandmarkPoint",
    "VotingOutcome",
    "GatingPolicy",
    "TemporalVoter",
]
