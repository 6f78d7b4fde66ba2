from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol, Tuple, Union, runtime_checkable

import numpy as np

from .encoder import FEATURE_SIZE
from .errors import InferenceError, InvalidInputSize, ModelUnavailable
from .labels import LabelSet
from .types import ClassificationResult


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@runtime_checkable
class Classifier(Protocol):
    """Inference capability: 126 features in, one probability per label out."""

    @property
    def labels(self) -> LabelSet:
        ...

    @property
    def available(self) -> bool:
        ...

    def classify(self, vector: np.ndarray) -> ClassificationResult:
        """Raise ModelUnavailable if nothing is loaded, InvalidInputSize on a bad vector."""
        ...


def check_feature_vector(vector) -> np.ndarray:
    """Flatten `vector` to float32 and verify it holds exactly FEATURE_SIZE values."""
    arr = np.asarray(vector, dtype=np.float32).reshape(-1)
    if arr.shape[0] != FEATURE_SIZE:
        raise InvalidInputSize(FEATURE_SIZE, int(arr.shape[0]))
    return arr


def _create_tflite_interpreter(model_content: bytes):
    import tensorflow as tf  # type: ignore

    return tf.lite.Interpreter(model_content=model_content)


class TFLiteClassifier:
    """
    TensorFlow Lite backed classifier.

    Starts out unavailable. `load()` reads the model blob and the label file; if either
    is missing or malformed the classifier stays unavailable and ModelUnavailable is
    raised to the caller.

    Usage:
        classifier = TFLiteClassifier.from_files("sign_model.tflite", "labels.txt")
        result = classifier.classify(vector)
    """

    def __init__(self, interpreter_factory: Optional[Callable[[bytes], Any]] = None) -> None:
        self._interpreter_factory = interpreter_factory or _create_tflite_interpreter
        self._interpreter: Any = None
        self._labels = LabelSet()
        self._input_index: Optional[int] = None
        self._input_shape: Tuple[int, ...] = ()
        self._input_dtype: Any = np.float32
        self._output_index: Optional[int] = None
        self._output_shape: Tuple[int, ...] = ()

    @classmethod
    def from_files(
        cls,
        model_path: PathLike,
        labels_path: PathLike,
        interpreter_factory: Optional[Callable[[bytes], Any]] = None,
    ) -> "TFLiteClassifier":
        classifier = cls(interpreter_factory=interpreter_factory)
        classifier.load(model_path, labels_path)
        return classifier

    @property
    def labels(self) -> LabelSet:
        return self._labels

    @property
    def available(self) -> bool:
        return self._interpreter is not None

    def load(self, model_path: PathLike, labels_path: PathLike) -> None:
        """
        Load the model blob and labels.

        Args:
            model_path: Path to the `.tflite` model
            labels_path: Path to a newline-delimited label file

        Raises:
            ModelUnavailable: if either resource is missing or malformed. The classifier
                is left unavailable in that case.
        """
        self.close()

        try:
            labels = LabelSet.load(labels_path)
        except OSError as e:
            raise ModelUnavailable(f"Could not read labels: {labels_path}") from e

        try:
            with open(model_path, "rb") as f:
                model_content = f.read()
        except OSError as e:
            raise ModelUnavailable(f"Could not read model: {model_path}") from e
        if not model_content:
            raise ModelUnavailable(f"Model file is empty: {model_path}")

        logger.info("Loading TFLite model %s (%d bytes)", model_path, len(model_content))
        try:
            interpreter = self._interpreter_factory(model_content)
            interpreter.allocate_tensors()
            input_details = interpreter.get_input_details()[0]
            output_details = interpreter.get_output_details()[0]
        except Exception as e:
            raise ModelUnavailable(f"Could not initialize interpreter for {model_path}") from e

        input_shape = tuple(int(d) for d in input_details["shape"])
        output_shape = tuple(int(d) for d in output_details["shape"])
        if int(np.prod(input_shape)) != FEATURE_SIZE:
            raise ModelUnavailable(
                f"Model input shape {input_shape} does not take {FEATURE_SIZE} features"
            )
        if int(np.prod(output_shape)) != len(labels):
            raise ModelUnavailable(
                f"Model output shape {output_shape} does not match {len(labels)} labels"
            )

        self._interpreter = interpreter
        self._labels = labels
        self._input_index = input_details["index"]
        self._input_shape = input_shape
        self._input_dtype = input_details.get("dtype", np.float32)
        self._output_index = output_details["index"]
        self._output_shape = output_shape
        logger.info("Interpreter ready: input=%s output=%s classes=%d", input_shape, output_shape, len(labels))

    def classify(self, vector: np.ndarray) -> ClassificationResult:
        if self._interpreter is None:
            raise ModelUnavailable("No model loaded")
        features = check_feature_vector(vector)

        try:
            self._interpreter.set_tensor(
                self._input_index,
                features.reshape(self._input_shape).astype(self._input_dtype),
            )
            self._interpreter.invoke()
            output = self._interpreter.get_tensor(self._output_index)
        except Exception as e:
            raise InferenceError("TFLite inference failed") from e

        probabilities = np.asarray(output, dtype=np.float32).reshape(-1)
        if probabilities.shape[0] != len(self._labels):
            raise InferenceError(
                f"Model returned {probabilities.shape[0]} scores for {len(self._labels)} labels"
            )
        return ClassificationResult(probabilities=probabilities)

    def model_info(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "input_shape": self._input_shape,
            "output_shape": self._output_shape,
            "num_classes": len(self._labels),
            "class_names": list(self._labels),
        }

    def close(self) -> None:
        self._interpreter = None
        self._labels = LabelSet()
        self._input_index = None
        self._input_shape = ()
        self._output_index = None
        self._output_shape = ()

    def __enter__(self) -> "TFLiteClassifier":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
