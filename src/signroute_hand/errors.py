"""
Exceptions raised by the sign classification pipeline.
"""


class SignRouteError(Exception):
    """Base exception for pipeline errors."""
    pass


class ModelUnavailable(SignRouteError):
    """Raised when the classifier has no loaded model or labels."""
    pass


class InvalidInputSize(SignRouteError, ValueError):
    """Raised when a feature vector does not hold exactly the expected number of values."""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"expected a feature vector of {expected} values, got {actual}")
        self.expected = expected
        self.actual = actual


class InferenceError(SignRouteError):
    """Raised when the inference backend fails or returns an unexpected output size."""
    pass


class DetectorFailure(SignRouteError):
    """Raised when the hand landmark detector fails on a frame."""
    pass


class IndexOutOfRange(SignRouteError, IndexError):
    """Raised when a class index falls outside the label set."""

    def __init__(self, index: int, size: int):
        super().__init__(f"class index {index} outside label set of size {size}")
        self.index = index
        self.size = size
