"""
Error types raised by the matcher.
Provider and storage failures are not wrapped: they propagate as raised.
"""


class JobMatchError(Exception):
    """Base class for matcher errors."""


class NotInitializedError(JobMatchError, RuntimeError):
    """An embedding provider was used before setup() was called."""


class DimensionMismatchError(JobMatchError, ValueError):
    """A vector does not have exactly the expected number of components."""

    def __init__(self, expected: int, actual: int, message: str = None):
        self.expected = expected
        self.actual = actual
        super().__init__(message or f"Vector dimension {actual} does not match expected dimension {expected}")


class InvalidVectorError(JobMatchError, ValueError):
    """A vector contains NaN or infinite components."""
