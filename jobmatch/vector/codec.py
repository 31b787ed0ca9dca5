"""
Blob encoding for embeddings: one little-endian float32 per component, in order.
"""

from typing import Sequence, Union

import numpy as np

from jobmatch.core.config import EMBED_DIM
from jobmatch.core.errors import DimensionMismatchError, InvalidVectorError

_DTYPE = np.dtype("<f4")

VectorLike = Union[Sequence[float], np.ndarray]


def as_vector(vector: VectorLike, dimension: int = EMBED_DIM) -> np.ndarray:
    """Convert to a 1-D float32 array, checking length and finiteness."""
    array = np.asarray(vector, dtype=np.float32)
    if array.ndim == 2 and array.shape[0] == 1:
        array = array[0]
    if array.ndim != 1 or array.shape[0] != dimension:
        raise DimensionMismatchError(dimension, array.size)
    if not np.all(np.isfinite(array)):
        raise InvalidVectorError("Vector contains NaN or infinite components")
    return array


def serialize_embedding(vector: VectorLike, dimension: int = EMBED_DIM) -> bytes:
    """Serialize a vector to exactly 4 * dimension bytes."""
    return as_vector(vector, dimension).astype(_DTYPE, copy=False).tobytes()


def deserialize_embedding(buffer: bytes, dimension: int = EMBED_DIM) -> np.ndarray:
    """Deserialize a blob written by serialize_embedding."""
    expected_bytes = dimension * _DTYPE.itemsize
    if len(buffer) != expected_bytes:
        raise DimensionMismatchError(
            dimension, len(buffer) // _DTYPE.itemsize,
            f"Embedding blob is {len(buffer)} bytes, expected {expected_bytes} ({dimension} float32 components)"
        )
    return np.frombuffer(buffer, dtype=_DTYPE).astype(np.float32)
