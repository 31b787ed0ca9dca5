"""
Vector index value types.
"""

from dataclasses import dataclass

import numpy as np

from jobmatch.core.schema import EntityKind


@dataclass
class VectorEntry:
    """One stored vector, keyed by the owning record's surrogate id."""

    kind: EntityKind
    id: int
    vector: np.ndarray


@dataclass
class QueryResult:
    """A nearest-neighbor hit from the vector index."""

    id: int
    """Surrogate id of the matching record"""

    distance: float
    """Squared Euclidean distance to the query vector (lower is closer)"""
