"""
Exact nearest-neighbor vector index, partitioned by entity kind.

Vectors are kept as float32 blobs in the same SQLite database as the
attribute records and scanned brute-force with numpy on query.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from jobmatch.core.config import EMBED_DIM
from jobmatch.core.db import Database, vector_table
from jobmatch.core.schema import EntityKind
from jobmatch.util.logging import logger

from .codec import VectorLike, as_vector, deserialize_embedding, serialize_embedding
from .types import QueryResult, VectorEntry


class IVectorIndex(ABC):
    """Abstract interface for vector index operations."""

    @abstractmethod
    def replace(self, kind: EntityKind, record_id: int, vector: VectorLike) -> None:
        """Insert the vector for an id, replacing any existing one."""
        pass

    @abstractmethod
    def query(self, kind: EntityKind, vector: VectorLike, k: int) -> List[QueryResult]:
        """Return up to k nearest entries in ascending distance order."""
        pass

    @abstractmethod
    def delete_all(self, kind: EntityKind) -> int:
        """Remove every entry of a kind."""
        pass


class SQLiteVectorIndex(IVectorIndex):
    """Brute-force squared-Euclidean KNN over vectors stored in SQLite."""

    def __init__(self, db: Database, dimension: int = EMBED_DIM):
        self.db = db
        self.dimension = dimension

    def replace(self, kind: EntityKind, record_id: int, vector: VectorLike) -> None:
        blob = serialize_embedding(vector, self.dimension)
        table = vector_table(kind)

        with self.db.transaction() as conn:
            conn.execute(f"DELETE FROM {table} WHERE id = ?", (int(record_id),))
            conn.execute(f"INSERT INTO {table} (id, embedding) VALUES (?, ?)", (int(record_id), blob))

        logger.debug(f"Replaced vector for {kind.value} id {record_id}")

    def query(self, kind: EntityKind, vector: VectorLike, k: int) -> List[QueryResult]:
        if k < 0:
            raise ValueError(f"k must be >= 0: {k}")
        query_vector = as_vector(vector, self.dimension).astype(np.float64)

        if k == 0:
            return []

        with self.db.snapshot() as conn:
            rows = conn.execute(f"SELECT id, embedding FROM {vector_table(kind)}").fetchall()

        if not rows:
            return []

        ids = np.array([row[0] for row in rows], dtype=np.int64)
        matrix = np.stack([deserialize_embedding(row[1], self.dimension) for row in rows]).astype(np.float64)

        diffs = matrix - query_vector
        distances = np.einsum("ij,ij->i", diffs, diffs)

        # Ascending distance, ties broken by ascending id
        order = np.lexsort((ids, distances))[:k]

        return [QueryResult(id=int(ids[i]), distance=float(distances[i])) for i in order]

    def delete_all(self, kind: EntityKind) -> int:
        with self.db.transaction() as conn:
            cursor = conn.execute(f"DELETE FROM {vector_table(kind)}")
            deleted = cursor.rowcount

        logger.debug(f"Deleted {deleted} {kind.value} vectors")
        return deleted

    def delete(self, kind: EntityKind, record_id: int) -> None:
        """Delete a single entry by id."""
        with self.db.transaction() as conn:
            conn.execute(f"DELETE FROM {vector_table(kind)} WHERE id = ?", (int(record_id),))

    def get(self, kind: EntityKind, record_id: int) -> Optional[np.ndarray]:
        """Get the stored vector for an id, or None."""
        with self.db.snapshot() as conn:
            row = conn.execute(
                f"SELECT embedding FROM {vector_table(kind)} WHERE id = ?", (int(record_id),)
            ).fetchone()
        return deserialize_embedding(row[0], self.dimension) if row else None

    def entries(self, kind: EntityKind) -> List[VectorEntry]:
        """All entries of a kind, ordered by id."""
        with self.db.snapshot() as conn:
            rows = conn.execute(f"SELECT id, embedding FROM {vector_table(kind)} ORDER BY id").fetchall()
        return [VectorEntry(kind=kind, id=row[0], vector=deserialize_embedding(row[1], self.dimension)) for row in rows]

    def ids(self, kind: EntityKind) -> List[int]:
        with self.db.snapshot() as conn:
            rows = conn.execute(f"SELECT id FROM {vector_table(kind)} ORDER BY id").fetchall()
        return [row[0] for row in rows]

    def count(self, kind: EntityKind) -> int:
        with self.db.snapshot() as conn:
            row = conn.execute(f"SELECT COUNT(*) FROM {vector_table(kind)}").fetchone()
        return row[0] if row else 0
