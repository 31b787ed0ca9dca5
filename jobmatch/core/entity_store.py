"""
Attribute store for profile and posting records, keyed by natural key.
"""

import json
from typing import List, Optional, Tuple

from jobmatch.util.logging import logger
from jobmatch.vector.codec import VectorLike, deserialize_embedding, serialize_embedding

from .config import EMBED_DIM
from .db import ENTITY_COLUMNS, Database, entity_table
from .schema import EntityAttributes, EntityKind, Record


class EntityStore:
    """Typed records partitioned by kind.

    The natural key is the only identity used for upsert: a second entity
    with the same key overwrites the first. Callers see this as
    ``was_created=False``.
    """

    def __init__(self, db: Database, dimension: int = EMBED_DIM):
        self.db = db
        self.dimension = dimension

    def _to_record(self, kind: EntityKind, row) -> Record:
        record_id, natural_key, seniority, skills, industry, body, embedding = row
        return Record(
            id=record_id,
            kind=kind,
            natural_key=natural_key,
            seniority=seniority or "",
            skills=json.loads(skills) if skills else [],
            industry=industry or "",
            body=body,
            embedding=deserialize_embedding(embedding, self.dimension),
        )

    def upsert(self, kind: EntityKind, natural_key: str, attributes: EntityAttributes,
               embedding: VectorLike) -> Tuple[int, bool]:
        """Insert or wholly replace the record for a natural key.

        Returns:
            (id, was_created); the id of an existing record never changes.
        """
        if not natural_key:
            raise ValueError("natural_key cannot be empty")

        blob = serialize_embedding(embedding, self.dimension)
        values = (
            attributes.seniority,
            json.dumps(attributes.skills),
            attributes.industry,
            attributes.body,
            blob,
        )
        table = entity_table(kind)

        with self.db.transaction() as conn:
            existing = conn.execute(
                f"SELECT id FROM {table} WHERE natural_key = ?", (natural_key,)
            ).fetchone()

            if existing:
                record_id = existing[0]
                conn.execute(
                    f"UPDATE {table} SET seniority = ?, skills = ?, industry = ?, body = ?, embedding = ? WHERE id = ?",
                    values + (record_id,)
                )
                created = False
            else:
                cursor = conn.execute(
                    f"INSERT INTO {table} (natural_key, seniority, skills, industry, body, embedding) VALUES (?, ?, ?, ?, ?, ?)",
                    (natural_key,) + values
                )
                record_id = cursor.lastrowid
                created = True

        logger.debug(f"{'Inserted' if created else 'Updated'} {kind.value} {natural_key!r} (id {record_id})")
        return record_id, created

    def lookup(self, kind: EntityKind, natural_key: str) -> Optional[Record]:
        """Get a record by exact natural key."""
        with self.db.snapshot() as conn:
            row = conn.execute(
                f"SELECT {ENTITY_COLUMNS} FROM {entity_table(kind)} WHERE natural_key = ?",
                (natural_key,)
            ).fetchone()
        return self._to_record(kind, row) if row else None

    def resolve(self, kind: EntityKind, record_id: int) -> Optional[Record]:
        """Get a record by surrogate id."""
        with self.db.snapshot() as conn:
            row = conn.execute(
                f"SELECT {ENTITY_COLUMNS} FROM {entity_table(kind)} WHERE id = ?",
                (int(record_id),)
            ).fetchone()
        return self._to_record(kind, row) if row else None

    def list_records(self, kind: EntityKind) -> List[Record]:
        """All records of a kind, ordered by id."""
        with self.db.snapshot() as conn:
            rows = conn.execute(
                f"SELECT {ENTITY_COLUMNS} FROM {entity_table(kind)} ORDER BY id"
            ).fetchall()
        return [self._to_record(kind, row) for row in rows]

    def count(self, kind: EntityKind) -> int:
        with self.db.snapshot() as conn:
            row = conn.execute(f"SELECT COUNT(*) FROM {entity_table(kind)}").fetchone()
        return row[0] if row else 0

    def clear(self, kind: EntityKind) -> int:
        """Delete all records of a kind. Ids are not reused afterwards."""
        with self.db.transaction() as conn:
            deleted = conn.execute(f"DELETE FROM {entity_table(kind)}").rowcount

        logger.debug(f"Deleted {deleted} {kind.value} records")
        return deleted
