"""
Matching engine over the attribute store and the vector index.

Upserts run in two phases:
1. prepare: build the enriched text and ask the embedding provider for a
   vector. No lock is held and no store is touched, so a provider failure
   leaves any existing record exactly as it was.
2. commit: write the attribute record and its vector inside a single
   transaction. Either both writes land or neither does.

Concurrent upserts of the same natural key are last-write-wins in commit
order, not call order: two callers that embed at different speeds can
commit in the opposite order to the one they started in.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from jobmatch.util.logging import logger
from jobmatch.vector.codec import as_vector
from jobmatch.vector.embeddings import IEmbeddingProvider
from jobmatch.vector.index import SQLiteVectorIndex

from .config import (
    DEFAULT_MATCH_LIMIT, EMBED_DIM, SKILL_OVERLAP_BOOST,
    get_embedding_provider, get_skill_overlap_mode,
)
from .db import Database
from .enrichment import build_posting_text, build_profile_text
from .entity_store import EntityStore
from .errors import NotInitializedError
from .schema import EntityAttributes, EntityKind, MatchResult, UpsertResult


@dataclass(frozen=True)
class PreparedUpsert:
    """Result of phase 1: everything phase 2 needs, already validated."""
    kind: EntityKind
    natural_key: str
    attributes: EntityAttributes
    embedding: np.ndarray


def skill_overlap_count(profile_skills: List[str], required_skills: List[str], mode: str = "substring") -> int:
    """Count profile skills that appear in a posting's required skills.

    In ``substring`` mode a skill counts when its text occurs anywhere in the
    comma-joined requirement string, so "Java" also matches "JavaScript".
    ``exact`` mode counts exact token matches only.
    """
    if mode == "exact":
        required = set(required_skills)
        return sum(1 for skill in profile_skills if skill in required)
    if mode != "substring":
        raise ValueError(f"Unknown skill overlap mode: {mode}")

    joined = ", ".join(required_skills)
    return sum(1 for skill in profile_skills if skill and skill in joined)


def raw_similarity(distance: float) -> float:
    """1 - distance, unclamped."""
    return 1.0 - distance


def boosted_similarity(distance: float, overlap: int, boost: float = SKILL_OVERLAP_BOOST) -> float:
    """Clamp 1 - distance to [0, 1], add the overlap boost, cap at 1."""
    base = max(0.0, min(1.0, 1.0 - distance))
    return min(1.0, base + overlap * boost)


class MatchEngine:
    """Upserts profiles and postings and matches them against each other."""

    def __init__(self, db: Database, embedding_provider: IEmbeddingProvider,
                 entity_store: Optional[EntityStore] = None,
                 vector_index: Optional[SQLiteVectorIndex] = None,
                 dimension: int = EMBED_DIM):
        self.db = db
        self.embedding_provider = embedding_provider
        self.dimension = dimension
        self.entity_store = entity_store or EntityStore(db, dimension)
        self.vector_index = vector_index or SQLiteVectorIndex(db, dimension)

    @classmethod
    def from_config(cls, db_path: str = None) -> "MatchEngine":
        """Open the configured database and embedding provider."""
        return cls(Database(db_path), get_embedding_provider())

    def close(self):
        self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Upsert

    def prepare_upsert(self, kind: EntityKind, natural_key: str, raw_text: str,
                       seniority: str, skills: List[str], industry: str) -> PreparedUpsert:
        """Phase 1: validate attributes and compute the embedding."""
        if not natural_key:
            raise ValueError("natural_key cannot be empty")
        attributes = EntityAttributes(seniority=seniority, skills=skills, industry=industry, body=raw_text)

        if not self.embedding_provider.is_initialized:
            raise NotInitializedError("Embedding provider is not initialized. Call setup() first.")

        if kind is EntityKind.PROFILE:
            text = build_profile_text(natural_key, attributes.body, attributes.seniority, attributes.skills, attributes.industry)
        else:
            text = build_posting_text(natural_key, attributes.body, attributes.seniority, attributes.skills, attributes.industry)

        try:
            embedding = as_vector(self.embedding_provider.embed_text(text), self.dimension).copy()
        except Exception as e:
            logger.log_entity_operation("embed", kind.value, natural_key, status="failed")
            logger.warning(f"Embedding failed for {kind.value} {natural_key!r}: {e}")
            raise

        embedding.setflags(write=False)
        return PreparedUpsert(kind=kind, natural_key=natural_key, attributes=attributes, embedding=embedding)

    def commit_upsert(self, prepared: PreparedUpsert) -> UpsertResult:
        """Phase 2: write the record and its vector as one transaction."""
        try:
            with self.db.transaction():
                record_id, created = self.entity_store.upsert(
                    prepared.kind, prepared.natural_key, prepared.attributes, prepared.embedding
                )
                self.vector_index.replace(prepared.kind, record_id, prepared.embedding)
        except Exception as e:
            logger.log_entity_operation("commit", prepared.kind.value, prepared.natural_key, status="failed")
            logger.error(f"Rolled back upsert of {prepared.kind.value} {prepared.natural_key!r}: {e}")
            raise

        logger.log_entity_operation("created" if created else "updated", prepared.kind.value, prepared.natural_key, record_id)
        return UpsertResult(id=record_id, was_created=created)

    def upsert(self, kind: EntityKind, natural_key: str, raw_text: str,
               seniority: str, skills: List[str], industry: str) -> UpsertResult:
        prepared = self.prepare_upsert(kind, natural_key, raw_text, seniority, skills, industry)
        return self.commit_upsert(prepared)

    def upsert_profile(self, natural_key: str, raw_text: str, seniority: str,
                       skills: List[str], industry: str) -> UpsertResult:
        """Create or update a candidate profile."""
        return self.upsert(EntityKind.PROFILE, natural_key, raw_text, seniority, skills, industry)

    def upsert_posting(self, natural_key: str, raw_text: str, seniority: str,
                       required_skills: List[str], industry: str) -> UpsertResult:
        """Create or update a job posting."""
        return self.upsert(EntityKind.POSTING, natural_key, raw_text, seniority, required_skills, industry)

    # Matching

    def find_matching_profiles(self, posting_key: str, limit: int = DEFAULT_MATCH_LIMIT) -> List[MatchResult]:
        """Nearest profiles for a posting.

        Similarity is 1 - distance without clamping; results keep the index's
        ascending-distance order. An unknown posting yields no results.
        """
        results = []
        with self.db.snapshot():
            posting = self.entity_store.lookup(EntityKind.POSTING, posting_key)
            if posting is not None:
                for hit in self.vector_index.query(EntityKind.PROFILE, posting.embedding, limit):
                    profile = self.entity_store.resolve(EntityKind.PROFILE, hit.id)
                    if profile is None:
                        logger.warning(f"Vector id {hit.id} has no profile record")
                        continue
                    results.append(MatchResult(
                        natural_key=profile.natural_key,
                        similarity=raw_similarity(hit.distance),
                        distance=hit.distance,
                    ))

        logger.log_match_query("profiles_for_posting", posting_key, limit, len(results))
        return results

    def find_matching_postings(self, profile_key: str, limit: int = DEFAULT_MATCH_LIMIT) -> List[MatchResult]:
        """Nearest postings for a profile, boosted by skill overlap.

        Similarity is clamp(1 - distance, 0, 1) plus 0.05 per overlapping
        skill, capped at 1, and results are re-sorted by it (highest first).
        An unknown profile yields no results.
        """
        mode = get_skill_overlap_mode()
        results = []
        with self.db.snapshot():
            profile = self.entity_store.lookup(EntityKind.PROFILE, profile_key)
            if profile is not None:
                for hit in self.vector_index.query(EntityKind.POSTING, profile.embedding, limit):
                    posting = self.entity_store.resolve(EntityKind.POSTING, hit.id)
                    if posting is None:
                        logger.warning(f"Vector id {hit.id} has no posting record")
                        continue
                    overlap = skill_overlap_count(profile.skills, posting.skills, mode)
                    results.append(MatchResult(
                        natural_key=posting.natural_key,
                        similarity=boosted_similarity(hit.distance, overlap),
                        distance=hit.distance,
                    ))

        # sorted() is stable: equal scores keep ascending-distance order
        results = sorted(results, key=lambda r: r.similarity, reverse=True)
        logger.log_match_query("postings_for_profile", profile_key, limit, len(results))
        return results

    # Maintenance

    def clear(self, kind: EntityKind) -> int:
        """Delete every record and vector of a kind in one transaction."""
        with self.db.transaction():
            deleted = self.entity_store.clear(kind)
            self.vector_index.delete_all(kind)

        logger.log_operation("entity.cleared", "success", {"kind": kind.value, "deleted": deleted})
        return deleted

    def clear_profiles(self) -> int:
        return self.clear(EntityKind.PROFILE)

    def clear_postings(self) -> int:
        return self.clear(EntityKind.POSTING)

    def reembed_all(self, kind: EntityKind) -> int:
        """Recompute embeddings for every stored record of a kind.

        Each record goes through the normal two-phase upsert, so a provider
        failure stops the run with earlier records already updated and the
        failing one untouched.
        """
        count = 0
        for record in self.entity_store.list_records(kind):
            self.upsert(kind, record.natural_key, record.body, record.seniority, record.skills, record.industry)
            count += 1

        logger.log_vector_operation("reembedded", kind.value, details={"records": count})
        return count
