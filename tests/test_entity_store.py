"""
Tests for the attribute store.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from jobmatch.core.config import EMBED_DIM
from jobmatch.core.db import Database
from jobmatch.core.entity_store import EntityStore
from jobmatch.core.errors import DimensionMismatchError
from jobmatch.core.schema import EntityAttributes, EntityKind


def unit(i):
    vector = np.zeros(EMBED_DIM, dtype=np.float32)
    vector[i] = 1.0
    return vector


def attrs(body="Backend engineer", seniority="Senior", skills=None, industry="Technology"):
    return EntityAttributes(
        seniority=seniority,
        skills=skills if skills is not None else ["Python", "SQL"],
        industry=industry,
        body=body,
    )


@pytest.fixture
def db():
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def store(db):
    return EntityStore(db)


class TestUpsert:
    """Insert-or-replace by natural key."""

    def test_first_upsert_creates_record(self, store):
        record_id, created = store.upsert(EntityKind.PROFILE, "alice", attrs(), unit(0))

        assert created is True
        record = store.lookup(EntityKind.PROFILE, "alice")
        assert record.id == record_id
        assert record.kind is EntityKind.PROFILE
        assert record.skills == ["Python", "SQL"]
        assert np.array_equal(record.embedding, unit(0))

    def test_second_upsert_keeps_id_and_replaces_everything(self, store):
        first_id, _ = store.upsert(EntityKind.PROFILE, "alice", attrs(), unit(0))
        second_id, created = store.upsert(
            EntityKind.PROFILE, "alice",
            attrs(body="Data scientist", seniority="Mid-level", skills=["R"], industry="Finance"),
            unit(1),
        )

        assert created is False
        assert second_id == first_id
        record = store.lookup(EntityKind.PROFILE, "alice")
        assert record.body == "Data scientist"
        assert record.seniority == "Mid-level"
        assert record.skills == ["R"]
        assert record.industry == "Finance"
        assert np.array_equal(record.embedding, unit(1))
        assert store.count(EntityKind.PROFILE) == 1

    def test_no_partial_merge_on_update(self, store):
        store.upsert(EntityKind.POSTING, "job-1", attrs(skills=["Go", "Rust"]), unit(0))
        store.upsert(EntityKind.POSTING, "job-1", attrs(skills=[]), unit(0))

        assert store.lookup(EntityKind.POSTING, "job-1").skills == []

    def test_ids_are_unique_and_increasing(self, store):
        ids = [store.upsert(EntityKind.PROFILE, f"p{i}", attrs(), unit(i))[0] for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_kinds_are_independent(self, store):
        store.upsert(EntityKind.PROFILE, "shared-key", attrs(body="profile text"), unit(0))
        store.upsert(EntityKind.POSTING, "shared-key", attrs(body="posting text"), unit(1))

        assert store.lookup(EntityKind.PROFILE, "shared-key").body == "profile text"
        assert store.lookup(EntityKind.POSTING, "shared-key").body == "posting text"

    def test_empty_natural_key_rejected(self, store):
        with pytest.raises(ValueError):
            store.upsert(EntityKind.PROFILE, "", attrs(), unit(0))

    def test_wrong_dimension_rejected_before_write(self, store):
        with pytest.raises(DimensionMismatchError):
            store.upsert(EntityKind.PROFILE, "alice", attrs(), [1.0, 0.0])
        assert store.lookup(EntityKind.PROFILE, "alice") is None


class TestLookup:
    """Exact-match lookups by natural key and id."""

    def test_lookup_is_exact(self, store):
        store.upsert(EntityKind.PROFILE, "Alice Smith", attrs(), unit(0))

        assert store.lookup(EntityKind.PROFILE, "Alice Smith") is not None
        assert store.lookup(EntityKind.PROFILE, "alice smith") is None
        assert store.lookup(EntityKind.PROFILE, "Alice Smith ") is None
        assert store.lookup(EntityKind.PROFILE, "Alice") is None

    def test_missing_key_returns_none(self, store):
        assert store.lookup(EntityKind.POSTING, "nope") is None

    def test_resolve_by_id(self, store):
        record_id, _ = store.upsert(EntityKind.POSTING, "job-1", attrs(), unit(0))

        assert store.resolve(EntityKind.POSTING, record_id).natural_key == "job-1"
        assert store.resolve(EntityKind.PROFILE, record_id) is None
        assert store.resolve(EntityKind.POSTING, record_id + 100) is None

    def test_list_records_ordered_by_id(self, store):
        store.upsert(EntityKind.PROFILE, "b", attrs(), unit(0))
        store.upsert(EntityKind.PROFILE, "a", attrs(), unit(1))

        assert [r.natural_key for r in store.list_records(EntityKind.PROFILE)] == ["b", "a"]


class TestClear:
    """Kind-scoped deletion."""

    def test_clear_removes_only_that_kind(self, store):
        store.upsert(EntityKind.PROFILE, "alice", attrs(), unit(0))
        store.upsert(EntityKind.POSTING, "job-1", attrs(), unit(0))

        assert store.clear(EntityKind.PROFILE) == 1

        assert store.lookup(EntityKind.PROFILE, "alice") is None
        assert store.lookup(EntityKind.POSTING, "job-1") is not None

    def test_ids_not_reused_after_clear(self, store):
        old_id, _ = store.upsert(EntityKind.PROFILE, "alice", attrs(), unit(0))
        store.clear(EntityKind.PROFILE)

        new_id, created = store.upsert(EntityKind.PROFILE, "alice", attrs(), unit(0))

        assert created is True
        assert new_id > old_id


class TestAttributeValidation:
    """Attribute model rules."""

    def test_blank_body_rejected(self):
        with pytest.raises(ValidationError):
            EntityAttributes(body="   ")

    def test_skills_become_ordered_set(self):
        attributes = EntityAttributes(body="x", skills=["React", "Node.js", "React", "", "  ", "AWS"])
        assert attributes.skills == ["React", "Node.js", "AWS"]

    def test_skill_tokens_are_case_sensitive(self):
        attributes = EntityAttributes(body="x", skills=["python", "Python"])
        assert attributes.skills == ["python", "Python"]
