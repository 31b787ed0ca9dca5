"""
Record types for profiles and postings, and the validated attribute model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np
from pydantic import BaseModel, field_validator


class EntityKind(str, Enum):
    PROFILE = "profile"
    POSTING = "posting"


class EntityAttributes(BaseModel):
    """Mutable attributes of a record; replaced as a whole on update."""
    seniority: str = ""
    skills: List[str] = []
    industry: str = ""
    body: str

    @field_validator('body')
    @classmethod
    def body_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('body cannot be empty')
        return v

    @field_validator('skills')
    @classmethod
    def skills_as_ordered_set(cls, v):
        # first occurrence wins, blank tokens dropped
        seen = []
        for token in v:
            if token.strip() and token not in seen:
                seen.append(token)
        return seen


@dataclass
class Record:
    id: int
    kind: EntityKind
    natural_key: str
    seniority: str
    skills: List[str]
    industry: str
    body: str
    embedding: np.ndarray = field(repr=False)


@dataclass
class UpsertResult:
    id: int
    was_created: bool


@dataclass
class MatchResult:
    natural_key: str
    similarity: float
    distance: float
