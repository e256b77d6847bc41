from __future__ import annotations

"""
Pydantic domain models for the skill matcher.

Categories, confidence levels and sources are closed ``str`` enums so a bad
value fails at construction instead of somewhere deep in the pipeline.
Tags are always stored in their normalised form (see ``skillmatch.tags``).
"""

import math
from enum import Enum
from typing import FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import CONFIDENCE_WEIGHTS
from .tags import Tag, normalize_tags


class Category(str, Enum):
    META = "meta"
    AUDIT = "audit"
    PRINCIPLES = "principles"
    HABITS = "habits"
    HOT = "hot"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return CONFIDENCE_WEIGHTS[self.value]


# high first; filter_by_confidence relies on this order
TIER_ORDER: List[ConfidenceLevel] = [
    ConfidenceLevel.HIGH,
    ConfidenceLevel.MEDIUM,
    ConfidenceLevel.LOW,
]


class SkillSource(str, Enum):
    CURATED = "curated"
    REGISTERED = "registered"


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value


# ---------------------------
# Inputs
# ---------------------------

class Candidate(BaseModel):
    """
    One catalog entry.

    A candidate with a blank name or no usable tags can be built (catalogs
    come from outside), but :attr:`is_well_formed` is False and the matcher
    skips it.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    tags: FrozenSet[str] = frozenset()
    description: str = ""
    category: Optional[Category] = None
    priority: Optional[Union[int, float]] = None
    source: SkillSource = SkillSource.CURATED

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("description", mode="before")
    @classmethod
    def _coerce_description(cls, v):
        return "" if v is None else str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v) -> FrozenSet[Tag]:
        return normalize_tags(v)

    @field_validator("category", mode="before")
    @classmethod
    def _lower_category(cls, v):
        return _blank_to_none(v)

    @field_validator("priority")
    @classmethod
    def _finite_priority(cls, v):
        if v is not None and not math.isfinite(v):
            raise ValueError("priority must be a finite number")
        return v

    @field_validator("source", mode="before")
    @classmethod
    def _lower_source(cls, v):
        return _blank_to_none(v) or SkillSource.CURATED

    @property
    def is_well_formed(self) -> bool:
        return bool(self.name) and bool(self.tags)

    @property
    def sorted_tags(self) -> List[str]:
        return sorted(self.tags)

    @property
    def rank_priority(self) -> float:
        """Priority used for ranking tie-breaks (missing counts as 0)."""
        return float(self.priority) if self.priority is not None else 0.0


class DetectedTechnology(BaseModel):
    """A technology found in the project, produced by the profile provider."""

    name: str
    tags: List[str] = Field(default_factory=list)
    confidence: ConfidenceLevel = ConfidenceLevel.HIGH
    category: Optional[str] = None   # language / framework / deployment / testing / database
    evidence: str = ""

    @property
    def normalized_tags(self) -> FrozenSet[Tag]:
        return normalize_tags(self.tags)


class Profile(BaseModel):
    technologies: List[DetectedTechnology] = Field(default_factory=list)
    installed: FrozenSet[str] = frozenset()

    @field_validator("installed", mode="before")
    @classmethod
    def _strip_installed(cls, v):
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError("installed must be a list of skill names")
        return frozenset(str(x).strip() for x in v if str(x).strip())


# ---------------------------
# Outputs
# ---------------------------

class SkillAlternative(BaseModel):
    name: str
    source: SkillSource


class Recommendation(BaseModel):
    """
    A single recommended skill. ``alternatives`` is only set on a dedup
    representative that absorbed other candidates.
    """

    name: str
    confidence: ConfidenceLevel
    reason: str = ""
    source: SkillSource = SkillSource.CURATED
    tags: List[str] = Field(default_factory=list)
    category: Optional[Category] = None
    priority: Optional[Union[int, float]] = None
    alternatives: Optional[List[SkillAlternative]] = None


class MatchResult(BaseModel):
    high: List[Recommendation] = Field(default_factory=list)
    medium: List[Recommendation] = Field(default_factory=list)
    low: List[Recommendation] = Field(default_factory=list)
    # malformed catalog entries left out of scoring
    skipped: List[str] = Field(default_factory=list)

    def tier(self, level: ConfidenceLevel) -> List[Recommendation]:
        return getattr(self, level.value)
