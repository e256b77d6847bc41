"""Hybrid keyword + embedding skill recommendation engine."""

from .matcher import (
    CatalogContractError,
    SkillMatcher,
    filter_by_confidence,
    filter_by_tag,
    get_all_recommendations,
    match_skills,
)
from .schemas import (
    Candidate,
    Category,
    ConfidenceLevel,
    DetectedTechnology,
    MatchResult,
    Profile,
    Recommendation,
    SkillAlternative,
    SkillSource,
)

__all__ = [
    "Candidate",
    "CatalogContractError",
    "Category",
    "ConfidenceLevel",
    "DetectedTechnology",
    "MatchResult",
    "Profile",
    "Recommendation",
    "SkillAlternative",
    "SkillMatcher",
    "SkillSource",
    "filter_by_confidence",
    "filter_by_tag",
    "get_all_recommendations",
    "match_skills",
]
