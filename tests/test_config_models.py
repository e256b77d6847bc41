import pytest
from pydantic import ValidationError

from skillmatch.config import RRF_K, HealthResponse, MatchSettings
from skillmatch.schemas import (
    Candidate,
    Category,
    ConfidenceLevel,
    DetectedTechnology,
    Profile,
    SkillSource,
)


def test_match_settings_defaults_follow_constants():
    settings = MatchSettings()
    assert settings.rrf_k == RRF_K == 60
    assert settings.high_min_matched_tags == 2
    assert settings.embedding_timeout_s > 0


def test_match_settings_rejects_bad_timeout():
    with pytest.raises(ValidationError):
        MatchSettings(embedding_timeout_s=0)


def test_candidate_normalizes_tags_and_category():
    cand = Candidate(name=" ts-review ", tags=["TypeScript", " ts", "ts"], category="HOT", priority=10)
    assert cand.name == "ts-review"
    assert cand.tags == frozenset({"typescript", "ts"})
    assert cand.category is Category.HOT
    assert cand.source is SkillSource.CURATED
    assert cand.is_well_formed


def test_candidate_rejects_unknown_category():
    with pytest.raises(ValidationError):
        Candidate(name="x", tags=["a"], category="frontend")


def test_candidate_without_tags_is_not_well_formed():
    assert not Candidate(name="empty", tags=["  ", ""]).is_well_formed
    assert not Candidate(name="", tags=["a"]).is_well_formed


def test_rank_priority_defaults_to_zero():
    assert Candidate(name="x", tags=["a"]).rank_priority == 0.0
    assert Candidate(name="x", tags=["a"], priority=7).rank_priority == 7.0


def test_confidence_weights():
    assert ConfidenceLevel.HIGH.weight == 3
    assert ConfidenceLevel.MEDIUM.weight == 2
    assert ConfidenceLevel.LOW.weight == 1


def test_detected_technology_normalized_tags():
    tech = DetectedTechnology(name="Svelte 5", tags=["Svelte", "RUNES "], confidence="medium")
    assert tech.normalized_tags == frozenset({"svelte", "runes"})
    assert tech.confidence is ConfidenceLevel.MEDIUM


def test_profile_installed_is_a_set():
    profile = Profile(installed=["a", " a", "b", ""])
    assert profile.installed == frozenset({"a", "b"})


def test_health_response():
    health = HealthResponse(status="healthy")
    assert health.status == "healthy"


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
def test_candidate_rejects_non_finite_priority(bad):
    with pytest.raises(ValidationError):
        Candidate(name="x", tags=["a"], priority=bad)
