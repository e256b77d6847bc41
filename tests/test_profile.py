import pytest
from pydantic import ValidationError

from skillmatch.profile import load_profile, profile_from_analysis
from skillmatch.schemas import ConfidenceLevel


def _tech(name, tags, confidence="high"):
    return {"name": name, "confidence": confidence, "evidence": "test", "tags": tags}


def test_profile_from_analysis_flattens_sections_in_order():
    analysis = {
        "frameworks": [_tech("Svelte 5", ["svelte", "runes"])],
        "languages": [_tech("TypeScript", ["typescript", "ts"])],
        "testing": [_tech("Vitest", ["vitest"], "medium")],
        "databases": [],
        "existingSkills": ["tdd"],
        "projectPath": "/test/project",
    }
    profile = profile_from_analysis(analysis)

    assert [t.name for t in profile.technologies] == ["TypeScript", "Svelte 5", "Vitest"]
    assert [t.category for t in profile.technologies] == ["language", "framework", "testing"]
    assert profile.technologies[2].confidence is ConfidenceLevel.MEDIUM
    assert profile.installed == frozenset({"tdd"})


def test_load_profile_accepts_profile_shape():
    profile = load_profile(
        {"technologies": [_tech("Rust", ["rust"])], "installed": ["code-review-rust"]}
    )
    assert profile.technologies[0].name == "Rust"
    assert profile.installed == frozenset({"code-review-rust"})


def test_load_profile_empty_analysis():
    profile = load_profile({"languages": []})
    assert profile.technologies == []
    assert profile.installed == frozenset()


@pytest.mark.parametrize(
    "analysis",
    [
        {"languages": ["python"]},
        {"languages": "python"},
        {"frameworks": [42]},
        {"languages": [], "existingSkills": 7},
    ],
)
def test_malformed_analysis_raises_validation_error(analysis):
    with pytest.raises(ValidationError):
        profile_from_analysis(analysis)


def test_single_installed_name_is_accepted():
    assert profile_from_analysis({"existingSkills": "tdd"}).installed == frozenset({"tdd"})
