"""Adapters from a project analysis to the matcher's Profile."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from pydantic import TypeAdapter

from .schemas import DetectedTechnology, Profile

# analysis section -> DetectedTechnology.category
ANALYSIS_SECTIONS: Dict[str, str] = {
    "languages": "language",
    "frameworks": "framework",
    "deployment": "deployment",
    "testing": "testing",
    "databases": "database",
}

_INSTALLED_KEYS = ("existingSkills", "existing_skills", "installed")
_SECTION = TypeAdapter(List[Any])


def profile_from_analysis(analysis: Mapping[str, Any]) -> Profile:
    """
    Flatten ``{languages, frameworks, deployment, testing, databases,
    existingSkills}`` into a Profile. Section order is kept so the
    embedding query text is stable.

    Malformed sections or items raise pydantic ``ValidationError``.
    """
    technologies: List[DetectedTechnology] = []
    for section, category in ANALYSIS_SECTIONS.items():
        for item in _SECTION.validate_python(analysis.get(section) or []):
            if isinstance(item, Mapping):
                item = {"category": category, **item}
            technologies.append(DetectedTechnology.model_validate(item))

    installed: Any = None
    for key in _INSTALLED_KEYS:
        if analysis.get(key):
            installed = analysis[key]
            break
    return Profile(technologies=technologies, installed=installed)


def load_profile(data: Mapping[str, Any]) -> Profile:
    """Accept either a Profile-shaped dict or a project-analysis dict."""
    if "technologies" in data:
        return Profile.model_validate(dict(data))
    return profile_from_analysis(data)
