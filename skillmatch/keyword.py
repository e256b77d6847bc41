from __future__ import annotations

"""
Keyword scorer: weighted tag overlap between detected technologies and
catalog candidates.

score(c) = sum over technologies t of weight(t.confidence) * |tags(t) & tags(c)|

Candidates scoring 0 are left out of the ranking entirely; that is how
"no keyword match" is represented.
"""

from typing import List, Sequence, Set, Tuple

from loguru import logger

from .pipeline_types import RankingEntry, assign_ranks
from .schemas import Candidate, DetectedTechnology
from .tags import Tag, tag_overlap


def _technology_tags(
    technologies: Sequence[DetectedTechnology],
) -> List[Tuple[DetectedTechnology, frozenset]]:
    out = []
    for tech in technologies:
        tags = tech.normalized_tags
        if tags:
            out.append((tech, tags))
    return out


def score_keywords(
    catalog: Sequence[Candidate],
    technologies: Sequence[DetectedTechnology],
) -> List[RankingEntry]:
    """
    Rank ``catalog`` by weighted tag overlap with ``technologies``.

    Each entry also records the distinct matched tags (union over all
    technologies) and the names of the technologies that contributed.
    """
    tech_tags = _technology_tags(technologies)
    if not tech_tags or not catalog:
        return []

    rows = []
    for cand in catalog:
        score = 0
        matched: Set[Tag] = set()
        techs: List[str] = []
        for tech, tags in tech_tags:
            hits = tag_overlap(tags, cand.tags)
            if not hits:
                continue
            score += tech.confidence.weight * len(hits)
            matched.update(hits)
            if tech.name not in techs:
                techs.append(tech.name)
        if score > 0:
            rows.append((cand, float(score), matched, techs))

    ranking = assign_ranks(rows)
    logger.debug(
        "score_keywords: {} technologies x {} candidates -> {} ranked",
        len(tech_tags), len(catalog), len(ranking),
    )
    return ranking


