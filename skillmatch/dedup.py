from __future__ import annotations

"""
Category-based deduplication of recommendations within one tier.

Recommendations sharing a category and the same tag set describe the same
capability; only the highest-priority one stays top-level and the rest are
listed as its alternatives. Uncategorized recommendations are never merged.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union

from loguru import logger

from .schemas import Recommendation, SkillAlternative

DedupKey = Union[Tuple[str, str], Tuple[str, int]]


def dedup_key(rec: Recommendation, position: int) -> DedupKey:
    """
    ``(category, "tag1,tag2,...")`` for categorized recommendations. An
    uncategorized one gets a key unique to its position, so it always forms
    its own group.
    """
    if rec.category is None:
        return ("", position)
    return (rec.category.value, ",".join(sorted(rec.tags)))


def _priority(rec: Recommendation) -> float:
    return float(rec.priority) if rec.priority is not None else float("-inf")


def deduplicate(recommendations: Sequence[Recommendation]) -> List[Recommendation]:
    """
    Collapse same-key recommendations, keeping input order of first
    appearance per group.

    The representative is the member with the highest priority (missing
    priority loses to any number; ties keep the earliest). Every other member
    becomes an alternative ``{name, source}`` in encounter order.
    """
    groups: Dict[DedupKey, List[Recommendation]] = {}
    for i, rec in enumerate(recommendations):
        groups.setdefault(dedup_key(rec, i), []).append(rec)

    out: List[Recommendation] = []
    for members in groups.values():
        if len(members) == 1:
            out.append(members[0])
            continue

        best: Optional[Recommendation] = None
        for rec in members:
            if best is None or _priority(rec) > _priority(best):
                best = rec

        alternatives = list(best.alternatives or [])
        alternatives.extend(
            SkillAlternative(name=rec.name, source=rec.source)
            for rec in members
            if rec is not best
        )
        logger.debug(
            "dedup: kept {} over {}", best.name, [a.name for a in alternatives],
        )
        out.append(best.model_copy(update={"alternatives": alternatives}))
    return out
