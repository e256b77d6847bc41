"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .schemas import Candidate


class Signal(str, Enum):
    KEYWORD = "keyword"
    EMBEDDING = "embedding"


@dataclass(frozen=True)
class RankingEntry:
    """One row of a single scorer's ranking."""

    candidate_name: str
    rank: int
    score: float
    matched_tags: Tuple[str, ...] = ()
    matched_technologies: Tuple[str, ...] = ()


@dataclass
class FusedEntry:
    """A candidate after rank fusion, with enough provenance to bucket it."""

    candidate_name: str
    fused_score: float
    contributing_signals: FrozenSet[Signal]
    ranks: Dict[Signal, int] = field(default_factory=dict)
    matched_tags: Tuple[str, ...] = ()
    matched_technologies: Tuple[str, ...] = ()
    similarity: Optional[float] = None


def order_key(score: float, candidate: Candidate) -> Tuple[float, float, str]:
    """Sort key: score desc, then priority desc (missing = 0), then name asc."""
    return (-score, -candidate.rank_priority, candidate.name)


def assign_ranks(
    scored: Iterable[Tuple[Candidate, float, Sequence[str], Sequence[str]]],
) -> List[RankingEntry]:
    """
    Order ``(candidate, score, matched_tags, matched_technologies)`` rows and
    assign 1-based ranks.
    """
    rows = sorted(scored, key=lambda row: order_key(row[1], row[0]))
    return [
        RankingEntry(
            candidate_name=cand.name,
            rank=i,
            score=float(score),
            matched_tags=tuple(sorted(tags)),
            matched_technologies=tuple(techs),
        )
        for i, (cand, score, tags, techs) in enumerate(rows, start=1)
    ]
