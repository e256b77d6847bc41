from __future__ import annotations

"""
Reciprocal Rank Fusion of the keyword and embedding rankings.

fused(c) = sum over rankings r containing c of 1 / (k + rank_r(c))

A candidate missing from a ranking gets nothing from it. With a single
non-empty ranking the fused order is that ranking's order, since
1 / (k + rank) is strictly decreasing in rank.
"""

from typing import Dict, List, Mapping, Sequence

from .config import RRF_K
from .pipeline_types import FusedEntry, RankingEntry, Signal, order_key
from .schemas import Candidate


def rrf_contribution(rank: int, k: int = RRF_K) -> float:
    return 1.0 / (k + rank)


def fuse_rankings(
    rankings: Mapping[Signal, Sequence[RankingEntry]],
    candidates: Mapping[str, Candidate],
    k: int = RRF_K,
) -> List[FusedEntry]:
    """
    Fuse per-signal rankings into one list ordered by fused score desc,
    then priority desc, then name asc.

    ``candidates`` maps name -> Candidate and supplies the tie-break fields.
    """
    fused: Dict[str, FusedEntry] = {}

    for signal, ranking in rankings.items():
        for entry in ranking:
            current = fused.get(entry.candidate_name)
            if current is None:
                current = FusedEntry(
                    candidate_name=entry.candidate_name,
                    fused_score=0.0,
                    contributing_signals=frozenset(),
                )
                fused[entry.candidate_name] = current
            current.fused_score += rrf_contribution(entry.rank, k)
            current.contributing_signals = current.contributing_signals | {signal}
            current.ranks[signal] = entry.rank
            if signal is Signal.KEYWORD:
                current.matched_tags = entry.matched_tags
                current.matched_technologies = entry.matched_technologies
            elif signal is Signal.EMBEDDING:
                current.similarity = entry.score

    return sorted(
        fused.values(),
        key=lambda e: order_key(e.fused_score, candidates[e.candidate_name]),
    )
