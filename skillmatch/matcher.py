from __future__ import annotations

"""
Recommendation assembler: the single entry point of the matching engine.

Pipeline for one call:

1. reject catalogs with duplicate names (caller bug, raised)
2. drop installed skills, set aside malformed candidates (reported, not raised)
3. keyword scoring in the calling thread while embedding scoring runs in a
   worker thread with a deadline
4. RRF fusion -> confidence buckets -> per-tier dedup

Nothing here holds state between calls except the embedding scorer's
vector cache, which is a pure function of catalog content.
"""

import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from .config import MatchSettings
from .confidence import bucket
from .dedup import deduplicate
from .embeddings import EmbeddingProvider, EmbeddingScorer, query_text
from .fusion import fuse_rankings
from .keyword import score_keywords
from .pipeline_types import FusedEntry, RankingEntry, Signal
from .schemas import (
    TIER_ORDER,
    Candidate,
    ConfidenceLevel,
    DetectedTechnology,
    MatchResult,
    Profile,
    Recommendation,
)
from .tags import contains_fragment


class CatalogContractError(ValueError):
    """The catalog breaks an invariant the caller is responsible for."""


# ---------------------------------------------------------------------------
# Catalog checks
# ---------------------------------------------------------------------------

def _check_unique_names(catalog: Sequence[Candidate]) -> None:
    seen = set()
    dupes: List[str] = []
    for cand in catalog:
        if not cand.name:
            continue
        if cand.name in seen and cand.name not in dupes:
            dupes.append(cand.name)
        seen.add(cand.name)
    if dupes:
        raise CatalogContractError(f"Duplicate candidate names in catalog: {dupes}")


def _partition_catalog(
    catalog: Sequence[Candidate],
    installed: Iterable[str],
) -> Tuple[List[Candidate], List[str]]:
    installed_set = set(installed)
    usable: List[Candidate] = []
    skipped: List[str] = []
    for i, cand in enumerate(catalog):
        if cand.name and cand.name in installed_set:
            continue
        if not cand.is_well_formed:
            skipped.append(cand.name or f"#{i}")
            continue
        usable.append(cand)
    return usable, skipped


# ---------------------------------------------------------------------------
# Recommendation building
# ---------------------------------------------------------------------------

def _reason(entry: FusedEntry, technologies: Sequence[DetectedTechnology]) -> str:
    if entry.matched_tags:
        techs = ", ".join(entry.matched_technologies)
        return f"Matches {techs} ({', '.join(entry.matched_tags)})"
    similarity = entry.similarity if entry.similarity is not None else 0.0
    return f"Similar to detected stack: {query_text(technologies)} (similarity {similarity:.2f})"


def _to_recommendation(
    cand: Candidate,
    entry: FusedEntry,
    level: ConfidenceLevel,
    technologies: Sequence[DetectedTechnology],
) -> Recommendation:
    return Recommendation(
        name=cand.name,
        confidence=level,
        reason=_reason(entry, technologies),
        source=cand.source,
        tags=cand.sorted_tags,
        category=cand.category,
        priority=cand.priority,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _run_in_daemon(fn: Callable[..., Any], *args: Any) -> Future:
    """
    Run ``fn(*args)`` on a daemon thread and hand back a Future for it.

    An abandoned call keeps running in the background but never holds up
    interpreter exit.
    """
    future: Future = Future()

    def _runner() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)

    threading.Thread(target=_runner, name="skillmatch-embed", daemon=True).start()
    return future


class SkillMatcher:
    """
    Hybrid keyword + embedding skill matcher.

    ``embedding_provider`` is optional; without one (or when it fails or
    times out) results are keyword-only.
    """

    def __init__(
        self,
        embedding_provider: Optional[EmbeddingProvider] = None,
        settings: Optional[MatchSettings] = None,
    ):
        self.settings = settings or MatchSettings()
        self.embedding_scorer = EmbeddingScorer(
            embedding_provider, cache_size=self.settings.embedding_cache_size
        )

    def _score(
        self,
        catalog: Sequence[Candidate],
        technologies: Sequence[DetectedTechnology],
    ) -> Tuple[List[RankingEntry], List[RankingEntry]]:
        if not self.embedding_scorer.enabled:
            return score_keywords(catalog, technologies), []

        timeout = self.settings.embedding_timeout_s
        started = time.monotonic()
        future = _run_in_daemon(self.embedding_scorer.rank, catalog, technologies)
        keyword_ranking = score_keywords(catalog, technologies)
        remaining = max(0.0, timeout - (time.monotonic() - started))
        try:
            embedding_ranking = future.result(timeout=remaining)
        except FuturesTimeout:
            logger.warning("Embedding scoring exceeded {:.1f}s; keyword only", timeout)
            embedding_ranking = []
        return keyword_ranking, embedding_ranking

    def match(self, profile: Profile, catalog: Sequence[Candidate]) -> MatchResult:
        catalog = list(catalog)
        _check_unique_names(catalog)

        usable, skipped = _partition_catalog(catalog, profile.installed)
        if skipped:
            logger.warning("Skipping {} malformed catalog entries: {}", len(skipped), skipped)

        if not profile.technologies or not usable:
            return MatchResult(skipped=skipped)

        keyword_ranking, embedding_ranking = self._score(usable, profile.technologies)
        rankings: Dict[Signal, List[RankingEntry]] = {}
        if keyword_ranking:
            rankings[Signal.KEYWORD] = keyword_ranking
        if embedding_ranking:
            rankings[Signal.EMBEDDING] = embedding_ranking

        by_name = {c.name: c for c in usable}
        fused = fuse_rankings(rankings, by_name, k=self.settings.rrf_k)

        tiers: Dict[ConfidenceLevel, List[Recommendation]] = {level: [] for level in TIER_ORDER}
        for entry, level in bucket(fused, self.settings):
            tiers[level].append(
                _to_recommendation(by_name[entry.candidate_name], entry, level, profile.technologies)
            )

        result = MatchResult(
            high=deduplicate(tiers[ConfidenceLevel.HIGH]),
            medium=deduplicate(tiers[ConfidenceLevel.MEDIUM]),
            low=deduplicate(tiers[ConfidenceLevel.LOW]),
            skipped=skipped,
        )
        logger.info(
            "match: keywordN={} embeddingN={} fused={} -> high={} medium={} low={}",
            len(keyword_ranking), len(embedding_ranking), len(fused),
            len(result.high), len(result.medium), len(result.low),
        )
        return result


def match_skills(
    profile: Profile,
    catalog: Sequence[Candidate],
    embedding_provider: Optional[EmbeddingProvider] = None,
    settings: Optional[MatchSettings] = None,
) -> MatchResult:
    """One-off convenience wrapper around :class:`SkillMatcher`."""
    return SkillMatcher(embedding_provider, settings).match(profile, catalog)


# ---------------------------------------------------------------------------
# Read-only projections
# ---------------------------------------------------------------------------

def get_all_recommendations(result: MatchResult) -> List[Recommendation]:
    return [*result.high, *result.medium, *result.low]


def _as_level(value: Union[ConfidenceLevel, str]) -> ConfidenceLevel:
    if isinstance(value, ConfidenceLevel):
        return value
    return ConfidenceLevel(str(value).strip().lower())


def filter_by_confidence(
    result: MatchResult,
    min_confidence: Union[ConfidenceLevel, str],
) -> List[Recommendation]:
    """All recommendations at or above ``min_confidence``, best tier first."""
    cutoff = TIER_ORDER.index(_as_level(min_confidence))
    out: List[Recommendation] = []
    for level in TIER_ORDER[: cutoff + 1]:
        out.extend(result.tier(level))
    return out


def filter_by_tag(recommendations: Sequence[Recommendation], tag: str) -> List[Recommendation]:
    """Case-insensitive substring match against tags or name; order preserved."""
    return [r for r in recommendations if contains_fragment([*r.tags, r.name], tag)]
