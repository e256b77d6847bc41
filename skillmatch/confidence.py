from __future__ import annotations

"""
Confidence bucketing for fused candidates.

Confidence comes from how a candidate was found, not only from its fused
score, so a strong exact-tag keyword hit is high confidence even when the
embedding signal is off.

Policy (thresholds live in MatchSettings):

* high   - at least ``high_min_matched_tags`` distinct keyword tags,
           or in the top third of the fused ranking
* medium - any keyword tag match below the high threshold, or embedding-only
           with similarity at or above ``similarity_floor``, or in the
           middle third
* low    - everything else

Position thirds only count when the fused list has at least
``position_tier_min_size`` entries.
"""

import math
from typing import List, Sequence, Tuple

from .config import MatchSettings
from .pipeline_types import FusedEntry, Signal
from .schemas import ConfidenceLevel


def _position_tier(position: int, total: int, settings: MatchSettings) -> ConfidenceLevel:
    if total < settings.position_tier_min_size:
        return ConfidenceLevel.LOW
    if position < math.ceil(total / 3):
        return ConfidenceLevel.HIGH
    if position < math.ceil(2 * total / 3):
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def classify(
    entry: FusedEntry,
    position: int,
    total: int,
    settings: MatchSettings,
) -> ConfidenceLevel:
    matched = len(entry.matched_tags)
    by_position = _position_tier(position, total, settings)

    if matched >= settings.high_min_matched_tags or by_position is ConfidenceLevel.HIGH:
        return ConfidenceLevel.HIGH

    embedding_only = entry.contributing_signals == frozenset({Signal.EMBEDDING})
    if (
        matched >= 1
        or (embedding_only and entry.similarity is not None
            and entry.similarity >= settings.similarity_floor)
        or by_position is ConfidenceLevel.MEDIUM
    ):
        return ConfidenceLevel.MEDIUM

    return ConfidenceLevel.LOW


def bucket(
    fused: Sequence[FusedEntry],
    settings: MatchSettings | None = None,
) -> List[Tuple[FusedEntry, ConfidenceLevel]]:
    """Classify every fused entry, preserving fused order."""
    settings = settings or MatchSettings()
    total = len(fused)
    return [(entry, classify(entry, i, total, settings)) for i, entry in enumerate(fused)]
