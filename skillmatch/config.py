from __future__ import annotations

import os
from typing import Dict

from pydantic import BaseModel, Field


# ---------------------------
# Model names (pinned)
# ---------------------------

# Dense encoder used by the bundled embedding provider
DEFAULT_ENCODER_MODEL = "BAAI/bge-small-en-v1.5"
ENCODER_MODEL = os.getenv("SKILLMATCH_ENCODER_MODEL", DEFAULT_ENCODER_MODEL)

# HF cache hints (only applied if the caller has not set them)
HF_ENV_VARS: Dict[str, str] = {
    "HF_HUB_ENABLE_HF_TRANSFER": "0",
    "TOKENIZERS_PARALLELISM": "false",
}


# ---------------------------
# Keyword scoring
# ---------------------------

# Multiplier applied to tag overlap per detected technology confidence
CONFIDENCE_WEIGHTS: Dict[str, int] = {
    "high": 3,
    "medium": 2,
    "low": 1,
}


# ---------------------------
# Fusion settings
# ---------------------------

RRF_K = 60


# ---------------------------
# Confidence bucketing
# ---------------------------

HIGH_MIN_MATCHED_TAGS = 2     # distinct keyword tags needed for high on evidence alone
SIMILARITY_FLOOR = 0.35       # embedding-only candidates at or above this are medium
POSITION_TIER_MIN_SIZE = 3    # fused lists shorter than this ignore position thirds


# ---------------------------
# Embedding step & env toggles
# ---------------------------

DEFAULT_EMBEDDING_TIMEOUT_S = 5.0
EMBEDDING_TIMEOUT_S = float(
    os.getenv("SKILLMATCH_EMBEDDING_TIMEOUT", str(DEFAULT_EMBEDDING_TIMEOUT_S))
)

# The API only loads the sentence-transformers provider when asked to
ENABLE_EMBEDDINGS = os.getenv("SKILLMATCH_ENABLE_EMBEDDINGS", "0") == "1"

ENCODER_BATCH_SIZE = 32

# Candidate vectors kept per matcher (least recently used evicted first)
EMBEDDING_CACHE_SIZE = 4096


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class MatchSettings(BaseModel):
    """
    Policy knobs for one matcher instance.

    Defaults mirror the module constants above, so a bare ``MatchSettings()``
    is the documented policy.
    """

    rrf_k: int = Field(default=RRF_K, ge=1)
    high_min_matched_tags: int = Field(default=HIGH_MIN_MATCHED_TAGS, ge=1)
    similarity_floor: float = Field(default=SIMILARITY_FLOOR, ge=-1.0, le=1.0)
    position_tier_min_size: int = Field(default=POSITION_TIER_MIN_SIZE, ge=1)
    embedding_timeout_s: float = Field(default=EMBEDDING_TIMEOUT_S, gt=0)
    embedding_cache_size: int = Field(default=EMBEDDING_CACHE_SIZE, ge=0)


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
