from __future__ import annotations

"""
FastAPI application for the skill matcher.

- GET  /health  -> {"status": "healthy"}
- POST /match   -> tiered MatchResult plus a flattened, filtered list

The catalog and profile travel in the request body; the service keeps no
catalog of its own.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .catalog import build_catalog
from .config import ENABLE_EMBEDDINGS, HealthResponse
from .embeddings import SentenceTransformerProvider
from .matcher import (
    CatalogContractError,
    SkillMatcher,
    filter_by_confidence,
    filter_by_tag,
    get_all_recommendations,
)
from .profile import load_profile
from .schemas import ConfidenceLevel, MatchResult, Recommendation


class MatchRequest(BaseModel):
    profile: Dict[str, Any]
    catalog: List[Dict[str, Any]]
    min_confidence: Optional[ConfidenceLevel] = None
    tag: Optional[str] = None


class MatchResponse(BaseModel):
    result: MatchResult
    recommendations: List[Recommendation]
    rejected: List[str] = Field(default_factory=list)


_matcher: Optional[SkillMatcher] = None


def get_matcher() -> SkillMatcher:
    global _matcher
    if _matcher is None:
        provider = SentenceTransformerProvider() if ENABLE_EMBEDDINGS else None
        _matcher = SkillMatcher(provider)
        logger.info("Skill matcher ready (embeddings={})", ENABLE_EMBEDDINGS)
    return _matcher


app = FastAPI(title="skillmatch")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/match", response_model=MatchResponse, response_model_exclude_none=True)
def match(req: MatchRequest) -> MatchResponse:
    try:
        profile = load_profile(req.profile)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=f"Invalid profile: {e}")

    built = build_catalog(req.catalog)
    try:
        result = get_matcher().match(profile, built.candidates)
    except CatalogContractError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if req.min_confidence is not None:
        recs = filter_by_confidence(result, req.min_confidence)
    else:
        recs = get_all_recommendations(result)
    if req.tag:
        recs = filter_by_tag(recs, req.tag)

    return MatchResponse(result=result, recommendations=recs, rejected=built.rejected)
