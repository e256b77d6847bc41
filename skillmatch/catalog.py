from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd
from loguru import logger
from pydantic import ValidationError

from .schemas import Candidate


# ---------------------------
# Column detection / standardization
# ---------------------------

# Registries and hand-maintained sheets name their columns differently.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "name": ["name", "Name", "skill", "Skill", "Skill Name", "skill_name"],
    "tags": ["tags", "Tags", "keywords", "Keywords"],
    "description": ["description", "Description", "summary", "Summary"],
    "category": ["category", "Category"],
    "priority": ["priority", "Priority"],
    "source": ["source", "Source", "origin"],
}


@dataclass
class CatalogBuild:
    """Candidates built from raw records, plus the rows that were rejected."""

    candidates: List[Candidate] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


def _standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            if candidate.lower() in lower_to_original:
                col_map[lower_to_original[candidate.lower()]] = canon
                break

    df_std = df.rename(columns=col_map)
    missing = [c for c in ("name", "tags") if c not in df_std.columns]
    if missing:
        logger.warning("Raw catalog is missing required columns: {}", missing)
    return df_std


# ---------------------------
# Field parsing helpers
# ---------------------------

def _clean_scalar(value: Any) -> Any:
    """Map pandas/numpy missing markers to None; leave containers alone."""
    if isinstance(value, (list, tuple, set, frozenset, np.ndarray)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def parse_tags_field(value: Any) -> List[str]:
    value = _clean_scalar(value)
    if value is None:
        return []
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v) for v in value if _clean_scalar(v) is not None]
    return [t for t in str(value).split(",")]


def parse_priority_field(value: Any) -> Optional[float]:
    value = _clean_scalar(value)
    if value is None:
        return None
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return int(value) if float(value).is_integer() else float(value)
    s = str(value).strip()
    if not s:
        return None
    return parse_priority_field(float(s))


# ---------------------------
# Builders
# ---------------------------

def build_catalog(records: Iterable[Mapping[str, Any]]) -> CatalogBuild:
    """
    Build validated candidates from raw dict records.

    Rows with an unknown category or an unparsable priority are rejected and
    reported; rows with no usable tags are kept so the matcher can report
    them as skipped.
    """
    out = CatalogBuild()
    for i, rec in enumerate(records):
        label = str(_clean_scalar(rec.get("name")) or f"#{i}")
        try:
            cand = Candidate(
                name=_clean_scalar(rec.get("name")),
                tags=parse_tags_field(rec.get("tags")),
                description=_clean_scalar(rec.get("description")),
                category=_clean_scalar(rec.get("category")),
                priority=parse_priority_field(rec.get("priority")),
                source=_clean_scalar(rec.get("source")),
            )
        except (ValidationError, ValueError) as e:
            out.rejected.append(f"{label}: {e}")
            continue
        out.candidates.append(cand)

    if out.rejected:
        logger.warning("Rejected {} catalog rows", len(out.rejected))
    logger.info("Built catalog with {} candidates", len(out.candidates))
    return out


def catalog_from_frame(df: pd.DataFrame) -> CatalogBuild:
    df = _standardize_columns(df)
    return build_catalog(df.to_dict(orient="records"))


def load_catalog_file(path: Path) -> CatalogBuild:
    """Read a catalog from JSON (list of records) or CSV."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog not found: {path}")
    if path.suffix.lower() == ".json":
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("skills", [])
        return catalog_from_frame(pd.DataFrame.from_records(raw))
    return catalog_from_frame(pd.read_csv(path, encoding="utf-8"))
