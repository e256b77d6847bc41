# skillmatch/cli.py
"""
Batch runner for the skill matcher.
Reads a catalog file and a project profile, prints recommendations without
starting FastAPI.

- Catalog: JSON list of records, or CSV
- Profile: JSON, either Profile-shaped or a project analysis
- --json prints pure JSON on stdout (logs go to stderr)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .catalog import load_catalog_file
from .embeddings import SentenceTransformerProvider
from .matcher import CatalogContractError, SkillMatcher, filter_by_confidence, filter_by_tag
from .profile import load_profile
from .schemas import TIER_ORDER, MatchResult, Recommendation


def _format_text(recs: List[Recommendation], result: MatchResult, rejected: List[str]) -> str:
    lines: List[str] = []
    for level in TIER_ORDER:
        tier = [r for r in recs if r.confidence is level]
        if not tier:
            continue
        lines.append(f"{level.value.upper()} ({len(tier)})")
        for rec in tier:
            cat = f" [{rec.category.value}]" if rec.category else ""
            lines.append(f"  {rec.name}{cat} - {rec.reason}")
            if rec.alternatives:
                alts = ", ".join(f"{a.name} ({a.source.value})" for a in rec.alternatives)
                lines.append(f"      alternatives: {alts}")
    if not lines:
        lines.append("No recommendations.")
    if result.skipped:
        lines.append(f"Skipped malformed entries: {', '.join(result.skipped)}")
    if rejected:
        lines.append(f"Rejected catalog rows: {len(rejected)}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Recommend skills for a project profile.")
    ap.add_argument("--catalog", type=Path, required=True, help="catalog JSON or CSV")
    ap.add_argument("--profile", type=Path, required=True, help="profile / analysis JSON")
    ap.add_argument(
        "--min-confidence",
        choices=[level.value for level in TIER_ORDER],
        default="low",
    )
    ap.add_argument("--tag", default=None, help="only show recommendations matching this tag")
    ap.add_argument("--json", action="store_true", help="print JSON instead of text")
    ap.add_argument(
        "--embeddings",
        action="store_true",
        help="add the sentence-transformers similarity signal",
    )
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    built = load_catalog_file(args.catalog)
    with args.profile.open("r", encoding="utf-8") as f:
        profile = load_profile(json.load(f))

    matcher = SkillMatcher(SentenceTransformerProvider() if args.embeddings else None)
    try:
        result = matcher.match(profile, built.candidates)
    except CatalogContractError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    recs = filter_by_confidence(result, args.min_confidence)
    if args.tag:
        recs = filter_by_tag(recs, args.tag)

    if args.json:
        payload = {
            "recommendations": [r.model_dump(mode="json", exclude_none=True) for r in recs],
            "skipped": result.skipped,
            "rejected": built.rejected,
        }
        print(json.dumps(payload, indent=2))
    else:
        print(_format_text(recs, result, built.rejected))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
