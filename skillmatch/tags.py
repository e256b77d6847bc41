from __future__ import annotations

"""
Tag normalisation shared by scoring, dedup and filtering.

Every tag that enters the engine goes through :func:`normalize_tag`, so
candidate tags and detected-technology tags are always compared in the same
canonical form (lowercase, surrounding whitespace trimmed).
"""

from typing import FrozenSet, Iterable, NewType, Optional

Tag = NewType("Tag", str)


def normalize_tag(raw: object) -> Optional[Tag]:
    """Return the canonical tag, or None if nothing is left after trimming."""
    if raw is None:
        return None
    text = str(raw).strip().lower()
    if not text:
        return None
    return Tag(text)


def normalize_tags(raw_tags: Iterable[object] | None) -> FrozenSet[Tag]:
    if raw_tags is None:
        return frozenset()
    if isinstance(raw_tags, str):
        raw_tags = raw_tags.split(",")
    out = set()
    for raw in raw_tags:
        tag = normalize_tag(raw)
        if tag is not None:
            out.add(tag)
    return frozenset(out)


def tag_overlap(query_tags: Iterable[Tag], candidate_tags: FrozenSet[Tag]) -> FrozenSet[Tag]:
    return frozenset(candidate_tags.intersection(query_tags))


def contains_fragment(values: Iterable[str], fragment: str) -> bool:
    """Case-insensitive substring lookup used by tag filtering.

    The fragment is used as given, whitespace included. An empty fragment is
    contained in every string, so it matches anything that has at least one
    value.
    """
    needle = (fragment or "").lower()
    return any(needle in str(v).lower() for v in values)
