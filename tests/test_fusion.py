import pytest

from skillmatch.fusion import fuse_rankings, rrf_contribution
from skillmatch.pipeline_types import RankingEntry, Signal
from skillmatch.schemas import Candidate


def _ranking(names):
    return [
        RankingEntry(candidate_name=n, rank=i, score=float(10 - i))
        for i, n in enumerate(names, start=1)
    ]


def _catalog(names, priorities=None):
    priorities = priorities or {}
    return {n: Candidate(name=n, tags=[n], priority=priorities.get(n)) for n in names}


def test_rrf_contribution_uses_k_60():
    assert rrf_contribution(1) == pytest.approx(1 / 61)
    assert rrf_contribution(3, k=10) == pytest.approx(1 / 13)


def test_single_ranking_order_is_preserved():
    names = ["c", "a", "b", "d"]
    # priority on the last item must not lift it over better-ranked ones
    fused = fuse_rankings({Signal.KEYWORD: _ranking(names)}, _catalog(names, {"d": 100}))

    assert [e.candidate_name for e in fused] == names
    assert all(e.contributing_signals == frozenset({Signal.KEYWORD}) for e in fused)


def test_two_rankings_sum_contributions():
    kw = _ranking(["a", "b"])
    emb = _ranking(["b", "c"])
    fused = fuse_rankings(
        {Signal.KEYWORD: kw, Signal.EMBEDDING: emb},
        _catalog(["a", "b", "c"]),
    )
    by_name = {e.candidate_name: e for e in fused}

    assert [e.candidate_name for e in fused] == ["b", "a", "c"]
    assert by_name["b"].fused_score == pytest.approx(1 / 62 + 1 / 61)
    assert by_name["b"].contributing_signals == frozenset({Signal.KEYWORD, Signal.EMBEDDING})
    assert by_name["b"].ranks == {Signal.KEYWORD: 2, Signal.EMBEDDING: 1}
    # absent from the keyword ranking: embedding only, no penalty
    assert by_name["c"].fused_score == pytest.approx(1 / 62)
    assert by_name["c"].similarity == 8.0


def test_equal_fused_scores_break_on_priority_then_name():
    kw = _ranking(["a", "b", "c"])
    emb = _ranking(["b", "a", "c"])
    fused = fuse_rankings(
        {Signal.KEYWORD: kw, Signal.EMBEDDING: emb},
        _catalog(["a", "b", "c"], {"b": 5}),
    )
    assert [e.candidate_name for e in fused] == ["b", "a", "c"]

    fused = fuse_rankings(
        {Signal.KEYWORD: kw, Signal.EMBEDDING: emb},
        _catalog(["a", "b", "c"]),
    )
    assert [e.candidate_name for e in fused] == ["a", "b", "c"]


def test_better_rank_everywhere_never_scores_lower():
    kw = _ranking(["x", "a", "y", "b"])
    emb = _ranking(["a", "z", "b"])
    fused = fuse_rankings(
        {Signal.KEYWORD: kw, Signal.EMBEDDING: emb},
        _catalog(["x", "a", "y", "b", "z"]),
    )
    by_name = {e.candidate_name: e for e in fused}
    assert by_name["a"].fused_score >= by_name["b"].fused_score


def test_no_rankings_gives_empty_fusion():
    assert fuse_rankings({}, {}) == []
