from skillmatch.dedup import dedup_key, deduplicate
from skillmatch.schemas import Recommendation, SkillAlternative


def rec(name, tags, category=None, priority=None, source="curated"):
    return Recommendation(
        name=name,
        confidence="high",
        reason="test",
        source=source,
        tags=tags,
        category=category,
        priority=priority,
    )


def test_key_ignores_tag_order():
    a = rec("a", ["a", "b"], "principles")
    b = rec("b", ["b", "a"], "principles")
    assert dedup_key(a, 0) == dedup_key(b, 1)


def test_higher_priority_is_kept_and_others_become_alternatives():
    recs = [
        rec("low", ["a", "b"], "principles", 5),
        rec("other", ["z"], "principles", 1),
        rec("top", ["b", "a"], "principles", 10),
        rec("mid", ["a", "b"], "principles", 7, source="registered"),
    ]
    out = deduplicate(recs)

    assert [r.name for r in out] == ["top", "other"]
    assert out[0].alternatives == [
        SkillAlternative(name="low", source="curated"),
        SkillAlternative(name="mid", source="registered"),
    ]
    assert out[1].alternatives is None


def test_missing_priority_loses_to_any_priority():
    out = deduplicate([rec("none", ["a"], "hot"), rec("neg", ["a"], "hot", -3)])
    assert [r.name for r in out] == ["neg"]
    assert [a.name for a in out[0].alternatives] == ["none"]


def test_priority_tie_keeps_first():
    out = deduplicate([rec("first", ["a"], "hot", 1), rec("second", ["a"], "hot", 1)])
    assert [r.name for r in out] == ["first"]


def test_uncategorized_are_never_merged():
    out = deduplicate([rec("skill-1", ["a", "b"]), rec("skill-2", ["a", "b"])])
    assert [r.name for r in out] == ["skill-1", "skill-2"]
    assert all(r.alternatives is None for r in out)


def test_different_categories_are_not_merged():
    out = deduplicate([rec("a", ["x"], "hot", 1), rec("b", ["x"], "audit", 2)])
    assert [r.name for r in out] == ["a", "b"]


def test_input_is_not_mutated():
    recs = [rec("a", ["x"], "hot", 1), rec("b", ["x"], "hot", 2)]
    deduplicate(recs)
    assert recs[1].alternatives is None
