from skillmatch.tags import contains_fragment, normalize_tag, normalize_tags, tag_overlap


def test_normalize_tag_lowercases_and_trims():
    assert normalize_tag("  TypeScript ") == "typescript"


def test_normalize_tag_drops_empty():
    assert normalize_tag("   ") is None
    assert normalize_tag("") is None
    assert normalize_tag(None) is None


def test_normalize_tags_collapses_duplicates():
    tags = normalize_tags(["TS", "ts ", "", "Svelte"])
    assert tags == frozenset({"ts", "svelte"})


def test_normalize_tags_accepts_comma_string():
    assert normalize_tags("rust, Cargo,,") == frozenset({"rust", "cargo"})


def test_tag_overlap_is_case_insensitive_after_normalisation():
    query = normalize_tags(["TS", "rust"])
    cand = normalize_tags(["ts", "svelte"])
    assert tag_overlap(query, cand) == frozenset({"ts"})


def test_contains_fragment_substring_and_case():
    assert contains_fragment(["cloudflare", "workers"], "CLOUD")
    assert not contains_fragment(["rust", "cargo"], "python")


def test_contains_fragment_keeps_whitespace_in_needle():
    assert not contains_fragment(["rust", "cargo"], " ")
    assert not contains_fragment(["svelte"], " svelte")
    assert contains_fragment(["svelte kit"], "E K")
    assert contains_fragment(["rust"], "")
