import pytest

from utils.matching import (
    COMPANY_TIERS,
    PRODUCT_TIERS,
    TIER_CONTAINED,
    TIER_CONTAINS,
    TIER_EXACT,
    TIER_PREFIX,
    TIER_SIMILAR,
    match_tier,
    normalize_name,
    rank_candidates,
)


def _rows(*names):
    return [{"id": f"id-{i}", "name": name} for i, name in enumerate(names)]


class TestMatchTier:

    @pytest.mark.parametrize("query,name,tier", [
        ("sk001", "sk001", TIER_EXACT),
        ("acme", "acme corp", TIER_PREFIX),
        ("serum", "anti-aging serum", TIER_CONTAINS),
        ("sk001 serum", "sk001", TIER_CONTAINED),
        ("widget", "gadget", None),
        ("", "gadget", None),
    ])
    def test_tiers(self, query, name, tier):
        assert match_tier(query, name) == tier

    def test_normalize_collapses_case_and_whitespace(self):
        assert normalize_name("  Luxe   Beauty Gallery ") == "luxe beauty gallery"
        assert normalize_name(None) == ""


class TestRankCandidates:

    def test_exact_beats_prefix_and_contains(self):
        rows = _rows("Premium Serum", "Serum Deluxe", "Serum")
        ranked = rank_candidates("serum", rows)
        assert [m.item["name"] for m in ranked] == ["Serum", "Serum Deluxe", "Premium Serum"]
        assert [m.tier for m in ranked] == [TIER_EXACT, TIER_PREFIX, TIER_CONTAINS]

    def test_same_tier_prefers_shorter_name(self):
        rows = _rows("Acme Distribution", "Acme Corp")
        assert rank_candidates("Acme", rows, tiers=COMPANY_TIERS)[0].item["name"] == "Acme Corp"

    def test_is_deterministic(self):
        rows = _rows("Acme Distribution", "Acme Corp", "Acme Co")
        first = rank_candidates("acme", rows, tiers=COMPANY_TIERS)
        for _ in range(5):
            assert rank_candidates("acme", rows, tiers=COMPANY_TIERS) == first

    def test_store_order_breaks_full_ties(self):
        rows = [{"id": "a", "name": "Gel One"}, {"id": "b", "name": "Gel One"}]
        assert [m.item["id"] for m in rank_candidates("gel", rows)] == ["a", "b"]

    def test_company_tiers_exclude_reverse_containment(self):
        rows = _rows("Acme")
        assert rank_candidates("Acme Corporation Ltd", rows, tiers=COMPANY_TIERS) == []
        assert rank_candidates("Acme Corporation Ltd", rows, tiers=PRODUCT_TIERS)[0].tier == TIER_CONTAINED

    def test_no_match_returns_empty(self):
        assert rank_candidates("unknown", _rows("Serum", "Cream")) == []

    def test_blank_query_matches_nothing(self):
        assert rank_candidates("   ", _rows("Serum")) == []

    def test_similarity_fallback_only_with_threshold(self):
        rows = _rows("Moisturizing Cream")
        assert rank_candidates("moisturising cream", rows) == []
        ranked = rank_candidates("moisturising cream", rows, fuzzy_threshold=0.8)
        assert len(ranked) == 1
        assert ranked[0].tier == TIER_SIMILAR
        assert ranked[0].score >= 0.8

    def test_similarity_below_threshold_is_dropped(self):
        assert rank_candidates("shampoo", _rows("Moisturizing Cream"), fuzzy_threshold=0.9) == []
