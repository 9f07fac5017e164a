"""
Tests for catalog filtering and similarity ranking.
"""

import math

import numpy as np
import pytest

from recs.models import Product


def _catalog():
    return [
        Product(id="p", category="apparel"),
        Product(id="q", category="apparel"),
        Product(id="x", category="apparel", recommendation_only=True),
        Product(id="nope", category="apparel"),
        Product(id="e", category="eyewear"),
    ]


EMBEDDINGS = {
    "p": np.array([1.0, 0.0]),
    "q": np.array([1.0, 1.0]),
    "x": np.array([-1.0, 0.0]),
    "e": np.array([0.0, 1.0]),
}


class TestCatalogFilter:
    """Tests for the two catalog views."""

    def test_recommendations_match_category(self):
        from recs.catalog_filter import filter_for_recommendations

        ids = [p.id for p in filter_for_recommendations(_catalog(), "apparel")]
        assert ids == ["p", "q", "x", "nope"]

    def test_exclusive_only(self):
        from recs.catalog_filter import filter_for_recommendations

        ids = [p.id for p in filter_for_recommendations(_catalog(), "apparel", exclusive_only=True)]
        assert ids == ["x"]

    def test_exclusive_only_empty_when_none_flagged(self):
        from recs.catalog_filter import filter_for_recommendations

        assert filter_for_recommendations(_catalog(), "eyewear", exclusive_only=True) == []

    def test_listing_hides_recommendation_only(self):
        from recs.catalog_filter import filter_for_listing

        ids = [p.id for p in filter_for_listing(_catalog(), "apparel")]
        assert ids == ["p", "q", "nope"]

    def test_unknown_category(self):
        from recs.catalog_filter import filter_for_listing, filter_for_recommendations

        assert filter_for_listing(_catalog(), "shoes") == []
        assert filter_for_recommendations(_catalog(), "shoes") == []


class TestRankProducts:
    """Tests for rank_products."""

    def test_cold_start_keeps_order_with_zero_scores(self):
        from recs.ranker import rank_products

        ranked = rank_products(_catalog(), None, EMBEDDINGS)

        assert [p.id for p in ranked] == [p.id for p in _catalog()]
        assert all(p.score == 0 for p in ranked)

    def test_single_like_self_similarity(self):
        """Liking P alone: P scores 1.0 and Q scores cos(e_P, e_Q)."""
        from recs.ranker import rank_products

        ranked = rank_products(_catalog()[:2], EMBEDDINGS["p"], EMBEDDINGS)
        scores = {p.id: p.score for p in ranked}

        assert scores["p"] == pytest.approx(1.0)
        assert scores["q"] == pytest.approx(1 / math.sqrt(2))

    def test_descending_total_order(self):
        from recs.ranker import rank_products

        ranked = rank_products(_catalog(), np.array([1.0, 0.2]), EMBEDDINGS)
        scores = [p.score for p in ranked]

        assert scores == sorted(scores, reverse=True)
        assert all(-1.0 <= s <= 1.0 for s in scores)
        assert len(ranked) == len(_catalog())

    def test_missing_embedding_scores_zero(self):
        from recs.ranker import rank_products

        ranked = rank_products(_catalog(), np.array([1.0, 0.0]), EMBEDDINGS)
        missing = next(p for p in ranked if p.id == "nope")

        assert missing.score == 0
        # Below the positive scores, above the negative one
        assert [p.id for p in ranked][-1] == "x"

    def test_ties_keep_catalog_order(self):
        from recs.ranker import rank_products

        products = [Product(id="t1"), Product(id="t2"), Product(id="t3")]
        embeddings = {"t1": [1.0, 0.0], "t2": [0.0, 1.0], "t3": [1.0, 1.0]}
        ranked = rank_products(products, np.array([1.0, 1.0]), embeddings)

        assert [p.id for p in ranked] == ["t3", "t1", "t2"]

    def test_mask_weights_change_scores(self):
        from recs.ranker import rank_products

        products = [Product(id="a"), Product(id="b")]
        embeddings = {"a": [1.0, 0.0], "b": [0.0, 1.0]}
        preference = np.array([0.4, 0.6])

        plain = [p.id for p in rank_products(products, preference, embeddings)]
        masked = [p.id for p in rank_products(products, preference, embeddings, mask_weights=[1.0, 0.1])]

        assert plain == ["b", "a"]
        assert masked == ["a", "b"]

    def test_extra_catalog_fields_survive(self):
        from recs.ranker import rank_products

        product = Product(id="p", name="Blazer", price=120)
        ranked = rank_products([product], None, {})

        assert ranked[0].model_dump()["name"] == "Blazer"
        assert ranked[0].model_dump()["price"] == 120

    def test_catalog_score_field_is_replaced(self):
        from recs.ranker import rank_products

        products = [Product(id="p", category="apparel", score=5), Product(id="q", category="apparel")]

        cold = rank_products(products, None, EMBEDDINGS)
        assert [(p.id, p.score) for p in cold] == [("p", 0.0), ("q", 0.0)]

        warm = rank_products(products, np.array([1.0, 0.0]), EMBEDDINGS)
        assert warm[0].id == "p"
        assert warm[0].score == pytest.approx(1.0)
