import pytest

from catalog_matcher.services.scoring import ScoreAdjuster

from .fakes import make_candidate, make_product


class TestScoreAdjuster:
    def test_brand_boost_only_on_equal_brands(self, score_adjuster):
        product = make_product(brand=" natura ")
        candidates = [
            make_candidate(1, 0.80, brand="NATURA"),
            make_candidate(2, 0.80, brand="COCINERO"),
            make_candidate(3, 0.80, brand=None),
        ]

        adjusted = score_adjuster.adjust(product, candidates)

        assert [c.adjusted_score for c in adjusted] == pytest.approx([0.90, 0.80, 0.80])

    def test_candidate_brand_is_normalized(self, score_adjuster):
        product = make_product(brand="ARCOR")

        adjusted = score_adjuster.adjust(product, [make_candidate(1, 0.66, brand="arcor ")])

        assert [c.id for c in adjusted] == [1]
        assert adjusted[0].score == pytest.approx(0.66)
        assert adjusted[0].adjusted_score == pytest.approx(0.76)

    def test_no_boost_without_product_brand(self, score_adjuster):
        product = make_product(brand=None)
        adjusted = score_adjuster.adjust(product, [make_candidate(1, 0.7, brand="")])

        assert adjusted[0].adjusted_score == pytest.approx(0.7)

    def test_threshold_uses_raw_score(self, score_adjuster):
        product = make_product(brand="NATURA")
        # 0.60 + 0.1 would pass on the adjusted score but not on the raw one
        candidates = [make_candidate(1, 0.60, brand="NATURA"), make_candidate(2, 0.65, brand="OTHER")]

        adjusted = score_adjuster.adjust(product, candidates)

        assert [c.id for c in adjusted] == [2]

    def test_keeps_retriever_order(self, score_adjuster):
        product = make_product(brand="NATURA")
        candidates = [
            make_candidate(1, 0.90, brand="OTHER"),
            make_candidate(2, 0.85, brand="NATURA"),
            make_candidate(3, 0.70, brand="OTHER"),
        ]

        adjusted = score_adjuster.adjust(product, candidates)

        assert [c.id for c in adjusted] == [1, 2, 3]

    def test_input_is_not_mutated_and_result_is_stable(self, score_adjuster):
        product = make_product(brand="NATURA")
        candidates = [make_candidate(1, 0.9, brand="NATURA")]

        first = score_adjuster.adjust(product, candidates)
        second = score_adjuster.adjust(product, candidates)

        assert candidates[0].adjusted_score is None
        assert first == second

    def test_from_settings(self, matching_settings):
        adjuster = ScoreAdjuster.from_settings(matching_settings)

        assert adjuster.brand_boost == pytest.approx(0.1)
        assert adjuster.min_score_threshold == pytest.approx(0.65)
