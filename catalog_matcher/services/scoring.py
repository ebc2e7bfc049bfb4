"""Brand boost and minimum-score filtering of retrieved candidates."""

import logging
from typing import List, Optional

from ..config import MatchingSettings
from ..schemas.products import CandidateMatch, ExtractedProduct

logger = logging.getLogger(__name__)


def _brand_key(brand: Optional[str]) -> str:
    return (brand or "").upper().strip()


class ScoreAdjuster:
    """Adds a brand boost to each candidate and drops weak ones.

    The minimum-score cut is applied to the raw similarity, not the boosted
    score, so the boost only reorders preferences; it never rescues a weak match.
    """

    def __init__(self, brand_boost: float = 0.1, min_score_threshold: float = 0.65):
        self.brand_boost = brand_boost
        self.min_score_threshold = min_score_threshold

    @classmethod
    def from_settings(cls, matching: MatchingSettings) -> "ScoreAdjuster":
        return cls(brand_boost=matching.brand_boost, min_score_threshold=matching.min_score_threshold)

    def adjust(self, product: ExtractedProduct, candidates: List[CandidateMatch]) -> List[CandidateMatch]:
        """Return new candidates with ``adjusted_score`` set, in retriever order.

        The input list and its items are left untouched.
        """
        product_brand = _brand_key(product.brand)
        adjusted = []
        for candidate in candidates:
            if candidate.score < self.min_score_threshold:
                continue
            candidate_brand = _brand_key(candidate.payload.brand)
            boost = self.brand_boost if product_brand and product_brand == candidate_brand else 0.0
            adjusted.append(candidate.model_copy(update={"adjusted_score": candidate.score + boost}))

        logger.debug(
            f"{product.normalized_name}: kept {len(adjusted)}/{len(candidates)} candidates "
            f"(min score {self.min_score_threshold})"
        )
        return adjusted
