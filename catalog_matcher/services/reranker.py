"""Second-pass discrimination of candidates for each preview item."""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..ai.base import RetryPolicy
from ..ai.prompts.match_reranking import MatchRerankingPrompt, create_match_reranking_prompt
from ..ai.providers.base import BaseProvider, parse_json_text
from ..schemas.products import CandidateMatch, PreviewItem
from ..utils.errors import ResponseParseError
from . import units

logger = logging.getLogger(__name__)

# Keys the model may use for the pruned candidate list
_MATCH_KEYS = ("coincidencias", "matches")


class BaseReranker(ABC):
    """Prunes an item's candidates to the ones that are the same product."""

    @abstractmethod
    async def rerank(self, item: PreviewItem) -> PreviewItem:
        """Return a copy of ``item`` whose matches are a subset of the input matches."""
        pass


def _id_key(value: Any) -> str:
    return str(value)


def select_by_ids(candidates: List[CandidateMatch], returned: List[Any]) -> List[CandidateMatch]:
    """Map the model's answer back onto the original candidates.

    Only ids the index surfaced are accepted; unknown ids and duplicates are
    dropped and the model's order is kept.
    """
    by_id = {_id_key(candidate.id): candidate for candidate in candidates}
    selected: List[CandidateMatch] = []
    seen = set()
    for entry in returned:
        raw_id = entry.get("id") if isinstance(entry, dict) else entry
        key = _id_key(raw_id)
        if key in by_id and key not in seen:
            selected.append(by_id[key])
            seen.add(key)
        elif key not in by_id:
            logger.debug(f"Ignoring candidate id {raw_id!r} not present in the input")
    return selected


def _returned_matches(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _MATCH_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    raise ResponseParseError("Re-ranker response has no candidate list", raw_preview=json.dumps(data)[:200])


class LLMReranker(BaseReranker):
    """Asks a text model to discard candidates that differ in brand, measure or category."""

    def __init__(
        self,
        provider: BaseProvider,
        policy: Optional[RetryPolicy] = None,
        prompt: Optional[MatchRerankingPrompt] = None,
        temperature: float = 0.1,
    ):
        self.provider = provider
        self.policy = policy or RetryPolicy()
        self.prompt = prompt or create_match_reranking_prompt()
        self.temperature = temperature

    def build_prompt(self, item: PreviewItem) -> str:
        payload = item.model_dump(
            mode="json",
            by_alias=True,
            include={"extracted_product", "matches"},
        )
        return self.prompt.format(item_json=json.dumps(payload, ensure_ascii=False, indent=2))

    async def rerank(self, item: PreviewItem) -> PreviewItem:
        if not item.matches:
            return item

        name = item.extracted_product.normalized_name
        try:
            prompt = self.build_prompt(item)
            text = await self.policy.run(
                lambda: self.provider.generate_text(prompt, temperature=self.temperature),
                description=f"{self.provider.provider} re-ranking",
            )
            selected = select_by_ids(item.matches, _returned_matches(parse_json_text(text)))
        except Exception as e:
            # Fail closed: a failed check never lets unverified candidates through
            logger.warning(f"Re-ranking failed for {name}: {e}")
            return item.with_matches([], llm_error=f"{e.__class__.__name__}: {e}")

        logger.debug(f"Re-ranked {name}: kept {len(selected)}/{len(item.matches)} candidates")
        return item.with_matches(selected)


class RuleBasedReranker(BaseReranker):
    """Deterministic re-ranker applying the same hard filters without a model call.

    Brand, measure (in base units) and category must agree whenever both sides
    carry them; among the survivors every candidate tied at the best adjusted
    score is kept.
    """

    async def rerank(self, item: PreviewItem) -> PreviewItem:
        if not item.matches:
            return item

        product = item.extracted_product
        survivors = [candidate for candidate in item.matches if self._compatible(product, candidate)]
        if not survivors:
            return item.with_matches([])

        best = max(self._effective_score(candidate) for candidate in survivors)
        kept = [candidate for candidate in survivors if self._effective_score(candidate) == best]
        return item.with_matches(kept)

    @staticmethod
    def _effective_score(candidate: CandidateMatch) -> float:
        return candidate.adjusted_score if candidate.adjusted_score is not None else candidate.score

    @staticmethod
    def _same_text(left: Optional[str], right: Optional[str]) -> bool:
        left = (left or "").upper().strip()
        right = (right or "").upper().strip()
        return not left or not right or left == right

    def _compatible(self, product, candidate: CandidateMatch) -> bool:
        payload = candidate.payload

        if not self._same_text(product.brand, payload.brand):
            return False

        if not self._same_text(product.inferred_category, payload.category):
            return False

        product_measure = units.standardize_for_comparison(product.unit_of_measure)
        candidate_measure = units.standardize_for_comparison(payload.normalized_weight)
        if product_measure and candidate_measure and product_measure != candidate_measure:
            return False

        if product.pack_count > 1 and payload.unit_count is not None and payload.unit_count != product.pack_count:
            return False

        return True


async def rerank_all(reranker: BaseReranker, items: List[PreviewItem], max_concurrent: int = 5) -> List[PreviewItem]:
    """Re-rank every item concurrently; output order equals input order.

    Args:
        reranker: Re-ranker applied to each item
        items: Preview items for one image
        max_concurrent: Upper bound on in-flight re-ranking calls

    Returns:
        The re-ranked items. An item whose re-ranking raises is returned with no
        matches and an error tag; the others are unaffected.
    """
    semaphore = asyncio.Semaphore(max(1, max_concurrent))

    async def run_one(item: PreviewItem) -> PreviewItem:
        async with semaphore:
            try:
                return await reranker.rerank(item)
            except Exception as e:
                logger.error(f"Re-ranker crashed on {item.extracted_product.normalized_name}: {e}", exc_info=True)
                return item.with_matches([], llm_error=f"{e.__class__.__name__}: {e}")

    return list(await asyncio.gather(*(run_one(item) for item in items)))
