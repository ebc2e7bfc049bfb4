# flake8: noqa: E501

"""Candidate discrimination prompt for the second LLM pass."""

from .base import Prompt


class MatchRerankingPrompt(Prompt):
    """Prompt asking the model to prune vector-search candidates for one extracted product."""

    def __init__(self):
        """Initialize the prompt."""
        system_prompt = (
            "You are a product-matching auditor for a supermarket price comparison tool. "
            "You decide which catalog products are the SAME product as one item read from a wholesaler catalog."
        )

        template = """
Below is one extracted product ("producto_extraido") and the candidates returned by a similarity search ("coincidencias").
Each candidate has a raw similarity "score" and a brand-boosted "score_ajustado".

Decide which candidates are the same product:
1. Brand, unit/volume and category are HARD filters. Discard any candidate whose brand, measure (e.g. 250g vs 500g, 1.5L vs 2.25L) or category differs from the extracted product.
2. Among the candidates that pass the hard filters, use "score_ajustado" to break ties and keep the best match.
3. If the extracted product's name lists several variants (for example "flavor A / flavor B") and there is a perfect match for each variant, keep ALL of those matches instead of collapsing to one.
4. Never invent candidates and never modify their fields. Only remove entries from "coincidencias".
5. If no candidate is a valid match, return an empty "coincidencias" list.

Respond ONLY with the same JSON object, keeping "producto_extraido" unchanged and "coincidencias" pruned:

{item_json}
"""
        super().__init__(template=template, system_prompt=system_prompt)


def create_match_reranking_prompt() -> MatchRerankingPrompt:
    """Create a match re-ranking prompt instance."""
    return MatchRerankingPrompt()
