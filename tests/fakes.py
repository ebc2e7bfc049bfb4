"""In-memory stand-ins for the external collaborators."""

from typing import Any, Callable, Dict, List, Optional, Union

from catalog_matcher.ai.providers.base import BaseProvider
from catalog_matcher.schemas.products import CandidateMatch, ExtractedProduct, ProductVectorRecord
from catalog_matcher.utils.errors import ProviderError


def make_product(**overrides: Any) -> ExtractedProduct:
    data = {
        "normalized_name": "ACEITE GIRASOL NATURA",
        "catalog_price": "1999.90",
        "brand": "NATURA",
        "pack_count": 1,
        "unit_of_measure": "1.5L",
        "inferred_category": "aceites",
    }
    data.update(overrides)
    return ExtractedProduct(**data)


def make_candidate(
    candidate_id: Union[int, str],
    score: float,
    brand: Optional[str] = None,
    weight: Optional[str] = None,
    category: Optional[str] = None,
    adjusted_score: Optional[float] = None,
) -> CandidateMatch:
    payload = {"description": f"product {candidate_id}", "brand": brand, "normalized_weight": weight, "category": category}
    return CandidateMatch(id=candidate_id, score=score, payload=payload, adjusted_score=adjusted_score)


class FakeEmbeddingProvider(BaseProvider):
    """Returns deterministic vectors of a fixed size."""

    def __init__(self, dimensions: int = 4, configured: bool = True):
        super().__init__(default_model="fake-embedding")
        self.provider = "fake"
        self.dimensions = dimensions
        self.configured = configured
        self.calls: List[Dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate_text(self, prompt: str, temperature: float = 1.0, max_tokens: Optional[int] = None) -> str:
        raise ProviderError("Text generation not supported by the fake embedding provider")

    async def get_embeddings(self, texts: List[str], task_type: Optional[str] = None) -> List[List[float]]:
        self.calls.append({"texts": list(texts), "task_type": task_type})
        return [[float(len(text))] + [0.0] * (self.dimensions - 1) for text in texts]

    def get_dimensions(self) -> int:
        return self.dimensions


class FakeTextProvider(BaseProvider):
    """Replays scripted responses; an Exception entry is raised instead of returned."""

    def __init__(self, responses: Optional[List[Union[str, Exception]]] = None, configured: bool = True):
        super().__init__(default_model="fake-llm")
        self.provider = "fake"
        self.responses = list(responses or [])
        self.configured = configured
        self.prompts: List[str] = []
        self.images: List[bytes] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def _next(self) -> str:
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_text(self, prompt: str, temperature: float = 1.0, max_tokens: Optional[int] = None) -> str:
        self.prompts.append(prompt)
        return self._next()

    async def generate_from_image(self, image: bytes, mime_type: str, prompt: str, temperature: float = 0.1) -> str:
        self.images.append(image)
        self.prompts.append(prompt)
        return self._next()

    async def get_embeddings(self, texts: List[str], task_type: Optional[str] = None) -> List[List[float]]:
        raise ProviderError("Embeddings not supported by the fake text provider")

    def get_dimensions(self) -> int:
        raise ProviderError("Embeddings not supported by the fake text provider")


class FakeIndex:
    """Vector index double recording every call.

    ``results`` is either a fixed candidate list or a callable taking the
    search filters and returning one (or raising).
    """

    def __init__(
        self,
        results: Union[List[CandidateMatch], Callable[[Dict[str, Any]], List[CandidateMatch]], None] = None,
        collection_name: str = "test_products",
    ):
        self.results = results if results is not None else []
        self.collection_name = collection_name
        self.searches: List[Dict[str, Any]] = []
        self.upserted: List[List[ProductVectorRecord]] = []
        self.cleared = False
        self.status: Dict[str, Any] = {"connected": True, "collection": collection_name, "exists": True}
        self.init_error: Optional[Exception] = None
        self.closed = False

    async def initialize(self) -> None:
        if self.init_error is not None:
            raise self.init_error

    async def search(self, vector, limit=10, score_threshold=None, filters=None) -> List[CandidateMatch]:
        self.searches.append({"vector": vector, "limit": limit, "score_threshold": score_threshold, "filters": filters})
        if callable(self.results):
            return self.results(filters or {})
        return list(self.results)

    async def upsert(self, records: List[ProductVectorRecord]) -> int:
        self.upserted.append(list(records))
        return len(records)

    async def scroll(self, limit: int = 10, offset=None) -> Dict[str, Any]:
        return {"points": [{"id": 1, "payload": {"brand": "NATURA"}}][:limit], "next_page_offset": None}

    async def get_collection_info(self) -> Optional[Dict[str, Any]]:
        return {"points_count": 1, "status": "green"}

    async def get_status(self) -> Dict[str, Any]:
        return dict(self.status)

    async def clear_collection(self) -> None:
        self.cleared = True

    async def close(self) -> None:
        self.closed = True
