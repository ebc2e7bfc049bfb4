"""Qdrant vector index client over the REST API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..ai.base import RetryPolicy
from ..config import VectorIndexSettings
from ..schemas.products import CandidateMatch, NormalizedFilterSet, ProductVectorRecord
from ..utils.errors import ConfigurationError, ServiceRejectedError, ServiceUnavailableError

SERVICE_NAME = "qdrant"

# Payload keys used as exact-match filters
PAYLOAD_INDEXES = {
    "brand": "keyword",
    "normalized_weight": "keyword",
    "unit_count": "integer",
}


def build_filter(filters: NormalizedFilterSet) -> Optional[Dict[str, Any]]:
    """Translate exact-match filters into a Qdrant ``must`` conjunction.

    Returns None for an empty filter set so the search runs unfiltered.
    """
    if not filters:
        return None
    return {"must": [{"key": key, "match": {"value": value}} for key, value in filters.items()]}


class QdrantIndex:
    """Catalog product collection stored in Qdrant."""

    def __init__(self, settings: VectorIndexSettings, client: Optional[httpx.AsyncClient] = None):
        """Initialize the index client.

        Args:
            settings: Vector index settings group
            client: Pre-built HTTP client (tests inject one with a mock transport)
        """
        self.logger = logging.getLogger(__name__)
        self.collection_name = settings.collection_name
        self.vector_size = settings.vector_size
        self.base_url = settings.url.rstrip("/")
        self.timeout = settings.timeout
        self._api_key = settings.api_key.get_secret_value()
        self.client: Optional[httpx.AsyncClient] = client
        self.policy = RetryPolicy(timeout_seconds=settings.timeout, max_retries=settings.max_retries, retry_delay=1.0)
        self.initialized = False

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["api-key"] = self._api_key
        return headers

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure httpx client exists."""
        if self.client is None:
            self.client = httpx.AsyncClient(base_url=self.base_url, headers=self._headers(), timeout=self.timeout)
        return self.client

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """Send one request and unwrap Qdrant's ``result`` field.

        Raises:
            ServiceUnavailableError: If Qdrant cannot be reached
            ServiceRejectedError: If Qdrant answers with an error status
        """
        client = await self._ensure_client()

        async def send() -> httpx.Response:
            try:
                return await client.request(method, path, json=json, params=params)
            except httpx.RequestError as e:
                raise ServiceUnavailableError(SERVICE_NAME, str(e) or e.__class__.__name__) from e

        response = await self.policy.run(send, description=f"{SERVICE_NAME} {method} {path}")

        if allow_missing and response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise ServiceRejectedError(SERVICE_NAME, response.status_code, self._error_message(response))

        body = response.json()
        return body.get("result") if isinstance(body, dict) else body

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        status = body.get("status") if isinstance(body, dict) else None
        if isinstance(status, dict) and status.get("error"):
            return str(status["error"])
        return response.text[:200]

    def _collection_path(self, suffix: str = "") -> str:
        return f"/collections/{self.collection_name}{suffix}"

    async def initialize(self) -> None:
        """Create the collection and payload indexes when they are missing.

        Raises:
            ConfigurationError: If an existing collection has a different vector size
        """
        info = await self._request("GET", self._collection_path(), allow_missing=True)
        if info is None:
            await self._create_collection()
        else:
            existing_size = self._vector_size_of(info)
            if existing_size is not None and existing_size != self.vector_size:
                raise ConfigurationError(
                    f"Collection {self.collection_name} has vectors of size {existing_size}, "
                    f"expected {self.vector_size}",
                    details={"collection": self.collection_name},
                )
            self.logger.debug(f"Collection {self.collection_name} already exists")

        await self._ensure_payload_indexes(info or {})
        self.initialized = True
        self.logger.info(f"Vector index ready: {self.collection_name}")

    @staticmethod
    def _vector_size_of(info: Dict[str, Any]) -> Optional[int]:
        vectors = info.get("config", {}).get("params", {}).get("vectors", {})
        if isinstance(vectors, dict) and "size" in vectors:
            return int(vectors["size"])
        return None

    async def _create_collection(self) -> None:
        self.logger.info(f"Creating collection {self.collection_name} (size={self.vector_size}, cosine)")
        await self._request(
            "PUT",
            self._collection_path(),
            json={"vectors": {"size": self.vector_size, "distance": "Cosine"}},
        )

    async def _ensure_payload_indexes(self, info: Dict[str, Any]) -> None:
        existing = info.get("payload_schema", {}) or {}
        for field_name, schema in PAYLOAD_INDEXES.items():
            if field_name in existing:
                continue
            await self._request(
                "PUT",
                self._collection_path("/index"),
                json={"field_name": field_name, "field_schema": schema},
                params={"wait": "true"},
            )
            self.logger.debug(f"Created payload index {field_name} ({schema})")

    async def search(
        self,
        vector: List[float],
        limit: int = 10,
        score_threshold: Optional[float] = None,
        filters: Optional[NormalizedFilterSet] = None,
    ) -> List[CandidateMatch]:
        """Nearest neighbours by cosine similarity, best first."""
        body: Dict[str, Any] = {"vector": vector, "limit": limit, "with_payload": True}
        if score_threshold is not None:
            body["score_threshold"] = score_threshold
        query_filter = build_filter(filters or {})
        if query_filter:
            body["filter"] = query_filter

        points = await self._request("POST", self._collection_path("/points/search"), json=body) or []
        return [
            CandidateMatch(id=point["id"], score=point["score"], payload=point.get("payload") or {})
            for point in points
        ]

    async def upsert(self, records: List[ProductVectorRecord]) -> int:
        """Insert or replace points; returns how many were sent."""
        if not records:
            return 0
        points = [
            {
                "id": record.id,
                "vector": record.vector,
                "payload": record.payload.model_dump(mode="json", exclude_none=True),
            }
            for record in records
        ]
        await self._request("PUT", self._collection_path("/points"), json={"points": points}, params={"wait": "true"})
        self.logger.debug(f"Upserted {len(points)} points into {self.collection_name}")
        return len(points)

    async def scroll(self, limit: int = 10, offset: Optional[Any] = None) -> Dict[str, Any]:
        """Page through stored points without vectors."""
        body: Dict[str, Any] = {"limit": limit, "with_payload": True, "with_vector": False}
        if offset is not None:
            body["offset"] = offset
        result = await self._request("POST", self._collection_path("/points/scroll"), json=body) or {}
        return {"points": result.get("points", []), "next_page_offset": result.get("next_page_offset")}

    async def get_collection_info(self) -> Optional[Dict[str, Any]]:
        """Raw collection description, or None if it does not exist."""
        return await self._request("GET", self._collection_path(), allow_missing=True)

    async def get_status(self) -> Dict[str, Any]:
        """Connection and collection summary for status endpoints."""
        info = await self.get_collection_info()
        return {
            "connected": True,
            "collection": self.collection_name,
            "exists": info is not None,
            "points_count": (info or {}).get("points_count"),
            "vector_size": self._vector_size_of(info) if info else self.vector_size,
            "status": (info or {}).get("status"),
        }

    async def clear_collection(self) -> None:
        """Drop the collection and recreate it empty."""
        self.logger.warning(f"Dropping collection {self.collection_name}")
        await self._request("DELETE", self._collection_path(), allow_missing=True)
        await self._create_collection()
        await self._ensure_payload_indexes({})

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
