import pytest

from catalog_matcher.schemas.products import CatalogProductRow
from catalog_matcher.services.catalog_ingestion import (
    CatalogIngestionService,
    build_payload,
    product_point_id,
)


def _row(**overrides):
    data = {"codigo": "1001", "rubro": "ACEITES", "marca": " natura ", "descripcion": "ACEITE GIRASOL", "peso": "1,5 LT", "precio": 1999.9}
    data.update(overrides)
    return CatalogProductRow(**data)


class TestPointIds:
    def test_numeric_codes_are_used_directly(self):
        assert product_point_id("1001") == 1001
        assert product_point_id(55) == 55

    def test_other_codes_hash_stably(self):
        first = product_point_id("ABC-12")
        assert first == product_point_id("ABC-12")
        assert first != product_point_id("ABC-13")
        assert 0 <= first < 2**64


class TestBuildPayload:
    def test_brand_and_unit_are_normalized(self):
        payload = build_payload(_row())

        assert payload.brand == "NATURA"
        assert payload.normalized_weight == "1.5L"
        assert payload.category == "ACEITES"
        assert payload.embedding_text == "1001; ACEITES; NATURA; ACEITE GIRASOL; 1.5L; 1999.9"

    def test_unrecognized_unit_is_left_out(self):
        payload = build_payload(_row(peso="docena"))

        assert payload.normalized_weight is None


class TestCatalogIngestionService:
    @pytest.mark.asyncio
    async def test_ingests_in_batches(self, embeddings, embedding_provider, index):
        rows = [_row(codigo=str(code)) for code in range(1, 6)]
        service = CatalogIngestionService(embeddings, index, batch_size=2)

        processed = await service.ingest(rows)

        assert processed == 5
        assert [len(batch) for batch in index.upserted] == [2, 2, 1]
        assert [record.id for batch in index.upserted for record in batch] == [1, 2, 3, 4, 5]
        assert all(call["task_type"] == "retrieval_document" for call in embedding_provider.calls)

    @pytest.mark.asyncio
    async def test_empty_input(self, embeddings, index):
        assert await CatalogIngestionService(embeddings, index).ingest([]) == 0
        assert index.upserted == []
