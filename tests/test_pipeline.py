import json

import pytest

from catalog_matcher.services.extraction import CatalogExtractor
from catalog_matcher.services.pipeline import CatalogPipeline, extract_wholesaler_tag
from catalog_matcher.services.reranker import RuleBasedReranker
from catalog_matcher.utils.errors import ConfigurationError, ServiceUnavailableError

from .fakes import FakeTextProvider, make_candidate, make_product


def _extraction_response(*names):
    return json.dumps(
        [
            {
                "normalized_name": name,
                "catalog_price": 100 + i,
                "brand": "NATURA",
                "pack_count": 1,
                "unit_of_measure": "1.5L",
                "inferred_category": "aceites",
            }
            for i, name in enumerate(names)
        ]
    )


def _pipeline(extraction_responses, retriever, query_builder, score_adjuster, fast_policy, **kwargs):
    extractor = CatalogExtractor(FakeTextProvider(extraction_responses), policy=fast_policy)
    return CatalogPipeline(
        extractor=extractor,
        query_builder=query_builder,
        retriever=retriever,
        score_adjuster=score_adjuster,
        **kwargs,
    )


class TestWholesalerTag:
    @pytest.mark.parametrize(
        "filename,expected",
        [
            ("maxiconsumo_2024-05.jpg", "MAXICONSUMO"),
            ("vital-ofertas.png", "VITAL"),
            ("diarco semana 3.jpeg", "DIARCO"),
            ("yaguar.jpg", "YAGUAR"),
            ("_.jpg", "UNKNOWN"),
            ("", "UNKNOWN"),
            (None, "UNKNOWN"),
        ],
    )
    def test_first_segment_upper_cased(self, filename, expected):
        assert extract_wholesaler_tag(filename) == expected


class TestCatalogPipeline:
    @pytest.mark.asyncio
    async def test_full_run(self, retriever, index, query_builder, score_adjuster, fast_policy):
        index.results = [
            make_candidate(1, 0.90, brand="NATURA", weight="1.5L"),
            make_candidate(2, 0.60, brand="NATURA", weight="1.5L"),
        ]
        pipeline = _pipeline([_extraction_response("ACEITE NATURA")], retriever, query_builder, score_adjuster, fast_policy)

        response = await pipeline.process(b"img", filename="maxiconsumo_01.jpg", company="Maxiconsumo")

        assert response.success is True
        assert response.data.products_processed == 1
        assert response.metadata.wholesaler_tag == "MAXICONSUMO"
        assert response.metadata.reranked is False
        item = response.data.preview[0]
        assert item.extracted_product.wholesaler == "MAXICONSUMO"
        assert [m.id for m in item.matches] == [1]
        assert item.total_matches == 1
        assert item.matches[0].adjusted_score == pytest.approx(1.0)
        assert index.searches[0]["filters"] == {"normalized_weight": "1.5L"}

    @pytest.mark.asyncio
    async def test_one_failing_item_does_not_abort_the_batch(
        self, retriever, index, query_builder, score_adjuster, fast_policy
    ):
        calls = {"count": 0}

        def results(filters):
            calls["count"] += 1
            if calls["count"] == 2:
                raise ServiceUnavailableError("qdrant", "connection refused")
            return [make_candidate(calls["count"], 0.9, brand="NATURA")]

        index.results = results
        pipeline = _pipeline(
            [_extraction_response("UNO", "DOS", "TRES")], retriever, query_builder, score_adjuster, fast_policy
        )

        response = await pipeline.process(b"img", filename="vital.jpg")

        preview = response.data.preview
        assert response.data.products_processed == 3
        assert [p.extracted_product.normalized_name for p in preview] == ["UNO", "DOS", "TRES"]
        assert preview[0].total_matches == 1 and preview[0].error is None
        assert preview[1].matches == [] and preview[1].total_matches == 0
        assert "unreachable" in preview[1].error
        assert preview[2].total_matches == 1 and preview[2].error is None

    @pytest.mark.asyncio
    async def test_configuration_error_aborts(self, index, query_builder, score_adjuster, fast_policy):
        class Unconfigured:
            async def retrieve(self, *args, **kwargs):
                raise ConfigurationError("Embedding service not configured")

        pipeline = _pipeline([_extraction_response("UNO")], Unconfigured(), query_builder, score_adjuster, fast_policy)

        with pytest.raises(ConfigurationError):
            await pipeline.process(b"img", filename="vital.jpg")

    @pytest.mark.asyncio
    async def test_rerank_flag(self, retriever, index, query_builder, score_adjuster, fast_policy):
        index.results = [
            make_candidate(1, 0.90, brand="NATURA", weight="900ML"),
            make_candidate(2, 0.80, brand="NATURA", weight="1.5L"),
        ]
        pipeline = _pipeline(
            [_extraction_response("ACEITE")] * 2,
            retriever,
            query_builder,
            score_adjuster,
            fast_policy,
            reranker=RuleBasedReranker(),
        )

        plain = await pipeline.process(b"img", filename="vital.jpg")
        reranked = await pipeline.process(b"img", filename="vital.jpg", rerank=True)

        assert [m.id for m in plain.data.preview[0].matches] == [1, 2]
        assert [m.id for m in reranked.data.preview[0].matches] == [2]
        assert reranked.metadata.reranked is True

    @pytest.mark.asyncio
    async def test_match_products_without_extraction(self, retriever, index, query_builder, score_adjuster, fast_policy):
        index.results = [make_candidate(5, 0.95, brand="NATURA")]
        pipeline = _pipeline([], retriever, query_builder, score_adjuster, fast_policy)

        preview = await pipeline.match_products([make_product(pack_count=6)])

        assert [m.id for m in preview[0].matches] == [5]
        assert index.searches[0]["filters"] == {"unit_count": 6}

    @pytest.mark.asyncio
    async def test_no_products_found(self, retriever, query_builder, score_adjuster, fast_policy):
        pipeline = _pipeline(["[]"], retriever, query_builder, score_adjuster, fast_policy)

        response = await pipeline.process(b"img", filename="vital.jpg")

        assert response.data.products_processed == 0
        assert response.data.preview == []
