from catalog_matcher.config import PROVIDER_TYPE, AISettings, MatchingSettings, Settings, VectorIndexSettings


class TestSettings:
    def test_matching_defaults(self, monkeypatch):
        for name in ("MATCH_SEARCH_LIMIT", "MATCH_MIN_SCORE_THRESHOLD", "MATCH_BRAND_FILTER_ENABLED"):
            monkeypatch.delenv(name, raising=False)

        matching = MatchingSettings()

        assert matching.search_limit == 10
        assert matching.min_score_threshold == 0.65
        assert matching.brand_boost == 0.1
        assert matching.brand_filter_enabled is False
        assert matching.rerank_enabled is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MATCH_SEARCH_LIMIT", "20")
        monkeypatch.setenv("MATCH_BRAND_FILTER_ENABLED", "true")
        monkeypatch.setenv("AI_RERANK_PROVIDER", "groq")
        monkeypatch.setenv("QDRANT_COLLECTION", "catalog_test")

        settings = Settings()

        assert settings.matching.search_limit == 20
        assert settings.matching.brand_filter_enabled is True
        assert settings.ai.rerank_provider == PROVIDER_TYPE.GROQ
        assert settings.vector_index.collection_name == "catalog_test"

    def test_embedding_size_matches_index_by_default(self, monkeypatch):
        monkeypatch.delenv("AI_EMBEDDING_DIMENSIONS", raising=False)
        monkeypatch.delenv("QDRANT_VECTOR_SIZE", raising=False)

        assert AISettings().embedding_dimensions == VectorIndexSettings().vector_size == 768
