"""Test fixtures for the catalog matcher."""

import os

import pytest

os.environ.setdefault("ENABLE_FILE_LOGGING", "false")

from catalog_matcher.ai.base import RetryPolicy
from catalog_matcher.config import MatchingSettings
from catalog_matcher.services.embeddings import EmbeddingService
from catalog_matcher.services.query_builder import QueryBuilder
from catalog_matcher.services.retriever import CandidateRetriever
from catalog_matcher.services.scoring import ScoreAdjuster

from .fakes import FakeEmbeddingProvider, FakeIndex


@pytest.fixture
def fast_policy():
    return RetryPolicy(timeout_seconds=5, max_retries=0, retry_delay=0)


@pytest.fixture
def matching_settings():
    return MatchingSettings()


@pytest.fixture
def embedding_provider():
    return FakeEmbeddingProvider(dimensions=4)


@pytest.fixture
def embeddings(embedding_provider, fast_policy):
    return EmbeddingService(embedding_provider, dimensions=4, policy=fast_policy)


@pytest.fixture
def index():
    return FakeIndex()


@pytest.fixture
def retriever(embeddings, index, matching_settings):
    return CandidateRetriever(embeddings, index, matching_settings)


@pytest.fixture
def query_builder(matching_settings):
    return QueryBuilder(matching_settings)


@pytest.fixture
def score_adjuster():
    return ScoreAdjuster(brand_boost=0.1, min_score_threshold=0.65)
