"""Application-wide configuration settings."""

from enum import Enum
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
load_dotenv(override=False)

# Base paths
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"


class PROVIDER_TYPE(Enum):
    GOOGLE = "google"
    GROQ = "groq"


class APISettings(BaseSettings):
    """API-related settings."""

    api_key: SecretStr = Field(default=SecretStr(""), validation_alias="API_KEY")
    cors_origins: list[str] = Field(default=["*"])
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


class AISettings(BaseSettings):
    """AI-related settings."""

    google_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="GOOGLE_API_KEY")
    groq_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="GROQ_API_KEY")

    extraction_model: str = Field(default="gemini-2.0-flash", validation_alias="AI_EXTRACTION_MODEL")
    rerank_provider: PROVIDER_TYPE = Field(default=PROVIDER_TYPE.GOOGLE, validation_alias="AI_RERANK_PROVIDER")
    rerank_model: str = Field(default="gemini-2.0-flash", validation_alias="AI_RERANK_MODEL")
    embedding_model: str = Field(default="models/gemini-embedding-001", validation_alias="AI_EMBEDDING_MODEL")
    # Must equal the vector index collection size
    embedding_dimensions: int = Field(default=768, validation_alias="AI_EMBEDDING_DIMENSIONS")

    # Per-call timeout and retry budget for every LLM / embedding call
    request_timeout: float = Field(default=60.0, validation_alias="AI_REQUEST_TIMEOUT")
    max_retries: int = Field(default=2, validation_alias="AI_MAX_RETRIES")
    retry_delay: float = Field(default=2.0, validation_alias="AI_RETRY_DELAY")

    # Concurrency settings
    rerank_max_concurrent: int = Field(default=5, validation_alias="AI_RERANK_MAX_CONCURRENT")

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


class VectorIndexSettings(BaseSettings):
    """Qdrant vector index settings."""

    url: str = Field(default="http://localhost:6333", validation_alias="QDRANT_URL")
    api_key: SecretStr = Field(default=SecretStr(""), validation_alias="QDRANT_API_KEY")
    collection_name: str = Field(default="supermarket_products", validation_alias="QDRANT_COLLECTION")
    vector_size: int = Field(default=768, validation_alias="QDRANT_VECTOR_SIZE")
    timeout: float = Field(default=30.0, validation_alias="QDRANT_TIMEOUT")
    max_retries: int = Field(default=2, validation_alias="QDRANT_MAX_RETRIES")
    upsert_batch_size: int = Field(default=100, validation_alias="VECTOR_UPSERT_BATCH_SIZE")

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


class MatchingSettings(BaseSettings):
    """Match-and-rank tuning knobs."""

    search_limit: int = Field(default=10, validation_alias="MATCH_SEARCH_LIMIT")
    search_score_threshold: float = Field(default=0.5, validation_alias="MATCH_SEARCH_SCORE_THRESHOLD")
    min_score_threshold: float = Field(default=0.65, validation_alias="MATCH_MIN_SCORE_THRESHOLD")
    brand_boost: float = Field(default=0.1, validation_alias="MATCH_BRAND_BOOST")
    brand_filter_enabled: bool = Field(default=False, validation_alias="MATCH_BRAND_FILTER_ENABLED")
    brand_filter_min_confidence: float = Field(default=0.9, validation_alias="MATCH_BRAND_FILTER_MIN_CONFIDENCE")
    rerank_enabled: bool = Field(default=False, validation_alias="MATCH_RERANK_ENABLED")

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


class LoggingSettings(BaseSettings):
    """Logging-related settings."""

    log_level: str = Field(default="INFO")
    file_log_level: str = Field(default="DEBUG")
    backup_count: int = Field(default=9)
    format: str = Field(default="%(name)s - %(levelname)s - %(message)s")
    file_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    enable_file_logging: bool = Field(default=True, validation_alias="ENABLE_FILE_LOGGING")
    enable_request_logging: bool = Field(default=False, validation_alias="ENABLE_REQUEST_LOGGING")
    noisy_loggers: Dict[str, str] = Field(
        default={
            "urllib3": "WARNING",
            "uvicorn": "WARNING",
            "httpx": "WARNING",
            "httpcore": "WARNING",
            "grpc": "WARNING",
            "google": "WARNING",
            "multipart": "WARNING",
            "watchfiles": "WARNING",
        }
    )

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


class Settings(BaseSettings):
    """Global settings container."""

    api: APISettings = Field(default_factory=APISettings)
    ai: AISettings = Field(default_factory=AISettings)
    vector_index: VectorIndexSettings = Field(default_factory=VectorIndexSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="allow", populate_by_name=True)


def get_settings() -> Settings:
    """Build the settings object once at the composition root."""
    return Settings()
