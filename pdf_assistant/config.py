"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    llm_model_name: str = Field(default="gpt-4.1-mini", alias="LLM_MODEL_NAME")
    sanitizer_model_name: str = Field(default="gpt-4.1-mini", alias="SANITIZER_MODEL_NAME")
    embedding_model_name: str = Field(default="text-embedding-3-small", alias="EMBEDDING_MODEL_NAME")
    embedding_dimensions: int = Field(default=1536, gt=0, alias="EMBEDDING_DIMENSIONS")
    answer_temperature: float = Field(default=0.2, ge=0, alias="ANSWER_TEMPERATURE")

    vector_store_backend: str = Field(default="upstash", alias="VECTOR_STORE_BACKEND")
    vector_store_url: str | None = Field(default=None, alias="UPSTASH_VECTOR_REST_URL")
    vector_store_token: SecretStr | None = Field(default=None, alias="UPSTASH_VECTOR_REST_TOKEN")
    vector_store_timeout_sec: float = Field(default=30.0, gt=0, alias="VECTOR_STORE_TIMEOUT_SEC")
    vector_store_path: str = Field(default="./data/vector_store", alias="VECTOR_STORE_PATH")
    vector_store_collection: str = Field(default="pdf_chunks", alias="VECTOR_STORE_COLLECTION")

    chunk_size_words: int = Field(default=300, gt=0, alias="CHUNK_SIZE_WORDS")
    chunk_overlap_words: int = Field(default=50, ge=0, alias="CHUNK_OVERLAP_WORDS")
    ingest_workers: int = Field(default=5, gt=0, alias="INGEST_WORKERS")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0, alias="MAX_UPLOAD_BYTES")

    retrieval_top_k: int = Field(default=3, gt=0, alias="RETRIEVAL_TOP_K")
    citation_snippet_chars: int = Field(default=100, gt=0, alias="CITATION_SNIPPET_CHARS")
    wipe_query_limit: int = Field(default=1000, gt=0, alias="WIPE_QUERY_LIMIT")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")


settings = Settings()


def setup_logging() -> logging.Logger:
    """
    Configure base logging for the app.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
    )
    return logging.getLogger("app")


def public_settings() -> Dict[str, Any]:
    """
    Return settings without secrets for safe logging/inspection.
    """
    return settings.model_dump(
        exclude={"openai_api_key", "vector_store_token"},
        exclude_none=True,
    )


def openai_api_key() -> str | None:
    return settings.openai_api_key.get_secret_value() if settings.openai_api_key else None


__all__ = ["Settings", "settings", "setup_logging", "public_settings", "openai_api_key"]
