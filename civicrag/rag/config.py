"""
RAG System Configuration

Centralized configuration for all RAG components including:
- Embedding provider settings and rate limiting
- Chunking parameters
- Per-entity-type retrieval thresholds and limits
- Classifier and summary model settings
"""

from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from .types import EntityType


class RAGConfig(BaseSettings):
    """Configuration for RAG system."""

    # Embedding Model
    embedding_provider: Literal["litellm", "sentence-transformers"] = Field(
        default="litellm",
        description="Backend used to generate embeddings"
    )
    embedding_model: str = Field(
        default="text-embedding-ada-002",
        description="Embedding model identifier (one model per deployment)"
    )
    embedding_dimension: int = Field(
        default=1536,
        description="Dimension of embedding vectors (text-embedding-ada-002 = 1536)",
        gt=0
    )
    embedding_batch_size: int = Field(
        default=5,
        description="Texts per embedding batch",
        ge=1
    )
    embedding_batch_delay_ms: int = Field(
        default=1000,
        description="Delay between embedding batches (provider rate limit)",
        ge=0
    )
    embedding_api_base: Optional[str] = Field(
        default=None,
        description="Custom API base URL for LiteLLM embeddings (proxy or self-hosted endpoint)"
    )
    embedding_timeout_seconds: float = Field(
        default=30.0,
        description="Per-request timeout for LiteLLM embedding calls",
        gt=0
    )
    use_gpu: bool = Field(
        default=False,
        description="Use GPU for sentence-transformers embeddings if available"
    )

    # Text Chunking
    chunk_size: int = Field(
        default=1500,
        description="Maximum characters per chunk",
        gt=0
    )
    chunk_overlap: int = Field(
        default=300,
        description="Overlap between consecutive chunks in characters",
        ge=0
    )

    # Retrieval
    document_similarity_threshold: float = Field(
        default=0.75,
        description="Minimum cosine similarity for document chunks",
        ge=-1.0,
        le=1.0
    )
    representative_similarity_threshold: float = Field(
        default=0.70,
        description="Minimum cosine similarity for representative records",
        ge=-1.0,
        le=1.0
    )
    document_result_limit: int = Field(
        default=6,
        description="Maximum document chunks returned per query",
        ge=1
    )
    representative_result_limit: int = Field(
        default=5,
        description="Maximum representative records returned per query",
        ge=1
    )
    retriever_timeout_seconds: float = Field(
        default=10.0,
        description="Time budget for a single entity-type retriever",
        gt=0
    )
    brute_force_ceiling: int = Field(
        default=10_000,
        description="Largest corpus the exact (in-memory) cosine scan is meant for",
        ge=1
    )

    # Classification and summaries
    query_classifier: Literal["llm", "keyword"] = Field(
        default="llm",
        description="Query intent classifier: model-based or keyword rules"
    )
    classifier_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for query intent classification"
    )
    classifier_max_tokens: int = Field(default=50, ge=1)
    summary_model: str = Field(
        default="gpt-4o",
        description="Model used for bill and proceeding summaries"
    )
    summary_input_chars: int = Field(
        default=8000,
        description="Characters of document text sent for summarisation",
        ge=1
    )

    class Config:
        env_prefix = "RAG_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @model_validator(mode="after")
    def check_overlap(self) -> "RAGConfig":
        """Overlap must leave room for new text in every chunk."""
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    @property
    def batch_delay_seconds(self) -> float:
        return self.embedding_batch_delay_ms / 1000.0

    def similarity_threshold(self, entity_type: EntityType) -> float:
        """Default minimum similarity for an entity type."""
        if EntityType(entity_type) == EntityType.REPRESENTATIVE:
            return self.representative_similarity_threshold
        return self.document_similarity_threshold

    def result_limit(self, entity_type: EntityType) -> int:
        """Default top-k for an entity type."""
        if EntityType(entity_type) == EntityType.REPRESENTATIVE:
            return self.representative_result_limit
        return self.document_result_limit


def get_rag_config() -> RAGConfig:
    """Get RAG configuration from environment."""
    return RAGConfig()
