"""
Embedding Service

Generates vector embeddings for text.

Backends:
- litellm (default): OpenAI-compatible embedding endpoints, e.g.
  text-embedding-ada-002 (1536 dims). Accepts many inputs per call.
- sentence-transformers: local models such as all-MiniLM-L6-v2 (384 dims).
  No API costs; install the ``local-embeddings`` extra.

Texts are embedded in fixed-size batches with a delay between batches to
stay within provider rate limits. Backends that only take one input per
call are driven one text at a time inside each batch.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import litellm

from .config import RAGConfig
from .exceptions import EmbeddingProviderError

logger = logging.getLogger(__name__)


class EmbeddingBackend(ABC):
    """A provider that turns texts into vectors."""

    supports_batch: bool = True

    def __init__(self, model_name: str):
        self.model_name = model_name

    @abstractmethod
    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed texts, returning one vector per input in the same order."""


class LiteLLMEmbeddingBackend(EmbeddingBackend):
    """Embeddings through LiteLLM (OpenAI, Azure, Cohere, Bedrock...)."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        super().__init__(model_name)
        self.api_base = api_base
        self.timeout = timeout

    def embed(self, texts: List[str]) -> List[List[float]]:
        params = {"model": self.model_name, "input": texts}
        if self.api_base:
            params["api_base"] = self.api_base
        if self.timeout is not None:
            params["timeout"] = self.timeout

        response = litellm.embedding(**params)

        items = sorted(response.data, key=_item_index)
        return [_item_vector(item) for item in items]


class SentenceTransformerBackend(EmbeddingBackend):
    """Local sentence-transformers model."""

    def __init__(self, model_name: str, use_gpu: bool = False, batch_size: int = 32):
        super().__init__(model_name)
        from sentence_transformers import SentenceTransformer

        device = "cuda" if use_gpu else "cpu"
        logger.info(f"Loading embedding model: {model_name}")
        self.model = SentenceTransformer(model_name, device=device)
        self.batch_size = batch_size
        logger.info(f"Model loaded on device: {device}")

    def embed(self, texts: List[str]) -> List[List[float]]:
        embeddings = self.model.encode(
            texts,
            batch_size=self.batch_size,
            convert_to_numpy=True,
            show_progress_bar=False
        )
        return embeddings.tolist()


def _item_index(item) -> int:
    if isinstance(item, dict):
        return item.get("index", 0)
    return getattr(item, "index", 0)


def _item_vector(item) -> List[float]:
    if isinstance(item, dict):
        return list(item["embedding"])
    return list(item.embedding)


class EmbeddingService:
    """Service for generating text embeddings."""

    def __init__(
        self,
        config: RAGConfig,
        backend: Optional[EmbeddingBackend] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize embedding service.

        Args:
            config: RAG configuration
            backend: Embedding backend (built from config if not provided)
            sleep: Function used for the inter-batch delay
        """
        self.config = config
        self.batch_size = config.embedding_batch_size
        self.dimension = config.embedding_dimension
        self.backend = backend or _build_backend(config)
        self._sleep = sleep

        logger.info(
            f"Embedding model: {self.backend.model_name} "
            f"(dimension {self.dimension}, batch {self.batch_size}, "
            f"delay {config.embedding_batch_delay_ms}ms)"
        )

    @property
    def model_name(self) -> str:
        return self.backend.model_name

    def embed_text(
        self,
        text: str,
        document_id: Optional[str] = None,
        chunk_index: Optional[int] = None
    ) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: Text to embed
            document_id: Owning record, for error context
            chunk_index: Position of the text, for error context

        Returns:
            Embedding vector as list of floats

        Raises:
            EmbeddingProviderError: If the provider call fails
        """
        return self._call([text], document_id, chunk_index, None)[0]

    def embed_batch(
        self,
        texts: List[str],
        document_id: Optional[str] = None,
        on_batch: Optional[Callable[[int, int], None]] = None
    ) -> List[List[float]]:
        """
        Generate embeddings for multiple texts, batch by batch.

        The first failing batch aborts the whole call; no partial result is
        returned.

        Args:
            texts: List of texts to embed
            document_id: Owning document, for error context
            on_batch: Called with (batch_number, total_batches) after each batch

        Returns:
            List of embedding vectors, same order as texts

        Raises:
            EmbeddingProviderError: If any batch fails
        """
        if not texts:
            return []

        total_batches = (len(texts) + self.batch_size - 1) // self.batch_size
        logger.info(f"Embedding {len(texts)} texts in {total_batches} batches of {self.batch_size}")

        embeddings: List[List[float]] = []
        for batch_number, offset in enumerate(range(0, len(texts), self.batch_size), start=1):
            batch = texts[offset:offset + self.batch_size]

            if self.backend.supports_batch:
                embeddings.extend(self._call(batch, document_id, offset, batch_number))
            else:
                for i, text in enumerate(batch):
                    embeddings.extend(self._call([text], document_id, offset + i, batch_number))

            if on_batch:
                on_batch(batch_number, total_batches)

            if batch_number < total_batches and self.config.embedding_batch_delay_ms:
                self._sleep(self.config.batch_delay_seconds)

        return embeddings

    def get_query_embedding(self, query: str) -> List[float]:
        """
        Generate embedding for a search query.

        Args:
            query: Search query text

        Returns:
            Query embedding vector
        """
        # Queries and passages share one embedding space
        return self.embed_text(query)

    async def aget_query_embedding(self, query: str) -> List[float]:
        """Async version of get_query_embedding() (runs in a worker thread)."""
        return await asyncio.to_thread(self.get_query_embedding, query)

    def _call(
        self,
        texts: List[str],
        document_id: Optional[str],
        chunk_index: Optional[int],
        batch_number: Optional[int]
    ) -> List[List[float]]:
        try:
            vectors = self.backend.embed(texts)
        except EmbeddingProviderError:
            raise
        except Exception as e:
            logger.error(f"Embedding provider call failed: {e}")
            raise EmbeddingProviderError(
                f"Embedding provider call failed: {e}",
                document_id=document_id,
                chunk_index=chunk_index,
                batch_number=batch_number
            ) from e

        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                f"Provider returned {len(vectors)} vectors for {len(texts)} texts",
                document_id=document_id,
                chunk_index=chunk_index,
                batch_number=batch_number
            )
        for vector in vectors:
            if len(vector) != self.dimension:
                raise EmbeddingProviderError(
                    f"Expected {self.dimension}-dimensional vectors, got {len(vector)}",
                    document_id=document_id,
                    chunk_index=chunk_index,
                    batch_number=batch_number
                )
        return vectors


def _build_backend(config: RAGConfig) -> EmbeddingBackend:
    if config.embedding_provider == "sentence-transformers":
        return SentenceTransformerBackend(config.embedding_model, use_gpu=config.use_gpu)
    return LiteLLMEmbeddingBackend(
        config.embedding_model,
        api_base=config.embedding_api_base,
        timeout=config.embedding_timeout_seconds
    )


def get_embedding_service(config: Optional[RAGConfig] = None) -> EmbeddingService:
    """
    Get embedding service instance.

    Args:
        config: RAG configuration (optional, will load from env if not provided)

    Returns:
        EmbeddingService instance
    """
    if config is None:
        from .config import get_rag_config
        config = get_rag_config()

    return EmbeddingService(config)
