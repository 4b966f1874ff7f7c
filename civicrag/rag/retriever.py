"""
Similarity Retriever

Thresholded top-k retrieval per entity type. Thresholds and limits default
to the per-entity values in RAGConfig and can be overridden per call.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from .config import RAGConfig
from .embedding_service import EmbeddingService
from .types import EntityType
from .vector_store import SearchResult, VectorStore

logger = logging.getLogger(__name__)


class SimilarityRetriever:
    """Retrieves the records most similar to a query, per entity type."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        config: RAGConfig
    ):
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.config = config

    def retrieve(
        self,
        query_vector: List[float],
        entity_type: EntityType,
        top_k: Optional[int] = None,
        min_similarity: Optional[float] = None,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        """
        Return up to top_k records at or above min_similarity.

        Args:
            query_vector: Query embedding
            entity_type: DOCUMENT or REPRESENTATIVE (BILL maps to DOCUMENT)
            top_k: Result limit (defaults per entity type)
            min_similarity: Similarity threshold (defaults per entity type)
            filters: Representative metadata filters

        Returns:
            Results ordered by descending similarity; may be empty
        """
        entity_type = EntityType(entity_type)
        if entity_type == EntityType.BILL:
            entity_type = EntityType.DOCUMENT

        top_k = top_k if top_k is not None else self.config.result_limit(entity_type)
        if min_similarity is None:
            min_similarity = self.config.similarity_threshold(entity_type)

        results = self.vector_store.search(
            query_embedding=query_vector,
            entity_type=entity_type,
            top_k=top_k,
            min_similarity=min_similarity,
            filters=filters
        )

        logger.info(
            f"Retrieved {len(results)} {entity_type.value} records "
            f"(top_k={top_k}, min_similarity={min_similarity})"
        )
        return results

    async def aretrieve(
        self,
        query_vector: List[float],
        entity_type: EntityType,
        top_k: Optional[int] = None,
        min_similarity: Optional[float] = None,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        """Async version of retrieve() (store calls run in a worker thread)."""
        return await asyncio.to_thread(
            self.retrieve, query_vector, entity_type, top_k, min_similarity, filters
        )

    def search(
        self,
        query: str,
        entity_type: EntityType,
        top_k: Optional[int] = None,
        min_similarity: Optional[float] = None,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        """Embed a text query and retrieve for one entity type."""
        if not query or not query.strip():
            raise ValueError("Query cannot be empty")

        query_vector = self.embedding_service.get_query_embedding(query)
        return self.retrieve(query_vector, entity_type, top_k, min_similarity, filters)
