"""
RAG (Retrieval Augmented Generation) System

This module provides semantic search over legislative documents and
National Assembly representatives.

Components:
- chunker: Splits extracted document text into overlapping chunks
- embedding_service: Generates vector embeddings (LiteLLM or sentence-transformers)
- vector_store: Stores embedding records and answers cosine similarity queries
- retriever: Per-entity-type thresholded retrieval
- classifier: Decides which entity types a query needs
- context: Runs retrievers concurrently and formats the grounding context
"""

from .config import RAGConfig, get_rag_config
from .types import EntityType

__all__ = ["RAGConfig", "get_rag_config", "EntityType"]
