"""
FastAPI Dependencies

Services are built once in the application lifespan and stored on
``app.state.services``; these dependencies hand them to the routers.
Tests replace them with ``app.dependency_overrides``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from ..agent.assistant import CivicAssistant
from ..agent.llm_config import LLMClient, get_llm_client
from ..db.pg_store import PgVectorStore
from ..db.session import Database
from ..ingestion.pipeline import IngestionPipeline
from ..ingestion.summaries import SummaryGenerator
from ..rag.classifier import build_classifier
from ..rag.config import RAGConfig, get_rag_config
from ..rag.context import ContextAssembler
from ..rag.embedding_service import EmbeddingService
from ..rag.retriever import SimilarityRetriever
from ..rag.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routers need, wired around one database handle."""
    config: RAGConfig
    database: Optional[Database]
    vector_store: VectorStore
    assistant: CivicAssistant
    pipeline: IngestionPipeline


def build_services(
    database: Database,
    config: Optional[RAGConfig] = None,
    llm_client: Optional[LLMClient] = None,
    vector_store: Optional[VectorStore] = None,
    embedding_service: Optional[EmbeddingService] = None
) -> Services:
    """
    Wire the query and ingestion services.

    Args:
        database: Open database handle
        config: RAG configuration (defaults to environment)
        llm_client: LLM client (defaults to get_llm_client())
        vector_store: Store override (defaults to PgVectorStore on ``database``)
        embedding_service: Embedding service override
    """
    config = config or get_rag_config()
    llm_client = llm_client or get_llm_client()
    vector_store = vector_store or PgVectorStore(database, dimension=config.embedding_dimension)
    embedding_service = embedding_service or EmbeddingService(config)

    retriever = SimilarityRetriever(vector_store, embedding_service, config)
    assistant = CivicAssistant(
        classifier=build_classifier(config, llm_client),
        assembler=ContextAssembler(retriever, config),
        llm_client=llm_client,
    )
    pipeline = IngestionPipeline(
        vector_store,
        embedding_service,
        config,
        summary_generator=SummaryGenerator(config, llm_client),
    )

    return Services(
        config=config,
        database=database,
        vector_store=vector_store,
        assistant=assistant,
        pipeline=pipeline,
    )


def get_services(request: Request) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Services are not initialized")
    return services


def get_assistant(request: Request) -> CivicAssistant:
    """
    Assistant dependency.

    Usage:
        @router.post("/chat")
        async def chat(assistant: CivicAssistant = Depends(get_assistant)):
            ...
    """
    return get_services(request).assistant


def get_pipeline(request: Request) -> IngestionPipeline:
    """Ingestion pipeline dependency."""
    return get_services(request).pipeline
