"""Pydantic data models for documents, derived records and representatives."""

from .document import (
    BillStatus,
    DocumentType,
    IngestRequest,
    DocumentRecord,
    ChunkEmbedding,
    BillRecord,
    ProceedingRecord,
)
from .representative import (
    Representative,
    RepresentativeContentType,
    RepresentativeEmbeddingRecord,
    ScrapedRepresentative,
    create_profile_content,
    create_embedding_metadata,
)

__all__ = [
    "BillStatus",
    "DocumentType",
    "IngestRequest",
    "DocumentRecord",
    "ChunkEmbedding",
    "BillRecord",
    "ProceedingRecord",
    "Representative",
    "RepresentativeContentType",
    "RepresentativeEmbeddingRecord",
    "ScrapedRepresentative",
    "create_profile_content",
    "create_embedding_metadata",
]
