"""Error taxonomy for ingestion and retrieval."""

from typing import Optional


class CivicRAGError(Exception):
    """Base class for all pipeline errors."""


class ExtractionError(CivicRAGError):
    """Source file is unreadable, corrupt, or contains no text."""


class EmbeddingProviderError(CivicRAGError):
    """
    The embedding provider failed (rate limit, auth, network, bad response).

    Carries enough context to identify which text failed.
    """

    def __init__(
        self,
        message: str,
        document_id: Optional[str] = None,
        chunk_index: Optional[int] = None,
        batch_number: Optional[int] = None,
    ):
        self.document_id = document_id
        self.chunk_index = chunk_index
        self.batch_number = batch_number

        context = []
        if document_id is not None:
            context.append(f"document={document_id}")
        if chunk_index is not None:
            context.append(f"chunk={chunk_index}")
        if batch_number is not None:
            context.append(f"batch={batch_number}")
        if context:
            message = f"{message} ({', '.join(context)})"

        super().__init__(message)


class ClassificationError(CivicRAGError):
    """Classifier output could not be parsed into entity tags."""


class RetrievalTimeout(CivicRAGError):
    """A single entity-type retriever exceeded its time budget."""

    def __init__(self, entity_type: str, timeout: float):
        self.entity_type = entity_type
        self.timeout = timeout
        super().__init__(f"Retrieval for '{entity_type}' timed out after {timeout:.1f}s")


class DerivedRecordError(CivicRAGError):
    """Summary generation for a bill or proceeding failed."""
