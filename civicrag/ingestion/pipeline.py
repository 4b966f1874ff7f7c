"""
Document Ingestion Pipeline

Per document:
    Extracting -> Chunking -> Embedding -> Persisting -> DerivedRecordCreation -> Complete

Any stage may end in Failed. Nothing is written before Persisting, and the
document row and all of its chunk embeddings are written as one unit, so a
failed ingestion leaves no partial state and can simply be re-run.

Re-ingesting a file passes the existing document id as ``replaces``. The old
document is removed only after the new one has been persisted, so a failed
re-ingest leaves the previous version searchable.

A failure while creating the bill/proceeding summary does not undo the
persisted document: the result is marked degraded and a placeholder summary
is stored instead.

Usage:
    pipeline = IngestionPipeline(vector_store, embedding_service, config)
    result = pipeline.ingest_file(
        Path("data/bills/finance-bill-2024.pdf"),
        IngestRequest(title="Finance Bill 2024", document_type="bill",
                      original_file_name="finance-bill-2024.pdf")
    )
    print(result.stage, result.document_id, result.embedding_count)
"""

import logging
import time
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional

from ..models.document import (
    BillRecord,
    ChunkEmbedding,
    DocumentRecord,
    DocumentType,
    IngestRequest,
    ProceedingRecord,
)
from ..rag.chunker import TextChunker
from ..rag.config import RAGConfig
from ..rag.embedding_service import EmbeddingService
from ..rag.exceptions import CivicRAGError, DerivedRecordError, ExtractionError
from ..rag.vector_store import VectorStore
from .extractor import TextExtractor
from .filenames import extract_date_from_filename
from .summaries import SUMMARY_FAILED_PLACEHOLDER, SummaryGenerator

logger = logging.getLogger(__name__)


class IngestionStage(str, Enum):
    EXTRACTING = "extracting"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    PERSISTING = "persisting"
    DERIVED_RECORD_CREATION = "derived_record_creation"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class IngestionResult:
    """Outcome of ingesting one document."""
    file_name: str
    stage: IngestionStage
    document_id: Optional[str] = None
    embedding_count: int = 0
    degraded: bool = False
    derived_record_id: Optional[str] = None
    replaced_document_id: Optional[str] = None
    failed_stage: Optional[IngestionStage] = None
    error: Optional[Exception] = None
    elapsed_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.stage == IngestionStage.COMPLETE


class IngestionPipeline:
    """Extracts, chunks, embeds and stores one document at a time."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        config: RAGConfig,
        summary_generator: Optional[SummaryGenerator] = None,
        extractor: Optional[TextExtractor] = None
    ):
        """
        Initialize pipeline.

        Args:
            vector_store: Destination store for documents and embeddings
            embedding_service: Embedding service (owns batching and rate limiting)
            config: RAG configuration
            summary_generator: Summary generator for bills and bulletins
            extractor: Text extractor (defaults to TextExtractor())
        """
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.config = config
        self.chunker = TextChunker(config)
        self.extractor = extractor or TextExtractor()
        self._summary_generator = summary_generator

    @property
    def summary_generator(self) -> SummaryGenerator:
        if self._summary_generator is None:
            self._summary_generator = SummaryGenerator(self.config)
        return self._summary_generator

    def document_exists(self, original_file_name: str) -> bool:
        """True if a document was already ingested from this filename."""
        return self.vector_store.document_exists(original_file_name)

    def find_document_id(self, original_file_name: str) -> Optional[str]:
        return self.vector_store.find_document_id(original_file_name)

    def ingest_file(
        self,
        path: Path,
        request: IngestRequest,
        raise_on_error: bool = False,
        replaces: Optional[str] = None
    ) -> IngestionResult:
        """Read a file from disk and ingest it (see ingest())."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            error = ExtractionError(f"Could not read {path}: {e}")
            result = self._failed(request, IngestionStage.EXTRACTING, error, time.time())
            if raise_on_error:
                raise error from e
            return result

        return self.ingest(data, request, raise_on_error=raise_on_error, replaces=replaces)

    def ingest(
        self,
        data: bytes,
        request: IngestRequest,
        raise_on_error: bool = False,
        replaces: Optional[str] = None
    ) -> IngestionResult:
        """
        Ingest one document.

        Args:
            data: Raw file bytes
            request: Title, type and type-specific fields
            raise_on_error: Re-raise the failing stage's exception instead of
                returning a FAILED result
            replaces: Id of an earlier version of this document, deleted
                once the new version is persisted

        Returns:
            IngestionResult (stage COMPLETE or FAILED)
        """
        start_time = time.time()
        stage = IngestionStage.EXTRACTING
        document = None

        try:
            logger.info(f"Ingesting '{request.title}' ({request.document_type.value}) from {request.original_file_name}")
            extracted = self.extractor.extract(data, request.original_file_name)

            stage = IngestionStage.CHUNKING
            chunks = self.chunker.chunk_pages(extracted.pages)
            if not chunks:
                raise ExtractionError(f"No text to chunk in {request.original_file_name}")
            logger.info(f"Created {len(chunks)} chunks")

            document = DocumentRecord(
                title=request.title,
                type=request.document_type,
                content=extracted.text,
                original_file_name=request.original_file_name,
            )

            stage = IngestionStage.EMBEDDING
            vectors = self.embedding_service.embed_batch(
                [chunk.text for chunk in chunks],
                document_id=document.id,
                on_batch=lambda k, n: logger.info(f"Processed batch {k}/{n}")
            )

            stage = IngestionStage.PERSISTING
            records = [
                ChunkEmbedding(content=chunk.text, embedding=vector, metadata=chunk.metadata)
                for chunk, vector in zip(chunks, vectors)
            ]
            self.vector_store.add_document(document, records)
            logger.info(f"Stored document {document.id} with {len(records)} embeddings")

        except Exception as e:
            result = self._failed(request, stage, e, start_time)
            if raise_on_error:
                raise
            return result

        result = IngestionResult(
            file_name=request.original_file_name,
            stage=IngestionStage.COMPLETE,
            document_id=document.id,
            embedding_count=len(records),
        )

        if replaces is not None:
            self._delete_replaced(replaces, document.id, result)

        if request.document_type.requires_summary:
            self._create_derived_record(document, request, result)

        result.elapsed_seconds = time.time() - start_time
        logger.info(
            f"Ingested {request.original_file_name}: {result.embedding_count} embeddings"
            f"{' (degraded)' if result.degraded else ''} in {result.elapsed_seconds:.1f}s"
        )
        return result

    def _delete_replaced(self, old_id: str, new_id: str, result: IngestionResult) -> None:
        try:
            removed = self.vector_store.delete_document(old_id)
        except Exception as e:
            logger.error(f"Document {new_id} stored but previous version {old_id} could not be deleted: {e}")
            result.degraded = True
            result.error = e
            return
        result.replaced_document_id = old_id
        logger.info(f"Replaced document {old_id} ({removed} embeddings) with {new_id}")

    def _create_derived_record(
        self,
        document: DocumentRecord,
        request: IngestRequest,
        result: IngestionResult
    ) -> None:
        """Summarize and store the bill/proceeding record; degrade on failure."""
        try:
            summary = self.summary_generator.summarize(document.content, request.document_type)
        except DerivedRecordError as e:
            logger.error(f"Derived record for document {document.id} degraded: {e}")
            summary = SUMMARY_FAILED_PLACEHOLDER
            result.degraded = True
            result.error = e

        try:
            if request.document_type == DocumentType.BILL:
                record = BillRecord(
                    document_id=document.id,
                    title=document.title,
                    status=request.status,
                    summary=summary,
                    original_text=document.content,
                    bill_number=request.bill_number,
                    session_number=request.session_number,
                    passage_date=request.passage_date,
                )
                result.derived_record_id = self.vector_store.add_bill(record)
            else:
                record = ProceedingRecord(
                    document_id=document.id,
                    title=document.title,
                    proceeding_date=(
                        request.bulletin_date
                        or extract_date_from_filename(request.original_file_name)
                        or date.today()
                    ),
                    summary=summary,
                    original_text=document.content,
                )
                result.derived_record_id = self.vector_store.add_proceeding(record)
        except Exception as e:
            logger.error(f"Could not store derived record for document {document.id}: {e}")
            result.degraded = True
            result.error = DerivedRecordError(f"Could not store derived record: {e}")

    def _failed(
        self,
        request: IngestRequest,
        stage: IngestionStage,
        error: Exception,
        start_time: float
    ) -> IngestionResult:
        if isinstance(error, CivicRAGError):
            logger.error(f"Ingestion of {request.original_file_name} failed while {stage.value}: {error}")
        else:
            logger.exception(f"Unexpected error ingesting {request.original_file_name} while {stage.value}")

        return IngestionResult(
            file_name=request.original_file_name,
            stage=IngestionStage.FAILED,
            failed_stage=stage,
            error=error,
            elapsed_seconds=time.time() - start_time,
        )
