"""
Vector Store Interface

Stores (content, embedding, metadata) records per entity type and answers
cosine similarity queries joined with parent-entity metadata.

Implementations:
- PgVectorStore (civicrag.db.pg_store): PostgreSQL + pgvector with an HNSW
  index per embedding table. Use for any real deployment.
- InMemoryVectorStore (this module): exact brute-force cosine scan with
  numpy. Meant for tests and small corpora up to ``brute_force_ceiling``
  records per entity type.

Similarity is ``1 - cosine_distance``. Results below the minimum similarity
are excluded, the rest are ordered by descending similarity with ties kept
in insertion order.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

import numpy as np

from .types import EntityType
from ..models.document import BillRecord, ChunkEmbedding, DocumentRecord, ProceedingRecord
from ..models.representative import Representative, RepresentativeEmbeddingRecord

logger = logging.getLogger(__name__)

REPRESENTATIVE_FILTERS = ("province", "party", "constituency", "district")


@dataclass
class SearchResult:
    """A retrieved record with its similarity and parent-entity fields."""
    record_id: Any
    entity_type: EntityType
    parent_id: str
    content: str
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)
    parent: Dict[str, Any] = field(default_factory=dict)


def cosine_similarity(vec1, vec2) -> float:
    """
    Calculate cosine similarity between two vectors.

    Returns:
        Cosine similarity in [-1, 1]; 0.0 if either vector is all zeros
    """
    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)

    norm1 = np.linalg.norm(a)
    norm2 = np.linalg.norm(b)
    if norm1 == 0 or norm2 == 0:
        return 0.0

    return float(np.dot(a, b) / (norm1 * norm2))


def document_parent(document: Optional[DocumentRecord]) -> Dict[str, Any]:
    """Parent fields attached to document chunk results."""
    if document is None:
        return {"title": None, "type": None}
    return {"title": document.title, "type": document.type.value}


def representative_parent(rep: Optional[Representative]) -> Dict[str, Any]:
    """Parent fields attached to representative results."""
    if rep is None:
        return {}
    return {
        "name": rep.name_clean,
        "constituency": rep.constituency,
        "constituency_code": rep.constituency_code,
        "constituency_name": rep.constituency_name,
        "district": rep.district,
        "province": rep.province,
        "party": rep.party,
        "phone": rep.phone,
        "permanent_address": rep.permanent_address,
        "islamabad_address": rep.islamabad_address,
    }


def validate_filters(filters: Optional[Dict[str, str]]) -> Dict[str, str]:
    filters = {k: v for k, v in (filters or {}).items() if v is not None}
    unknown = set(filters) - set(REPRESENTATIVE_FILTERS)
    if unknown:
        raise ValueError(f"Unsupported representative filters: {sorted(unknown)}")
    return filters


class VectorStore(ABC):
    """Persistent collection of embedding records per entity type."""

    dimension: int

    # Documents

    @abstractmethod
    def find_document_id(self, original_file_name: str) -> Optional[str]:
        """Return the id of a document ingested from this filename, if any."""

    def document_exists(self, original_file_name: str) -> bool:
        return self.find_document_id(original_file_name) is not None

    @abstractmethod
    def add_document(self, document: DocumentRecord, chunks: Sequence[ChunkEmbedding]) -> str:
        """Write a document and all of its chunk embeddings in one unit."""

    @abstractmethod
    def delete_document(self, document_id: str) -> int:
        """Delete a document; cascades to its embeddings and derived records.

        Returns:
            Number of chunk embeddings removed
        """

    @abstractmethod
    def add_bill(self, bill: BillRecord) -> str:
        """Persist a bill record."""

    @abstractmethod
    def add_proceeding(self, proceeding: ProceedingRecord) -> str:
        """Persist a proceeding record."""

    # Representatives

    @abstractmethod
    def add_representative(self, rep: Representative) -> str:
        """Insert or replace a representative."""

    @abstractmethod
    def list_representatives(self) -> List[Representative]:
        """All representatives, in insertion order."""

    @abstractmethod
    def add_representative_embeddings(
        self,
        records: Sequence[RepresentativeEmbeddingRecord]
    ) -> int:
        """Write representative embeddings; returns the number written."""

    @abstractmethod
    def replace_representative_embeddings(
        self,
        representative_id: str,
        records: Sequence[RepresentativeEmbeddingRecord]
    ) -> int:
        """
        Swap one representative's embeddings for ``records`` in a single unit.

        If the write fails the previous embeddings are kept.

        Returns:
            Number of embeddings written
        """

    @abstractmethod
    def representative_ids_with_embeddings(self) -> Set[str]:
        """Ids of representatives that already have at least one embedding."""

    # Retrieval

    @abstractmethod
    def search(
        self,
        query_embedding: List[float],
        entity_type: EntityType,
        top_k: int,
        min_similarity: float,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        """
        Find the records most similar to a query vector.

        Args:
            query_embedding: Query vector
            entity_type: DOCUMENT or REPRESENTATIVE
            top_k: Maximum number of results
            min_similarity: Records strictly below this are excluded
            filters: Representative metadata filters (province, party, ...)

        Returns:
            Results ordered by descending similarity
        """

    @abstractmethod
    def count_embeddings(self, entity_type: EntityType) -> int:
        """Number of embedding records for an entity type."""

    def _check_dimension(self, vector: Sequence[float]) -> None:
        if len(vector) != self.dimension:
            raise ValueError(
                f"Vector has {len(vector)} dimensions, store expects {self.dimension}"
            )

    def _check_search_args(self, query_embedding, top_k: int) -> None:
        self._check_dimension(query_embedding)
        if top_k < 1:
            raise ValueError("top_k must be at least 1")


@dataclass
class _Row:
    id: int
    parent_id: str
    content: str
    vector: np.ndarray
    metadata: Dict[str, Any]
    content_type: Optional[str] = None


class InMemoryVectorStore(VectorStore):
    """Exact cosine scan over records held in process memory."""

    def __init__(self, dimension: int, brute_force_ceiling: int = 10_000):
        """
        Initialize in-memory store.

        Args:
            dimension: Embedding dimension every record must have
            brute_force_ceiling: Records per entity type above which a warning is logged
        """
        self.dimension = dimension
        self.brute_force_ceiling = brute_force_ceiling

        self.documents: Dict[str, DocumentRecord] = {}
        self.bills: Dict[str, BillRecord] = {}
        self.proceedings: Dict[str, ProceedingRecord] = {}
        self.representatives: Dict[str, Representative] = {}
        self._rows: Dict[EntityType, List[_Row]] = {
            EntityType.DOCUMENT: [],
            EntityType.REPRESENTATIVE: [],
        }
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_document_id(self, original_file_name: str) -> Optional[str]:
        for document in self.documents.values():
            if document.original_file_name == original_file_name:
                return document.id
        return None

    def add_document(self, document: DocumentRecord, chunks: Sequence[ChunkEmbedding]) -> str:
        for chunk in chunks:
            self._check_dimension(chunk.embedding)

        with self._lock:
            if document.id in self.documents:
                raise ValueError(f"Document already exists: {document.id}")
            self.documents[document.id] = document
            self._rows[EntityType.DOCUMENT].extend(
                _Row(
                    id=next(self._ids),
                    parent_id=document.id,
                    content=chunk.content,
                    vector=np.asarray(chunk.embedding, dtype=float),
                    metadata=dict(chunk.metadata),
                )
                for chunk in chunks
            )
            self._warn_if_large(EntityType.DOCUMENT)

        logger.info(f"Stored document {document.id} with {len(chunks)} embeddings")
        return document.id

    def delete_document(self, document_id: str) -> int:
        with self._lock:
            if self.documents.pop(document_id, None) is None:
                return 0
            rows = self._rows[EntityType.DOCUMENT]
            kept = [row for row in rows if row.parent_id != document_id]
            removed = len(rows) - len(kept)
            self._rows[EntityType.DOCUMENT] = kept
            self.bills = {k: v for k, v in self.bills.items() if v.document_id != document_id}
            self.proceedings = {
                k: v for k, v in self.proceedings.items() if v.document_id != document_id
            }

        logger.info(f"Deleted document {document_id} ({removed} embeddings)")
        return removed

    def add_bill(self, bill: BillRecord) -> str:
        self.bills[bill.id] = bill
        return bill.id

    def add_proceeding(self, proceeding: ProceedingRecord) -> str:
        self.proceedings[proceeding.id] = proceeding
        return proceeding.id

    def add_representative(self, rep: Representative) -> str:
        self.representatives[rep.id] = rep
        return rep.id

    def list_representatives(self) -> List[Representative]:
        return list(self.representatives.values())

    def add_representative_embeddings(
        self,
        records: Sequence[RepresentativeEmbeddingRecord]
    ) -> int:
        for record in records:
            self._check_dimension(record.embedding)
            if record.representative_id not in self.representatives:
                raise ValueError(f"Unknown representative: {record.representative_id}")

        with self._lock:
            self._rows[EntityType.REPRESENTATIVE].extend(
                _Row(
                    id=next(self._ids),
                    parent_id=record.representative_id,
                    content=record.content,
                    vector=np.asarray(record.embedding, dtype=float),
                    metadata=dict(record.metadata),
                    content_type=record.content_type.value,
                )
                for record in records
            )
            self._warn_if_large(EntityType.REPRESENTATIVE)
        return len(records)

    def replace_representative_embeddings(
        self,
        representative_id: str,
        records: Sequence[RepresentativeEmbeddingRecord]
    ) -> int:
        if representative_id not in self.representatives:
            raise ValueError(f"Unknown representative: {representative_id}")
        for record in records:
            self._check_dimension(record.embedding)
            if record.representative_id != representative_id:
                raise ValueError(
                    f"Embedding for {record.representative_id} cannot replace {representative_id}"
                )

        with self._lock:
            kept = [
                row for row in self._rows[EntityType.REPRESENTATIVE]
                if row.parent_id != representative_id
            ]
            kept.extend(
                _Row(
                    id=next(self._ids),
                    parent_id=record.representative_id,
                    content=record.content,
                    vector=np.asarray(record.embedding, dtype=float),
                    metadata=dict(record.metadata),
                    content_type=record.content_type.value,
                )
                for record in records
            )
            self._rows[EntityType.REPRESENTATIVE] = kept
        return len(records)

    def representative_ids_with_embeddings(self) -> Set[str]:
        return {row.parent_id for row in self._rows[EntityType.REPRESENTATIVE]}

    def search(
        self,
        query_embedding: List[float],
        entity_type: EntityType,
        top_k: int,
        min_similarity: float,
        filters: Optional[Dict[str, str]] = None
    ) -> List[SearchResult]:
        self._check_search_args(query_embedding, top_k)
        entity_type = EntityType(entity_type)
        filters = validate_filters(filters) if entity_type == EntityType.REPRESENTATIVE else {}

        with self._lock:
            rows = list(self._rows[entity_type])

        scored = []
        for row in rows:
            if any(row.metadata.get(key) != value for key, value in filters.items()):
                continue
            similarity = cosine_similarity(query_embedding, row.vector)
            if similarity >= min_similarity:
                scored.append((similarity, row))

        # sort() is stable, so equal similarities keep insertion order
        scored.sort(key=lambda item: -item[0])

        return [self._to_result(entity_type, row, similarity) for similarity, row in scored[:top_k]]

    def count_embeddings(self, entity_type: EntityType) -> int:
        return len(self._rows[EntityType(entity_type)])

    def _to_result(self, entity_type: EntityType, row: _Row, similarity: float) -> SearchResult:
        if entity_type == EntityType.REPRESENTATIVE:
            parent = representative_parent(self.representatives.get(row.parent_id))
            metadata = dict(row.metadata, contentType=row.content_type)
        else:
            parent = document_parent(self.documents.get(row.parent_id))
            metadata = dict(row.metadata)

        return SearchResult(
            record_id=row.id,
            entity_type=entity_type,
            parent_id=row.parent_id,
            content=row.content,
            similarity=similarity,
            metadata=metadata,
            parent=parent,
        )

    def _warn_if_large(self, entity_type: EntityType) -> None:
        count = len(self._rows[entity_type])
        if count > self.brute_force_ceiling:
            logger.warning(
                f"In-memory store holds {count} {entity_type.value} embeddings "
                f"(ceiling {self.brute_force_ceiling}); use PgVectorStore for an ANN index"
            )
