"""
PostgreSQL + pgvector implementation of the vector store.

Each embedding table carries an HNSW index (vector_cosine_ops), so the
ORDER BY cosine distance ... LIMIT queries below stay sub-linear as the
corpus grows. Parent metadata is fetched with a join in the same query.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from sqlalchemy import delete, func, select

from .models import (
    EMBEDDING_DIMENSION,
    Bill,
    Document,
    Embedding,
    Proceeding,
    Representative,
    RepresentativeEmbedding,
)
from .session import Database
from ..models import document as doc_models
from ..models import representative as rep_models
from ..rag.types import EntityType
from ..rag.vector_store import SearchResult, VectorStore, validate_filters

logger = logging.getLogger(__name__)


class PgVectorStore(VectorStore):
    """Vector store backed by PostgreSQL tables with pgvector columns."""

    def __init__(self, database: Database, dimension: int = EMBEDDING_DIMENSION):
        """
        Args:
            database: Open database handle
            dimension: Configured embedding dimension; must match the schema
        """
        if dimension != EMBEDDING_DIMENSION:
            raise ValueError(
                f"Embedding dimension {dimension} does not match the vector "
                f"columns ({EMBEDDING_DIMENSION})"
            )
        self.database = database
        self.dimension = dimension

    # Documents

    def find_document_id(self, original_file_name: str) -> Optional[str]:
        with self.database.session() as db:
            return db.execute(
                select(Document.id)
                .where(Document.original_file_name == original_file_name)
                .limit(1)
            ).scalar_one_or_none()

    def add_document(
        self,
        document: doc_models.DocumentRecord,
        chunks: Sequence[doc_models.ChunkEmbedding]
    ) -> str:
        for chunk in chunks:
            self._check_dimension(chunk.embedding)

        with self.database.session() as db:
            db.add(Document(
                id=document.id,
                title=document.title,
                type=document.type.value,
                content=document.content,
                original_file_name=document.original_file_name,
                created_at=document.created_at,
            ))
            db.flush()
            db.add_all([
                Embedding(
                    document_id=document.id,
                    content=chunk.content,
                    embedding=chunk.embedding,
                    chunk_metadata=chunk.metadata,
                )
                for chunk in chunks
            ])

        logger.info(f"Stored document {document.id} with {len(chunks)} embeddings")
        return document.id

    def delete_document(self, document_id: str) -> int:
        with self.database.session() as db:
            removed = db.execute(
                select(func.count(Embedding.id)).where(Embedding.document_id == document_id)
            ).scalar_one()
            result = db.execute(delete(Document).where(Document.id == document_id))
            if result.rowcount == 0:
                return 0

        logger.info(f"Deleted document {document_id} ({removed} embeddings)")
        return removed

    def add_bill(self, bill: doc_models.BillRecord) -> str:
        with self.database.session() as db:
            db.add(Bill(
                id=bill.id,
                document_id=bill.document_id,
                title=bill.title,
                status=bill.status.value,
                summary=bill.summary,
                original_text=bill.original_text,
                bill_number=bill.bill_number,
                session_number=bill.session_number,
                passage_date=bill.passage_date,
            ))
        return bill.id

    def add_proceeding(self, proceeding: doc_models.ProceedingRecord) -> str:
        with self.database.session() as db:
            db.add(Proceeding(
                id=proceeding.id,
                document_id=proceeding.document_id,
                title=proceeding.title,
                proceeding_date=proceeding.proceeding_date,
                summary=proceeding.summary,
                original_text=proceeding.original_text,
            ))
        return proceeding.id

    # Representatives

    def add_representative(self, rep: rep_models.Representative) -> str:
        with self.database.session() as db:
            db.merge(Representative(**rep.model_dump()))
        return rep.id

    def list_representatives(self) -> List[rep_models.Representative]:
        with self.database.session() as db:
            rows = db.execute(
                select(Representative).order_by(Representative.created_at, Representative.id)
            ).scalars().all()
            return [
                rep_models.Representative(
                    id=row.id,
                    name=row.name,
                    name_clean=row.name_clean,
                    father_name=row.father_name,
                    constituency=row.constituency,
                    constituency_code=row.constituency_code,
                    constituency_name=row.constituency_name,
                    district=row.district,
                    province=row.province,
                    party=row.party,
                    oath_taking_date=row.oath_taking_date,
                    phone=row.phone,
                    permanent_address=row.permanent_address,
                    islamabad_address=row.islamabad_address,
                )
                for row in rows
            ]

    def add_representative_embeddings(
        self,
        records: Sequence[rep_models.RepresentativeEmbeddingRecord]
    ) -> int:
        for record in records:
            self._check_dimension(record.embedding)

        with self.database.session() as db:
            db.add_all([
                RepresentativeEmbedding(
                    representative_id=record.representative_id,
                    content=record.content,
                    embedding=record.embedding,
                    content_type=record.content_type.value,
                    rep_metadata=record.metadata,
                )
                for record in records
            ])
        return len(records)

    def replace_representative_embeddings(
        self,
        representative_id: str,
        records: Sequence[rep_models.RepresentativeEmbeddingRecord]
    ) -> int:
        for record in records:
            self._check_dimension(record.embedding)

        # Delete and insert share one transaction; a failed insert rolls back the delete
        with self.database.session() as db:
            db.execute(
                delete(RepresentativeEmbedding)
                .where(RepresentativeEmbedding.representative_id == representative_id)
            )
            db.add_all([
                RepresentativeEmbedding(
                    representative_id=representative_id,
                    content=record.content,
                    embedding=record.embedding,
                    content_type=record.content_type.value,
                    rep_metadata=record.metadata,
                )
                for record in records
            ])
        return len(records)

    def representative_ids_with_embeddings(self) -> Set[str]:
        with self.database.session() as db:
            return set(db.execute(
                select(RepresentativeEmbedding.representative_id).distinct()
            ).scalars())

    # Retrieval

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

        if entity_type == EntityType.REPRESENTATIVE:
            stmt = build_representative_query(
                query_embedding, top_k, min_similarity, validate_filters(filters)
            )
        else:
            stmt = build_document_query(query_embedding, top_k, min_similarity)

        with self.database.session() as db:
            rows = db.execute(stmt).all()

        if entity_type == EntityType.REPRESENTATIVE:
            results = [_representative_result(row) for row in rows]
        else:
            results = [_document_result(row) for row in rows]

        logger.info(
            f"Found {len(results)} {entity_type.value} matches"
            + (f" (top similarity {results[0].similarity:.3f})" if results else "")
        )
        return results

    def count_embeddings(self, entity_type: EntityType) -> int:
        model = (
            RepresentativeEmbedding
            if EntityType(entity_type) == EntityType.REPRESENTATIVE
            else Embedding
        )
        with self.database.session() as db:
            return db.execute(select(func.count(model.id))).scalar_one()


def build_document_query(query_embedding: List[float], top_k: int, min_similarity: float):
    """
    SELECT chunk + document title/type, ordered by cosine distance.

    Ties fall back to the autoincrement id, i.e. insertion order.
    """
    distance = Embedding.embedding.cosine_distance(query_embedding)
    similarity = (1 - distance).label("similarity")

    return (
        select(
            Embedding.id,
            Embedding.document_id,
            Embedding.content,
            Embedding.chunk_metadata,
            Document.title,
            Document.type,
            similarity,
        )
        .join(Document, Embedding.document_id == Document.id)
        .where(1 - distance >= min_similarity)
        .order_by(distance.asc(), Embedding.id.asc())
        .limit(top_k)
    )


def build_representative_query(
    query_embedding: List[float],
    top_k: int,
    min_similarity: float,
    filters: Dict[str, str]
):
    """SELECT representative embedding + representative fields, ordered by cosine distance."""
    distance = RepresentativeEmbedding.embedding.cosine_distance(query_embedding)
    similarity = (1 - distance).label("similarity")

    stmt = (
        select(
            RepresentativeEmbedding.id,
            RepresentativeEmbedding.representative_id,
            RepresentativeEmbedding.content,
            RepresentativeEmbedding.content_type,
            RepresentativeEmbedding.rep_metadata,
            Representative.name_clean,
            Representative.constituency,
            Representative.constituency_code,
            Representative.constituency_name,
            Representative.district,
            Representative.province,
            Representative.party,
            Representative.phone,
            Representative.permanent_address,
            Representative.islamabad_address,
            similarity,
        )
        .join(Representative, RepresentativeEmbedding.representative_id == Representative.id)
        .where(1 - distance >= min_similarity)
    )
    for key, value in filters.items():
        stmt = stmt.where(getattr(Representative, key) == value)

    return stmt.order_by(distance.asc(), RepresentativeEmbedding.id.asc()).limit(top_k)


def _document_result(row) -> SearchResult:
    return SearchResult(
        record_id=row.id,
        entity_type=EntityType.DOCUMENT,
        parent_id=row.document_id,
        content=row.content,
        similarity=float(row.similarity),
        metadata=dict(row.chunk_metadata or {}),
        parent={"title": row.title, "type": row.type},
    )


def _representative_result(row) -> SearchResult:
    metadata = dict(row.rep_metadata or {})
    metadata["contentType"] = row.content_type
    return SearchResult(
        record_id=row.id,
        entity_type=EntityType.REPRESENTATIVE,
        parent_id=row.representative_id,
        content=row.content,
        similarity=float(row.similarity),
        metadata=metadata,
        parent={
            "name": row.name_clean,
            "constituency": row.constituency,
            "constituency_code": row.constituency_code,
            "constituency_name": row.constituency_name,
            "district": row.district,
            "province": row.province,
            "party": row.party,
            "phone": row.phone,
            "permanent_address": row.permanent_address,
            "islamabad_address": row.islamabad_address,
        },
    )
