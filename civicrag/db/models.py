"""SQLAlchemy database models for documents, representatives and their embeddings."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    String,
    Text,
    Integer,
    Date,
    DateTime,
    Index,
    ForeignKey,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

# Must match RAGConfig.embedding_dimension (text-embedding-ada-002)
EMBEDDING_DIMENSION = 1536


class Document(Base):
    """
    Full text of an ingested constitution, law, bill or bulletin.

    Immutable after ingestion.
    """
    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(191), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    original_file_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # Relationships
    embeddings: Mapped[List["Embedding"]] = relationship(
        "Embedding",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id}, type={self.type}, title={self.title[:40]})>"


class Embedding(Base):
    """
    A document chunk and its vector.

    The autoincrement id doubles as insertion order for tie-breaking.
    """
    __tablename__ = "embeddings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    document_id: Mapped[str] = mapped_column(
        String(191),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[List[float]] = mapped_column(Vector(EMBEDDING_DIMENSION), nullable=False)
    # "metadata" is reserved on declarative classes
    chunk_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSONB)

    document: Mapped["Document"] = relationship("Document", back_populates="embeddings")

    __table_args__ = (
        Index(
            "embedding_index",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )


class Bill(Base):
    """Bill details and generated summary."""
    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(String(191), primary_key=True)
    document_id: Mapped[Optional[str]] = mapped_column(
        String(191),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    bill_number: Mapped[Optional[str]] = mapped_column(String(100))
    session_number: Mapped[Optional[str]] = mapped_column(String(100))
    passage_date: Mapped[Optional[date]] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Proceeding(Base):
    """Parliamentary proceeding (bulletin) summary."""
    __tablename__ = "proceedings"

    id: Mapped[str] = mapped_column(String(191), primary_key=True)
    document_id: Mapped[Optional[str]] = mapped_column(
        String(191),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    proceeding_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Representative(Base):
    """Member of the National Assembly."""
    __tablename__ = "representatives"

    id: Mapped[str] = mapped_column(String(191), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    name_clean: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    father_name: Mapped[Optional[str]] = mapped_column(Text)
    constituency: Mapped[str] = mapped_column(Text, nullable=False)
    constituency_code: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    constituency_name: Mapped[Optional[str]] = mapped_column(Text)
    district: Mapped[Optional[str]] = mapped_column(Text, index=True)
    province: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    party: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    oath_taking_date: Mapped[Optional[date]] = mapped_column(Date)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    permanent_address: Mapped[Optional[str]] = mapped_column(Text)
    islamabad_address: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    embeddings: Mapped[List["RepresentativeEmbedding"]] = relationship(
        "RepresentativeEmbedding",
        back_populates="representative",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Representative(id={self.id}, name={self.name_clean}, code={self.constituency_code})>"


class RepresentativeEmbedding(Base):
    """Embedded profile/bio/contact text of a representative."""
    __tablename__ = "representative_embeddings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    representative_id: Mapped[str] = mapped_column(
        String(191),
        ForeignKey("representatives.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[List[float]] = mapped_column(Vector(EMBEDDING_DIMENSION), nullable=False)
    content_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    rep_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column("metadata", JSONB)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    representative: Mapped["Representative"] = relationship(
        "Representative",
        back_populates="embeddings",
    )

    __table_args__ = (
        Index(
            "representative_embedding_index",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )
