"""Database module: SQLAlchemy models, database handle and pgvector store."""

from .base import Base
from .session import Database, get_database_url
from .models import (
    EMBEDDING_DIMENSION,
    Document,
    Embedding,
    Bill,
    Proceeding,
    Representative,
    RepresentativeEmbedding,
)
from .pg_store import PgVectorStore

__all__ = [
    "Base",
    "Database",
    "get_database_url",
    "EMBEDDING_DIMENSION",
    "Document",
    "Embedding",
    "Bill",
    "Proceeding",
    "Representative",
    "RepresentativeEmbedding",
    "PgVectorStore",
]
