"""Pydantic models for legislative documents and their derived records."""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentType(str, Enum):
    """Closed set of document types."""

    CONSTITUTION = "constitution"
    ELECTION_LAW = "election_law"
    BILL = "bill"
    PARLIAMENTARY_BULLETIN = "parliamentary_bulletin"

    @property
    def requires_summary(self) -> bool:
        """Bills and bulletins get a generated summary record."""
        return self in (DocumentType.BILL, DocumentType.PARLIAMENTARY_BULLETIN)


class BillStatus(str, Enum):
    PENDING = "pending"
    PASSED = "passed"
    REJECTED = "rejected"


class IngestRequest(BaseModel):
    """
    Everything the ingestion pipeline needs besides the file bytes.

    Bill and bulletin fields are ignored for other document types.
    """

    title: str = Field(..., min_length=1, max_length=500)
    document_type: DocumentType
    original_file_name: str = Field(..., min_length=1)

    # Bills
    bill_number: Optional[str] = None
    session_number: Optional[str] = None
    status: BillStatus = BillStatus.PASSED
    passage_date: Optional[date] = None

    # Parliamentary bulletins
    bulletin_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be blank")
        return v


class DocumentRecord(BaseModel):
    """A full legal or parliamentary text unit."""

    id: str = Field(default_factory=new_id)
    title: str
    type: DocumentType
    content: str
    original_file_name: str
    created_at: datetime = Field(default_factory=utcnow)


class ChunkEmbedding(BaseModel):
    """A retrievable chunk of a document with its vector."""

    content: str
    embedding: List[float]
    metadata: Dict[str, Any] = Field(default_factory=dict)


class BillRecord(BaseModel):
    """Bill summary derived from an ingested document."""

    id: str = Field(default_factory=new_id)
    document_id: Optional[str] = None
    title: str
    status: BillStatus = BillStatus.PASSED
    summary: str
    original_text: str
    bill_number: Optional[str] = None
    session_number: Optional[str] = None
    passage_date: Optional[date] = None


class ProceedingRecord(BaseModel):
    """Parliamentary proceeding summary derived from an ingested bulletin."""

    id: str = Field(default_factory=new_id)
    document_id: Optional[str] = None
    title: str
    proceeding_date: date
    summary: str
    original_text: str
