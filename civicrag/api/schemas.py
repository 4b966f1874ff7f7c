"""
Pydantic Schemas for API Request/Response Validation
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """Single message in a conversation"""

    role: Literal["user", "assistant", "system"] = Field(..., description="Message role")
    content: str = Field(..., description="Message content")


class ChatRequest(BaseModel):
    """Request body for the chat endpoint"""

    messages: List[ChatMessage] = Field(
        ...,
        min_length=1,
        description="Conversation history; the last message is the active question"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "messages": [
                    {"role": "user", "content": "Who is the MNA for NA-1?"}
                ]
            }
        }


class DocumentIngestResponse(BaseModel):
    """Result of a successful document upload"""

    document_id: str = Field(..., description="Id of the stored document")
    embedding_count: int = Field(..., description="Number of chunk embeddings stored")
    degraded: bool = Field(
        False,
        description="True when the document is searchable but its summary could not be generated"
    )
    derived_record_id: Optional[str] = Field(None, description="Bill or proceeding record id")


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(..., description="Service status", examples=["healthy"])
    database: str = Field(..., description="Database connection status", examples=["connected"])
    version: str = Field(..., description="API version", examples=["0.1.0"])
    timestamp: datetime = Field(default_factory=_now, description="Current server time")


class ErrorResponse(BaseModel):
    """Error response"""

    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code for client handling")
    stage: Optional[str] = Field(None, description="Ingestion stage that failed")
    timestamp: datetime = Field(default_factory=_now)
