"""
Documents Router

Upload endpoint for legislative documents (PDF, HTML, text).
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..dependencies import get_pipeline
from ..schemas import DocumentIngestResponse, ErrorResponse
from ...ingestion.pipeline import IngestionPipeline
from ...models.document import BillStatus, DocumentType, IngestRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/documents",
    response_model=DocumentIngestResponse,
    responses={422: {"model": ErrorResponse}}
)
async def upload_document(
    file: UploadFile = File(..., description="PDF, HTML, TXT or MD file"),
    title: str = Form(..., description="Document title"),
    document_type: DocumentType = Form(..., description="Document type"),
    bill_number: Optional[str] = Form(None),
    session_number: Optional[str] = Form(None),
    status: BillStatus = Form(BillStatus.PASSED),
    passage_date: Optional[date] = Form(None),
    bulletin_date: Optional[date] = Form(None),
    force: bool = Form(False, description="Replace a document with the same filename"),
    pipeline: IngestionPipeline = Depends(get_pipeline)
):
    """
    Ingest a document: extract, chunk, embed and store it.

    Bills and parliamentary bulletins also get a generated summary record.
    If the summary fails the document is still stored and `degraded` is true.

    **Errors:**
    - 409: a document with this filename exists and `force` is false
    - 422: invalid input, or ingestion failed (ErrorResponse with the failing `stage`)

    With `force` the existing document is deleted only after the new upload
    has been stored, so a failed replacement keeps the old version.
    """
    file_name = file.filename or ""
    try:
        request = IngestRequest(
            title=title,
            document_type=document_type,
            original_file_name=file_name,
            bill_number=bill_number,
            session_number=session_number,
            status=status,
            passage_date=passage_date,
            bulletin_date=bulletin_date,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors()[0]["msg"])

    existing_id = await run_in_threadpool(pipeline.find_document_id, file_name)
    if existing_id is not None:
        if not force:
            raise HTTPException(
                status_code=409,
                detail=f"Document '{file_name}' already exists (id {existing_id})"
            )
        logger.info(f"Replacing existing document {existing_id} ({file_name})")

    data = await file.read()
    result = await run_in_threadpool(pipeline.ingest, data, request, replaces=existing_id)

    if not result.success:
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                detail=f"Ingestion failed: {result.error}",
                error_code="INGESTION_FAILED",
                stage=result.failed_stage.value if result.failed_stage else None,
            ).model_dump(mode='json')
        )

    return DocumentIngestResponse(
        document_id=result.document_id,
        embedding_count=result.embedding_count,
        degraded=result.degraded,
        derived_record_id=result.derived_record_id,
    )
