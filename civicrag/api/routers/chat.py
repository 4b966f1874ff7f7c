"""
Chat Router

Streaming question answering over representatives and legislative documents.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from ..dependencies import get_assistant
from ..schemas import ChatRequest
from ...agent.assistant import CivicAssistant, validate_messages

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat")
async def chat(
    request: ChatRequest,
    assistant: CivicAssistant = Depends(get_assistant)
):
    """
    Ask a question about National Assembly members, the Constitution,
    election law, bills or parliamentary proceedings.

    The answer is streamed as plain text. It is grounded in retrieved
    records only; when nothing relevant is found the assistant says so.

    **Example:**
    ```json
    {"messages": [{"role": "user", "content": "Who is the MNA for NA-1?"}]}
    ```
    """
    messages = [{"role": m.role, "content": m.content} for m in request.messages]

    try:
        query = validate_messages(messages)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(f"Chat query received: {query[:100]}")
    return StreamingResponse(
        assistant.stream_answer(messages),
        media_type="text/plain; charset=utf-8"
    )
