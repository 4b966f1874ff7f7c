"""
Civic Assistant

Answers questions about representatives and legislative documents.

Flow:
1. The last user message is classified into entity types
2. Retrievers for those types run concurrently and build the context
3. The model streams an answer grounded in that context

When no relevant context is found the assistant says so instead of asking
the model, so it never answers from ungrounded knowledge.
"""

import logging
from typing import AsyncIterator, Dict, List, Optional

from .llm_config import LLMClient, get_llm_client
from .prompts import NO_INFORMATION_ANSWER, get_system_prompt
from ..rag.classifier import QueryClassifier
from ..rag.context import ContextAssembler

logger = logging.getLogger(__name__)

LIMIT_EXCEEDED_ANSWER = (
    "This question needs more resources than are currently available. "
    "Please rephrase it or ask something more specific."
)
GENERIC_ERROR_ANSWER = (
    "I encountered an error while preparing an answer. Please try again in a moment."
)

RATE_LIMIT_PHRASES = [
    "rate_limit_error",
    "rate limit",
    "too many requests",
    "quota exceeded",
]
TOKEN_LIMIT_PHRASES = [
    "maximum context length",
    "token limit",
    "context_length_exceeded",
    "too many tokens",
]


def validate_messages(messages: List[Dict[str, str]]) -> str:
    """
    Check a conversation and return the active query.

    Raises:
        ValueError: If there are no messages, the last one is not from the
            user, or it is blank
    """
    if not messages:
        raise ValueError("messages cannot be empty")

    last = messages[-1]
    if last.get("role") != "user":
        raise ValueError("the last message must come from the user")

    query = (last.get("content") or "").strip()
    if not query:
        raise ValueError("the last message cannot be blank")
    return query


def error_answer(error: Exception) -> str:
    """User-facing message for a generation failure."""
    error_str = str(error).lower()
    is_rate_limit = any(phrase in error_str for phrase in RATE_LIMIT_PHRASES)
    is_token_limit = any(phrase in error_str for phrase in TOKEN_LIMIT_PHRASES)

    if is_rate_limit or is_token_limit:
        return LIMIT_EXCEEDED_ANSWER
    return GENERIC_ERROR_ANSWER


class CivicAssistant:
    """Classify, retrieve, and stream a grounded answer."""

    def __init__(
        self,
        classifier: QueryClassifier,
        assembler: ContextAssembler,
        llm_client: Optional[LLMClient] = None
    ):
        """
        Initialize assistant.

        Args:
            classifier: Query intent classifier
            assembler: Context assembler (owns the retrievers)
            llm_client: LLM client (defaults to get_llm_client())
        """
        self.classifier = classifier
        self.assembler = assembler
        self.llm_client = llm_client or get_llm_client()

    async def stream_answer(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """
        Stream an answer to the last user message.

        Args:
            messages: Conversation history as {'role', 'content'} dicts

        Yields:
            Text deltas of the answer

        Raises:
            ValueError: If the conversation is not answerable (see validate_messages)
        """
        query = validate_messages(messages)

        tags = await self.classifier.classify(query)
        context = await self.assembler.assemble(query, tags)

        if context.is_empty:
            logger.info("No relevant context found; answering without the model")
            yield NO_INFORMATION_ANSWER
            return

        conversation = [{"role": "system", "content": get_system_prompt(context.text)}]
        conversation.extend(
            {"role": m["role"], "content": m["content"]}
            for m in messages
            if m.get("role") in ("user", "assistant")
        )

        try:
            stream = await self.llm_client.acomplete(messages=conversation, stream=True)
            async for chunk in stream:
                delta = chunk.choices[0].delta.content if chunk.choices else None
                if delta:
                    yield delta
        except Exception as e:
            logger.error(f"Answer generation failed: {e}")
            yield error_answer(e)

    async def answer(self, messages: List[Dict[str, str]]) -> str:
        """Collect the streamed answer into one string."""
        parts = []
        async for delta in self.stream_answer(messages):
            parts.append(delta)
        return "".join(parts)
