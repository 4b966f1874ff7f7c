"""
Context Assembly

Runs one retrieval task per entity type concurrently, waits for all of them
(each with its own timeout), and renders the results as labeled blocks
joined by an explicit source separator.

The query embedding shares the same budget. A retriever that times out or
fails contributes no results; the others are unaffected.

Retrieval and embedding calls run in worker threads. A timeout or a
cancelled ``assemble()`` stops waiting for them and discards their results,
but a thread already inside a database or embedding call runs until that
call returns.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from .config import RAGConfig
from .exceptions import RetrievalTimeout
from .retriever import SimilarityRetriever
from .types import EntityType, retrieval_domains
from .vector_store import SearchResult

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = "\n\n=== DIFFERENT SOURCE TYPE ===\n\n"
RECORD_SEPARATOR = "\n\n"


def format_representative(result: SearchResult) -> str:
    rep = result.parent
    constituency = rep.get("constituency_name") or rep.get("constituency")
    return (
        f"Representative: {rep.get('name')}\n"
        f"Constituency: {rep.get('constituency_code')} - {constituency}\n"
        f"District: {rep.get('district') or 'N/A'}\n"
        f"Province: {rep.get('province') or 'N/A'}\n"
        f"Party: {rep.get('party')}\n"
        f"Phone: {rep.get('phone') or 'Not available'}\n"
        f"Permanent Address: {rep.get('permanent_address') or 'Not available'}\n"
        f"Islamabad Address: {rep.get('islamabad_address') or 'Not available'}\n"
        "---"
    )


def format_document(result: SearchResult) -> str:
    return (
        f"Document: {result.parent.get('title')}\n"
        f"Type: {result.parent.get('type')}\n"
        f"Content: {result.content}\n"
        "---"
    )


DEFAULT_FORMATTERS: Dict[EntityType, Callable[[SearchResult], str]] = {
    EntityType.REPRESENTATIVE: format_representative,
    EntityType.DOCUMENT: format_document,
}


@dataclass
class AssembledContext:
    """Grounding context plus the raw results it was built from."""
    text: str
    results: Dict[EntityType, List[SearchResult]] = field(default_factory=dict)
    tags: FrozenSet[EntityType] = frozenset()
    timed_out: List[EntityType] = field(default_factory=list)
    failed: List[EntityType] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text


class ContextAssembler:
    """Fan-out retrieval over entity types and fan-in formatting."""

    def __init__(
        self,
        retriever: SimilarityRetriever,
        config: RAGConfig,
        formatters: Optional[Dict[EntityType, Callable[[SearchResult], str]]] = None
    ):
        self.retriever = retriever
        self.config = config
        self.formatters = dict(DEFAULT_FORMATTERS)
        if formatters:
            self.formatters.update(formatters)

    async def assemble(
        self,
        query: str,
        tags: Iterable[EntityType],
        timeout: Optional[float] = None
    ) -> AssembledContext:
        """
        Retrieve for every domain the tags select and build the context.

        Args:
            query: User query text
            tags: Classifier output
            timeout: Per-retriever budget in seconds (defaults to config)

        Returns:
            AssembledContext (text is '' when nothing relevant was found)
        """
        tags = frozenset(EntityType(tag) for tag in tags)
        context = AssembledContext(text="", tags=tags)
        domains = retrieval_domains(tags)
        if not domains:
            return context

        budget = timeout if timeout is not None else self.config.retriever_timeout_seconds
        try:
            query_vector = await asyncio.wait_for(
                self.retriever.embedding_service.aget_query_embedding(query), budget
            )
        except asyncio.TimeoutError:
            logger.warning(str(RetrievalTimeout("query embedding", budget)))
            context.timed_out = list(domains)
            return context
        except Exception as e:
            logger.error(f"Could not embed query, no context assembled: {e}")
            context.failed = list(domains)
            return context

        tasks = {
            domain: asyncio.create_task(
                asyncio.wait_for(self.retriever.aretrieve(query_vector, domain), budget),
                name=f"retrieve-{domain.value}",
            )
            for domain in domains
        }

        try:
            await asyncio.gather(*tasks.values(), return_exceptions=True)
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()

        for domain, task in tasks.items():
            error = task.exception()
            if isinstance(error, asyncio.TimeoutError):
                logger.warning(str(RetrievalTimeout(domain.value, budget)))
                context.timed_out.append(domain)
                context.results[domain] = []
            elif error is not None:
                logger.warning(f"Retrieval for '{domain.value}' failed: {error}")
                context.failed.append(domain)
                context.results[domain] = []
            else:
                context.results[domain] = task.result()

        context.text = self.format(context.results)
        return context

    def format(self, results: Dict[EntityType, List[SearchResult]]) -> str:
        """
        Render result sets as labeled blocks.

        Empty result sets contribute no block.
        """
        blocks = []
        for domain in retrieval_domains(results.keys()):
            records = results.get(domain) or []
            if not records:
                continue
            formatter = self.formatters[domain]
            blocks.append(RECORD_SEPARATOR.join(formatter(record) for record in records))

        return SOURCE_SEPARATOR.join(blocks)
