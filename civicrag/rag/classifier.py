"""
Query Intent Classification

Decides which entity types a user query needs searched. Every classifier
returns a non-empty set of tags; any failure degrades to the default
document search instead of failing the request.

Variants:
- LLMQueryClassifier: one temperature-0 model call that must answer with a
  JSON array of tags
- KeywordQueryClassifier: deterministic keyword rules, no model call
- FallbackQueryClassifier: tries a primary classifier, asks a secondary
  one if the primary raises
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable, List, Optional, Pattern, Tuple

from .config import RAGConfig
from .exceptions import ClassificationError
from .types import DEFAULT_TAGS, EntityType
from ..agent.llm_config import LLMClient, response_text
from ..agent.prompts import CLASSIFIER_SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_entity_tags(raw: str) -> FrozenSet[EntityType]:
    """
    Strictly parse a classifier response into entity tags.

    Accepts a JSON array of tag strings, optionally wrapped in a code fence.
    Unknown tags are dropped.

    Raises:
        ClassificationError: If the output is not a JSON array or has no valid tags
    """
    text = _CODE_FENCE.sub("", (raw or "").strip())
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ClassificationError(f"Classifier output is not JSON: {raw!r}") from e

    if not isinstance(parsed, list):
        raise ClassificationError(f"Classifier output is not an array: {raw!r}")

    valid = {tag.value for tag in EntityType}
    tags = frozenset(
        EntityType(item.strip().lower())
        for item in parsed
        if isinstance(item, str) and item.strip().lower() in valid
    )
    if not tags:
        raise ClassificationError(f"Classifier output has no valid tags: {raw!r}")
    return tags


class QueryClassifier(ABC):
    """Maps query text to the entity types that should be searched."""

    fallback: FrozenSet[EntityType] = DEFAULT_TAGS

    @abstractmethod
    async def classify(self, query: str) -> FrozenSet[EntityType]:
        """Return a non-empty set of entity tags for the query."""


class LLMQueryClassifier(QueryClassifier):
    """
    Generative classifier (temperature 0, strict JSON output).

    With ``strict=True`` failures raise ClassificationError instead of
    returning the fallback, so a FallbackQueryClassifier can take over.
    """

    def __init__(self, llm_client: LLMClient, config: RAGConfig, strict: bool = False):
        self.llm_client = llm_client
        self.config = config
        self.strict = strict

    async def classify(self, query: str) -> FrozenSet[EntityType]:
        try:
            response = await self.llm_client.acomplete(
                messages=[
                    {"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT},
                    {"role": "user", "content": query},
                ],
                model=self.config.classifier_model,
                temperature=0,
                max_tokens=self.config.classifier_max_tokens,
            )
            raw = response_text(response)
            tags = parse_entity_tags(raw)
        except ClassificationError as e:
            logger.warning(f"Failed to parse query analysis: {e}")
            if self.strict:
                raise
            return self.fallback
        except Exception as e:
            logger.warning(f"Query classification call failed: {e}")
            if self.strict:
                raise ClassificationError(f"Query classification call failed: {e}") from e
            return self.fallback

        logger.info(f"Detected query types {sorted(t.value for t in tags)} for query: {query[:100]}")
        return tags


DEFAULT_KEYWORD_RULES: List[Tuple[EntityType, Pattern]] = [
    (
        EntityType.REPRESENTATIVE,
        re.compile(
            r"\b(mna|mnas|representative|representatives|member of (the )?national assembly|"
            r"constituency|constituencies|na-\s?\d+|party|parties|contact|phone|address)\b",
            re.IGNORECASE,
        ),
    ),
    (
        EntityType.BILL,
        re.compile(r"\b(bill|bills|act|acts|legislation|law passed|ordinance)\b", re.IGNORECASE),
    ),
    (
        EntityType.DOCUMENT,
        re.compile(
            r"\b(constitution|constitutional|article|articles|amendment|amendments|clause|"
            r"election|elections|proceeding|proceedings|bulletin|session|assembly)\b",
            re.IGNORECASE,
        ),
    ),
]


class KeywordQueryClassifier(QueryClassifier):
    """Rule-based classifier; deterministic and free."""

    def __init__(self, rules: Optional[Iterable[Tuple[EntityType, Pattern]]] = None):
        self.rules = list(rules) if rules is not None else DEFAULT_KEYWORD_RULES

    def match(self, query: str) -> FrozenSet[EntityType]:
        """Synchronous rule evaluation."""
        tags = frozenset(tag for tag, pattern in self.rules if pattern.search(query or ""))
        return tags or self.fallback

    async def classify(self, query: str) -> FrozenSet[EntityType]:
        return self.match(query)


class FallbackQueryClassifier(QueryClassifier):
    """Use ``primary``; if it raises, let ``secondary`` decide."""

    def __init__(self, primary: QueryClassifier, secondary: QueryClassifier):
        self.primary = primary
        self.secondary = secondary

    async def classify(self, query: str) -> FrozenSet[EntityType]:
        try:
            tags = await self.primary.classify(query)
        except Exception as e:
            logger.warning(f"Primary classifier failed ({e}); using {type(self.secondary).__name__}")
            return await self.secondary.classify(query)
        return tags or self.fallback


def build_classifier(config: RAGConfig, llm_client: Optional[LLMClient] = None) -> QueryClassifier:
    """
    Classifier selected by ``config.query_classifier``.

    The model-based variant answers ``{document}`` when its call fails or its
    output does not parse. Keyword rules run only when selected explicitly
    or when no model client is configured.
    """
    if config.query_classifier == "keyword" or llm_client is None:
        return KeywordQueryClassifier()
    return LLMQueryClassifier(llm_client, config)
