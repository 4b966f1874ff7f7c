"""Shared enumerations for retrieval routing."""

from enum import Enum
from typing import Dict, List


class EntityType(str, Enum):
    """Tags a query can be routed to."""

    REPRESENTATIVE = "representative"
    BILL = "bill"
    DOCUMENT = "document"


# Bills are stored as documents, so both tags search the document embeddings.
RETRIEVAL_DOMAIN: Dict[EntityType, EntityType] = {
    EntityType.REPRESENTATIVE: EntityType.REPRESENTATIVE,
    EntityType.BILL: EntityType.DOCUMENT,
    EntityType.DOCUMENT: EntityType.DOCUMENT,
}

# Order in which blocks appear in the assembled context
DOMAIN_ORDER: List[EntityType] = [EntityType.REPRESENTATIVE, EntityType.DOCUMENT]

DEFAULT_TAGS = frozenset({EntityType.DOCUMENT})


def retrieval_domains(tags) -> List[EntityType]:
    """Map classifier tags to the distinct stores that must be searched, in display order."""
    wanted = {RETRIEVAL_DOMAIN[EntityType(tag)] for tag in tags}
    return [domain for domain in DOMAIN_ORDER if domain in wanted]
