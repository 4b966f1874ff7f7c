"""Pytest configuration and shared fixtures."""

import hashlib
import re
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from civicrag.models import Representative
from civicrag.rag.config import RAGConfig
from civicrag.rag.embedding_service import EmbeddingBackend, EmbeddingService
from civicrag.rag.vector_store import InMemoryVectorStore

TEST_DIMENSION = 16


class FakeEmbeddingBackend(EmbeddingBackend):
    """
    Deterministic bag-of-words hashing embedder.

    Texts sharing words get similar vectors. ``vectors`` pins exact vectors
    for given texts; ``fail_on_call`` makes the n-th call (1-based) raise.
    """

    def __init__(
        self,
        dimension: int = TEST_DIMENSION,
        supports_batch: bool = True,
        fail_on_call: Optional[int] = None,
        vectors: Optional[Dict[str, List[float]]] = None
    ):
        super().__init__("fake-hashing-embedder")
        self.dimension = dimension
        self.supports_batch = supports_batch
        self.fail_on_call = fail_on_call
        self.vectors = vectors or {}
        self.calls: List[List[str]] = []

    def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise RuntimeError("rate limit exceeded")
        return [self.vectors.get(text) or self._hash(text) for text in texts]

    def _hash(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        vector[0] = 0.1  # never all zeros
        for word in re.findall(r"\w+", text.lower()):
            digest = hashlib.sha256(word.encode("utf-8")).digest()
            vector[digest[0] % self.dimension] += 1.0
        return vector


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config():
    """Small, fast configuration (no inter-batch delay)."""
    return RAGConfig(
        embedding_dimension=TEST_DIMENSION,
        embedding_batch_size=5,
        embedding_batch_delay_ms=0,
        chunk_size=1500,
        chunk_overlap=300,
    )


@pytest.fixture
def fake_backend():
    return FakeEmbeddingBackend()


@pytest.fixture
def sleeps():
    """Records inter-batch sleep calls instead of sleeping."""
    return []


@pytest.fixture
def embedding_service(config, fake_backend, sleeps):
    return EmbeddingService(config, backend=fake_backend, sleep=sleeps.append)


@pytest.fixture
def memory_store():
    return InMemoryVectorStore(dimension=TEST_DIMENSION)


@pytest.fixture
def make_representative():
    """Factory for representatives with sensible defaults."""
    def _make(**overrides) -> Representative:
        fields = {
            "name": "Mr. Ali Khan",
            "name_clean": "Ali Khan",
            "father_name": "Ahmed Khan",
            "constituency": "NA-1 (Chitral)",
            "constituency_code": "NA-1",
            "constituency_name": "Chitral",
            "district": "Chitral",
            "province": "Khyber Pakhtunkhwa",
            "party": "IND",
            "phone": "0300-0000000",
        }
        fields.update(overrides)
        return Representative(**fields)
    return _make


def unit_vector(index: int, dimension: int = TEST_DIMENSION) -> List[float]:
    vector = [0.0] * dimension
    vector[index] = 1.0
    return vector


def vector_with_similarity(similarity: float, dimension: int = TEST_DIMENSION) -> List[float]:
    """A vector whose cosine similarity to unit_vector(0) is ``similarity``."""
    vector = [0.0] * dimension
    vector[0] = similarity
    vector[1] = (1.0 - similarity ** 2) ** 0.5
    return vector
