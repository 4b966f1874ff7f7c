"""Unit tests for the in-memory vector store and the similarity retriever."""

import asyncio

import pytest

from civicrag.models import (
    BillRecord,
    ChunkEmbedding,
    DocumentRecord,
    DocumentType,
    RepresentativeEmbeddingRecord,
    create_embedding_metadata,
    create_profile_content,
)
from civicrag.rag.embedding_service import EmbeddingService
from civicrag.rag.retriever import SimilarityRetriever
from civicrag.rag.types import EntityType
from civicrag.rag.vector_store import InMemoryVectorStore, cosine_similarity

from conftest import TEST_DIMENSION, FakeEmbeddingBackend, unit_vector, vector_with_similarity


def add_document(store, title, vectors, file_name=None):
    document = DocumentRecord(
        title=title,
        type=DocumentType.CONSTITUTION,
        content=f"{title} full text",
        original_file_name=file_name or f"{title}.pdf",
    )
    chunks = [
        ChunkEmbedding(content=f"{title} chunk {i}", embedding=v, metadata={"chunkIndex": i, "level": 0})
        for i, v in enumerate(vectors)
    ]
    store.add_document(document, chunks)
    return document


def add_representative(store, rep, vector):
    store.add_representative(rep)
    store.add_representative_embeddings([
        RepresentativeEmbeddingRecord(
            representative_id=rep.id,
            content=create_profile_content(rep),
            embedding=vector,
            metadata=create_embedding_metadata(rep),
        )
    ])


class TestCosineSimilarity:

    def test_identical_vectors(self):
        assert cosine_similarity([1, 0, 0], [1, 0, 0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)

    def test_zero_vector(self):
        assert cosine_similarity([0, 0], [1, 1]) == 0.0


class TestSearch:
    """Tests for thresholding and ranking."""

    def test_results_below_threshold_are_excluded(self, memory_store):
        add_document(memory_store, "Constitution", [
            vector_with_similarity(0.9),
            vector_with_similarity(0.5),
            vector_with_similarity(0.8),
        ])

        results = memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=10, min_similarity=0.75)

        assert [round(r.similarity, 2) for r in results] == [0.9, 0.8]
        assert all(r.similarity >= 0.75 for r in results)

    def test_result_at_threshold_is_included(self, memory_store):
        add_document(memory_store, "Constitution", [unit_vector(0)])

        results = memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=5, min_similarity=1.0)

        assert len(results) == 1

    def test_no_results_is_valid(self, memory_store):
        add_document(memory_store, "Constitution", [unit_vector(3)])

        assert memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=5, min_similarity=0.75) == []

    def test_top_k_limits_results(self, memory_store):
        add_document(memory_store, "Constitution", [vector_with_similarity(0.9)] * 8)

        results = memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=3, min_similarity=0.0)

        assert len(results) == 3

    def test_ties_keep_insertion_order(self, memory_store):
        query = [0.0] * TEST_DIMENSION
        query[1] = query[2] = 1.0
        add_document(memory_store, "First", [unit_vector(1)])
        add_document(memory_store, "Second", [unit_vector(2)])

        results = memory_store.search(query, EntityType.DOCUMENT, top_k=5, min_similarity=0.0)

        assert results[0].similarity == results[1].similarity
        assert [r.parent["title"] for r in results] == ["First", "Second"]

    def test_ties_follow_reversed_insertion(self):
        store = InMemoryVectorStore(dimension=TEST_DIMENSION)
        query = [0.0] * TEST_DIMENSION
        query[1] = query[2] = 1.0
        add_document(store, "Second", [unit_vector(2)])
        add_document(store, "First", [unit_vector(1)])

        results = store.search(query, EntityType.DOCUMENT, top_k=5, min_similarity=0.0)

        assert [r.parent["title"] for r in results] == ["Second", "First"]

    def test_document_results_carry_parent_fields(self, memory_store):
        document = add_document(memory_store, "Elections Act", [unit_vector(0)])

        result = memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=1, min_similarity=0.5)[0]

        assert result.parent_id == document.id
        assert result.parent == {"title": "Elections Act", "type": "constitution"}
        assert result.metadata["level"] == 0

    def test_invalid_arguments(self, memory_store):
        with pytest.raises(ValueError):
            memory_store.search([1.0, 0.0], EntityType.DOCUMENT, top_k=5, min_similarity=0.5)
        with pytest.raises(ValueError):
            memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=0, min_similarity=0.5)


class TestDocuments:
    """Tests for document persistence."""

    def test_cascade_delete(self, memory_store):
        kept = add_document(memory_store, "Kept", [unit_vector(0)] * 3)
        removed = add_document(memory_store, "Removed", [unit_vector(0)] * 4)
        memory_store.add_bill(BillRecord(
            document_id=removed.id, title="Removed", summary="s", original_text="t"
        ))

        count = memory_store.delete_document(removed.id)

        assert count == 4
        assert memory_store.count_embeddings(EntityType.DOCUMENT) == 3
        assert memory_store.bills == {}
        results = memory_store.search(unit_vector(0), EntityType.DOCUMENT, top_k=10, min_similarity=0.0)
        assert {r.parent_id for r in results} == {kept.id}

    def test_delete_unknown_document(self, memory_store):
        assert memory_store.delete_document("missing") == 0

    def test_find_by_filename(self, memory_store):
        document = add_document(memory_store, "Bill", [unit_vector(0)], file_name="bill-12.pdf")

        assert memory_store.find_document_id("bill-12.pdf") == document.id
        assert memory_store.document_exists("bill-12.pdf")
        assert not memory_store.document_exists("other.pdf")

    def test_wrong_dimension_rejected_atomically(self, memory_store):
        document = DocumentRecord(
            title="Broken", type=DocumentType.BILL, content="x", original_file_name="broken.pdf"
        )
        chunks = [
            ChunkEmbedding(content="ok", embedding=unit_vector(0)),
            ChunkEmbedding(content="bad", embedding=[1.0, 0.0]),
        ]

        with pytest.raises(ValueError):
            memory_store.add_document(document, chunks)

        assert memory_store.documents == {}
        assert memory_store.count_embeddings(EntityType.DOCUMENT) == 0


class TestRepresentatives:
    """Tests for representative records."""

    def test_filters(self, memory_store, make_representative):
        punjab = make_representative(name_clean="Punjab Member", province="Punjab")
        sindh = make_representative(name_clean="Sindh Member", province="Sindh")
        add_representative(memory_store, punjab, unit_vector(0))
        add_representative(memory_store, sindh, unit_vector(0))

        results = memory_store.search(
            unit_vector(0), EntityType.REPRESENTATIVE, top_k=5, min_similarity=0.5,
            filters={"province": "Punjab"}
        )

        assert [r.parent["name"] for r in results] == ["Punjab Member"]
        assert results[0].metadata["contentType"] == "profile"

    def test_unknown_filter(self, memory_store):
        with pytest.raises(ValueError, match="Unsupported"):
            memory_store.search(
                unit_vector(0), EntityType.REPRESENTATIVE, top_k=5, min_similarity=0.5,
                filters={"religion": "x"}
            )

    def test_embedding_for_unknown_representative(self, memory_store):
        record = RepresentativeEmbeddingRecord(
            representative_id="ghost", content="x", embedding=unit_vector(0)
        )

        with pytest.raises(ValueError):
            memory_store.add_representative_embeddings([record])

    def test_replace_embeddings(self, memory_store, make_representative):
        rep = make_representative()
        add_representative(memory_store, rep, unit_vector(0))
        record = RepresentativeEmbeddingRecord(
            representative_id=rep.id, content="Representative: Ali Khan (updated)", embedding=unit_vector(1)
        )

        written = memory_store.replace_representative_embeddings(rep.id, [record])

        results = memory_store.search(unit_vector(1), EntityType.REPRESENTATIVE, top_k=5, min_similarity=0.5)
        assert written == 1
        assert memory_store.count_embeddings(EntityType.REPRESENTATIVE) == 1
        assert [r.content for r in results] == ["Representative: Ali Khan (updated)"]

    def test_rejected_replacement_keeps_embeddings(self, memory_store, make_representative):
        rep = make_representative()
        add_representative(memory_store, rep, unit_vector(0))
        wrong_size = RepresentativeEmbeddingRecord(
            representative_id=rep.id, content="x", embedding=[1.0] * (TEST_DIMENSION + 1)
        )

        with pytest.raises(ValueError):
            memory_store.replace_representative_embeddings(rep.id, [wrong_size])

        results = memory_store.search(unit_vector(0), EntityType.REPRESENTATIVE, top_k=5, min_similarity=0.5)
        assert memory_store.count_embeddings(EntityType.REPRESENTATIVE) == 1
        assert results[0].content == create_profile_content(rep)


class TestSimilarityRetriever:
    """Tests for the retriever."""

    def test_representative_in_constituency(self, config, memory_store, make_representative):
        """One representative at similarity 0.82 with threshold 0.70 is returned."""
        query = "Who is my representative in constituency NA-1?"
        backend = FakeEmbeddingBackend(vectors={query: unit_vector(0)})
        service = EmbeddingService(config, backend=backend, sleep=lambda s: None)
        rep = make_representative()
        add_representative(memory_store, rep, vector_with_similarity(0.82))
        retriever = SimilarityRetriever(memory_store, service, config)

        results = retriever.search(query, EntityType.REPRESENTATIVE)

        assert len(results) == 1
        assert results[0].parent_id == rep.id
        assert results[0].similarity == pytest.approx(0.82)
        assert results[0].parent["constituency_code"] == "NA-1"

    def test_defaults_per_entity_type(self, config, memory_store, embedding_service):
        add_document(memory_store, "Constitution", [vector_with_similarity(0.74)] + [unit_vector(0)] * 10)
        retriever = SimilarityRetriever(memory_store, embedding_service, config)

        results = retriever.retrieve(unit_vector(0), EntityType.DOCUMENT)

        assert len(results) == config.document_result_limit
        assert all(r.similarity >= config.document_similarity_threshold for r in results)

    def test_bill_searches_documents(self, config, memory_store, embedding_service):
        add_document(memory_store, "Finance Bill", [unit_vector(0)])
        retriever = SimilarityRetriever(memory_store, embedding_service, config)

        results = retriever.retrieve(unit_vector(0), EntityType.BILL)

        assert [r.entity_type for r in results] == [EntityType.DOCUMENT]

    def test_overrides(self, config, memory_store, embedding_service):
        add_document(memory_store, "Constitution", [vector_with_similarity(0.5)] * 3)
        retriever = SimilarityRetriever(memory_store, embedding_service, config)

        results = retriever.retrieve(unit_vector(0), EntityType.DOCUMENT, top_k=2, min_similarity=0.4)

        assert len(results) == 2

    def test_async_retrieve(self, config, memory_store, embedding_service):
        add_document(memory_store, "Constitution", [unit_vector(0)])
        retriever = SimilarityRetriever(memory_store, embedding_service, config)

        results = asyncio.run(retriever.aretrieve(unit_vector(0), EntityType.DOCUMENT))

        assert len(results) == 1

    def test_empty_query(self, config, memory_store, embedding_service):
        retriever = SimilarityRetriever(memory_store, embedding_service, config)

        with pytest.raises(ValueError):
            retriever.search("   ", EntityType.DOCUMENT)
