"""
Integration tests for the chat and document endpoints.

The app runs without its lifespan; services are wired around an in-memory
vector store and a fake embedder, and injected with dependency overrides.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from civicrag.agent.assistant import CivicAssistant
from civicrag.agent.prompts import NO_INFORMATION_ANSWER
from civicrag.api.dependencies import get_assistant, get_pipeline
from civicrag.api.main import app
from civicrag.ingestion.pipeline import IngestionPipeline
from civicrag.ingestion.summaries import SummaryGenerator
from civicrag.models import ChunkEmbedding, DocumentRecord, DocumentType
from civicrag.rag.classifier import KeywordQueryClassifier
from civicrag.rag.context import ContextAssembler
from civicrag.rag.embedding_service import EmbeddingService
from civicrag.rag.retriever import SimilarityRetriever
from civicrag.rag.types import EntityType

from conftest import FakeEmbeddingBackend, unit_vector

QUESTION = "What does Article 25 say?"


def stream_of(*deltas):
    async def _stream():
        for delta in deltas:
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=delta))])
    return _stream()


@pytest.fixture
def llm_client():
    client = MagicMock()
    client.acomplete = AsyncMock(side_effect=lambda **kwargs: stream_of("All citizens ", "are equal."))
    client.complete.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="Bill summary."))]
    )
    return client


@pytest.fixture
def services(config, memory_store, llm_client):
    """Assistant and pipeline over the in-memory store, injected into the app."""
    backend = FakeEmbeddingBackend(vectors={QUESTION: unit_vector(0)})
    embedding_service = EmbeddingService(config, backend=backend, sleep=lambda s: None)
    retriever = SimilarityRetriever(memory_store, embedding_service, config)
    assistant = CivicAssistant(
        KeywordQueryClassifier(), ContextAssembler(retriever, config), llm_client=llm_client
    )
    pipeline = IngestionPipeline(
        memory_store, embedding_service, config,
        summary_generator=SummaryGenerator(config, llm_client)
    )

    app.dependency_overrides[get_assistant] = lambda: assistant
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield SimpleNamespace(assistant=assistant, pipeline=pipeline, store=memory_store)
    app.dependency_overrides.clear()


@pytest.fixture
def client(services):
    """Create test client"""
    return TestClient(app)


def upload(client, file_name="constitution.txt", content=b"Article 25. All citizens are equal.", **fields):
    data = {"title": "Constitution of Pakistan", "document_type": "constitution"}
    data.update(fields)
    return client.post(
        "/api/documents",
        files={"file": (file_name, content, "text/plain")},
        data=data,
    )


class TestChat:
    """Test suite for /api/chat"""

    def test_streams_grounded_answer(self, client, services, llm_client):
        document = DocumentRecord(
            title="Constitution of Pakistan", type=DocumentType.CONSTITUTION,
            content="Article 25.", original_file_name="constitution.pdf"
        )
        services.store.add_document(document, [
            ChunkEmbedding(content="Article 25. All citizens are equal before law.", embedding=unit_vector(0))
        ])

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": QUESTION}]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "All citizens are equal."
        system_prompt = llm_client.acomplete.call_args.kwargs["messages"][0]["content"]
        assert "Article 25. All citizens are equal before law." in system_prompt

    def test_no_context_answer(self, client, llm_client):
        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": QUESTION}]})

        assert response.status_code == 200
        assert response.text == NO_INFORMATION_ANSWER
        llm_client.acomplete.assert_not_called()

    def test_empty_messages(self, client):
        response = client.post("/api/chat", json={"messages": []})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_last_message_not_from_user(self, client):
        response = client.post("/api/chat", json={"messages": [
            {"role": "user", "content": "Hello"},
            {"role": "assistant", "content": "Hi, how can I help?"},
        ]})

        assert response.status_code == 422
        assert "user" in response.json()["detail"]


class TestDocuments:
    """Test suite for /api/documents"""

    def test_upload_success(self, client, services):
        response = upload(client)

        assert response.status_code == 200
        body = response.json()
        assert body["embedding_count"] == 1
        assert body["degraded"] is False
        assert body["derived_record_id"] is None
        assert body["document_id"] in services.store.documents

    def test_upload_bill_creates_summary(self, client, services):
        response = upload(
            client, file_name="finance-bill.txt", content=b"An Act to provide for the budget.",
            title="Finance Bill", document_type="bill", bill_number="3"
        )

        body = response.json()
        assert response.status_code == 200
        assert services.store.bills[body["derived_record_id"]].summary == "Bill summary."

    def test_duplicate_conflict(self, client):
        upload(client)

        response = upload(client)

        assert response.status_code == 409

    def test_force_replaces(self, client, services):
        first = upload(client).json()

        response = upload(client, force="true")

        assert response.status_code == 200
        assert first["document_id"] not in services.store.documents
        assert services.store.count_embeddings(EntityType.DOCUMENT) == 1

    def test_ingestion_failure(self, client, services):
        response = upload(client, file_name="scan.docx")

        body = response.json()
        assert response.status_code == 422
        assert body["error_code"] == "INGESTION_FAILED"
        assert body["stage"] == "extracting"
        assert "timestamp" in body
        assert services.store.documents == {}

    def test_failed_force_keeps_original(self, client, services):
        first = upload(client).json()

        response = upload(client, content=b"", force="true")

        assert response.status_code == 422
        assert response.json()["stage"] == "extracting"
        assert list(services.store.documents) == [first["document_id"]]
        assert services.store.count_embeddings(EntityType.DOCUMENT) == 1

    def test_invalid_document_type(self, client):
        response = upload(client, document_type="memo")

        assert response.status_code == 422


class TestHealth:
    """Test suite for /health"""

    def test_health_without_database(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "disconnected"

    def test_root(self, client):
        assert client.get("/").json()["chat"] == "/api/chat"
