"""Unit tests for directory batch ingestion."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from civicrag.ingestion.batch import BatchIngestor, find_source_files
from civicrag.ingestion.pipeline import IngestionPipeline
from civicrag.models import BillStatus, DocumentType
from civicrag.rag.embedding_service import EmbeddingService
from civicrag.rag.types import EntityType

from conftest import FakeEmbeddingBackend


@pytest.fixture
def source_dir(tmp_path):
    (tmp_path / "finance-bill-2024.txt").write_text("An Act to provide for the budget.", encoding="utf-8")
    (tmp_path / "education_bill.txt").write_text("An Act to provide for education.", encoding="utf-8")
    (tmp_path / "notes.docx").write_bytes(b"ignored")
    (tmp_path / "archive").mkdir()
    return tmp_path


@pytest.fixture
def ingestor(config, memory_store):
    generator = MagicMock()
    generator.summarize.return_value = "Summary."
    service = EmbeddingService(config, backend=FakeEmbeddingBackend(), sleep=lambda s: None)
    pipeline = IngestionPipeline(memory_store, service, config, summary_generator=generator)
    return BatchIngestor(pipeline)


class TestBatchIngestor:
    """Tests for skip, force and dry-run handling."""

    def test_find_source_files(self, source_dir):
        assert [p.name for p in find_source_files(source_dir)] == [
            "education_bill.txt",
            "finance-bill-2024.txt",
        ]

    def test_ingests_every_file(self, ingestor, memory_store, source_dir):
        seen = []

        report = ingestor.ingest_directory(source_dir, DocumentType.BILL, on_file=seen.append)

        assert report.summary() == {
            "files": 2, "ingested": 2, "skipped": 0, "failed": 0, "degraded": 0, "embeddings": 2,
        }
        assert [entry.title for entry in seen] == ["Education Bill", "Finance Bill 2024"]
        assert len(memory_store.documents) == 2
        assert len(memory_store.bills) == 2

    def test_skip_existing(self, ingestor, memory_store, source_dir):
        ingestor.ingest_directory(source_dir, DocumentType.BILL)

        report = ingestor.ingest_directory(source_dir, DocumentType.BILL, skip_existing=True)

        assert report.skipped == 2
        assert report.ingested == 0
        assert len(memory_store.documents) == 2

    def test_force_replaces_documents(self, ingestor, memory_store, source_dir):
        first = ingestor.ingest_directory(source_dir, DocumentType.BILL)
        old_ids = {f.result.document_id for f in first.files}

        report = ingestor.ingest_directory(source_dir, DocumentType.BILL, skip_existing=True, force=True)

        assert report.ingested == 2
        assert set(memory_store.documents).isdisjoint(old_ids)
        assert len(memory_store.documents) == 2
        assert memory_store.count_embeddings(EntityType.DOCUMENT) == 2

    def test_failed_force_keeps_existing_documents(self, config, ingestor, memory_store, source_dir):
        first = ingestor.ingest_directory(source_dir, DocumentType.BILL)
        old_ids = {f.result.document_id for f in first.files}
        service = EmbeddingService(config, backend=FakeEmbeddingBackend(fail_on_call=1), sleep=lambda s: None)
        generator = MagicMock()
        generator.summarize.return_value = "Summary."
        failing = BatchIngestor(IngestionPipeline(memory_store, service, config, summary_generator=generator))

        report = failing.ingest_directory(source_dir, DocumentType.BILL, force=True)

        assert report.failed == 1
        assert report.ingested == 1
        assert len(memory_store.documents) == 2
        assert len(set(memory_store.documents) & old_ids) == 1
        assert memory_store.count_embeddings(EntityType.DOCUMENT) == 2

    def test_dry_run_writes_nothing(self, ingestor, memory_store, source_dir):
        report = ingestor.ingest_directory(source_dir, DocumentType.CONSTITUTION, dry_run=True)

        assert [f.action for f in report.files] == ["dry_run", "dry_run"]
        assert memory_store.documents == {}

    def test_failed_file_is_reported(self, ingestor, tmp_path):
        (tmp_path / "empty.txt").write_bytes(b"")

        report = ingestor.ingest_directory(tmp_path, DocumentType.CONSTITUTION)

        assert report.failed == 1
        assert report.files[0].result.error is not None

    def test_not_a_directory(self, ingestor, tmp_path):
        with pytest.raises(ValueError):
            ingestor.ingest_directory(tmp_path / "missing", DocumentType.BILL)

    def test_build_request(self, ingestor, tmp_path):
        bulletin = ingestor.build_request(
            tmp_path / "bulletin_15-03-2024.pdf", DocumentType.PARLIAMENTARY_BULLETIN
        )
        bill = ingestor.build_request(
            tmp_path / "bill-2024-01-02.pdf", "bill", status=BillStatus.PENDING
        )

        assert bulletin.bulletin_date == date(2024, 3, 15)
        assert bulletin.title == "Bulletin 15 03 2024"
        assert bill.bulletin_date is None
        assert bill.status == BillStatus.PENDING
        assert bill.document_type == DocumentType.BILL
