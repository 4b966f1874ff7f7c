"""Unit tests for representative import and profile embeddings."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from civicrag.ingestion.representatives import (
    RepresentativeEmbeddingGenerator,
    RepresentativeImporter,
    load_scraped_representatives,
)
from civicrag.models import RepresentativeContentType, create_profile_content
from civicrag.rag.config import RAGConfig
from civicrag.rag.embedding_service import EmbeddingService
from civicrag.rag.types import EntityType

from conftest import TEST_DIMENSION, FakeEmbeddingBackend


@pytest.fixture
def populated_store(memory_store, make_representative):
    for i in range(1, 8):
        memory_store.add_representative(make_representative(
            name_clean=f"Member {i}", constituency_code=f"NA-{i}", constituency=f"NA-{i} (Area {i})"
        ))
    return memory_store


def generator_for(store, config, backend=None, sleeps=None):
    service = EmbeddingService(config, backend=backend or FakeEmbeddingBackend(), sleep=lambda s: None)
    sleep = sleeps.append if sleeps is not None else (lambda s: None)
    return RepresentativeEmbeddingGenerator(store, service, config, sleep=sleep)


class TestRepresentativeEmbeddingGenerator:
    """Tests for generation, skipping and error handling."""

    def test_generates_one_profile_per_representative(self, config, populated_store):
        report = generator_for(populated_store, config).generate()

        assert report.total == 7
        assert report.processed == 7
        assert report.errors == []
        assert populated_store.count_embeddings(EntityType.REPRESENTATIVE) == 7

    def test_record_content(self, config, memory_store, make_representative):
        rep = make_representative()
        memory_store.add_representative(rep)

        record = generator_for(memory_store, config).build_record(rep)

        assert record.content == create_profile_content(rep)
        assert record.content_type == RepresentativeContentType.PROFILE
        assert record.metadata["constituency"] == "NA-1 (Chitral)"
        assert len(record.embedding) == TEST_DIMENSION

    def test_skips_existing(self, config, populated_store):
        generator_for(populated_store, config).generate(limit=3)

        report = generator_for(populated_store, config).generate()

        assert report.skipped == 3
        assert report.processed == 4
        assert populated_store.count_embeddings(EntityType.REPRESENTATIVE) == 7

    def test_force_regenerates(self, config, populated_store):
        generator_for(populated_store, config).generate()

        report = generator_for(populated_store, config).generate(force=True)

        assert report.skipped == 0
        assert report.processed == 7
        assert populated_store.count_embeddings(EntityType.REPRESENTATIVE) == 7

    def test_failed_regeneration_keeps_previous_embeddings(self, config, populated_store):
        generator_for(populated_store, config).generate()
        populated_store.replace_representative_embeddings = MagicMock(
            side_effect=RuntimeError("could not serialize access")
        )

        report = generator_for(populated_store, config).generate(force=True)

        assert report.processed == 0
        assert len(report.errors) == 7
        assert populated_store.count_embeddings(EntityType.REPRESENTATIVE) == 7
        assert populated_store.representative_ids_with_embeddings() == {
            rep.id for rep in populated_store.list_representatives()
        }

    def test_failure_continues_with_next(self, config, populated_store):
        backend = FakeEmbeddingBackend(fail_on_call=2)

        report = generator_for(populated_store, config, backend=backend).generate()

        assert report.processed == 6
        assert len(report.errors) == 1
        assert report.errors[0][0] == "Member 2 (NA-2)"
        assert populated_store.count_embeddings(EntityType.REPRESENTATIVE) == 6

    def test_delay_between_batches(self, populated_store):
        sleeps = []
        config = RAGConfig(
            embedding_dimension=TEST_DIMENSION, embedding_batch_size=3, embedding_batch_delay_ms=500
        )
        progress = []

        generator_for(populated_store, config, sleeps=sleeps).generate(on_progress=progress.append)

        assert progress == [3, 3, 1]
        assert sleeps == [0.5, 0.5]


def scraped(code, name, province="Punjab", party="PML-N", **extra):
    record = {
        "constituency": f"{code} ({name} Area)",
        "constituencyCode": code,
        "constituencyName": f"{name} Area",
        "name": f"Mr. {name}",
        "nameClean": name,
        "party": party,
        "permanentAddress": "",
        "islamabadAddress": "Parliament Lodges",
        "phone": "051-0000000",
        "profileUrl": f"https://na.gov.pk/en/profile/{code}",
        "province": province,
    }
    record.update(extra)
    return record


class TestRepresentativeImporter:
    """Tests for loading the scraped member list."""

    def test_imports_records(self, memory_store):
        records = [
            scraped("NA-1", "Ali Khan", province="Khyber Pakhtunkhwa", party="IND", oathTakingDate="29-02-2024"),
            scraped("NA-120", "Sara Malik"),
            scraped("NA-121", "Usman Raza"),
        ]

        report = RepresentativeImporter(memory_store).import_records(records)

        assert (report.total, report.imported, report.skipped, report.errors) == (3, 3, 0, [])
        assert report.by_province == {"Punjab": 2, "Khyber Pakhtunkhwa": 1}
        assert report.by_party == {"PML-N": 2, "IND": 1}
        reps = {rep.constituency_code: rep for rep in memory_store.list_representatives()}
        assert reps["NA-1"].oath_taking_date == date(2024, 2, 29)
        assert reps["NA-1"].permanent_address is None
        assert reps["NA-120"].islamabad_address == "Parliament Lodges"

    def test_rerun_skips_existing_constituencies(self, memory_store):
        importer = RepresentativeImporter(memory_store)
        importer.import_records([scraped("NA-1", "Ali Khan")])

        report = importer.import_records([scraped("NA-1", "Ali Khan"), scraped("NA-2", "Sara Malik")])

        assert report.imported == 1
        assert report.skipped == 1
        assert len(memory_store.list_representatives()) == 2

    def test_without_skip_existing(self, memory_store):
        importer = RepresentativeImporter(memory_store)
        importer.import_records([scraped("NA-1", "Ali Khan")])

        report = importer.import_records([scraped("NA-1", "Ali Khan")], skip_existing=False)

        assert report.imported == 1
        assert len(memory_store.list_representatives()) == 2

    def test_invalid_record_is_reported(self, memory_store):
        broken = scraped("NA-2", "Sara Malik")
        del broken["party"]

        report = RepresentativeImporter(memory_store).import_records([scraped("NA-1", "Ali Khan"), broken])

        assert report.imported == 1
        assert [label for label, _ in report.errors] == ["Sara Malik"]

    def test_progress_per_batch(self, memory_store):
        records = [scraped(f"NA-{i}", f"Member {i}") for i in range(1, 8)]
        progress = []

        RepresentativeImporter(memory_store, batch_size=3).import_records(records, on_progress=progress.append)

        assert progress == [3, 3, 1]

    def test_load_file(self, tmp_path):
        path = tmp_path / "representatives.json"
        path.write_text(json.dumps([scraped("NA-1", "Ali Khan")]), encoding="utf-8")

        assert load_scraped_representatives(path)[0]["constituencyCode"] == "NA-1"

    def test_load_rejects_non_list(self, tmp_path):
        path = tmp_path / "representatives.json"
        path.write_text(json.dumps({"NA-1": "Ali Khan"}), encoding="utf-8")

        with pytest.raises(ValueError):
            load_scraped_representatives(path)
