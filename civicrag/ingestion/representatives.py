"""
Representative Import and Embedding Generation

RepresentativeImporter loads the scraped member list (a JSON array with
camelCase keys) into the store. Members whose constituency code is already
stored are skipped unless asked otherwise, so the import can be re-run.

RepresentativeEmbeddingGenerator creates one profile embedding per
representative so members can be found by semantic search. Representatives
are processed in batches with the configured inter-batch delay. A failure is
logged against that representative and generation continues with the next
one.
"""

import json
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from ..models.representative import (
    Representative,
    RepresentativeContentType,
    RepresentativeEmbeddingRecord,
    ScrapedRepresentative,
    create_embedding_metadata,
    create_profile_content,
)
from ..rag.config import RAGConfig
from ..rag.embedding_service import EmbeddingService
from ..rag.vector_store import VectorStore

logger = logging.getLogger(__name__)

DEFAULT_REPRESENTATIVES_FILE = Path("data") / "representatives" / "representatives-detailed.json"
IMPORT_BATCH_SIZE = 50


def load_scraped_representatives(path: Path) -> List[Dict[str, Any]]:
    """Read the scraped member list; raises ValueError if it is not a JSON array."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of representatives")
    return data


@dataclass
class RepresentativeImportReport:
    total: int = 0
    imported: int = 0
    skipped: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)
    by_province: Counter = field(default_factory=Counter)
    by_party: Counter = field(default_factory=Counter)


class RepresentativeImporter:
    """Writes scraped representatives to the store in batches."""

    def __init__(self, vector_store: VectorStore, batch_size: int = IMPORT_BATCH_SIZE):
        self.vector_store = vector_store
        self.batch_size = batch_size

    def import_records(
        self,
        records: Iterable[Dict[str, Any]],
        skip_existing: bool = True,
        on_progress: Optional[Callable[[int], None]] = None
    ) -> RepresentativeImportReport:
        """
        Import scraped records.

        Args:
            records: Raw scraped entries
            skip_existing: Skip constituencies that already have a representative
            on_progress: Called with the number of records handled per batch

        Returns:
            RepresentativeImportReport with per-province and per-party
            counts over every stored representative
        """
        records = list(records)
        report = RepresentativeImportReport(total=len(records))
        existing = None
        if skip_existing:
            existing = {rep.constituency_code for rep in self.vector_store.list_representatives()}
        if existing:
            logger.info(f"Store already holds {len(existing)} constituencies; those will be skipped")

        for offset in range(0, len(records), self.batch_size):
            batch = records[offset:offset + self.batch_size]
            for raw in batch:
                self._import_one(raw, existing, report)
            logger.info(f"Handled {offset + len(batch)}/{len(records)} representatives")
            if on_progress:
                on_progress(len(batch))

        for rep in self.vector_store.list_representatives():
            report.by_province[rep.province or "Unknown"] += 1
            report.by_party[rep.party or "Unknown"] += 1

        logger.info(
            f"Representative import complete: {report.imported} imported, "
            f"{report.skipped} skipped, {len(report.errors)} errors"
        )
        return report

    def _import_one(
        self,
        raw: Dict[str, Any],
        existing: Optional[set],
        report: RepresentativeImportReport
    ) -> None:
        label = repr(raw)
        if isinstance(raw, dict):
            label = raw.get("nameClean") or raw.get("name") or "<unnamed>"
        try:
            rep = ScrapedRepresentative.model_validate(raw).to_representative()
        except ValidationError as e:
            logger.error(f"Invalid representative record {label}: {e.errors()[0]['msg']}")
            report.errors.append((label, str(e)))
            return

        if existing is not None and rep.constituency_code in existing:
            logger.info(f"Skipping {rep.name_clean} ({rep.constituency_code}): already imported")
            report.skipped += 1
            return

        try:
            self.vector_store.add_representative(rep)
        except Exception as e:
            logger.error(f"Failed to store {rep.name_clean} ({rep.constituency_code}): {e}")
            report.errors.append((label, str(e)))
            return

        if existing is not None:
            existing.add(rep.constituency_code)
        report.imported += 1


@dataclass
class RepresentativeEmbeddingReport:
    total: int = 0
    skipped: int = 0
    processed: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)


class RepresentativeEmbeddingGenerator:
    """Generates profile embeddings for every representative in the store."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        config: RAGConfig,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.vector_store = vector_store
        self.embedding_service = embedding_service
        self.config = config
        self._sleep = sleep

    def build_record(self, rep: Representative) -> RepresentativeEmbeddingRecord:
        """Embed one representative's profile text."""
        content = create_profile_content(rep)
        embedding = self.embedding_service.embed_text(content, document_id=rep.id)
        return RepresentativeEmbeddingRecord(
            representative_id=rep.id,
            content=content,
            embedding=embedding,
            content_type=RepresentativeContentType.PROFILE,
            metadata=create_embedding_metadata(rep),
        )

    def generate(
        self,
        force: bool = False,
        limit: Optional[int] = None,
        on_progress: Optional[Callable[[int], None]] = None
    ) -> RepresentativeEmbeddingReport:
        """
        Generate missing profile embeddings.

        Args:
            force: Regenerate embeddings for representatives that already have them
            limit: Process at most this many representatives
            on_progress: Called with the number of representatives handled per batch

        Returns:
            RepresentativeEmbeddingReport
        """
        reps = self.vector_store.list_representatives()
        existing = set() if force else self.vector_store.representative_ids_with_embeddings()
        to_process = [rep for rep in reps if rep.id not in existing]
        if limit is not None:
            to_process = to_process[:limit]

        report = RepresentativeEmbeddingReport(total=len(reps), skipped=len(reps) - len(to_process))
        logger.info(
            f"Found {len(reps)} representatives: {report.skipped} skipped, "
            f"{len(to_process)} to process"
        )
        if not to_process:
            return report

        batch_size = self.config.embedding_batch_size
        total_batches = (len(to_process) + batch_size - 1) // batch_size

        for batch_number, offset in enumerate(range(0, len(to_process), batch_size), start=1):
            batch = to_process[offset:offset + batch_size]
            logger.info(f"[Batch {batch_number}/{total_batches}]")

            for rep in batch:
                label = f"{rep.name_clean} ({rep.constituency_code})"
                try:
                    record = self.build_record(rep)
                    if force:
                        self.vector_store.replace_representative_embeddings(rep.id, [record])
                    else:
                        self.vector_store.add_representative_embeddings([record])
                    report.processed += 1
                    logger.info(f"Generated embedding for {label} ({len(record.content)} chars)")
                except Exception as e:
                    logger.error(f"Failed to embed {label}: {e}")
                    report.errors.append((label, str(e)))

            if on_progress:
                on_progress(len(batch))

            if batch_number < total_batches and self.config.embedding_batch_delay_ms:
                self._sleep(self.config.batch_delay_seconds)

        logger.info(
            f"Representative embeddings complete: {report.processed} processed, "
            f"{len(report.errors)} errors"
        )
        return report
