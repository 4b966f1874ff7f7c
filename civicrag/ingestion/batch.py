"""
Batch Ingestion

Ingests every supported file in a directory with one document type.

Options:
- skip_existing: skip files whose filename was already ingested
- force: re-ingest and replace the existing document once the new one is stored
- dry_run: only report what would be processed

Titles are derived from filenames; bulletin dates from filenames when they
contain one.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from ..models.document import BillStatus, DocumentType, IngestRequest
from .extractor import is_supported
from .filenames import extract_date_from_filename, title_from_filename
from .pipeline import IngestionPipeline, IngestionResult

logger = logging.getLogger(__name__)


@dataclass
class BatchFileResult:
    file_name: str
    action: str  # ingested | skipped | failed | dry_run
    title: str
    result: Optional[IngestionResult] = None


@dataclass
class BatchIngestReport:
    files: List[BatchFileResult] = field(default_factory=list)

    def _count(self, action: str) -> int:
        return sum(1 for f in self.files if f.action == action)

    @property
    def ingested(self) -> int:
        return self._count("ingested")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def degraded(self) -> int:
        return sum(1 for f in self.files if f.result is not None and f.result.degraded)

    @property
    def total_embeddings(self) -> int:
        return sum(f.result.embedding_count for f in self.files if f.result is not None)

    def summary(self) -> dict:
        return {
            "files": len(self.files),
            "ingested": self.ingested,
            "skipped": self.skipped,
            "failed": self.failed,
            "degraded": self.degraded,
            "embeddings": self.total_embeddings,
        }


def find_source_files(directory: Path) -> List[Path]:
    """Supported files directly inside a directory, sorted by name."""
    return sorted(p for p in Path(directory).iterdir() if p.is_file() and is_supported(p.name))


class BatchIngestor:
    """Runs the ingestion pipeline over a directory of files."""

    def __init__(self, pipeline: IngestionPipeline):
        self.pipeline = pipeline

    def build_request(
        self,
        path: Path,
        document_type: DocumentType,
        status: BillStatus = BillStatus.PASSED
    ) -> IngestRequest:
        document_type = DocumentType(document_type)
        return IngestRequest(
            title=title_from_filename(path.name),
            document_type=document_type,
            original_file_name=path.name,
            status=status,
            bulletin_date=(
                extract_date_from_filename(path.name)
                if document_type == DocumentType.PARLIAMENTARY_BULLETIN else None
            ),
        )

    def ingest_directory(
        self,
        directory: Path,
        document_type: DocumentType,
        status: BillStatus = BillStatus.PASSED,
        skip_existing: bool = False,
        force: bool = False,
        dry_run: bool = False,
        on_file: Optional[Callable[[BatchFileResult], None]] = None
    ) -> BatchIngestReport:
        """
        Ingest all supported files in a directory.

        Args:
            directory: Directory to scan (not recursive)
            document_type: Type assigned to every file
            status: Bill status (bills only)
            skip_existing: Skip files already ingested
            force: Replace files already ingested
            dry_run: Report without ingesting
            on_file: Called after each file

        Returns:
            BatchIngestReport with one entry per file
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ValueError(f"Not a directory: {directory}")

        files = find_source_files(directory)
        logger.info(f"Found {len(files)} files to consider in {directory}")

        report = BatchIngestReport()
        for path in files:
            request = self.build_request(path, document_type, status)
            entry = self._process(path, request, skip_existing, force, dry_run)
            report.files.append(entry)
            if on_file:
                on_file(entry)

        logger.info(f"Batch ingestion summary: {report.summary()}")
        return report

    def _process(
        self,
        path: Path,
        request: IngestRequest,
        skip_existing: bool,
        force: bool,
        dry_run: bool
    ) -> BatchFileResult:
        existing_id = self.pipeline.find_document_id(path.name)

        if existing_id is not None and skip_existing and not force:
            logger.info(f"Skipping (already processed): {path.name}")
            return BatchFileResult(path.name, "skipped", request.title)

        if dry_run:
            logger.info(f"[dry run] Would ingest {path.name} as '{request.title}'")
            return BatchFileResult(path.name, "dry_run", request.title)

        replaces = existing_id if force else None
        if replaces is not None:
            logger.info(f"Re-ingesting {path.name}, replacing document {replaces}")

        result = self.pipeline.ingest_file(path, request, replaces=replaces)
        action = "ingested" if result.success else "failed"
        return BatchFileResult(path.name, action, request.title, result)
