"""
Batch Document Ingestion

Ingests every PDF/HTML/TXT/MD file in a directory with one document type.

Usage:
    # Ingest all bills in ./docs
    python scripts/batch_ingest.py ./docs --type bill --status passed

    # Skip files that were already ingested
    python scripts/batch_ingest.py ./docs/bulletins --type parliamentary_bulletin --skip-existing

    # Show what would be processed
    python scripts/batch_ingest.py ./docs --type bill --dry-run
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from civicrag.db import Database, PgVectorStore
from civicrag.ingestion import BatchIngestor, IngestionPipeline
from civicrag.ingestion.batch import find_source_files
from civicrag.models import BillStatus, DocumentType
from civicrag.rag.config import get_rag_config
from civicrag.rag.embedding_service import get_embedding_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load environment
load_dotenv()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Ingest all documents in a directory")
    parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=Path("./docs"),
        help="Directory containing documents (default: ./docs)"
    )
    parser.add_argument(
        "--type",
        choices=[t.value for t in DocumentType],
        default=DocumentType.BILL.value,
        help="Document type for all files (default: bill)"
    )
    parser.add_argument(
        "--status",
        choices=[s.value for s in BillStatus],
        default=BillStatus.PASSED.value,
        help="Bill status for all files (default: passed)"
    )
    parser.add_argument("--skip-existing", action="store_true", help="Skip files already in the database")
    parser.add_argument("--force", action="store_true", help="Re-ingest files already in the database")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be processed")

    args = parser.parse_args()

    if not args.directory.is_dir():
        logger.error(f"Directory not found: {args.directory}")
        sys.exit(1)

    total_files = len(find_source_files(args.directory))
    config = get_rag_config()

    with Database() as database:
        store = PgVectorStore(database, dimension=config.embedding_dimension)
        pipeline = IngestionPipeline(store, get_embedding_service(config), config)
        ingestor = BatchIngestor(pipeline)

        with tqdm(total=total_files, desc="Ingesting") as progress:
            report = ingestor.ingest_directory(
                args.directory,
                document_type=DocumentType(args.type),
                status=BillStatus(args.status),
                skip_existing=args.skip_existing,
                force=args.force,
                dry_run=args.dry_run,
                on_file=lambda entry: progress.update(1),
            )

    logger.info("=" * 60)
    logger.info("BATCH INGESTION SUMMARY")
    logger.info("=" * 60)
    for key, value in report.summary().items():
        logger.info(f"{key.title()}: {value:,}")

    for entry in report.files:
        if entry.action == "failed":
            logger.error(f"  - {entry.file_name}: {entry.result.error}")

    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
