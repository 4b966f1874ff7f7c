"""
Ingest a Single Document

Extracts, chunks, embeds and stores one file. Bills and parliamentary
bulletins also get a generated summary record.

Usage:
    # Ingest the constitution
    python scripts/ingest_document.py data/constitution.pdf --type constitution \\
        --title "Constitution of Pakistan"

    # Ingest a bill with its details
    python scripts/ingest_document.py data/bills/finance-bill.pdf --type bill \\
        --bill-number 12 --session-number 5 --status passed --passage-date 2024-06-28

    # Replace a previously ingested file
    python scripts/ingest_document.py data/bulletins/bulletin-2024-12-31.pdf \\
        --type parliamentary_bulletin --force
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from civicrag.db import Database, PgVectorStore
from civicrag.ingestion import IngestionPipeline
from civicrag.ingestion.filenames import title_from_filename
from civicrag.models import BillStatus, DocumentType, IngestRequest
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
    parser = argparse.ArgumentParser(description="Ingest a legislative document")
    parser.add_argument("path", type=Path, help="PDF, HTML, TXT or MD file")
    parser.add_argument(
        "--type",
        required=True,
        choices=[t.value for t in DocumentType],
        help="Document type"
    )
    parser.add_argument("--title", help="Title (defaults to one derived from the filename)")
    parser.add_argument("--bill-number", help="Bill number (bills only)")
    parser.add_argument("--session-number", help="Session number (bills only)")
    parser.add_argument(
        "--status",
        choices=[s.value for s in BillStatus],
        default=BillStatus.PASSED.value,
        help="Bill status (default: passed)"
    )
    parser.add_argument("--passage-date", type=date.fromisoformat, help="YYYY-MM-DD (bills only)")
    parser.add_argument("--bulletin-date", type=date.fromisoformat, help="YYYY-MM-DD (bulletins only)")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Delete and re-ingest if the file was already ingested"
    )

    args = parser.parse_args()

    if not args.path.is_file():
        logger.error(f"File not found: {args.path}")
        sys.exit(1)

    request = IngestRequest(
        title=args.title or title_from_filename(args.path.name),
        document_type=args.type,
        original_file_name=args.path.name,
        bill_number=args.bill_number,
        session_number=args.session_number,
        status=args.status,
        passage_date=args.passage_date,
        bulletin_date=args.bulletin_date,
    )

    config = get_rag_config()
    with Database() as database:
        store = PgVectorStore(database, dimension=config.embedding_dimension)
        pipeline = IngestionPipeline(store, get_embedding_service(config), config)

        existing_id = pipeline.find_document_id(request.original_file_name)
        if existing_id is not None:
            if not args.force:
                logger.error(
                    f"{request.original_file_name} was already ingested (id {existing_id}); "
                    "use --force to replace it"
                )
                sys.exit(1)
            logger.info(f"Replacing document {existing_id} after the new version is stored")

        result = pipeline.ingest_file(args.path, request, replaces=existing_id)

    if not result.success:
        logger.error(f"Ingestion failed while {result.failed_stage.value}: {result.error}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info(f"Document id: {result.document_id}")
    logger.info(f"Embeddings: {result.embedding_count}")
    if result.derived_record_id:
        logger.info(f"Derived record: {result.derived_record_id}")
    if result.degraded:
        logger.warning(f"Summary not generated: {result.error}")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
