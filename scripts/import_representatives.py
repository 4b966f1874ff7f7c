"""
Import Representatives

Loads the scraped National Assembly member list into the database. Run
generate_representative_embeddings.py afterwards to make the new members
searchable.

Usage:
    # Import data/representatives/representatives-detailed.json
    python scripts/import_representatives.py

    # Import another file
    python scripts/import_representatives.py --file data/representatives/by-election.json

    # Add every record even if its constituency is already stored
    python scripts/import_representatives.py --no-skip-existing
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from civicrag.db import Database, PgVectorStore
from civicrag.ingestion import RepresentativeImporter, load_scraped_representatives
from civicrag.ingestion.representatives import DEFAULT_REPRESENTATIVES_FILE
from civicrag.rag.config import get_rag_config

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
    parser = argparse.ArgumentParser(description="Import scraped representatives")
    parser.add_argument(
        "--file",
        type=Path,
        default=project_root / DEFAULT_REPRESENTATIVES_FILE,
        help="Scraped representatives JSON (default: %(default)s)"
    )
    parser.add_argument(
        "--no-skip-existing",
        dest="skip_existing",
        action="store_false",
        help="Import members whose constituency is already stored"
    )

    args = parser.parse_args()

    try:
        records = load_scraped_representatives(args.file)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {args.file}: {e}")
        sys.exit(1)
    logger.info(f"Found {len(records)} representatives in {args.file}")

    config = get_rag_config()
    with Database() as database:
        store = PgVectorStore(database, dimension=config.embedding_dimension)
        importer = RepresentativeImporter(store)

        with tqdm(total=len(records), desc="Representatives") as progress:
            report = importer.import_records(
                records,
                skip_existing=args.skip_existing,
                on_progress=progress.update,
            )

    logger.info("=" * 60)
    logger.info(f"Records in file: {report.total}")
    logger.info(f"Imported: {report.imported}")
    logger.info(f"Skipped (already imported): {report.skipped}")
    logger.info(f"Errors: {len(report.errors)}")
    for label, error in report.errors:
        logger.error(f"  - {label}: {error.splitlines()[0]}")

    logger.info("By province:")
    for province, count in report.by_province.most_common():
        logger.info(f"  {province}: {count}")
    logger.info("By party:")
    for party, count in report.by_party.most_common():
        logger.info(f"  {party}: {count}")
    logger.info("=" * 60)

    if report.errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
