"""
Generate Representative Embeddings

Creates a profile embedding for every representative in the database so
members can be found by semantic search.

Usage:
    # Embed representatives that have no embedding yet
    python scripts/generate_representative_embeddings.py

    # Regenerate all embeddings
    python scripts/generate_representative_embeddings.py --force

    # Process at most 20 representatives
    python scripts/generate_representative_embeddings.py --limit 20
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
from civicrag.ingestion import RepresentativeEmbeddingGenerator
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
    parser = argparse.ArgumentParser(description="Generate representative profile embeddings")
    parser.add_argument("--force", action="store_true", help="Regenerate existing embeddings")
    parser.add_argument("--limit", type=int, help="Process at most this many representatives")

    args = parser.parse_args()

    config = get_rag_config()
    with Database() as database:
        store = PgVectorStore(database, dimension=config.embedding_dimension)
        generator = RepresentativeEmbeddingGenerator(store, get_embedding_service(config), config)

        with tqdm(desc="Representatives") as progress:
            report = generator.generate(
                force=args.force,
                limit=args.limit,
                on_progress=progress.update,
            )

    logger.info("=" * 60)
    logger.info(f"Representatives: {report.total}")
    logger.info(f"Skipped (already embedded): {report.skipped}")
    logger.info(f"Processed: {report.processed}")
    logger.info(f"Errors: {len(report.errors)}")
    for label, error in report.errors:
        logger.error(f"  - {label}: {error}")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
