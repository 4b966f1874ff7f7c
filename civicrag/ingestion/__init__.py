"""
Document and representative ingestion.

Extraction, chunking, rate-limited embedding and persistence of legislative
documents, plus import and profile embeddings for representatives.
"""

from .batch import BatchIngestor, BatchIngestReport
from .extractor import ExtractedDocument, TextExtractor
from .pipeline import IngestionPipeline, IngestionResult, IngestionStage
from .representatives import (
    RepresentativeEmbeddingGenerator,
    RepresentativeImporter,
    load_scraped_representatives,
)
from .summaries import SummaryGenerator

__all__ = [
    "BatchIngestor",
    "BatchIngestReport",
    "ExtractedDocument",
    "TextExtractor",
    "IngestionPipeline",
    "IngestionResult",
    "IngestionStage",
    "RepresentativeEmbeddingGenerator",
    "RepresentativeImporter",
    "load_scraped_representatives",
    "SummaryGenerator",
]
