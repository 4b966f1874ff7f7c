"""
Text Extraction

Turns raw file bytes into plain text, keeping page boundaries where the
format has them.

Supported formats:
- PDF (pypdf): one page per PDF page
- HTML (BeautifulSoup): a single page, scripts and styles removed
- Plain text / markdown: pages split on form feed (\\f)

Usage:
    extractor = TextExtractor()
    extracted = extractor.extract(data, "constitution.pdf")
    print(extracted.page_count, len(extracted.text))
"""

import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from bs4 import BeautifulSoup
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..rag.chunker import PAGE_SEPARATOR
from ..rag.exceptions import ExtractionError

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {".pdf"}
HTML_EXTENSIONS = {".html", ".htm"}
TEXT_EXTENSIONS = {".txt", ".md"}
SUPPORTED_EXTENSIONS = PDF_EXTENSIONS | HTML_EXTENSIONS | TEXT_EXTENSIONS


@dataclass
class ExtractedDocument:
    """Extracted text, one entry per source page."""
    pages: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return PAGE_SEPARATOR.join(self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)


def is_supported(file_name: str) -> bool:
    return Path(file_name).suffix.lower() in SUPPORTED_EXTENSIONS


class TextExtractor:
    """Extracts text from PDF, HTML and plain-text files."""

    def extract(self, data: bytes, file_name: str) -> ExtractedDocument:
        """
        Extract text from file bytes.

        Args:
            data: Raw file content
            file_name: Original filename (its extension selects the format)

        Returns:
            ExtractedDocument with at least one non-blank page

        Raises:
            ExtractionError: Unsupported format, unreadable file, or no text
        """
        suffix = Path(file_name).suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise ExtractionError(f"Unsupported file type '{suffix or file_name}'")
        if not data:
            raise ExtractionError(f"File is empty: {file_name}")

        if suffix in PDF_EXTENSIONS:
            pages = self._extract_pdf(data, file_name)
        elif suffix in HTML_EXTENSIONS:
            pages = [self._extract_html(self._decode(data, file_name))]
        else:
            pages = self._decode(data, file_name).split("\f")

        pages = [_normalize(page) for page in pages]
        if not any(page.strip() for page in pages):
            raise ExtractionError(f"No text could be extracted from {file_name}")

        extracted = ExtractedDocument(pages=pages)
        logger.info(
            f"Extracted {len(extracted.text):,} characters "
            f"from {extracted.page_count} page(s) of {file_name}"
        )
        return extracted

    def _extract_pdf(self, data: bytes, file_name: str) -> List[str]:
        try:
            reader = PdfReader(io.BytesIO(data))
            return [page.extract_text() or "" for page in reader.pages]
        except (PdfReadError, ValueError, KeyError, OSError) as e:
            raise ExtractionError(f"Could not read PDF {file_name}: {e}") from e

    def _extract_html(self, html_content: str) -> str:
        soup = BeautifulSoup(html_content, 'html.parser')

        # Remove unwanted tags
        for tag in soup(['script', 'style', 'meta', 'link', 'noscript']):
            tag.decompose()

        return soup.get_text(separator="\n")

    def _decode(self, data: bytes, file_name: str) -> str:
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ExtractionError(f"{file_name} is not valid UTF-8 text: {e}") from e


def _normalize(text: str) -> str:
    """Normalize line endings and collapse runs of blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
