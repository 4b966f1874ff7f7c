"""
Text Chunking for RAG

Splits extracted document text into overlapping chunks that can be
embedded and retrieved independently.

Strategy:
- Every chunk is an exact slice of the source text (no cleaning), so the
  chunks tile the document with only the configured overlap duplicated
- Chunk ends are placed on the best separator found in the tail of the
  window (paragraph break, then line break, sentence end, comma, space),
  with a hard character cut as the last resort
- Consecutive chunks overlap by exactly ``chunk_overlap`` characters, except
  the final pair which may overlap less so the tail fits in one chunk
- Each chunk records its page number, a detected section heading and a
  detected date/time token
"""

import re
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .config import RAGConfig

SEPARATORS: Sequence[str] = ("\n\n", "\n", ". ", "! ", "? ", ", ", " ")

# Joins extracted pages into one text; also a paragraph break for splitting
PAGE_SEPARATOR = "\n\n"

SECTION_PATTERNS = [
    re.compile(r"^#{1,6}\s+(.+)$", re.MULTILINE),                       # markdown header
    re.compile(r"^([A-Z][A-Za-z \t]{2,}:)", re.MULTILINE),              # "Label:" line
    re.compile(r"^(\d+\.\d*\s+[A-Z][A-Za-z \t]{2,})", re.MULTILINE),    # "1.2 Title"
    re.compile(r"^([A-Z][A-Za-z \t]{2,})$", re.MULTILINE),              # bare title line
]

TIMESTAMP_PATTERNS = [
    re.compile(r"\b(\d{4}-\d{2}-\d{2})\b"),
    re.compile(r"\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})\b"),
    re.compile(
        r"\b((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4})\b"
    ),
    re.compile(r"\b(\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AaPp][Mm])?)\b"),
]


def detect_section(content: str) -> Optional[str]:
    """Return the first section heading found in priority order, or None."""
    for pattern in SECTION_PATTERNS:
        match = pattern.search(content)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return None


def detect_timestamp(content: str) -> Optional[str]:
    """Return the first date or clock-time token found in priority order, or None."""
    for pattern in TIMESTAMP_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.group(1)
    return None


@dataclass
class TextChunk:
    """A chunk of text with its position in the source document."""
    text: str
    chunk_index: int
    char_start: int
    char_end: int
    page_number: int = 1
    section: Optional[str] = None
    timestamp: Optional[str] = None
    level: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def metadata(self) -> Dict[str, Any]:
        """Metadata bag persisted alongside the chunk embedding."""
        data = {
            "pageNumber": self.page_number,
            "section": self.section,
            "timestamp": self.timestamp,
            "level": self.level,
            "chunkIndex": self.chunk_index,
            "charStart": self.char_start,
            "charEnd": self.char_end,
        }
        data.update(self.extra)
        return data


class TextChunker:
    """Splits text into overlapping chunks for embedding."""

    def __init__(self, config: RAGConfig):
        """
        Initialize chunker.

        Args:
            config: RAG configuration
        """
        self.config = config
        self.chunk_size = config.chunk_size
        self.chunk_overlap = config.chunk_overlap
        self.separators = SEPARATORS
        # Separators are only searched for near the end of the window
        self.break_window = max(self.chunk_overlap, self.chunk_size // 5)

    def chunk_text(self, text: str) -> List[TextChunk]:
        """
        Split a single-page text into chunks.

        Args:
            text: Text to chunk

        Returns:
            List of TextChunk objects (empty for empty text)
        """
        return self.chunk_pages([text])

    def chunk_pages(self, pages: Sequence[str]) -> List[TextChunk]:
        """
        Split a multi-page document into chunks.

        Pages are joined with a paragraph break; each chunk is assigned the
        page on which it starts.

        Args:
            pages: Extracted text of each page, in order

        Returns:
            List of TextChunk objects
        """
        text = PAGE_SEPARATOR.join(pages)
        page_starts = []
        offset = 0
        for page in pages:
            page_starts.append(offset)
            offset += len(page) + len(PAGE_SEPARATOR)

        chunks = []
        for index, (start, end) in enumerate(self.split_offsets(text)):
            content = text[start:end]
            chunks.append(TextChunk(
                text=content,
                chunk_index=index,
                char_start=start,
                char_end=end,
                page_number=bisect_right(page_starts, start) or 1,
                section=detect_section(content),
                timestamp=detect_timestamp(content),
            ))
        return chunks

    def split_offsets(self, text: str) -> List[tuple]:
        """
        Compute (start, end) character spans for each chunk.

        Args:
            text: Full document text

        Returns:
            Ordered list of spans covering the whole text
        """
        length = len(text)
        if length == 0:
            return []
        if length <= self.chunk_size:
            return [(0, length)]

        spans = []
        start = 0
        while True:
            end = self._find_break(text, start)
            spans.append((start, end))

            next_start = end - self.chunk_overlap
            if length - next_start <= self.chunk_size:
                spans.append((next_start, length))
                break
            if length - end <= self.chunk_size:
                # Tail fits in one chunk only with a reduced overlap
                spans.append((length - self.chunk_size, length))
                break
            start = next_start

        return spans

    def _find_break(self, text: str, start: int) -> int:
        """
        Find where the chunk starting at ``start`` should end.

        The end must leave the chunk longer than the overlap so the next
        chunk always advances.
        """
        limit = start + self.chunk_size
        lower = max(start + self.chunk_overlap + 1, limit - self.break_window)

        for separator in self.separators:
            idx = text.rfind(separator, lower, limit)
            if idx != -1:
                return idx + len(separator)

        return limit
