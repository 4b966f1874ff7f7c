"""Helpers that derive document fields from source filenames."""

import re
from datetime import date, datetime
from pathlib import Path
from typing import Optional

# (pattern, strptime format), tried in order
DATE_PATTERNS = [
    (re.compile(r"(\d{4}-\d{2}-\d{2})"), "%Y-%m-%d"),
    (re.compile(r"(\d{2}-\d{2}-\d{4})"), "%d-%m-%Y"),
    (re.compile(r"(?<!\d)(\d{8})(?!\d)"), "%Y%m%d"),
]


def extract_date_from_filename(file_name: str) -> Optional[date]:
    """
    Find a date in a filename.

    Recognizes YYYY-MM-DD, DD-MM-YYYY and YYYYMMDD.

    Returns:
        The first valid date found, or None
    """
    stem = Path(file_name).stem
    for pattern, fmt in DATE_PATTERNS:
        for match in pattern.finditer(stem):
            try:
                return datetime.strptime(match.group(1), fmt).date()
            except ValueError:
                continue
    return None


def title_from_filename(file_name: str) -> str:
    """'national-assembly_bulletin-12' -> 'National Assembly Bulletin 12'"""
    stem = Path(file_name).stem
    words = re.sub(r"[-_.]+", " ", stem).split()
    return " ".join(words).title() or stem
