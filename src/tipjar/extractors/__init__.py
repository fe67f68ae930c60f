"""
Tip report extractors.

Provides:
- TipReportExtractor: Line-oriented pattern extraction of partner rows
  and report metadata from OCR or pasted text
- extract(): Convenience wrapper around the default extractor
- Base class for custom extractors
"""

from .base import BaseExtractor
from .report_extractor import (
    MISSING_TOTAL_HOURS_WARNING,
    NO_PARTNERS_WARNING,
    TipReportExtractor,
    extract,
)

__all__ = [
    "BaseExtractor",
    "TipReportExtractor",
    "extract",
    "NO_PARTNERS_WARNING",
    "MISSING_TOTAL_HOURS_WARNING",
]
