"""
Base extractor interface.
"""

from abc import ABC, abstractmethod

from ..schemas.tip_report import ParsedReport


class BaseExtractor(ABC):
    """
    Base class for report extractors.

    Extractors are pure: text in, ParsedReport out. They never raise on
    malformed input; problems are reported through ``ParsedReport.warnings``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Extractor name for logging."""
        pass

    @abstractmethod
    def extract(self, content: str) -> ParsedReport:
        """
        Extract a structured report from text.

        Args:
            content: OCR transcript or pasted text

        Returns:
            ParsedReport with partners, metadata and warnings
        """
        pass
