"""
Report service: wires OCR, extraction and allocation together.

The extractor and the allocation engine are pure; this service owns the
glue around them:
- Upload checks (empty / oversize) before any OCR call
- Averaging OCR word confidences into ``ParsedReport.confidence``
- Merging a manual paste into an edited report
- Running a distribution with the report's authoritative total hours
"""

import dataclasses
import logging
from decimal import Decimal
from typing import Optional

from ..allocation import distribute
from ..confidence import average_confidence
from ..config import DEFAULT_MAX_FILE_SIZE, Config
from ..extractors import BaseExtractor, TipReportExtractor
from ..ocr_client import DocumentIntelligenceClient
from ..schemas.tip_report import DistributeResult, ParsedReport, RoundingMode

logger = logging.getLogger(__name__)


class UploadRejectedError(Exception):
    """Raised when an upload is refused before it reaches the OCR service."""

    pass


def merge_manual_parse(current: ParsedReport, parsed: ParsedReport) -> ParsedReport:
    """
    Apply a manual-paste parse on top of an existing (possibly edited) report.

    Warnings are always replaced by the new parse. Partners, total hours,
    store number and time period are only replaced when the new parse
    found them, so a paste without a header keeps the previous metadata.
    Confidence stays with the current report.
    """
    return dataclasses.replace(
        current,
        partners=list(parsed.partners) if parsed.partners else list(current.partners),
        total_tippable_hours=(
            parsed.total_tippable_hours
            if parsed.total_tippable_hours is not None
            else current.total_tippable_hours
        ),
        store_number=parsed.store_number if parsed.store_number is not None else current.store_number,
        time_period=parsed.time_period if parsed.time_period is not None else current.time_period,
        warnings=list(parsed.warnings),
    )


class ReportService:
    """
    Turns documents or pasted text into ParsedReports and distributes tips.

    Usage:
        service = ReportService.from_config(config)
        report = service.extract_document(pdf_bytes, "application/pdf")
        result = service.distribute(report, Decimal("250.00"), RoundingMode.QUARTER)
    """

    def __init__(
        self,
        ocr_client: Optional[DocumentIntelligenceClient] = None,
        extractor: Optional[BaseExtractor] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.ocr_client = ocr_client
        self.extractor = extractor or TipReportExtractor()
        self.max_file_size = max_file_size

    @classmethod
    def from_config(cls, config: Config) -> "ReportService":
        """Create a service with an OCR client built from config."""
        return cls(
            ocr_client=DocumentIntelligenceClient.from_config(config.ocr),
            max_file_size=config.ocr.max_file_size_bytes,
        )

    def check_upload(self, file_bytes: bytes) -> None:
        """Reject empty and oversize uploads.

        Raises:
            UploadRejectedError: With a user-facing message
        """
        if not file_bytes:
            raise UploadRejectedError("No file uploaded")
        if len(file_bytes) > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            raise UploadRejectedError(f"File exceeds {limit_mb} MB limit.")

    def extract_document(
        self, file_bytes: bytes, content_type: str = "application/octet-stream"
    ) -> ParsedReport:
        """
        OCR a document and extract a report from its transcript.

        Raises:
            UploadRejectedError: If the upload is empty or too large
            OCRError: If the OCR service fails (see ocr_client)
        """
        self.check_upload(file_bytes)
        if self.ocr_client is None:
            raise UploadRejectedError("No OCR service configured for document uploads")

        read_result = self.ocr_client.analyze(file_bytes, content_type)
        report = self.extractor.extract(read_result.content)
        report.confidence = average_confidence(read_result.word_confidences)

        logger.info(
            "extract:%s: %s found %d partners, %d warnings, confidence=%s",
            read_result.request_id,
            self.extractor.name,
            len(report.partners),
            len(report.warnings),
            report.confidence,
        )
        return report

    def parse_text(self, text: str) -> ParsedReport:
        """Extract a report from pasted text (no confidence)."""
        return self.extractor.extract(text)

    def distribute(
        self,
        report: ParsedReport,
        total_pool: Decimal | float | int | str,
        rounding: RoundingMode | str = RoundingMode.NONE,
    ) -> DistributeResult:
        """Distribute a pool over a report's partners.

        The report's total tippable hours, when present, is the hours basis.
        """
        return distribute(
            report.partners,
            total_pool,
            rounding,
            total_hours=report.total_tippable_hours,
        )
