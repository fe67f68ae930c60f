"""Tests for the report service (upload checks, OCR glue, merging)."""

from decimal import Decimal

import pytest

from tipjar.config import Config, OCRConfig
from tipjar.extractors import MISSING_TOTAL_HOURS_WARNING, NO_PARTNERS_WARNING
from tipjar.ocr_client import DocumentIntelligenceClient, OCRAPIError, ReadResult
from tipjar.schemas import ParsedReport, Partner, RoundingMode
from tipjar.services import ReportService, UploadRejectedError, merge_manual_parse


class StubOCRClient:
    """Returns a canned ReadResult and records what it was sent."""

    def __init__(self, result: ReadResult = None, error: Exception = None):
        self.result = result
        self.error = error
        self.calls = []

    def analyze(self, file_bytes, content_type="application/octet-stream"):
        self.calls.append((file_bytes, content_type))
        if self.error:
            raise self.error
        return self.result


class TestExtractDocument:
    """Tests for ReportService.extract_document."""

    def test_extract_sets_confidence(self, sample_report_text):
        ocr = StubOCRClient(ReadResult(sample_report_text, [0.99, 0.97, 0.8, 0.96], "req-1"))
        service = ReportService(ocr_client=ocr)

        report = service.extract_document(b"%PDF-1.4", "application/pdf")

        assert ocr.calls == [(b"%PDF-1.4", "application/pdf")]
        assert len(report.partners) == 4
        assert report.store_number == "8123"
        assert report.confidence == 0.93

    def test_no_words_means_no_confidence(self, sample_report_text):
        service = ReportService(ocr_client=StubOCRClient(ReadResult(sample_report_text)))

        report = service.extract_document(b"%PDF-1.4")

        assert report.confidence is None
        assert "confidence" not in report.to_dict()

    def test_unreadable_document_degrades_to_warnings(self):
        service = ReportService(ocr_client=StubOCRClient(ReadResult("", [0.4])))

        report = service.extract_document(b"%PDF-1.4")

        assert report.partners == []
        assert report.warnings == [NO_PARTNERS_WARNING, MISSING_TOTAL_HOURS_WARNING]
        assert report.confidence == 0.4

    def test_empty_upload_rejected(self):
        ocr = StubOCRClient(ReadResult("x"))

        with pytest.raises(UploadRejectedError, match="No file uploaded"):
            ReportService(ocr_client=ocr).extract_document(b"")
        assert ocr.calls == []

    def test_oversize_upload_rejected_before_ocr(self):
        ocr = StubOCRClient(ReadResult("x"))
        service = ReportService(ocr_client=ocr, max_file_size=2 * 1024 * 1024)

        with pytest.raises(UploadRejectedError, match="File exceeds 2 MB limit."):
            service.extract_document(b"x" * (2 * 1024 * 1024 + 1))
        assert ocr.calls == []

    def test_upload_at_limit_accepted(self):
        ocr = StubOCRClient(ReadResult(""))
        service = ReportService(ocr_client=ocr, max_file_size=1024)

        service.extract_document(b"x" * 1024)
        assert len(ocr.calls) == 1

    def test_without_ocr_client(self):
        with pytest.raises(UploadRejectedError, match="No OCR service configured"):
            ReportService().extract_document(b"%PDF-1.4")

    def test_ocr_errors_propagate(self):
        service = ReportService(ocr_client=StubOCRClient(error=OCRAPIError(500, "boom")))

        with pytest.raises(OCRAPIError):
            service.extract_document(b"%PDF-1.4")

    def test_from_config(self):
        config = Config(
            ocr=OCRConfig(endpoint="https://ocr.test", api_key="k", max_file_size_bytes=1000)
        )
        service = ReportService.from_config(config)

        assert isinstance(service.ocr_client, DocumentIntelligenceClient)
        assert service.max_file_size == 1000


class TestParseAndDistribute:
    """Tests for text parsing and distribution through the service."""

    def test_parse_text_has_no_confidence(self, single_partner_text):
        report = ReportService().parse_text(single_partner_text)

        assert report.partners[0].partner_number == "12345"
        assert report.confidence is None

    def test_distribute_uses_report_total(self):
        report = ParsedReport(
            partners=[Partner("12345", "Smith, Alex J", Decimal("10"))],
            total_tippable_hours=Decimal("50"),
        )
        result = ReportService().distribute(report, 100, RoundingMode.CENT)

        assert result.hourly_rate == Decimal("2")
        assert result.payouts[0].rounded_payout == Decimal("100.00")

    def test_distribute_without_total_sums_hours(self, sample_report_text):
        service = ReportService()
        report = service.parse_text(sample_report_text)
        report.total_tippable_hours = None

        result = service.distribute(report, "411.00", "quarter")

        assert result.hourly_rate == Decimal("4")
        assert result.total_rounded == Decimal("411.00")


class TestMergeManualParse:
    """Tests for merging a manual paste into an existing report."""

    @pytest.fixture
    def current(self):
        return ParsedReport(
            partners=[Partner("12345", "Smith, Alex J", Decimal("31.45"), "US98765432")],
            total_tippable_hours=Decimal("31.45"),
            store_number="8123",
            time_period="10/01/2024–10/14/2024",
            confidence=0.91,
            warnings=["old warning"],
        )

    def test_found_fields_replace(self, current, sample_report_text):
        parsed = ReportService().parse_text(sample_report_text)

        merged = merge_manual_parse(current, parsed)

        assert len(merged.partners) == 4
        assert merged.total_tippable_hours == Decimal("102.75")
        assert merged.warnings == []

    def test_missing_fields_keep_previous(self, current):
        parsed = ReportService().parse_text("23456 Nguyen, Bao US12345678 20.00")

        merged = merge_manual_parse(current, parsed)

        assert [p.partner_number for p in merged.partners] == ["23456"]
        assert merged.total_tippable_hours == Decimal("31.45")
        assert merged.store_number == "8123"
        assert merged.time_period == "10/01/2024–10/14/2024"
        assert merged.confidence == 0.91
        # Warnings always come from the new parse
        assert merged.warnings == [MISSING_TOTAL_HOURS_WARNING]

    def test_empty_paste_keeps_partners(self, current):
        merged = merge_manual_parse(current, ReportService().parse_text(""))

        assert merged.partners == current.partners
        assert merged.warnings == [NO_PARTNERS_WARNING, MISSING_TOTAL_HOURS_WARNING]

    def test_current_not_mutated(self, current):
        merge_manual_parse(current, ReportService().parse_text("Store #9999"))
        assert current.store_number == "8123"
        assert current.warnings == ["old warning"]
