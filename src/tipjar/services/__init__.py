"""
Service layer for tipjar.

Provides:
- ReportService: OCR + extraction + confidence + distribution glue
- merge_manual_parse: Apply a pasted-text parse onto an edited report
"""

from .report_service import ReportService, UploadRejectedError, merge_manual_parse

__all__ = [
    "ReportService",
    "UploadRejectedError",
    "merge_manual_parse",
]
