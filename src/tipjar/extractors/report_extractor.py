"""
Tip distribution report extractor.

Turns the flattened text of a tip distribution report into partner rows
and report metadata using three independent scans over the same text:

- Partner rows: one fixed-shape match per line, all or nothing
- Labeled fields: total tippable hours, store number, time period
  (whole-text scan, first match wins, later matches are ignored)

Row shape:
    12345  Smith, Alex J  US98765432  31.45
    <4-6 digit number> <name> <US global id> <hours, 0-2 decimals>
"""

import logging
import re
from decimal import Decimal

from ..schemas.tip_report import ParsedReport, Partner
from .base import BaseExtractor

logger = logging.getLogger(__name__)

# Partner row: anchored, name is non-greedy and must end on a non-space
PARTNER_ROW_PATTERN = re.compile(
    r"^([0-9]{4,6})\s+(.*?\S)\s+(US[A-Z0-9]+)\s+([0-9]+(?:\.[0-9]{1,2})?)$"
)

TOTAL_HOURS_PATTERN = re.compile(
    r"Total Tippable Hours:\s*([0-9]+(?:\.[0-9]{1,2})?)", re.IGNORECASE
)

STORE_NUMBER_PATTERN = re.compile(r"Store\s+#?([0-9]{4,6})", re.IGNORECASE)

# Two dates separated by a hyphen or an en-dash
TIME_PERIOD_PATTERN = re.compile(
    r"([0-9]{1,2}/[0-9]{1,2}/[0-9]{2,4})\s*[–-]\s*([0-9]{1,2}/[0-9]{1,2}/[0-9]{2,4})"
)

TIME_PERIOD_SEPARATOR = "–"

NO_PARTNERS_WARNING = (
    "No partner rows detected. Ensure the upload is a Tip Distribution Report."
)
MISSING_TOTAL_HOURS_WARNING = (
    "Total tippable hours not found. You may need to enter them manually."
)


def split_lines(content: str) -> list[str]:
    """Split on any line ending, trim each line and drop blank lines."""
    return [line.strip() for line in content.splitlines() if line.strip()]


def parse_partner_row(line: str) -> Partner | None:
    """Parse one trimmed line into a Partner, or None if it is not a row."""
    match = PARTNER_ROW_PATTERN.match(line)
    if not match:
        return None

    number, name, global_id, hours = match.groups()
    return Partner(
        partner_number=number,
        name=name,
        partner_global_id=global_id,
        hours=Decimal(hours),
    )


class TipReportExtractor(BaseExtractor):
    """
    Extract partner hours from a tip distribution report.

    Malformed rows contribute nothing; the report is never rejected.
    Only two conditions produce warnings: no partner rows, and no
    total tippable hours.
    """

    @property
    def name(self) -> str:
        return "tip_report"

    def extract(self, content: str) -> ParsedReport:
        """Extract partners, labeled fields and warnings from text."""
        content = content or ""
        report = ParsedReport()

        for line in split_lines(content):
            partner = parse_partner_row(line)
            if partner:
                report.partners.append(partner)

        report.total_tippable_hours = self._extract_total_hours(content)
        report.store_number = self._extract_store_number(content)
        report.time_period = self._extract_time_period(content)

        if not report.partners:
            report.warnings.append(NO_PARTNERS_WARNING)

        if report.total_tippable_hours is None:
            report.warnings.append(MISSING_TOTAL_HOURS_WARNING)

        logger.debug(
            "Extracted %d partner rows (store=%s, period=%s, total_hours=%s)",
            len(report.partners),
            report.store_number,
            report.time_period,
            report.total_tippable_hours,
        )
        return report

    def _extract_total_hours(self, content: str) -> Decimal | None:
        match = TOTAL_HOURS_PATTERN.search(content)
        return Decimal(match.group(1)) if match else None

    def _extract_store_number(self, content: str) -> str | None:
        match = STORE_NUMBER_PATTERN.search(content)
        return match.group(1) if match else None

    def _extract_time_period(self, content: str) -> str | None:
        """Re-emit the first date range with an en-dash separator."""
        match = TIME_PERIOD_PATTERN.search(content)
        if not match:
            return None
        return f"{match.group(1)}{TIME_PERIOD_SEPARATOR}{match.group(2)}"


_default_extractor = TipReportExtractor()


def extract(text: str) -> ParsedReport:
    """Extract a ParsedReport from report text using the default extractor."""
    return _default_extractor.extract(text)
