"""
SSOT (Single Source of Truth) schemas for tip reports and payouts.

These canonical schemas are the ONLY models used across all modules.
"""

from .tip_report import (
    CURRENCY_PRECISION,
    DistributeResult,
    ParsedReport,
    Partner,
    PartnerPayout,
    RoundingMode,
    UnknownRoundingModeError,
    to_decimal,
    validate_partners,
)

__all__ = [
    # Report (extraction output)
    "ParsedReport",
    "Partner",
    "validate_partners",
    # Distribution (allocation output)
    "DistributeResult",
    "PartnerPayout",
    "RoundingMode",
    "UnknownRoundingModeError",
    # Amounts
    "CURRENCY_PRECISION",
    "to_decimal",
]
