"""
Canonical tip report objects (SSOT).

These are the only shapes that flow between the extractor, the allocation
engine, the web API and the CLI. Field names in ``to_dict()`` are the wire
names the HTTP boundary serializes, so they must not drift.

Amount conventions:
- Hours and money are ``Decimal`` internally
- Wire format uses JSON numbers
- Optional fields are omitted from the wire format when absent
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Optional

# Rounding precision for currency amounts
CURRENCY_PRECISION = Decimal("0.01")

PARTNER_NUMBER_PATTERN = re.compile(r"^[0-9]{4,6}$")
PARTNER_GLOBAL_ID_PATTERN = re.compile(r"^US[A-Z0-9]+$")


class UnknownRoundingModeError(ValueError):
    """Raised when a rounding mode token is not one of the supported modes."""

    pass


class RoundingMode(str, Enum):
    """
    Monetary granularity a payout is snapped to.

    NONE: Exact share, shown at cent precision, no reconciliation
    CENT / DIME / QUARTER / DOLLAR: Quantize to 0.01 / 0.10 / 0.25 / 1.00
    """

    NONE = "none"
    CENT = "cent"
    DIME = "dime"
    QUARTER = "quarter"
    DOLLAR = "dollar"

    @property
    def unit(self) -> Optional[Decimal]:
        """Rounding unit for this mode (None for NONE)."""
        return ROUNDING_UNITS[self]

    @classmethod
    def parse(cls, token: "str | RoundingMode") -> "RoundingMode":
        """Resolve a user/config token to a mode.

        Raises:
            UnknownRoundingModeError: If the token is not a known mode.
        """
        if isinstance(token, cls):
            return token
        normalized = str(token).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(mode.value for mode in cls)
            raise UnknownRoundingModeError(
                f"Unknown rounding mode {token!r} (expected one of: {valid})"
            ) from None


ROUNDING_UNITS: dict[RoundingMode, Optional[Decimal]] = {
    RoundingMode.NONE: None,
    RoundingMode.CENT: Decimal("0.01"),
    RoundingMode.DIME: Decimal("0.10"),
    RoundingMode.QUARTER: Decimal("0.25"),
    RoundingMode.DOLLAR: Decimal("1.00"),
}


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a wire/user value to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, str):
        value = value.strip()
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a number: {value!r}") from e


def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    return to_decimal(value)


@dataclass
class Partner:
    """One line item of a tip distribution report."""

    partner_number: str  # 4-6 digits, unique within one report
    name: str  # e.g. "Smith, Alex J"
    hours: Decimal
    partner_global_id: Optional[str] = None  # e.g. "US98765432"

    def __post_init__(self):
        self.hours = to_decimal(self.hours)

    def validate(self) -> list[str]:
        """Validate a partner row (typically after a manual edit).

        Returns:
            List of validation errors (empty if valid).
        """
        errors: list[str] = []
        label = self.partner_number or "(new partner)"

        if not PARTNER_NUMBER_PATTERN.match(self.partner_number or ""):
            errors.append(f"Partner {label}: partner number must be 4-6 digits")

        if not self.name or not self.name.strip():
            errors.append(f"Partner {label}: name is required")

        if self.partner_global_id and not PARTNER_GLOBAL_ID_PATTERN.match(
            self.partner_global_id
        ):
            errors.append(
                f"Partner {label}: global id must start with 'US' followed by letters or digits"
            )

        if not self.hours.is_finite():
            errors.append(f"Partner {label}: hours must be a finite number")
        elif self.hours < 0:
            errors.append(f"Partner {label}: hours cannot be negative (got {self.hours})")
        elif self.hours != self.hours.quantize(CURRENCY_PRECISION):
            errors.append(f"Partner {label}: hours allow at most 2 decimal places")

        return errors

    def to_dict(self) -> dict:
        """Serialize to the wire shape."""
        data: dict[str, Any] = {
            "partner_number": self.partner_number,
            "name": self.name,
        }
        if self.partner_global_id:
            data["partner_global_id"] = self.partner_global_id
        data["hours"] = float(self.hours)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Partner":
        """Deserialize from the wire shape."""
        return cls(
            partner_number=str(data.get("partner_number") or "").strip(),
            name=str(data.get("name") or "").strip(),
            hours=to_decimal(data.get("hours", 0) or 0),
            partner_global_id=data.get("partner_global_id") or None,
        )


def validate_partners(partners: list[Partner]) -> list[str]:
    """Validate a full partner list, including duplicate partner numbers.

    Returns:
        List of validation errors (empty if valid).
    """
    errors: list[str] = []
    seen: set[str] = set()

    for partner in partners:
        errors.extend(partner.validate())
        if partner.partner_number in seen:
            errors.append(f"Partner {partner.partner_number}: duplicate partner number")
        seen.add(partner.partner_number)

    return errors


@dataclass
class ParsedReport:
    """
    Structured tip distribution report (output of extraction).

    ``warnings`` is never None; an empty list means nothing was flagged.
    """

    partners: list[Partner] = field(default_factory=list)
    total_tippable_hours: Optional[Decimal] = None  # Authoritative total, if printed
    store_number: Optional[str] = None
    time_period: Optional[str] = None  # "MM/DD/YYYY–MM/DD/YYYY"
    confidence: Optional[float] = None  # Mean OCR word confidence, 0.0 - 1.0
    warnings: list[str] = field(default_factory=list)

    @property
    def total_hours(self) -> Decimal:
        """Calculated sum of partner hours."""
        return sum((p.hours for p in self.partners), Decimal("0"))

    def to_dict(self) -> dict:
        """Serialize to the wire shape."""
        data: dict[str, Any] = {}
        if self.store_number is not None:
            data["store_number"] = self.store_number
        if self.time_period is not None:
            data["time_period"] = self.time_period
        if self.total_tippable_hours is not None:
            data["total_tippable_hours"] = float(self.total_tippable_hours)
        data["partners"] = [p.to_dict() for p in self.partners]
        if self.confidence is not None:
            data["confidence"] = self.confidence
        data["warnings"] = list(self.warnings)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ParsedReport":
        """Deserialize from the wire shape."""
        confidence = data.get("confidence")
        return cls(
            partners=[Partner.from_dict(p) for p in data.get("partners") or []],
            total_tippable_hours=_optional_decimal(data.get("total_tippable_hours")),
            store_number=data.get("store_number"),
            time_period=data.get("time_period"),
            confidence=float(confidence) if confidence is not None else None,
            warnings=list(data.get("warnings") or []),
        )


@dataclass
class PartnerPayout:
    """A partner with its share of the pool."""

    partner: Partner
    payout: Decimal  # Exact share: hours * hourly_rate
    rounded_payout: Decimal  # Rounded to the active unit, then reconciled

    def to_dict(self) -> dict:
        """Serialize to the wire shape (Partner fields plus payouts)."""
        data = self.partner.to_dict()
        data["payout"] = float(self.payout)
        data["roundedPayout"] = float(self.rounded_payout)
        return data


@dataclass
class DistributeResult:
    """Result of one allocation run. Recomputed on every edit, never stored."""

    payouts: list[PartnerPayout]
    hourly_rate: Decimal
    rounding_delta: Decimal

    @property
    def total_rounded(self) -> Decimal:
        """Sum of all rounded payouts, exact to the cent."""
        with localcontext() as ctx:
            for p in self.payouts:
                ctx.prec = max(ctx.prec, p.rounded_payout.adjusted() + 3 + len(self.payouts))
            return sum((p.rounded_payout for p in self.payouts), Decimal("0"))

    def to_dict(self) -> dict:
        """Serialize to the wire shape."""
        return {
            "payouts": [p.to_dict() for p in self.payouts],
            "hourlyRate": float(self.hourly_rate),
            "roundingDelta": float(self.rounding_delta),
        }
