"""
Proportional tip allocation.

Splits a tip pool across partners by hours, snaps each share to the
active rounding unit and reconciles the rounding error back into the
total.

Rounding Strategy (SSOT):
- All intermediate calculations use full Decimal precision
- Each exact share is quantized to the nearest unit (ROUND_HALF_UP,
  i.e. half away from zero), then expressed at cent precision
- The whole reconciliation delta goes to ONE partner: the one whose
  exact share has the largest fractional part (first in input order
  on ties). That partner's payout may end up off the unit grid.
- RoundingMode.NONE only rounds to cents and never reconciles

Degenerate input:
- A non-positive hours basis yields a zero rate and zero payouts. The
  pool is reported as the delta but is not absorbed by anyone.
"""

import logging
from collections.abc import Sequence
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, getcontext, localcontext
from typing import Optional

from ..schemas.tip_report import (
    CURRENCY_PRECISION,
    DistributeResult,
    Partner,
    PartnerPayout,
    RoundingMode,
    to_decimal,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def apply_rounding(value: Decimal, mode: RoundingMode) -> Decimal:
    """Round an exact share for display under the given mode.

    Args:
        value: Exact (unrounded) share
        mode: Active rounding mode

    Returns:
        Value snapped to the mode's unit, at cent precision
    """
    unit = mode.unit
    with localcontext() as ctx:
        # Quantizing needs every integer digit plus the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 6)
        if unit is None:
            return value.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)

        units = (value / unit).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return (units * unit).quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)


def fractional_part(value: Decimal) -> Decimal:
    """Share minus its floor, independent of the rounding unit."""
    return value - value.to_integral_value(rounding=ROUND_FLOOR)


def select_remainder_target(payouts: Sequence[PartnerPayout]) -> Optional[int]:
    """Index of the payout with the largest fractional remainder.

    Ties go to the earliest payout in input order.
    """
    best_index: Optional[int] = None
    best_fraction = ZERO

    for index, payout in enumerate(payouts):
        fraction = fractional_part(payout.payout)
        if best_index is None or fraction > best_fraction:
            best_index = index
            best_fraction = fraction

    return best_index


def working_precision(
    pool: Decimal,
    partners: Sequence[Partner],
    total_hours: Optional[Decimal] = None,
) -> int:
    """Context precision that keeps every share significant down to the cent.

    Shares grow with the pool and with partner hours, and shrink with the
    hours basis, so each adds its integer digits on top of the default
    precision.
    """
    digits = max(pool.adjusted(), 0)
    digits += max((max(p.hours.adjusted(), 0) for p in partners), default=0)
    if total_hours is not None and total_hours > 0:
        digits += max(-total_hours.adjusted(), 0)
    return getcontext().prec + digits + 3


def resolve_hours_basis(
    partners: Sequence[Partner],
    total_hours: Optional[Decimal] = None,
) -> Decimal:
    """Authoritative total if given, otherwise the sum of partner hours."""
    if total_hours is not None:
        return total_hours
    return sum((p.hours for p in partners), ZERO)


def distribute(
    partners: Sequence[Partner],
    total_pool: Decimal | float | int | str,
    rounding: RoundingMode | str = RoundingMode.NONE,
    total_hours: Decimal | float | int | str | None = None,
) -> DistributeResult:
    """
    Allocate a tip pool across partners in proportion to hours.

    Pure and stateless: identical inputs always produce identical outputs.
    Callers are expected to validate hours and pool upstream.

    Args:
        partners: Partner rows, in display order
        total_pool: Amount to distribute
        rounding: Rounding mode or its token (e.g. "quarter")
        total_hours: Authoritative hours basis (default: sum of partner hours)

    Returns:
        DistributeResult with per-partner payouts, hourly rate and the
        reconciliation delta

    Raises:
        UnknownRoundingModeError: If ``rounding`` is not a known mode
    """
    mode = RoundingMode.parse(rounding)
    pool = to_decimal(total_pool)
    hours_override = to_decimal(total_hours) if total_hours is not None else None

    with localcontext() as ctx:
        ctx.prec = working_precision(pool, partners, hours_override)
        return _allocate(partners, pool, mode, hours_override)


def _allocate(
    partners: Sequence[Partner],
    pool: Decimal,
    mode: RoundingMode,
    hours_override: Optional[Decimal],
) -> DistributeResult:
    hours_basis = resolve_hours_basis(partners, hours_override)
    hourly_rate = pool / hours_basis if hours_basis > 0 else ZERO

    payouts: list[PartnerPayout] = []
    for partner in partners:
        exact = partner.hours * hourly_rate
        payouts.append(
            PartnerPayout(
                partner=partner,
                payout=exact,
                rounded_payout=apply_rounding(exact, mode),
            )
        )

    if mode is RoundingMode.NONE:
        logger.debug(
            "Distributed %s across %d partners at %s/h (no rounding)",
            pool,
            len(payouts),
            hourly_rate,
        )
        return DistributeResult(payouts=payouts, hourly_rate=hourly_rate, rounding_delta=ZERO)

    rounded_total = sum((p.rounded_payout for p in payouts), ZERO)
    delta = pool.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP) - rounded_total

    target = select_remainder_target(payouts) if hours_basis > 0 else None
    if delta != 0 and target is not None:
        payouts[target].rounded_payout += delta
        logger.info(
            "Rounding delta %s absorbed by partner %s",
            delta,
            payouts[target].partner.partner_number,
        )
    elif delta != 0:
        logger.warning(
            "No partner to absorb the rounding delta; %s of the pool is unallocated", delta
        )

    logger.debug(
        "Distributed %s across %d partners at %s/h (%s rounding, delta %s)",
        pool,
        len(payouts),
        hourly_rate,
        mode.value,
        delta,
    )
    return DistributeResult(payouts=payouts, hourly_rate=hourly_rate, rounding_delta=delta)
