"""
Tip pool allocation.

Provides:
- distribute(): Proportional split of a pool by hours with rounding and
  single-partner reconciliation of the rounding delta
- Helpers for rounding and remainder selection

Pure calculation, no I/O.
"""

from .engine import (
    apply_rounding,
    distribute,
    fractional_part,
    resolve_hours_basis,
    select_remainder_target,
    working_precision,
)

__all__ = [
    "distribute",
    "apply_rounding",
    "fractional_part",
    "resolve_hours_basis",
    "select_remainder_target",
    "working_precision",
]
