"""
Presence checks for deal frames before they enter the engine.

Only blocking problems (missing columns, no rows) are errors. Everything
record-level is a warning: the engine drops such deals on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import pandas as pd

from core.schema import (
    DEAL_STATUS,
    DEAL_VALUE,
    EVENT_DATE,
    LOST_DATE,
    REQUIRED_DEAL_COLUMNS,
    STATUS_LOST,
    STATUS_WON,
    WON_DATE,
)
from core.utils import parse_amounts, parse_dates


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a deal frame."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_deals(deals: pd.DataFrame) -> ValidationResult:
    """
    Run presence checks on a canonical deal frame.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    missing = [c for c in REQUIRED_DEAL_COLUMNS if c not in deals.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result

    if len(deals) == 0:
        result.errors.append("Deal file is empty (0 rows).")
        return result

    values = parse_amounts(deals[DEAL_VALUE])
    n_bad = int(values.isna().sum())
    n_non_positive = int((values <= 0).sum())
    if n_bad > 0:
        result.warnings.append(f"{n_bad} rows have a blank or unparseable {DEAL_VALUE}.")
    if n_non_positive > 0:
        result.warnings.append(f"{n_non_positive} rows have zero or negative {DEAL_VALUE}.")

    won = deals[DEAL_STATUS] == STATUS_WON
    lost = deals[DEAL_STATUS] == STATUS_LOST

    for dcol, mask, label in (
        (WON_DATE, won, "won"),
        (EVENT_DATE, won, "won"),
        (LOST_DATE, lost, "lost"),
    ):
        if not mask.any():
            continue
        if dcol not in deals.columns:
            result.warnings.append(f"No {dcol} column; {label} deals will be skipped.")
            continue
        n_null = int(parse_dates(deals.loc[mask, dcol]).isna().sum())
        if n_null > 0:
            result.warnings.append(f"{n_null} {label} deals have a blank or unparseable {dcol}.")

    n_other = int((~(won | lost)).sum())
    if n_other > 0:
        result.warnings.append(f"{n_other} deals are neither won nor lost and are ignored.")

    return result
