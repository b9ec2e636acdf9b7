"""
Revenue adjustment distributor: places manual monthly revenue into week buckets.

  Partnership: the full amount goes to the week holding the month's last day.
  Prior-year:  entries sharing (year, month) are summed as amount * weight;
               total / weeks_per_month is added to EVERY week touching the
               month. A month touching 5 weeks therefore contributes
               5 / 4.33 of its weighted total; this is a flat per-week rate,
               not a pro-rata split by days.

Only the weekly forecast uses these.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from core.config import ForecastConfig
from core.periods import last_week_of_month, weeks_in_month
from core.schema import AdjustmentKind, RevenueAdjustment, parse_adjustments

logger = logging.getLogger(__name__)

AdjustmentLike = Union[RevenueAdjustment, Mapping[str, Any]]


def split_adjustments(
    adjustments: Iterable[AdjustmentLike],
) -> Tuple[List[RevenueAdjustment], List[RevenueAdjustment]]:
    """Validate and partition into (partnership, prior_year)."""
    parsed = parse_adjustments(adjustments)
    partnerships = [a for a in parsed if a.kind is AdjustmentKind.PARTNERSHIP]
    prior_year = [a for a in parsed if a.kind is AdjustmentKind.PRIOR_YEAR]
    return partnerships, prior_year


def _to_series(sums: Dict[str, float], name: str) -> pd.Series:
    if not sums:
        return pd.Series(dtype=float, name=name)
    return pd.Series(sums, dtype=float, name=name).sort_index()


def distribute_partnerships(
    adjustments: Iterable[AdjustmentLike],
    *,
    config: Optional[ForecastConfig] = None,
) -> pd.Series:
    """Partnership revenue per week key."""
    cfg = config or ForecastConfig()
    partnerships, _ = split_adjustments(adjustments)

    sums: Dict[str, float] = defaultdict(float)
    for adj in partnerships:
        week = last_week_of_month(adj.year, adj.month, cfg.week_year)
        sums[week] += float(adj.amount)
        logger.debug("Partnership %s-%02d: %.2f -> %s", adj.year, adj.month, adj.amount, week)
    return _to_series(sums, "partnership_amount")


def monthly_weighted_totals(
    adjustments: Iterable[AdjustmentLike],
) -> Dict[Tuple[int, int], float]:
    """Sum of amount * weight of prior-year entries per (year, month)."""
    _, prior_year = split_adjustments(adjustments)
    totals: Dict[Tuple[int, int], float] = defaultdict(float)
    for adj in prior_year:
        totals[(adj.year, adj.month)] += adj.weighted_amount
    return dict(totals)


def distribute_prior_year(
    adjustments: Iterable[AdjustmentLike],
    *,
    config: Optional[ForecastConfig] = None,
) -> pd.Series:
    """Prior-year revenue per week key."""
    cfg = config or ForecastConfig()

    sums: Dict[str, float] = defaultdict(float)
    for (year, month), total in sorted(monthly_weighted_totals(adjustments).items()):
        weekly = total / cfg.weeks_per_month
        weeks = weeks_in_month(year, month, cfg.week_year)
        for week in weeks:
            sums[week] += weekly
        logger.debug(
            "Prior-year %s-%02d: %.2f / %s = %.2f per week over %d weeks",
            year, month, total, cfg.weeks_per_month, weekly, len(weeks),
        )
    return _to_series(sums, "prior_year_amount")
