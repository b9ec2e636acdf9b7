"""
Forecast aggregator: merges per-period partial sums into the liquidity forecast.

Pipeline (each step returns a new frame indexed by period key):
  1. build_period_table    components -> one row per period, rounded, with total
  2. drop_past_periods     keep period >= current period (string compare)
  3. with_cumulative_balance  ascending order, running sum of the rounded totals
  4. display_order         descending order; balances already attached

The monthly view carries deal payments only. The weekly view also blends
partnership and prior-year adjustments and reports each component.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from core.config import ForecastConfig
from core.formatting import EUR_DE, Formatter
from core.periods import Granularity, month_key, week_key
from core.utils import excel_round, round_amount
from data_prep.deals import won_deals

from .adjustments import AdjustmentLike, distribute_partnerships, distribute_prior_year
from .scheduler import schedule_deal_payments

logger = logging.getLogger(__name__)

WEEKLY_COMPONENTS = ("deal_amount", "partnership_amount", "prior_year_amount")


@dataclass(frozen=True)
class ForecastEntry:
    """One period of the forecast. Component amounts are weekly-only."""
    period: str
    amount: float
    cumulative_balance: float
    formatted_amount: str = ""
    formatted_cumulative_balance: str = ""
    deal_amount: Optional[float] = None
    partnership_amount: Optional[float] = None
    prior_year_amount: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ForecastSummary:
    period_count: int
    final_balance: float
    formatted_final_balance: str
    total_amount: float
    average_amount: float


@dataclass(frozen=True)
class ForecastResult:
    """Forecast entries newest-first plus summary."""
    granularity: Granularity
    current_period: str
    entries: Tuple[ForecastEntry, ...]
    summary: ForecastSummary
    formatter: Formatter = field(default=EUR_DE, repr=False, compare=False)

    def chronological(self) -> List[ForecastEntry]:
        return sorted(self.entries, key=lambda e: e.period)

    def to_dataframe(self) -> pd.DataFrame:
        """Display-friendly table in the stored (newest-first) order."""
        rows = [e.to_dict() for e in self.entries]
        cols = ["period", "amount"]
        if self.granularity == "week":
            cols += list(WEEKLY_COMPONENTS)
        cols += ["cumulative_balance", "formatted_amount", "formatted_cumulative_balance"]
        return pd.DataFrame(rows, columns=cols)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "granularity": self.granularity,
            "current_period": self.current_period,
            "forecast": [e.to_dict() for e in self.entries],
            "summary": asdict(self.summary),
        }


# ---------------------------------------------------------------------------
# Table transformations
# ---------------------------------------------------------------------------
def build_period_table(components: Mapping[str, pd.Series]) -> pd.DataFrame:
    """
    Outer-join per-period component sums into one frame indexed by period.

    `amount` is the rounded sum of the unrounded components; each component is
    rounded on its own.
    """
    periods = sorted(set().union(*(set(s.index) for s in components.values())))
    table = pd.DataFrame(index=pd.Index(periods, name="period", dtype=object))
    for name, sums in components.items():
        table[name] = sums.reindex(table.index).fillna(0.0).astype(float)

    total = table[list(components)].sum(axis=1)
    for name in components:
        table[name] = excel_round(table[name].to_numpy(), 2)
    table["amount"] = excel_round(total.to_numpy(), 2)
    return table


def drop_past_periods(table: pd.DataFrame, current_period: str) -> pd.DataFrame:
    """Keep periods whose key sorts at or after the current period's key."""
    if table.empty:
        return table.copy()
    keep = [p >= current_period for p in table.index]
    return table.loc[keep].copy()


def with_cumulative_balance(table: pd.DataFrame) -> pd.DataFrame:
    """Ascending by period with cumulative_balance = running sum of `amount`."""
    out = table.sort_index(ascending=True).copy()
    out["cumulative_balance"] = excel_round(out["amount"].cumsum().to_numpy(), 2)
    return out


def display_order(table: pd.DataFrame) -> pd.DataFrame:
    """Newest period first."""
    return table.sort_index(ascending=False).copy()


def _summarize(chronological: pd.DataFrame, formatter: Formatter) -> ForecastSummary:
    n = len(chronological)
    final_balance = float(chronological["cumulative_balance"].iloc[-1]) if n else 0.0
    total = round_amount(chronological["amount"].sum()) if n else 0.0
    return ForecastSummary(
        period_count=n,
        final_balance=final_balance,
        formatted_final_balance=formatter(final_balance),
        total_amount=total,
        average_amount=round_amount(total / n) if n else 0.0,
    )


def _finalize(
    table: pd.DataFrame,
    *,
    granularity: Granularity,
    current_period: str,
    components: Iterable[str],
    formatter: Formatter,
) -> ForecastResult:
    future = drop_past_periods(table, current_period)
    chronological = with_cumulative_balance(future)
    shown = display_order(chronological)

    components = list(components)
    entries = []
    for period, row in shown.iterrows():
        extra = {c: float(row[c]) for c in components}
        entries.append(ForecastEntry(
            period=str(period),
            amount=float(row["amount"]),
            cumulative_balance=float(row["cumulative_balance"]),
            formatted_amount=formatter(row["amount"]),
            formatted_cumulative_balance=formatter(row["cumulative_balance"]),
            **extra,
        ))

    summary = _summarize(chronological, formatter)
    logger.info(
        "%s forecast: %d periods from %s, final balance %.2f",
        granularity, summary.period_count, current_period, summary.final_balance,
    )
    return ForecastResult(
        granularity=granularity,
        current_period=current_period,
        entries=tuple(entries),
        summary=summary,
        formatter=formatter,
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------
def compute_monthly_forecast(
    deals: pd.DataFrame,
    *,
    config: Optional[ForecastConfig] = None,
    formatter: Formatter = EUR_DE,
) -> ForecastResult:
    """
    Monthly liquidity forecast from won deals. Manual revenue adjustments are
    not blended into the monthly view.
    """
    cfg = config or ForecastConfig()
    deal_sums = schedule_deal_payments(won_deals(deals), granularity="month", config=cfg)
    table = build_period_table({"deal_amount": deal_sums})
    return _finalize(
        table,
        granularity="month",
        current_period=month_key(cfg.today()),
        components=(),
        formatter=formatter,
    )


def compute_weekly_forecast(
    deals: pd.DataFrame,
    adjustments: Optional[Iterable[AdjustmentLike]] = None,
    *,
    config: Optional[ForecastConfig] = None,
    formatter: Formatter = EUR_DE,
) -> ForecastResult:
    """Weekly liquidity forecast from won deals plus partnership and prior-year revenue."""
    cfg = config or ForecastConfig()
    adjustments = list(adjustments or [])
    table = build_period_table({
        "deal_amount": schedule_deal_payments(won_deals(deals), granularity="week", config=cfg),
        "partnership_amount": distribute_partnerships(adjustments, config=cfg),
        "prior_year_amount": distribute_prior_year(adjustments, config=cfg),
    })
    return _finalize(
        table,
        granularity="week",
        current_period=week_key(cfg.today(), cfg.week_year),
        components=WEEKLY_COMPONENTS,
        formatter=formatter,
    )
