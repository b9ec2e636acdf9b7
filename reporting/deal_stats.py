"""
Per-period win/loss statistics over all resolved deals.

Won deals are bucketed by their won date, lost deals by their lost date.
Unlike the forecast, past periods are kept.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from core.config import ForecastConfig
from core.periods import Granularity, period_key_func
from core.schema import DEAL_STATUS, DEAL_VALUE, LOST_DATE, STATUS_LOST, STATUS_WON, WON_DATE
from core.utils import excel_round, parse_amounts, parse_dates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DealStat:
    period: str
    total_deals: int
    won_deals: int
    lost_deals: int
    total_value: float
    won_value: float
    lost_value: float
    win_rate: int  # percent, 0..100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def win_rate(won: int, total: int) -> int:
    """round(won / total * 100), halves rounded up; 0 when there are no deals."""
    if total <= 0:
        return 0
    return int(excel_round(won / total * 100, 0))


def _resolution_dates(deals: pd.DataFrame) -> pd.Series:
    status = deals[DEAL_STATUS]
    blank = pd.Series("", index=deals.index, dtype=object)
    won_raw = deals[WON_DATE] if WON_DATE in deals.columns else blank
    lost_raw = deals[LOST_DATE] if LOST_DATE in deals.columns else blank
    raw = pd.Series(
        np.where(status == STATUS_WON, won_raw, np.where(status == STATUS_LOST, lost_raw, "")),
        index=deals.index,
        dtype=object,
    )
    return parse_dates(raw)


def compute_deal_stats(
    deals: pd.DataFrame,
    *,
    granularity: Granularity,
    config: Optional[ForecastConfig] = None,
) -> List[DealStat]:
    """Win/loss counts and values per period, newest period first."""
    cfg = config or ForecastConfig()
    if deals.empty or DEAL_STATUS not in deals.columns or DEAL_VALUE not in deals.columns:
        return []

    status = deals[DEAL_STATUS]
    values = parse_amounts(deals[DEAL_VALUE])
    dates = _resolution_dates(deals)

    ok = status.isin([STATUS_WON, STATUS_LOST]) & dates.notna() & (values > 0)
    n_skipped = int((~ok).sum())
    if n_skipped:
        logger.debug("Deal stats: skipped %d of %d deals.", n_skipped, len(deals))
    if not ok.any():
        return []

    key = period_key_func(granularity, cfg.week_year)
    frame = pd.DataFrame({
        "period": dates[ok].map(key),
        "won": (status[ok] == STATUS_WON).astype(int),
        "lost": (status[ok] == STATUS_LOST).astype(int),
        "value": values[ok].astype(float),
    })
    frame["won_value"] = frame["value"].where(frame["won"] == 1, 0.0)
    frame["lost_value"] = frame["value"].where(frame["lost"] == 1, 0.0)

    grouped = frame.groupby("period").agg(
        total_deals=("value", "size"),
        won_deals=("won", "sum"),
        lost_deals=("lost", "sum"),
        total_value=("value", "sum"),
        won_value=("won_value", "sum"),
        lost_value=("lost_value", "sum"),
    )

    stats = []
    for period, row in grouped.sort_index(ascending=False).iterrows():
        total = int(row["total_deals"])
        won = int(row["won_deals"])
        stats.append(DealStat(
            period=str(period),
            total_deals=total,
            won_deals=won,
            lost_deals=int(row["lost_deals"]),
            total_value=float(excel_round(row["total_value"], 2)),
            won_value=float(excel_round(row["won_value"], 2)),
            lost_value=float(excel_round(row["lost_value"], 2)),
            win_rate=win_rate(won, total),
        ))
    return stats


def compute_monthly_deal_stats(
    deals: pd.DataFrame, *, config: Optional[ForecastConfig] = None
) -> List[DealStat]:
    return compute_deal_stats(deals, granularity="month", config=config)


def compute_weekly_deal_stats(
    deals: pd.DataFrame, *, config: Optional[ForecastConfig] = None
) -> List[DealStat]:
    return compute_deal_stats(deals, granularity="week", config=config)


def deal_stats_to_dataframe(stats: List[DealStat]) -> pd.DataFrame:
    cols = ["period", "total_deals", "won_deals", "lost_deals",
            "total_value", "won_value", "lost_value", "win_rate"]
    return pd.DataFrame([s.to_dict() for s in stats], columns=cols)
