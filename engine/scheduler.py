"""
Deal payment scheduler: maps each won deal onto two payment instalments.

Payment terms (fixed by ForecastConfig):
  1. payment_split of the value arrives payment_lag_weeks after the won date
  2. the remainder arrives payment_lag_weeks after the event date

A deal without a positive value or without both dates parseable is skipped,
never raised on. The monthly and weekly views run this independently.
"""

from __future__ import annotations

import logging
from typing import Optional

import pandas as pd

from core.config import ForecastConfig
from core.periods import Granularity, add_weeks, period_key_func
from core.schema import DEAL_VALUE, EVENT_DATE, WON_DATE
from core.utils import parse_amounts, parse_dates

logger = logging.getLogger(__name__)

PAYMENT_COLUMNS = ["deal_index", "instalment", "payment_date", "period", "amount"]


def _column(deals: pd.DataFrame, name: str) -> pd.Series:
    """The named column, or an all-blank one so a missing column skips every deal."""
    if name in deals.columns:
        return deals[name]
    return pd.Series("", index=deals.index, dtype=object)


def _is_blank(values: pd.Series) -> pd.Series:
    return values.isna() | (values.astype(str).str.strip() == "")


def deal_payment_events(
    deals: pd.DataFrame,
    *,
    granularity: Granularity,
    config: Optional[ForecastConfig] = None,
) -> pd.DataFrame:
    """
    One row per payment instalment: deal_index, instalment (1 or 2),
    payment_date, period, amount. Usable deals contribute exactly two rows.
    """
    cfg = config or ForecastConfig()
    key = period_key_func(granularity, cfg.week_year)

    raw_won = _column(deals, WON_DATE)
    raw_event = _column(deals, EVENT_DATE)
    values = parse_amounts(_column(deals, DEAL_VALUE))
    won_dates = parse_dates(raw_won)
    event_dates = parse_dates(raw_event)

    missing = _is_blank(raw_won) | _is_blank(raw_event) | ~(values > 0)
    unparseable = ~missing & (won_dates.isna() | event_dates.isna())
    ok = ~missing & ~unparseable

    if missing.any():
        logger.debug("Skipping %d deals without value or dates.", int(missing.sum()))
    for idx in deals.index[unparseable.to_numpy()]:
        logger.warning(
            "Invalid date found for deal %s: won=%r event=%r",
            idx, raw_won.loc[idx], raw_event.loc[idx],
        )

    if not ok.any():
        return pd.DataFrame(columns=PAYMENT_COLUMNS)

    first_dates = won_dates[ok].map(lambda d: add_weeks(d, cfg.payment_lag_weeks))
    second_dates = event_dates[ok].map(lambda d: add_weeks(d, cfg.payment_lag_weeks))

    first = pd.DataFrame({
        "deal_index": first_dates.index,
        "instalment": 1,
        "payment_date": first_dates.values,
        "period": first_dates.map(key).values,
        "amount": (values[ok] * cfg.payment_split).values,
    })
    second = pd.DataFrame({
        "deal_index": second_dates.index,
        "instalment": 2,
        "payment_date": second_dates.values,
        "period": second_dates.map(key).values,
        "amount": (values[ok] * (1.0 - cfg.payment_split)).values,
    })
    return (
        pd.concat([first, second], ignore_index=True)
        .sort_values(["deal_index", "instalment"])
        .reset_index(drop=True)
    )


def schedule_deal_payments(
    deals: pd.DataFrame,
    *,
    granularity: Granularity,
    config: Optional[ForecastConfig] = None,
) -> pd.Series:
    """
    Sum of scheduled deal payments per period key (unrounded).
    Instalments landing on the same period add up.
    """
    events = deal_payment_events(deals, granularity=granularity, config=config)
    if events.empty:
        return pd.Series(dtype=float, name="deal_amount")
    sums = events.groupby("period")["amount"].sum().astype(float)
    sums.name = "deal_amount"
    return sums.sort_index()
