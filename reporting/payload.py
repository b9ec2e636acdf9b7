"""
Request-level assembly: CSV in, JSON-ready forecast payload out.

Failures the caller can act on come back as {"success": False, ...} with an
HTTP-style status instead of raising, so any front end can relay them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from core.config import ForecastConfig
from core.formatting import EUR_DE, Formatter
from core.periods import Granularity
from core.schema import AdjustmentKind, RevenueAdjustment, parse_adjustments
from core.utils import round_amount
from data_prep.deals import total_deal_value, won_deals
from data_prep.loader import CsvSource, load_deals_csv
from data_prep.validators import validate_deals
from engine.adjustments import AdjustmentLike
from engine.forecast import compute_monthly_forecast, compute_weekly_forecast

from .deal_stats import compute_monthly_deal_stats, compute_weekly_deal_stats

logger = logging.getLogger(__name__)

SAMPLE_ROWS = 5


def _failure(error: str, status: int, details: Optional[str] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": False, "error": error, "status": status}
    if details is not None:
        out["details"] = details
    return out


def build_monthly_payload(
    deals: pd.DataFrame,
    *,
    config: Optional[ForecastConfig] = None,
    formatter: Formatter = EUR_DE,
) -> Dict[str, Any]:
    won = won_deals(deals)
    forecast = compute_monthly_forecast(deals, config=config, formatter=formatter)
    stats = compute_monthly_deal_stats(deals, config=config)
    return {
        "total_rows": len(deals),
        "won_deals": len(won),
        "total_deal_value": round_amount(total_deal_value(won)),
        "headers": list(deals.columns),
        "sample_data": deals.head(SAMPLE_ROWS).to_dict(orient="records"),
        "liquidity_forecast": forecast.to_dict(),
        "deal_stats": [s.to_dict() for s in stats],
        "summary": {
            "columns": len(deals.columns),
            "rows": len(deals),
            "won_deals_count": len(won),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


def build_weekly_payload(
    deals: pd.DataFrame,
    adjustments: Optional[Iterable[AdjustmentLike]] = None,
    *,
    config: Optional[ForecastConfig] = None,
    formatter: Formatter = EUR_DE,
) -> Dict[str, Any]:
    won = won_deals(deals)
    forecast = compute_weekly_forecast(deals, adjustments, config=config, formatter=formatter)
    stats = compute_weekly_deal_stats(deals, config=config)
    return {
        "won_deals": len(won),
        "total_deal_value": round_amount(total_deal_value(won)),
        "liquidity_forecast": forecast.to_dict(),
        "deal_stats": [s.to_dict() for s in stats],
    }


def process_deals_csv(
    source: Optional[CsvSource],
    *,
    granularity: Granularity = "month",
    adjustments: Optional[Iterable[AdjustmentLike]] = None,
    config: Optional[ForecastConfig] = None,
    formatter: Formatter = EUR_DE,
) -> Dict[str, Any]:
    """
    Parse an uploaded deal export and build the monthly or weekly payload.

    `adjustments` is only used for the weekly view and should already be loaded
    (see store.load_adjustments, which degrades to an empty list).
    """
    if source is None or (isinstance(source, (bytes, str)) and not source):
        return _failure("No CSV file provided", 400)
    if granularity not in ("month", "week"):
        return _failure(f"Unknown view: {granularity!r}", 400)

    try:
        deals = load_deals_csv(source)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError, OSError) as exc:
        logger.error("Failed to read deal CSV: %s", exc)
        return _failure("Failed to process CSV", 500, str(exc))

    vr = validate_deals(deals)
    for w in vr.warnings:
        logger.warning("Deal CSV: %s", w)
    if not vr.is_valid:
        return _failure("Failed to process CSV", 500, "; ".join(vr.errors))

    if granularity == "week":
        data = build_weekly_payload(deals, adjustments, config=config, formatter=formatter)
    else:
        data = build_monthly_payload(deals, config=config, formatter=formatter)
    data["warnings"] = list(vr.warnings)
    return {"success": True, "data": data}


def summarize_adjustments(adjustments: Iterable[AdjustmentLike]) -> pd.DataFrame:
    """Totals per year and kind (raw amounts, weights not applied), newest year first."""
    parsed: List[RevenueAdjustment] = parse_adjustments(adjustments)
    kinds = [k.value for k in AdjustmentKind]
    if not parsed:
        return pd.DataFrame(columns=["year"] + kinds + ["total"])
    df = pd.DataFrame([{"year": a.year, "kind": a.kind.value, "amount": float(a.amount)} for a in parsed])
    pivot = (
        df.pivot_table(index="year", columns="kind", values="amount", aggfunc="sum", fill_value=0.0)
        .reindex(columns=kinds, fill_value=0.0)
    )
    pivot["total"] = pivot.sum(axis=1)
    pivot.columns.name = None
    return pivot.sort_index(ascending=False).reset_index()
