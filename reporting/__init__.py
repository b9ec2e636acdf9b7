"""
Reporting outputs: deal win/loss statistics and request payloads.
"""

from .deal_stats import (
    DealStat,
    compute_deal_stats,
    compute_monthly_deal_stats,
    compute_weekly_deal_stats,
    deal_stats_to_dataframe,
)
from .export import forecast_to_excel
from .payload import process_deals_csv, summarize_adjustments

__all__ = [
    "DealStat",
    "compute_deal_stats",
    "compute_monthly_deal_stats",
    "compute_weekly_deal_stats",
    "deal_stats_to_dataframe",
    "forecast_to_excel",
    "process_deals_csv",
    "summarize_adjustments",
]
