"""
Excel export of a forecast run (one sheet per table).
"""

from __future__ import annotations

import io
from typing import List, Optional

import pandas as pd

from engine.forecast import ForecastResult

from .deal_stats import DealStat, deal_stats_to_dataframe


def forecast_to_excel(result: ForecastResult, stats: Optional[List[DealStat]] = None) -> bytes:
    """Workbook with Forecast, Summary and (optionally) Deal Stats sheets."""
    summary = pd.DataFrame([
        {"Metric": "View", "Value": result.granularity},
        {"Metric": "From Period", "Value": result.current_period},
        {"Metric": "Periods", "Value": result.summary.period_count},
        {"Metric": "Total Amount", "Value": result.summary.total_amount},
        {"Metric": "Average per Period", "Value": result.summary.average_amount},
        {"Metric": "Final Balance", "Value": result.summary.final_balance},
    ])
    forecast = result.to_dataframe().drop(columns=["formatted_amount", "formatted_cumulative_balance"])

    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        forecast.to_excel(writer, sheet_name="Forecast", index=False)
        summary.to_excel(writer, sheet_name="Summary", index=False)
        if stats is not None:
            deal_stats_to_dataframe(stats).to_excel(writer, sheet_name="Deal Stats", index=False)
    return buf.getvalue()
