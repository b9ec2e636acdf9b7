import io

import pandas as pd
import pytest

from engine.forecast import compute_weekly_forecast
from reporting.deal_stats import compute_weekly_deal_stats
from reporting.export import forecast_to_excel


def test_forecast_workbook(deals, cfg):
    result = compute_weekly_forecast(deals, config=cfg)
    data = forecast_to_excel(result, compute_weekly_deal_stats(deals, config=cfg))
    sheets = pd.read_excel(io.BytesIO(data), sheet_name=None)
    assert list(sheets) == ["Forecast", "Summary", "Deal Stats"]
    assert len(sheets["Forecast"]) == len(result.entries)
    assert sheets["Forecast"]["amount"].sum() == pytest.approx(result.summary.total_amount)


def test_workbook_without_stats(deals, cfg):
    result = compute_weekly_forecast(deals, config=cfg)
    sheets = pd.read_excel(io.BytesIO(forecast_to_excel(result)), sheet_name=None)
    assert "Deal Stats" not in sheets
