"""
Core package: schema definitions, configuration, calendar and shared utilities.
No forecasting logic lives here.
"""

from .schema import DEAL_COLUMNS, AdjustmentKind, RevenueAdjustment
from .config import ForecastConfig
from .formatting import CurrencyFormatter, EUR_DE
from .utils import excel_round, round_amount

__all__ = [
    "DEAL_COLUMNS",
    "AdjustmentKind",
    "RevenueAdjustment",
    "ForecastConfig",
    "CurrencyFormatter",
    "EUR_DE",
    "excel_round",
    "round_amount",
]
