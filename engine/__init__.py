"""
Forecast engine: deal payment scheduling, revenue adjustment distribution, period aggregation.
"""

from .forecast import compute_monthly_forecast, compute_weekly_forecast

__all__ = ["compute_monthly_forecast", "compute_weekly_forecast"]
