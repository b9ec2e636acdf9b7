"""
Forecast configuration.
Payment timing and blending constants live here; nothing is read from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional

WeekYear = Literal["iso", "calendar"]


@dataclass(frozen=True)
class ForecastConfig:
    # each won deal pays in two instalments, `payment_lag_weeks` after the
    # won date and after the event date
    payment_lag_weeks: int = 3
    payment_split: float = 0.5

    # prior-year revenue is spread at month_total / weeks_per_month per week
    weeks_per_month: float = 4.33

    # "iso" labels weeks with the ISO week-year; "calendar" keeps the legacy
    # calendar-year labels (Dec 30 -> "2024-W01" under "calendar")
    week_year: WeekYear = "iso"

    # None means "today"; fixes the current period for reproducible runs
    as_of_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.week_year not in ("iso", "calendar"):
            raise ValueError(f"week_year must be 'iso' or 'calendar', got {self.week_year!r}")
        if self.weeks_per_month <= 0:
            raise ValueError("weeks_per_month must be positive.")

    def today(self) -> date:
        if self.as_of_date is None:
            return date.today()
        if isinstance(self.as_of_date, datetime):
            return self.as_of_date.date()
        return self.as_of_date
