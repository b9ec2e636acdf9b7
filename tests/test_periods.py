from datetime import date

import pandas as pd
import pytest

from core.periods import (
    add_weeks,
    iso_week,
    last_week_of_month,
    month_key,
    period_key_func,
    week_key,
    weeks_in_month,
)


@pytest.mark.parametrize("d, expected", [
    (date(2024, 1, 1), 1),
    (date(2024, 1, 22), 4),
    (date(2024, 3, 31), 13),
    (date(2020, 12, 31), 53),
    (date(2021, 1, 3), 53),
    (date(2024, 12, 30), 1),
])
def test_iso_week(d, expected):
    assert iso_week(d) == expected


def test_week_key_zero_pads():
    assert week_key(date(2024, 1, 22)) == "2024-W04"


def test_week_key_uses_iso_week_year_at_boundaries():
    assert week_key(date(2024, 12, 30)) == "2025-W01"
    assert week_key(date(2021, 1, 1)) == "2020-W53"


def test_week_key_calendar_year_reproduces_legacy_labels():
    assert week_key(date(2024, 12, 30), "calendar") == "2024-W01"
    assert week_key(date(2021, 1, 1), "calendar") == "2021-W53"


def test_week_key_rejects_unknown_year_mode():
    with pytest.raises(ValueError):
        week_key(date(2024, 1, 1), "fiscal")


def test_week_key_accepts_timestamps():
    assert week_key(pd.Timestamp("2024-01-22 15:30")) == "2024-W04"


def test_iso_keys_sort_chronologically_across_new_year():
    days = [date(2024, 12, 23), date(2024, 12, 30), date(2025, 1, 6)]
    keys = [week_key(d) for d in days]
    assert keys == sorted(keys)


def test_month_key():
    assert month_key(date(2024, 3, 5)) == "2024-03"
    assert month_key(date(2024, 12, 31)) == "2024-12"


def test_add_weeks():
    assert add_weeks(date(2024, 1, 1), 3) == date(2024, 1, 22)
    assert add_weeks(date(2024, 12, 20), 3) == date(2025, 1, 10)
    assert add_weeks(date(2024, 1, 22), -3) == date(2024, 1, 1)


def test_last_week_of_month():
    assert last_week_of_month(2024, 3) == "2024-W13"
    assert last_week_of_month(2024, 2) == "2024-W09"
    assert last_week_of_month(2024, 12) == "2025-W01"
    assert last_week_of_month(2024, 12, "calendar") == "2024-W01"


def test_weeks_in_month_june_2024_spans_five_weeks():
    assert weeks_in_month(2024, 6) == ["2024-W22", "2024-W23", "2024-W24", "2024-W25", "2024-W26"]


def test_weeks_in_month_crossing_year_end():
    assert weeks_in_month(2024, 12) == [
        "2024-W48", "2024-W49", "2024-W50", "2024-W51", "2024-W52", "2025-W01",
    ]
    # legacy labels put the spill-over week first
    assert weeks_in_month(2024, 12, "calendar")[0] == "2024-W01"


def test_period_key_func():
    d = date(2024, 1, 22)
    assert period_key_func("week")(d) == "2024-W04"
    assert period_key_func("month")(d) == "2024-01"
    with pytest.raises(ValueError):
        period_key_func("quarter")
