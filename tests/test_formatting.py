import pytest

from core.config import ForecastConfig
from core.formatting import EUR_DE, USD_US, CurrencyFormatter
from core.utils import excel_round, round_amount


@pytest.mark.parametrize("amount, expected", [
    (1234.5, "1.234,50\u00a0€"),
    (-1234567.891, "-1.234.567,89\u00a0€"),
    (0, "0,00\u00a0€"),
    (-0.001, "0,00\u00a0€"),
])
def test_eur_de(amount, expected):
    assert EUR_DE(amount) == expected


def test_usd_us():
    assert USD_US(1234.5) == "$1,234.50"
    assert USD_US(-2) == "-$2.00"


def test_custom_decimals():
    assert CurrencyFormatter(decimals=0)(1234.6) == "1.235\u00a0€"


def test_excel_round_half_away_from_zero():
    assert list(excel_round([0.125, -0.125, 2.5, -2.5], 2)) == pytest.approx([0.13, -0.13, 2.5, -2.5])
    assert round_amount(2.5, 0) == 3.0
    assert round_amount(-2.5, 0) == -3.0


def test_config_rejects_bad_values():
    with pytest.raises(ValueError):
        ForecastConfig(week_year="fiscal")
    with pytest.raises(ValueError):
        ForecastConfig(weeks_per_month=0)
