from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from core.config import ForecastConfig
from core.schema import DEAL_COLUMNS


def make_deals(rows):
    """rows: (value, status, won_date, event_date, lost_date) tuples of strings."""
    return pd.DataFrame(rows, columns=list(DEAL_COLUMNS))


@pytest.fixture
def cfg():
    return ForecastConfig(as_of_date=date(2024, 1, 1))


@pytest.fixture
def deals():
    return make_deals([
        ("1000", "won", "2024-01-01", "2024-03-10", ""),
        ("2000", "won", "2024-01-15", "2024-02-01", ""),
        ("5000", "lost", "", "", "2024-01-20"),
        ("700", "won", "not a date", "2024-02-01", ""),
        ("0", "won", "2024-01-01", "2024-01-01", ""),
    ])


GERMAN_CSV = (
    '"Deal - Titel","Deal - Wert","Deal - Status","Deal - Datum des gewonnenen Deals",'
    '"Deal - Event Datum","Deal - Datum des verlorenen Deals"\n'
    '"Hochzeit Meier","1000","Gewonnen","2024-01-01","2024-01-01",""\n'
    '"Firmenfeier","500","Verloren","","","2024-01-05"\n'
    '\n'
    '"Geburtstag","300","Offen","","",""\n'
).encode("utf-8")


@pytest.fixture
def german_csv():
    return GERMAN_CSV
