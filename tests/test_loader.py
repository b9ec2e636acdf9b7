import io

import pytest

from core.schema import DEAL_STATUS, DEAL_TITLE, DEAL_VALUE, EVENT_DATE, LOST_DATE, WON_DATE
from data_prep.deals import canonicalize_columns, normalize_status, total_deal_value, won_deals
from data_prep.loader import load_deals_csv
from data_prep.validators import validate_deals
from tests.conftest import make_deals


def test_german_export_is_canonicalized(german_csv):
    deals = load_deals_csv(german_csv)
    assert set(deals.columns) == {DEAL_TITLE, DEAL_VALUE, DEAL_STATUS, WON_DATE, EVENT_DATE, LOST_DATE}
    assert len(deals) == 3
    assert list(deals[DEAL_STATUS]) == ["won", "lost", "offen"]
    assert deals.loc[0, DEAL_VALUE] == "1000"
    assert deals.loc[1, LOST_DATE] == "2024-01-05"
    assert deals.loc[0, LOST_DATE] == ""


def test_load_from_file_object_and_path(german_csv, tmp_path):
    from_buffer = load_deals_csv(io.BytesIO(german_csv))
    path = tmp_path / "deals.csv"
    path.write_bytes(german_csv)
    from_path = load_deals_csv(str(path))
    assert from_buffer.equals(from_path)


def test_cells_and_headers_are_trimmed():
    csv = b" value , status ,won_date,event_date\n 1000 , Gewonnen ,2024-01-01,2024-01-01\n"
    deals = load_deals_csv(csv)
    assert list(deals.columns) == [DEAL_VALUE, DEAL_STATUS, WON_DATE, EVENT_DATE]
    assert deals.loc[0, DEAL_VALUE] == "1000"
    assert deals.loc[0, DEAL_STATUS] == "won"


def test_duplicate_aliases_are_coalesced():
    import pandas as pd

    raw = pd.DataFrame({"Deal - Wert": ["", "200"], "value": ["100", "999"]})
    out = canonicalize_columns(raw)
    assert list(out.columns) == [DEAL_VALUE]
    assert list(out[DEAL_VALUE]) == ["100", "200"]


def test_normalize_status_maps_aliases():
    import pandas as pd

    df = normalize_status(pd.DataFrame({DEAL_STATUS: ["Gewonnen", "VERLOREN", " won ", None]}))
    assert list(df[DEAL_STATUS]) == ["won", "lost", "won", ""]


def test_won_deals_and_total(deals):
    won = won_deals(deals)
    assert len(won) == 4
    # unparseable values count as zero
    assert total_deal_value(won) == pytest.approx(3700.0)


def test_validate_deals_reports_record_problems(deals):
    vr = validate_deals(deals)
    assert vr.is_valid
    text = " ".join(vr.warnings)
    assert "zero or negative" in text
    assert "unparseable Won Date" in text


def test_validate_deals_rejects_missing_columns():
    import pandas as pd

    vr = validate_deals(pd.DataFrame({"foo": ["1"]}))
    assert not vr.is_valid
    assert "Missing required columns" in vr.errors[0]
    assert "ERRORS (1)" in vr.summary()


def test_validate_deals_rejects_empty_frame():
    vr = validate_deals(make_deals([]))
    assert not vr.is_valid
