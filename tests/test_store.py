import sqlite3

import pydantic
import pytest

from core.schema import AdjustmentKind
from store.revenue_store import REVENUES_KEY, AdjustmentStore, load_adjustments


@pytest.fixture
def store(tmp_path):
    return AdjustmentStore(tmp_path / "nested" / "revenue_store.db")


def test_add_list_delete(store):
    added = store.add_adjustment({"kind": "partnership", "year": 2024, "month": 3, "amount": 500})
    assert added.id
    assert added.created_at is not None

    listed = store.list_adjustments()
    assert [a.id for a in listed] == [added.id]
    assert listed[0].kind is AdjustmentKind.PARTNERSHIP

    assert store.delete_adjustment(added.id) is True
    assert store.delete_adjustment(added.id) is False
    assert store.list_adjustments() == []


def test_given_id_is_kept(store):
    added = store.add_adjustment({"id": "abc", "type": "previous_revenue", "year": 2023, "month": 6,
                                  "amount": 1000, "weight": 0.5})
    assert added.id == "abc"
    assert store.list_adjustments()[0].weighted_amount == pytest.approx(500.0)


def test_persists_across_instances(store):
    store.add_adjustment({"kind": "prior-year", "year": 2024, "month": 6, "amount": 100})
    reopened = AdjustmentStore(store.path)
    assert len(reopened.list_adjustments()) == 1


@pytest.mark.parametrize("record", [
    {"kind": "partnership", "year": 2024, "month": 13, "amount": 500},
    {"kind": "partnership", "year": 2024, "month": 1},
    {"year": 2024, "month": 1, "amount": 500},
    {"kind": "partnership", "year": 2024, "month": 1, "amount": 0},
])
def test_invalid_record_is_rejected(store, record):
    with pytest.raises(pydantic.ValidationError):
        store.add_adjustment(record)
    assert store.list_adjustments() == []


def test_load_adjustments_without_store():
    assert load_adjustments(None) == []


def test_load_adjustments_from_corrupt_store(store, caplog):
    conn = sqlite3.connect(str(store.path))
    conn.execute(
        "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)",
        (REVENUES_KEY, "{not json", "2024-01-01T00:00:00+00:00"),
    )
    conn.commit()
    conn.close()
    assert load_adjustments(store) == []
    assert "Could not load revenue adjustments" in caplog.text
