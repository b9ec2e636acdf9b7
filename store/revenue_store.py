from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from core.schema import RevenueAdjustment, parse_adjustments

logger = logging.getLogger(__name__)

REVENUES_KEY = "revenues"


class AdjustmentStore:
    """
    Manual revenue adjustments kept as one JSON list under a single key of an
    SQLite key-value table.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.path))

    def _ensure_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute('''
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            ''')
            conn.commit()
        finally:
            conn.close()

    def _get(self, key: str) -> Optional[Any]:
        conn = self._connect()
        try:
            row = conn.execute('SELECT value FROM kv_store WHERE key=?', (key,)).fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        return json.loads(row[0])

    def _put(self, key: str, value: Any) -> None:
        now = datetime.now(timezone.utc).isoformat()
        conn = self._connect()
        try:
            conn.execute(
                'INSERT INTO kv_store (key, value, updated_at) VALUES (?,?,?) '
                'ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at',
                (key, json.dumps(value), now),
            )
            conn.commit()
        finally:
            conn.close()

    def _records(self) -> List[dict]:
        records = self._get(REVENUES_KEY)
        return records if isinstance(records, list) else []

    def list_adjustments(self) -> List[RevenueAdjustment]:
        return parse_adjustments(self._records())

    def add_adjustment(self, record: Union[RevenueAdjustment, Mapping[str, Any]]) -> RevenueAdjustment:
        """
        Validate and append an adjustment, filling in id and created_at when absent.
        Raises pydantic.ValidationError (a ValueError) on missing or invalid fields.
        """
        adj = record if isinstance(record, RevenueAdjustment) else RevenueAdjustment.model_validate(record)
        update = {}
        if not adj.id:
            update["id"] = uuid.uuid4().hex
        if adj.created_at is None:
            update["created_at"] = datetime.now(timezone.utc)
        if update:
            adj = adj.model_copy(update=update)

        records = self._records()
        records.append(adj.model_dump(mode="json"))
        self._put(REVENUES_KEY, records)
        logger.info("Added %s adjustment %s for %s-%02d", adj.kind.value, adj.id, adj.year, adj.month)
        return adj

    def delete_adjustment(self, adjustment_id: str) -> bool:
        """Remove by id. Returns False when no record had that id."""
        records = self._records()
        kept = [r for r in records if r.get("id") != adjustment_id]
        if len(kept) == len(records):
            return False
        self._put(REVENUES_KEY, kept)
        logger.info("Deleted adjustment %s", adjustment_id)
        return True


def load_adjustments(store: Optional[AdjustmentStore]) -> List[RevenueAdjustment]:
    """
    Adjustments for a forecast run. A missing or unreadable store yields an
    empty list so the forecast still runs, just without adjustments.
    """
    if store is None:
        return []
    try:
        return store.list_adjustments()
    except (sqlite3.Error, OSError, ValueError) as exc:
        logger.warning("Could not load revenue adjustments from %s: %s", store.path, exc)
        return []
