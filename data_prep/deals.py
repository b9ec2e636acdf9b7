"""
Deal frame shaping: header aliases, status normalization, won-deal selection.
"""

from __future__ import annotations

from typing import Dict, List

import pandas as pd

from core.schema import (
    DEAL_STATUS,
    DEAL_TITLE,
    DEAL_VALUE,
    EVENT_DATE,
    LOST_DATE,
    STATUS_ALIASES,
    STATUS_WON,
    WON_DATE,
)
from core.utils import parse_amounts


_COLUMN_ALIASES: Dict[str, str] = {
    # German CRM export
    "Deal - Wert": DEAL_VALUE,
    "Deal - Status": DEAL_STATUS,
    "Deal - Datum des gewonnenen Deals": WON_DATE,
    "Deal - Event Datum": EVENT_DATE,
    "Deal - Datum des verlorenen Deals": LOST_DATE,
    "Deal - Titel": DEAL_TITLE,
    # English CRM export
    "Deal - Value": DEAL_VALUE,
    "Deal - Won time": WON_DATE,
    "Deal - Lost time": LOST_DATE,
    "Deal - Event date": EVENT_DATE,
    "Deal - Title": DEAL_TITLE,
    # short forms
    "value": DEAL_VALUE,
    "status": DEAL_STATUS,
    "won_date": WON_DATE,
    "event_date": EVENT_DATE,
    "lost_date": LOST_DATE,
    "title": DEAL_TITLE,
}


def canonicalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy with known header aliases renamed and duplicates coalesced."""
    if df.empty and len(df.columns) == 0:
        return df.copy()

    ren = {c: _COLUMN_ALIASES.get(c, c) for c in df.columns}
    out = df.rename(columns=ren).copy()

    # Two aliases of the same field: keep the first non-blank value per row.
    if out.columns.duplicated().any():
        new_cols: List[str] = []
        parts: List[pd.Series] = []
        seen: set[str] = set()
        cols = list(out.columns)
        for name in cols:
            if name in seen:
                continue
            idxs = [i for i, c in enumerate(cols) if c == name]
            s = out.iloc[:, idxs[0]].replace("", pd.NA)
            for j in idxs[1:]:
                s = s.combine_first(out.iloc[:, j].replace("", pd.NA))
            new_cols.append(name)
            parts.append(s.fillna(""))
            seen.add(name)
        out = pd.concat(parts, axis=1)
        out.columns = new_cols

    return out


def normalize_status(df: pd.DataFrame) -> pd.DataFrame:
    """Map status labels ("Gewonnen", "Verloren", ...) onto "won"/"lost"."""
    if DEAL_STATUS not in df.columns:
        return df
    out = df.copy()
    status = out[DEAL_STATUS].fillna("").astype(str).str.strip().str.lower()
    out[DEAL_STATUS] = status.map(lambda s: STATUS_ALIASES.get(s, s))
    return out


def won_deals(deals: pd.DataFrame) -> pd.DataFrame:
    """Rows whose status is "won". A frame without a status column is taken as all-won."""
    if DEAL_STATUS not in deals.columns:
        return deals
    return deals.loc[deals[DEAL_STATUS] == STATUS_WON]


def total_deal_value(deals: pd.DataFrame) -> float:
    """Sum of parseable deal values; blanks and junk count as zero."""
    if DEAL_VALUE not in deals.columns or deals.empty:
        return 0.0
    return float(parse_amounts(deals[DEAL_VALUE]).fillna(0.0).sum())
