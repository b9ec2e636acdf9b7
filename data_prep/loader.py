from __future__ import annotations

import io
from typing import IO, Union

import pandas as pd

from .deals import canonicalize_columns, normalize_status

CsvSource = Union[str, bytes, IO]


def load_deals_csv(source: CsvSource) -> pd.DataFrame:
    """
    Load a CRM deal export into a canonical deal frame.

    `source` is a path, raw bytes (an uploaded file body) or a file-like object.
    Every cell is read as text; coercion to numbers/dates happens per computation
    so one bad cell only drops its own deal.
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    raw = pd.read_csv(
        source,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        skip_blank_lines=True,
    )
    raw.columns = [str(c).strip().strip('"') for c in raw.columns]
    for col in raw.columns:
        raw[col] = raw[col].str.strip()
    return normalize_status(canonicalize_columns(raw))
