from __future__ import annotations

import numpy as np
import pandas as pd


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round_amount(x: float, decimals: int = 2) -> float:
    """Scalar excel_round returning a plain float."""
    return float(excel_round(x, decimals))


def parse_amounts(values: pd.Series) -> pd.Series:
    """Coerce currency amounts to float; NaN where parsing fails."""
    return pd.to_numeric(values, errors="coerce")


def parse_dates(values: pd.Series) -> pd.Series:
    """
    Coerce date strings to normalized Timestamps; NaT where parsing fails.
    Blank strings and None count as missing.
    """
    try:
        parsed = pd.to_datetime(values, errors="coerce", format="mixed")
    except ValueError:
        parsed = None
    if parsed is None or not pd.api.types.is_datetime64_any_dtype(parsed):
        # differing UTC offsets
        parsed = pd.to_datetime(values, errors="coerce", format="mixed", utc=True)
    if isinstance(parsed.dtype, pd.DatetimeTZDtype):
        parsed = parsed.dt.tz_localize(None)
    return parsed.dt.normalize()
