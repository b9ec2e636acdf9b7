"""
Data preparation: loading deal CSVs, canonical columns, validation.
"""

from .loader import load_deals_csv
from .deals import (
    canonicalize_columns,
    normalize_status,
    won_deals,
    total_deal_value,
)
from .validators import validate_deals

__all__ = [
    "load_deals_csv",
    "canonicalize_columns",
    "normalize_status",
    "won_deals",
    "total_deal_value",
    "validate_deals",
]
