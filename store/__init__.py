"""
Persistence of manually entered revenue adjustments.
"""

from .revenue_store import AdjustmentStore, load_adjustments

__all__ = ["AdjustmentStore", "load_adjustments"]
