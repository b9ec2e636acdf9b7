from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Canonical deal columns. The loader maps CRM export headers onto these and
# the engine only ever reads these names.
DEAL_VALUE = "Deal Value"
DEAL_STATUS = "Deal Status"
WON_DATE = "Won Date"
EVENT_DATE = "Event Date"
LOST_DATE = "Lost Date"
DEAL_TITLE = "Deal Title"

DEAL_COLUMNS: Tuple[str, ...] = (
    DEAL_VALUE,
    DEAL_STATUS,
    WON_DATE,
    EVENT_DATE,
    LOST_DATE,
)

# A deal file without these cannot feed any computation.
REQUIRED_DEAL_COLUMNS: Tuple[str, ...] = (DEAL_VALUE, DEAL_STATUS)

STATUS_WON = "won"
STATUS_LOST = "lost"

STATUS_ALIASES: Dict[str, str] = {
    "gewonnen": STATUS_WON,
    "won": STATUS_WON,
    "verloren": STATUS_LOST,
    "lost": STATUS_LOST,
}


class AdjustmentKind(str, Enum):
    PARTNERSHIP = "partnership"
    PRIOR_YEAR = "prior-year"


# Names used by records written before the kinds were renamed.
_KIND_ALIASES: Dict[str, str] = {
    "partnerschaften": AdjustmentKind.PARTNERSHIP.value,
    "previous_revenue": AdjustmentKind.PRIOR_YEAR.value,
    "prior_year": AdjustmentKind.PRIOR_YEAR.value,
}


class RevenueAdjustment(BaseModel):
    """
    A manually entered monthly revenue figure blended into the weekly forecast.

    Partnership entries land in full on the last week of their month.
    Prior-year entries are weighted and spread over every week touching the month.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = None
    kind: AdjustmentKind = Field(validation_alias=AliasChoices("kind", "type"))
    year: int = Field(ge=1900, le=9999)
    month: int = Field(ge=1, le=12)
    amount: float
    weight: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    created_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt")
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _legacy_kind(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return _KIND_ALIASES.get(key, key)
        return value

    @field_validator("amount")
    @classmethod
    def _non_zero_amount(cls, value: float) -> float:
        if value == 0:
            raise ValueError("amount must be non-zero")
        return value

    @property
    def effective_weight(self) -> float:
        if self.kind is AdjustmentKind.PARTNERSHIP or self.weight is None:
            return 1.0
        return float(self.weight)

    @property
    def weighted_amount(self) -> float:
        return float(self.amount) * self.effective_weight


def parse_adjustments(
    records: Iterable[Union[RevenueAdjustment, Mapping[str, Any]]],
) -> List[RevenueAdjustment]:
    """Validate raw adjustment records, dropping (and logging) the ones that fail."""
    out: List[RevenueAdjustment] = []
    for i, rec in enumerate(records or []):
        if isinstance(rec, RevenueAdjustment):
            out.append(rec)
            continue
        try:
            out.append(RevenueAdjustment.model_validate(rec))
        except ValidationError as exc:
            logger.warning("Skipping revenue adjustment #%d (%s): %s", i, rec, exc.errors())
    return out
