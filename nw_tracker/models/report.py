from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class HistoryRange(str, Enum):
    ONE_MONTH = "1M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    ALL = "ALL"

    @classmethod
    def parse(cls, value: str) -> "HistoryRange":
        try:
            return cls(value.strip().upper())
        except ValueError:
            raise ValueError(
                f"invalid history range '{value}': expected 1M, 6M, 1Y, 5Y, or ALL"
            ) from None


class AssetRow(BaseModel):
    asset_id: str
    name: str
    category: str
    currency: str
    native_value: float
    usd_value: float


class CategoryGroup(BaseModel):
    category: str
    rows: List[AssetRow] = Field(default_factory=list)
    subtotal: float = 0.0
    allocation_percent: float = 0.0


class SnapshotView(BaseModel):
    """Breakdown of one snapshot by category, in USD."""

    date: date
    category_filter: Optional[str] = None
    groups: List[CategoryGroup] = Field(default_factory=list)
    total: float = 0.0

    @property
    def rows(self) -> List[AssetRow]:
        return [row for group in self.groups for row in group.rows]

    @property
    def allocation(self) -> List[Tuple[str, float]]:
        """(category, percent) pairs, largest share first."""
        pairs = [(group.category, group.allocation_percent) for group in self.groups]
        return sorted(pairs, key=lambda pair: pair[1], reverse=True)


class HistoryRow(BaseModel):
    date: date
    total_usd: float
    change: Optional[float] = None
    change_percent: Optional[float] = None


class HistoryView(BaseModel):
    range: HistoryRange
    since: Optional[date] = None
    rows: List[HistoryRow] = Field(default_factory=list)
