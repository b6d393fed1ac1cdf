"""Month-over-month comparison schemas."""

from enum import Enum

from pydantic import BaseModel, Field


class Trend(str, Enum):
    """Direction of change between two periods."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class MonthComparison(BaseModel):
    """One metric compared across the two latest snapshot dates."""

    metric: str
    previous_value: float
    current_value: float
    change: float
    change_pct: int
    trend: Trend
    is_positive: bool


class MonthComparisonData(BaseModel):
    """Comparison of the two most recent snapshot periods."""

    current_month: str  # e.g. "February 2024"
    previous_month: str
    comparisons: list[MonthComparison] = Field(default_factory=list)
    summary_text: str


class KeyHighlights(BaseModel):
    """Comparisons split by whether they moved in a good direction."""

    improvements: list[MonthComparison] = Field(default_factory=list)
    concerns: list[MonthComparison] = Field(default_factory=list)
    stable: list[MonthComparison] = Field(default_factory=list)


class TrendDataPoint(BaseModel):
    """Chart point for one SKU in one snapshot month."""

    date: str  # e.g. "Jan 24"
    sku_name: str
    purchased: int
    assigned: int
    utilisation: float
