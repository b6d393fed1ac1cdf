"""Insight schemas."""

from enum import Enum

from pydantic import BaseModel

from licence_intelligence.schemas.comparison import Trend


class InsightType(str, Enum):
    """Insight priority buckets."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"


INSIGHT_PRIORITY = {
    InsightType.CRITICAL: 0,
    InsightType.WARNING: 1,
    InsightType.INFO: 2,
    InsightType.SUCCESS: 3,
}


class Insight(BaseModel):
    """A free-text observation about the licence estate."""

    id: str
    type: InsightType
    title: str
    description: str
    metric: str | None = None
    trend: Trend | None = None
    action: str | None = None
