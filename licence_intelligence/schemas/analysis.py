"""Bundle of every derived output for one analysis cycle."""

from datetime import datetime

from pydantic import BaseModel, Field

from licence_intelligence.schemas.alert import Alert
from licence_intelligence.schemas.comparison import MonthComparisonData, TrendDataPoint
from licence_intelligence.schemas.downgrade import DowngradeRecommendation, DowngradeSummary
from licence_intelligence.schemas.insight import Insight
from licence_intelligence.schemas.kpi import IssueCategory, KpiSummary
from licence_intelligence.schemas.usage import (
    FeatureUsageStats,
    UsageAnalysisSummary,
    UserUsageProfile,
)


class LicenceAnalysis(BaseModel):
    """Derived outputs, rebuilt wholesale on every load."""

    kpi: KpiSummary
    issue_categories: list[IssueCategory] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
    month_comparison: MonthComparisonData | None = None
    trend_data: list[TrendDataPoint] = Field(default_factory=list)
    downgrade_recommendations: list[DowngradeRecommendation] = Field(default_factory=list)
    downgrade_summaries: list[DowngradeSummary] = Field(default_factory=list)
    usage_profiles: list[UserUsageProfile] = Field(default_factory=list)
    usage_summary: UsageAnalysisSummary = Field(default_factory=UsageAnalysisSummary)
    feature_stats: list[FeatureUsageStats] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
    executive_summary: str = ""
    has_usage_telemetry: bool = False
    generated_at: datetime = Field(default_factory=datetime.utcnow)
