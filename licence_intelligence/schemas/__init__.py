"""Pydantic schemas for licence records and derived analytics outputs."""

from licence_intelligence.schemas.alert import (
    Alert,
    AlertCategory,
    AlertSeverity,
)
from licence_intelligence.schemas.analysis import LicenceAnalysis
from licence_intelligence.schemas.comparison import (
    KeyHighlights,
    MonthComparison,
    MonthComparisonData,
    Trend,
    TrendDataPoint,
)
from licence_intelligence.schemas.downgrade import (
    Confidence,
    DowngradeRecommendation,
    DowngradeSummary,
    DowngradeTotals,
    DowngradeType,
    LicenceCost,
    LicenceCostLine,
    PricingSource,
    UserCostBreakdown,
)
from licence_intelligence.schemas.insight import Insight, InsightType
from licence_intelligence.schemas.kpi import IssueCategory, KpiSummary
from licence_intelligence.schemas.licence import (
    AppUsageRecord,
    LicenceDataset,
    LicencePricing,
    LicenceSku,
    LicenceSnapshot,
    LicenceUser,
    UsageReport,
)
from licence_intelligence.schemas.usage import (
    DepartmentBreakdown,
    E5Feature,
    FeatureUsageStats,
    FeatureUsageVerdict,
    UnusedFeature,
    UsageAnalysisSummary,
    UserUsageProfile,
)

__all__ = [
    # Records
    "AppUsageRecord",
    "LicenceDataset",
    "LicencePricing",
    "LicenceSku",
    "LicenceSnapshot",
    "LicenceUser",
    "UsageReport",
    # KPI
    "IssueCategory",
    "KpiSummary",
    # Alerts
    "Alert",
    "AlertCategory",
    "AlertSeverity",
    # Comparison
    "KeyHighlights",
    "MonthComparison",
    "MonthComparisonData",
    "Trend",
    "TrendDataPoint",
    # Downgrade
    "Confidence",
    "DowngradeRecommendation",
    "DowngradeSummary",
    "DowngradeTotals",
    "DowngradeType",
    "LicenceCost",
    "LicenceCostLine",
    "PricingSource",
    "UserCostBreakdown",
    # Usage
    "DepartmentBreakdown",
    "E5Feature",
    "FeatureUsageStats",
    "FeatureUsageVerdict",
    "UnusedFeature",
    "UsageAnalysisSummary",
    "UserUsageProfile",
    # Insights
    "Insight",
    "InsightType",
    # Bundle
    "LicenceAnalysis",
]
