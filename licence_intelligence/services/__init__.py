"""Analytics services module."""

from licence_intelligence.services.alert_service import AlertService
from licence_intelligence.services.analysis_service import LicenceAnalysisService
from licence_intelligence.services.comparison_service import ComparisonService
from licence_intelligence.services.cost_resolver import CostResolver, calculate_potential_savings
from licence_intelligence.services.downgrade_engine import DowngradeEngine
from licence_intelligence.services.feature_usage import (
    E5_FEATURES,
    FeatureUsageStrategy,
    HeuristicFeatureUsageStrategy,
)
from licence_intelligence.services.insight_service import InsightService
from licence_intelligence.services.kpi_service import KpiService
from licence_intelligence.services.usage_report_parser import parse_app_usage_csv
from licence_intelligence.services.usage_service import UsageService

__all__ = [
    "CostResolver",
    "calculate_potential_savings",
    "KpiService",
    "AlertService",
    "ComparisonService",
    "DowngradeEngine",
    "E5_FEATURES",
    "FeatureUsageStrategy",
    "HeuristicFeatureUsageStrategy",
    "UsageService",
    "parse_app_usage_csv",
    "InsightService",
    "LicenceAnalysisService",
]
