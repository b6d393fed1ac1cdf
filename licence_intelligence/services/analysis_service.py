"""Analysis orchestration for one licence data cycle.

Builds the shared classifier and cost resolver for the cycle, runs every
analytics service over the loaded records and bundles the outputs into a
LicenceAnalysis. Fetching is delegated to injected coroutines.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import date

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.sku_classifier import SkuCatalog, SkuClassifier
from licence_intelligence.schemas.analysis import LicenceAnalysis
from licence_intelligence.schemas.licence import AppUsageRecord, LicenceDataset
from licence_intelligence.services.alert_service import AlertService
from licence_intelligence.services.comparison_service import ComparisonService
from licence_intelligence.services.cost_resolver import CostResolver
from licence_intelligence.services.downgrade_engine import DowngradeEngine
from licence_intelligence.services.feature_usage import FeatureUsageStrategy
from licence_intelligence.services.insight_service import InsightService
from licence_intelligence.services.kpi_service import KpiService
from licence_intelligence.services.usage_report_parser import parse_app_usage_csv
from licence_intelligence.services.usage_service import UsageService

logger = logging.getLogger(__name__)

DatasetFetcher = Callable[[], Awaitable[LicenceDataset]]
# Either parsed rows or the raw CSV report body
AppUsageFetcher = Callable[[], Awaitable[list[AppUsageRecord] | str]]


class LicenceAnalysisService:
    """Runs the full analytics pipeline over a loaded dataset."""

    def __init__(
        self,
        settings: Settings | None = None,
        catalog: SkuCatalog | None = None,
        standard_pricing: dict[str, float] | None = None,
        feature_strategy: FeatureUsageStrategy | None = None,
        today: date | None = None,
    ):
        self.settings = settings or get_settings()
        self.classifier = SkuClassifier(catalog, self.settings)
        self.standard_pricing = standard_pricing
        self.feature_strategy = feature_strategy
        self.today = today

    def analyse(
        self,
        dataset: LicenceDataset,
        app_usage: list[AppUsageRecord] | None = None,
    ) -> LicenceAnalysis:
        """Derive every output for one dataset.

        Args:
            dataset: Users, SKUs, pricing, snapshots and storage rows
            app_usage: Optional per-user app telemetry

        Returns:
            LicenceAnalysis bundle
        """
        s = self.settings
        resolver = CostResolver(
            dataset.pricing, dataset.skus, self.classifier, self.standard_pricing
        )

        kpi_service = KpiService(resolver, s)
        kpi = kpi_service.calculate_kpi_summary(dataset.users, dataset.skus)
        issue_categories = kpi_service.get_issue_categories(dataset.users)

        downgrade_engine = DowngradeEngine(resolver, s)
        recommendations = downgrade_engine.generate_downgrade_recommendations(dataset.users)
        summaries = downgrade_engine.summarise_downgrades(recommendations)

        alerts = AlertService(self.classifier, s, self.today).generate_alerts(
            dataset.skus, dataset.pricing, kpi, recommendations
        )

        comparison_service = ComparisonService(self.classifier, s)
        month_comparison = comparison_service.generate_month_comparison(
            dataset.snapshots, dataset.skus
        )
        trend_data = comparison_service.get_trend_data(dataset.snapshots)

        usage_service = UsageService(resolver, self.feature_strategy, settings=s)
        profiles = usage_service.generate_user_usage_profiles(
            dataset.users, app_usage, dataset.usage
        )

        insight_service = InsightService(self.classifier, s)
        insights = insight_service.generate_insights(
            dataset.users, dataset.skus, dataset.snapshots, kpi
        )

        analysis = LicenceAnalysis(
            kpi=kpi,
            issue_categories=issue_categories,
            alerts=alerts,
            month_comparison=month_comparison,
            trend_data=trend_data,
            downgrade_recommendations=recommendations,
            downgrade_summaries=summaries,
            usage_profiles=profiles,
            usage_summary=usage_service.generate_usage_analysis_summary(profiles),
            feature_stats=usage_service.generate_feature_usage_stats(profiles),
            insights=insights,
            executive_summary=insight_service.generate_executive_summary(kpi),
            has_usage_telemetry=bool(app_usage),
        )

        logger.info(
            f"Analysis complete: {len(alerts)} alerts, {len(recommendations)} downgrade "
            f"candidates, {len(insights)} insights"
        )
        return analysis

    async def load_and_analyse(
        self,
        fetch_dataset: DatasetFetcher,
        fetch_app_usage: AppUsageFetcher | None = None,
    ) -> LicenceAnalysis:
        """Fetch licence data and telemetry concurrently, then analyse.

        A failed dataset fetch is analysed as an empty dataset; a failed
        telemetry fetch is analysed without telemetry.
        """
        tasks = [fetch_dataset()]
        if fetch_app_usage is not None:
            tasks.append(fetch_app_usage())

        results = await asyncio.gather(*tasks, return_exceptions=True)

        dataset = results[0]
        if isinstance(dataset, Exception):
            logger.error(f"Licence data fetch failed: {type(dataset).__name__}: {dataset}")
            dataset = LicenceDataset()

        app_usage: list[AppUsageRecord] = []
        if len(results) > 1:
            usage = results[1]
            if isinstance(usage, Exception):
                logger.warning(
                    f"App usage fetch failed, continuing without telemetry: "
                    f"{type(usage).__name__}: {usage}"
                )
            elif isinstance(usage, str):
                app_usage = parse_app_usage_csv(usage)
            else:
                app_usage = list(usage or [])

        if not app_usage:
            logger.warning("No app usage telemetry; usage profiles use licence data only")

        return self.analyse(dataset, app_usage or None)
