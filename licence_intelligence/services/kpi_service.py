"""KPI aggregation and issue categorisation."""

import logging

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import IssueType
from licence_intelligence.core.utils import percentage
from licence_intelligence.schemas.kpi import IssueCategory, KpiSummary
from licence_intelligence.schemas.licence import LicenceSku, LicenceUser
from licence_intelligence.services.cost_resolver import CostResolver

logger = logging.getLogger(__name__)

ISSUE_CATEGORY_DEFINITIONS = (
    (IssueType.DISABLED, "Disabled accounts still holding licences", "critical"),
    (IssueType.DUAL_LICENSED, "Users with both E3 and E5 (only need E5)", "warning"),
    (IssueType.INACTIVE_90, "No sign-in for 90+ days", "warning"),
    (IssueType.SERVICE_ACCOUNT, "Service accounts - review licence need", "info"),
)


class KpiService:
    """Service for headline licence KPIs."""

    def __init__(self, resolver: CostResolver, settings: Settings | None = None):
        self.resolver = resolver
        self.classifier = resolver.classifier
        self.settings = settings or get_settings()

    def _user_monthly_savings(self, user: LicenceUser) -> float:
        # Curated pricing only; list prices never inflate headline savings
        breakdown = self.resolver.user_cost_breakdown(user, include_standard=False)
        return breakdown.potential_monthly_savings

    def calculate_kpi_summary(
        self,
        users: list[LicenceUser],
        skus: list[LicenceSku],
    ) -> KpiSummary:
        """Calculate the KPI summary for one cycle.

        Args:
            users: Licensed users with upstream issue classification
            skus: Every SKU in the tenant; excluded SKUs are filtered here

        Returns:
            KpiSummary with utilisation, spend, savings and issue counts
        """
        total_users = len(users)
        active_users = [
            u for u in users
            if u.account_enabled and u.days_since_sign_in < self.settings.inactive_days
        ]

        counts = {issue_type: 0 for issue_type, _, _ in ISSUE_CATEGORY_DEFINITIONS}
        for user in users:
            if user.issue_type in counts:
                counts[user.issue_type] += 1

        paid_skus = self.classifier.paid_skus(skus)
        total_purchased = sum(s.purchased for s in paid_skus)
        total_assigned = sum(s.assigned for s in paid_skus)

        monthly_spend = sum(
            s.assigned * self.resolver.resolve_sku(s).cost for s in paid_skus
        )
        monthly_savings = sum(
            self._user_monthly_savings(u) for u in users if u.issue_type != IssueType.NONE
        )

        summary = KpiSummary(
            total_licensed_users=total_users,
            active_users_count=len(active_users),
            active_users_pct=percentage(len(active_users), total_users),
            total_purchased_licences=total_purchased,
            total_assigned_licences=total_assigned,
            overall_utilisation_pct=percentage(total_assigned, total_purchased),
            monthly_spend=monthly_spend,
            annual_spend=monthly_spend * 12,
            potential_monthly_savings=monthly_savings,
            potential_annual_savings=monthly_savings * 12,
            issues_count=sum(counts.values()),
            disabled_count=counts[IssueType.DISABLED],
            dual_licensed_count=counts[IssueType.DUAL_LICENSED],
            inactive_count=counts[IssueType.INACTIVE_90],
            service_account_count=counts[IssueType.SERVICE_ACCOUNT],
        )

        logger.info(
            f"KPI summary: {total_users} users, {len(paid_skus)}/{len(skus)} paid SKUs, "
            f"{summary.issues_count} issues"
        )
        return summary

    def get_issue_categories(self, users: list[LicenceUser]) -> list[IssueCategory]:
        """Group users by issue type with annual savings per group."""
        categories = []
        for issue_type, description, severity in ISSUE_CATEGORY_DEFINITIONS:
            affected = [u for u in users if u.issue_type == issue_type]
            monthly = sum(self._user_monthly_savings(u) for u in affected)
            categories.append(
                IssueCategory(
                    type=issue_type,
                    count=len(affected),
                    potential_savings=monthly * 12,
                    description=description,
                    severity=severity,
                )
            )
        return categories
