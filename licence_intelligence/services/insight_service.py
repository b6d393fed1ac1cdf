"""Prioritised insights and the executive summary paragraph."""

import logging
from collections import defaultdict

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import IssueType
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.core.utils import percentage, round_half_up
from licence_intelligence.schemas.comparison import Trend
from licence_intelligence.schemas.insight import INSIGHT_PRIORITY, Insight, InsightType
from licence_intelligence.schemas.kpi import KpiSummary
from licence_intelligence.schemas.licence import LicenceSku, LicenceSnapshot, LicenceUser

logger = logging.getLogger(__name__)

UNDER_UTILISED_PCT = 70
UNDER_UTILISED_MIN_PURCHASED = 10
HEALTHY_UTILISATION_PCT = 85
MAJOR_SAVINGS_ANNUAL = 10_000
MODERATE_SAVINGS_ANNUAL = 1_000
SAVINGS_SHARE_PCT = 10
INACTIVE_MIN_COUNT = 10
ACTIVE_USERS_TARGET_PCT = 80
ASSIGNMENT_CHANGE_MIN = 10
ISSUE_CHANGE_MIN = 5
DEPARTMENT_MIN_USERS = 10
DEPARTMENT_ISSUE_RATE = 0.2


class InsightService:
    """Turns KPI, SKU, user and snapshot data into ranked observations."""

    def __init__(self, classifier: SkuClassifier | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.classifier = classifier or SkuClassifier(settings=self.settings)

    def generate_insights(
        self,
        users: list[LicenceUser],
        skus: list[LicenceSku],
        snapshots: list[LicenceSnapshot],
        kpi: KpiSummary,
    ) -> list[Insight]:
        """Generate insights, most urgent first, capped at max_insights."""
        insights: list[Insight] = []
        insights.extend(self._utilisation_insights(skus, kpi))
        insights.extend(self._savings_insights(kpi))
        insights.extend(self._issue_insights(kpi))
        if snapshots:
            insights.extend(self._trend_insights(snapshots))
        insights.extend(self._department_insights(users))

        insights.sort(key=lambda i: INSIGHT_PRIORITY[i.type])
        logger.info(f"Generated {len(insights)} insights, keeping {self.settings.max_insights}")
        return insights[: self.settings.max_insights]

    def _utilisation_insights(self, skus: list[LicenceSku], kpi: KpiSummary) -> list[Insight]:
        insights = []
        paid_skus = self.classifier.paid_skus(skus)

        # Purchased=0 rows are bundled components, not over-allocation
        over_allocated = [s for s in paid_skus if s.purchased > 0 and s.assigned > s.purchased]
        if over_allocated:
            insights.append(
                Insight(
                    id="over-allocated",
                    type=InsightType.CRITICAL,
                    title="Over-Allocated Licences",
                    description=(
                        f"{len(over_allocated)} licence type(s) have more assignments than "
                        f"purchased seats: {', '.join(s.title for s in over_allocated)}"
                    ),
                    action="Purchase additional licences or remove assignments",
                )
            )

        under_utilised = [
            s for s in paid_skus
            if s.utilisation_pct < UNDER_UTILISED_PCT and s.purchased >= UNDER_UTILISED_MIN_PURCHASED
        ]
        if under_utilised:
            unused = sum(s.available for s in under_utilised)
            insights.append(
                Insight(
                    id="under-utilised",
                    type=InsightType.WARNING,
                    title="Under-Utilised Licences",
                    description=(
                        f"{len(under_utilised)} licence type(s) below {UNDER_UTILISED_PCT}% "
                        f"utilisation with {unused} unused seats"
                    ),
                    metric=f"{unused} seats",
                    action="Review and reduce licence allocation at next renewal",
                )
            )

        if kpi.overall_utilisation_pct >= HEALTHY_UTILISATION_PCT and not over_allocated:
            insights.append(
                Insight(
                    id="well-optimised",
                    type=InsightType.SUCCESS,
                    title="Healthy Utilisation",
                    description=(
                        f"Overall licence utilisation is {kpi.overall_utilisation_pct}% "
                        "- well optimised"
                    ),
                    metric=f"{kpi.overall_utilisation_pct}%",
                )
            )

        return insights

    def _savings_insights(self, kpi: KpiSummary) -> list[Insight]:
        insights = []
        savings = self.settings.format_currency(kpi.potential_annual_savings)

        if kpi.potential_annual_savings >= MAJOR_SAVINGS_ANNUAL:
            insights.append(
                Insight(
                    id="major-savings",
                    type=InsightType.CRITICAL,
                    title="Significant Savings Available",
                    description=f"{savings} potential annual savings from licence optimisation",
                    metric=savings,
                    action="Review and action the issues identified",
                )
            )
        elif kpi.potential_annual_savings >= MODERATE_SAVINGS_ANNUAL:
            insights.append(
                Insight(
                    id="moderate-savings",
                    type=InsightType.WARNING,
                    title="Savings Opportunity",
                    description=f"{savings} annual savings possible",
                    metric=savings,
                )
            )

        if kpi.monthly_spend > 0:
            savings_pct = percentage(kpi.potential_monthly_savings, kpi.monthly_spend)
            if savings_pct >= SAVINGS_SHARE_PCT:
                insights.append(
                    Insight(
                        id="savings-pct",
                        type=InsightType.INFO,
                        title="Cost Reduction Potential",
                        description=(
                            f"{savings_pct}% of monthly licence spend "
                            f"({self.settings.format_currency(kpi.monthly_spend)}) could be saved"
                        ),
                        metric=f"{savings_pct}%",
                    )
                )

        return insights

    def _issue_insights(self, kpi: KpiSummary) -> list[Insight]:
        insights = []

        if kpi.disabled_count > 0:
            insights.append(
                Insight(
                    id="disabled-accounts",
                    type=InsightType.CRITICAL,
                    title="Disabled Accounts Holding Licences",
                    description=f"{kpi.disabled_count} disabled accounts still have licences assigned",
                    metric=f"{kpi.disabled_count} users",
                    action="Remove licences from disabled accounts",
                )
            )

        if kpi.dual_licensed_count > 0:
            insights.append(
                Insight(
                    id="dual-licensed",
                    type=InsightType.WARNING,
                    title="Dual-Licensed Users",
                    description=(
                        f"{kpi.dual_licensed_count} users have both E3 and E5 licences "
                        "(only E5 needed)"
                    ),
                    metric=f"{kpi.dual_licensed_count} users",
                    action="Remove E3 licences from E5 users",
                )
            )

        if kpi.inactive_count > INACTIVE_MIN_COUNT:
            insights.append(
                Insight(
                    id="inactive-users",
                    type=InsightType.WARNING,
                    title="Inactive Licensed Users",
                    description=(
                        f"{kpi.inactive_count} users haven't signed in for "
                        f"{self.settings.inactive_days}+ days but have licences"
                    ),
                    metric=f"{kpi.inactive_count} users",
                    action="Review and potentially revoke licences",
                )
            )

        if kpi.active_users_pct < ACTIVE_USERS_TARGET_PCT:
            insights.append(
                Insight(
                    id="low-activity",
                    type=InsightType.INFO,
                    title="User Activity Below Target",
                    description=(
                        f"Only {kpi.active_users_pct}% of licensed users are actively "
                        "using their licences"
                    ),
                    metric=f"{kpi.active_users_pct}%",
                    trend=Trend.DOWN,
                )
            )

        return insights

    def _trend_insights(self, snapshots: list[LicenceSnapshot]) -> list[Insight]:
        dates = sorted({s.snapshot_date for s in snapshots}, reverse=True)
        if len(dates) < 2:
            return []

        current = [s for s in snapshots if s.snapshot_date == dates[0]]
        previous = [s for s in snapshots if s.snapshot_date == dates[1]]
        insights = []

        assigned_change = sum(s.assigned for s in current) - sum(s.assigned for s in previous)
        if abs(assigned_change) >= ASSIGNMENT_CHANGE_MIN:
            growth = assigned_change > 0
            insights.append(
                Insight(
                    id="assignment-trend",
                    type=InsightType.INFO if growth else InsightType.SUCCESS,
                    title="Licence Growth" if growth else "Licence Reduction",
                    description=(
                        f"{abs(assigned_change)} {'more' if growth else 'fewer'} licences "
                        "assigned compared to last month"
                    ),
                    metric=f"{'+' if growth else ''}{assigned_change}",
                    trend=Trend.UP if growth else Trend.DOWN,
                )
            )

        # Tenant-wide counts repeat on every SKU row, so read them once per date
        def issue_total(rows: list[LicenceSnapshot]) -> int:
            first = rows[0]
            return first.disabled_count + first.inactive_count + first.dual_count

        issue_change = issue_total(current) - issue_total(previous)
        if issue_change < -ISSUE_CHANGE_MIN:
            insights.append(
                Insight(
                    id="issues-improving",
                    type=InsightType.SUCCESS,
                    title="Issues Decreasing",
                    description=f"{abs(issue_change)} fewer licence issues than last month",
                    metric=str(issue_change),
                    trend=Trend.DOWN,
                )
            )
        elif issue_change > ISSUE_CHANGE_MIN:
            insights.append(
                Insight(
                    id="issues-increasing",
                    type=InsightType.WARNING,
                    title="Issues Increasing",
                    description=f"{issue_change} more licence issues than last month",
                    metric=f"+{issue_change}",
                    trend=Trend.UP,
                )
            )

        return insights

    @staticmethod
    def _department_insights(users: list[LicenceUser]) -> list[Insight]:
        departments: dict[str, list[LicenceUser]] = defaultdict(list)
        for u in users:
            departments[u.department or "Unknown"].append(u)

        worst_dept = ""
        worst_rate = 0.0
        for dept, members in departments.items():
            if len(members) < DEPARTMENT_MIN_USERS:
                continue
            rate = sum(1 for u in members if u.issue_type != IssueType.NONE) / len(members)
            if rate > worst_rate:
                worst_dept, worst_rate = dept, rate

        if not worst_dept or worst_rate < DEPARTMENT_ISSUE_RATE:
            return []

        pct = round_half_up(worst_rate * 100)
        return [
            Insight(
                id="dept-issues",
                type=InsightType.INFO,
                title="Department Attention Needed",
                description=f"{worst_dept} has {pct}% of users with licence issues",
                metric=f"{pct}%",
                action=f"Review {worst_dept} licence assignments",
            )
        ]

    def generate_executive_summary(self, kpi: KpiSummary) -> str:
        """One-paragraph plain-English summary of the licence estate."""
        utilisation = kpi.overall_utilisation_pct
        parts = []

        if utilisation >= 90:
            parts.append(f"Licence utilisation is healthy at {utilisation}%.")
        elif utilisation >= 70:
            parts.append(f"Licence utilisation is {utilisation}%, with room for optimisation.")
        else:
            parts.append(
                f"Licence utilisation is low at {utilisation}%, "
                "indicating significant over-provisioning."
            )

        parts.append(
            f"{kpi.active_users_pct}% of licensed users are active "
            f"(signed in within {self.settings.inactive_days} days)."
        )

        if kpi.issues_count > 0:
            details = []
            if kpi.disabled_count > 0:
                details.append(f"{kpi.disabled_count} disabled accounts")
            if kpi.dual_licensed_count > 0:
                details.append(f"{kpi.dual_licensed_count} dual-licensed users")
            if kpi.inactive_count > 0:
                details.append(f"{kpi.inactive_count} inactive users")
            if kpi.service_account_count > 0:
                details.append(f"{kpi.service_account_count} service accounts")
            parts.append(f"{kpi.issues_count} issues identified: {', '.join(details)}.")
        else:
            parts.append("No licence issues detected.")

        if kpi.potential_annual_savings > 0:
            parts.append(
                f"Potential annual savings of "
                f"{self.settings.format_currency(kpi.potential_annual_savings)} identified."
            )

        return " ".join(parts)

    @staticmethod
    def get_insight_by_id(insights: list[Insight], insight_id: str) -> Insight | None:
        return next((i for i in insights if i.id == insight_id), None)
