"""Proactive alert generation.

Alert categories:
- Capacity: over-allocated, near capacity, under-utilised
- Cost: savings opportunities, savings share of spend
- Compliance: disabled accounts, duplicate licences, inactive users
- Renewal: upcoming contract renewals
"""

import logging
from datetime import date

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.core.utils import round_half_up
from licence_intelligence.schemas.alert import (
    SEVERITY_RANK,
    Alert,
    AlertCategory,
    AlertSeverity,
)
from licence_intelligence.schemas.downgrade import DowngradeRecommendation
from licence_intelligence.schemas.kpi import KpiSummary
from licence_intelligence.schemas.licence import LicencePricing, LicenceSku

logger = logging.getLogger(__name__)


class AlertService:
    """Service for generating alerts from one analysis cycle."""

    def __init__(
        self,
        classifier: SkuClassifier | None = None,
        settings: Settings | None = None,
        today: date | None = None,
    ):
        self.settings = settings or get_settings()
        self.classifier = classifier or SkuClassifier(settings=self.settings)
        self.today = today

    def generate_alerts(
        self,
        skus: list[LicenceSku],
        pricing: list[LicencePricing],
        kpi: KpiSummary,
        downgrade_recommendations: list[DowngradeRecommendation] | None = None,
    ) -> list[Alert]:
        """Evaluate every alert rule and return alerts, most severe first."""
        alerts: list[Alert] = []
        paid_skus = self.classifier.paid_skus(skus)

        alerts.extend(self._capacity_alerts(paid_skus))
        alerts.extend(self._cost_alerts(kpi, downgrade_recommendations or []))
        alerts.extend(self._compliance_alerts(kpi))
        alerts.extend(self._renewal_alerts(pricing))

        # sorted() is stable, so equal severities keep generation order
        alerts = sorted(alerts, key=lambda a: SEVERITY_RANK[a.severity])

        logger.info(f"Generated {len(alerts)} alerts")
        return alerts

    def _capacity_alerts(self, skus: list[LicenceSku]) -> list[Alert]:
        s = self.settings
        alerts = []

        over_allocated = [sku for sku in skus if sku.assigned > sku.purchased]
        if over_allocated:
            total_over = sum(sku.assigned - sku.purchased for sku in over_allocated)
            alerts.append(
                Alert(
                    severity=AlertSeverity.CRITICAL,
                    category=AlertCategory.CAPACITY,
                    title=f"{len(over_allocated)} licence type(s) over-allocated",
                    description=(
                        f"{total_over} more licences assigned than purchased. "
                        "This may cause compliance issues."
                    ),
                    metric=f"+{total_over} over",
                    action_label="View Details",
                    action_type="navigate",
                    action_target="utilisation",
                )
            )

        near_capacity = [
            sku for sku in skus
            if s.near_capacity_pct <= sku.utilisation_pct < 100
            and sku.purchased >= s.capacity_min_purchased
        ]
        if near_capacity:
            most_critical = max(near_capacity, key=lambda sku: sku.utilisation_pct)
            remaining = most_critical.purchased - most_critical.assigned
            alerts.append(
                Alert(
                    severity=AlertSeverity.WARNING,
                    category=AlertCategory.CAPACITY,
                    title=(
                        f"{most_critical.title} at "
                        f"{round_half_up(most_critical.utilisation_pct)}% capacity"
                    ),
                    description=f"Only {remaining} licences remaining. Consider purchasing more.",
                    metric=f"{remaining} left",
                    action_label="Review Allocation",
                    action_type="navigate",
                    action_target="utilisation",
                )
            )

        under_utilised = [
            sku for sku in skus
            if sku.utilisation_pct < s.under_utilised_pct
            and sku.purchased >= s.capacity_min_purchased
        ]
        if under_utilised:
            total_unused = sum(sku.purchased - sku.assigned for sku in under_utilised)
            alerts.append(
                Alert(
                    severity=AlertSeverity.INFO,
                    category=AlertCategory.CAPACITY,
                    title=f"{total_unused} purchased licences unused",
                    description=(
                        f"{len(under_utilised)} licence type(s) below "
                        f"{round_half_up(s.under_utilised_pct)}% utilisation. "
                        "Consider reducing at renewal."
                    ),
                    metric=f"{total_unused} unused",
                    action_label="View Under-utilised",
                    action_type="navigate",
                    action_target="utilisation",
                )
            )

        return alerts

    def _cost_alerts(
        self,
        kpi: KpiSummary,
        downgrade_recommendations: list[DowngradeRecommendation],
    ) -> list[Alert]:
        s = self.settings
        alerts = []
        annual_savings = s.format_currency(kpi.potential_annual_savings)

        if kpi.potential_annual_savings >= s.savings_critical_annual:
            alerts.append(
                Alert(
                    severity=AlertSeverity.CRITICAL,
                    category=AlertCategory.COST,
                    title=f"{annual_savings} annual savings identified",
                    description=(
                        f"Significant cost reduction available from "
                        f"{kpi.issues_count} licence issues."
                    ),
                    metric=annual_savings,
                    action_label="View Opportunities",
                    action_type="navigate",
                    action_target="issues",
                )
            )
        elif kpi.potential_annual_savings >= s.savings_warning_annual:
            alerts.append(
                Alert(
                    severity=AlertSeverity.WARNING,
                    category=AlertCategory.COST,
                    title=f"{annual_savings} potential savings",
                    description="Cost optimisation opportunities identified from licence issues.",
                    metric=annual_savings,
                    action_label="Review Issues",
                    action_type="navigate",
                    action_target="issues",
                )
            )

        if downgrade_recommendations:
            downgrade_total = sum(r.annual_savings for r in downgrade_recommendations)
            if downgrade_total >= s.downgrade_alert_min_annual:
                count = len(downgrade_recommendations)
                alerts.append(
                    Alert(
                        severity=AlertSeverity.INFO,
                        category=AlertCategory.COST,
                        title=f"{count} downgrade candidates",
                        description=(
                            f"Potential {s.format_currency(downgrade_total)} annual savings "
                            "from licence rightsizing."
                        ),
                        metric=f"{count} users",
                        action_label="View Recommendations",
                        action_type="navigate",
                        action_target="optimisation",
                    )
                )

        if kpi.monthly_spend > 0:
            savings_pct = kpi.potential_monthly_savings / kpi.monthly_spend * 100
            if savings_pct >= s.savings_share_warning_pct:
                alerts.append(
                    Alert(
                        severity=AlertSeverity.WARNING,
                        category=AlertCategory.COST,
                        title=f"{round_half_up(savings_pct)}% of licence spend could be saved",
                        description=(
                            f"{s.format_currency(kpi.potential_monthly_savings)}/month of "
                            f"{s.format_currency(kpi.monthly_spend)} total spend."
                        ),
                        metric=f"{round_half_up(savings_pct)}%",
                        action_label="Optimise Now",
                        action_type="navigate",
                        action_target="issues",
                    )
                )

        return alerts

    def _compliance_alerts(self, kpi: KpiSummary) -> list[Alert]:
        s = self.settings
        alerts = []

        if kpi.disabled_count > 0:
            alerts.append(
                Alert(
                    severity=AlertSeverity.CRITICAL,
                    category=AlertCategory.COMPLIANCE,
                    title=f"{kpi.disabled_count} disabled accounts holding licences",
                    description="Licences assigned to disabled accounts should be removed immediately.",
                    metric=f"{kpi.disabled_count} accounts",
                    action_label="Remove Licences",
                    action_type="navigate",
                    action_target="issues",
                )
            )

        if kpi.dual_licensed_count > 0:
            alerts.append(
                Alert(
                    severity=AlertSeverity.WARNING,
                    category=AlertCategory.COMPLIANCE,
                    title=f"{kpi.dual_licensed_count} users with duplicate licences",
                    description="Users have both E3 and E5 assigned - only E5 is needed.",
                    metric=f"{kpi.dual_licensed_count} users",
                    action_label="Fix Duplicates",
                    action_type="navigate",
                    action_target="issues",
                )
            )

        if kpi.total_licensed_users > 0:
            inactive_pct = kpi.inactive_count / kpi.total_licensed_users * 100
            if (
                kpi.inactive_count >= s.inactive_alert_min_count
                and inactive_pct >= s.inactive_alert_min_pct
            ):
                alerts.append(
                    Alert(
                        severity=AlertSeverity.WARNING,
                        category=AlertCategory.COMPLIANCE,
                        title=f"{kpi.inactive_count} users inactive for {s.inactive_days}+ days",
                        description=(
                            f"{round_half_up(inactive_pct)}% of licensed users "
                            "haven't signed in recently."
                        ),
                        metric=f"{kpi.inactive_count} users",
                        action_label="Review Inactive",
                        action_type="navigate",
                        action_target="issues",
                    )
                )

        if kpi.active_users_pct < s.active_users_info_pct:
            alerts.append(
                Alert(
                    severity=AlertSeverity.INFO,
                    category=AlertCategory.COMPLIANCE,
                    title=f"Only {kpi.active_users_pct}% of users are active",
                    description="Consider reviewing licence assignments for inactive users.",
                    metric=f"{kpi.active_users_pct}% active",
                    action_label="View Activity",
                    action_type="navigate",
                    action_target="users",
                )
            )

        return alerts

    def _renewal_alerts(self, pricing: list[LicencePricing]) -> list[Alert]:
        s = self.settings
        today = self.today or date.today()
        alerts = []

        for p in pricing:
            if not p.renewal_date:
                continue

            days_until = (p.renewal_date - today).days
            if days_until <= 0:
                continue

            renewal_on = p.renewal_date.strftime("%d/%m/%Y")
            if days_until <= s.renewal_critical_days:
                alerts.append(
                    Alert(
                        severity=AlertSeverity.CRITICAL,
                        category=AlertCategory.RENEWAL,
                        title=f"{p.title} renewal in {days_until} days",
                        description=f"Contract renewal on {renewal_on}. Review licence counts.",
                        metric=f"{days_until} days",
                        action_label="Review Contract",
                        action_type="navigate",
                        action_target="costs",
                    )
                )
            elif days_until <= s.renewal_warning_days:
                alerts.append(
                    Alert(
                        severity=AlertSeverity.WARNING,
                        category=AlertCategory.RENEWAL,
                        title=f"{p.title} renewal approaching",
                        description=f"Contract renewal on {renewal_on} ({days_until} days).",
                        metric=f"{days_until} days",
                        action_label="Plan Renewal",
                        action_type="navigate",
                        action_target="costs",
                    )
                )

        return alerts

    # =========================================================================
    # Filtering helpers
    # =========================================================================

    @staticmethod
    def get_alerts_by_severity(alerts: list[Alert], severity: AlertSeverity) -> list[Alert]:
        return [a for a in alerts if a.severity == severity]

    @staticmethod
    def get_alerts_by_category(alerts: list[Alert], category: AlertCategory) -> list[Alert]:
        return [a for a in alerts if a.category == category]

    @staticmethod
    def get_alert_counts(alerts: list[Alert]) -> dict[AlertSeverity, int]:
        """Count alerts per severity, including zero counts."""
        counts = {severity: 0 for severity in AlertSeverity}
        for alert in alerts:
            counts[alert.severity] += 1
        return counts
