"""Licence downgrade recommendations.

Downgrade paths:
- E5 -> E3: E5 holders whose sign-in activity has dropped off
- E3 -> F3: E3 holders in frontline-sounding departments

Users that already carry a hygiene issue are tracked by the issue
categories and are not re-flagged here.
"""

import logging
from collections import defaultdict

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import (
    E3_LICENCE,
    E3_SKUS,
    E5_LICENCE,
    E5_SKUS,
    F3_LICENCE,
    FRONTLINE_DEPARTMENT_KEYWORDS,
    IssueType,
)
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.core.utils import contains_any
from licence_intelligence.schemas.downgrade import (
    DOWNGRADE_DESCRIPTIONS,
    Confidence,
    DowngradeRecommendation,
    DowngradeSummary,
    DowngradeTotals,
    DowngradeType,
    LicenceCost,
    UserCostBreakdown,
)
from licence_intelligence.schemas.licence import LicencePricing, LicenceSku, LicenceUser
from licence_intelligence.services.cost_resolver import CostResolver

logger = logging.getLogger(__name__)


class DowngradeEngine:
    """Identifies right-sizing candidates with resolver-backed savings."""

    def __init__(
        self,
        resolver: CostResolver | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver or CostResolver([], [], SkuClassifier(settings=self.settings))

    def initialise(self, pricing: list[LicencePricing], skus: list[LicenceSku]) -> None:
        """Rebuild the pricing and SKU lookups for a new analysis cycle."""
        self.resolver = CostResolver(pricing, skus, self.resolver.classifier)

    def get_licence_cost(self, licence_name: str) -> LicenceCost:
        return self.resolver.resolve(licence_name)

    def get_user_cost_breakdown(self, user: LicenceUser) -> UserCostBreakdown:
        return self.resolver.user_cost_breakdown(user)

    def has_licence_tier(self, user: LicenceUser, sku_patterns: tuple[str, ...]) -> bool:
        """True if the user holds any of the given SKUs by name."""
        return self.resolver.holds_tier(user, sku_patterns)

    def generate_downgrade_recommendations(
        self, users: list[LicenceUser]
    ) -> list[DowngradeRecommendation]:
        """Generate downgrade candidates for users without an existing issue."""
        s = self.settings
        recommendations = []

        for user in users:
            if user.issue_type != IssueType.NONE or user.is_service_account:
                continue

            has_e5 = self.has_licence_tier(user, E5_SKUS) or user.has_e5
            has_e3 = self.has_licence_tier(user, E3_SKUS) or user.has_e3
            days = user.days_since_sign_in

            if has_e5 and s.e5_review_min_inactive_days <= days < s.inactive_days:
                monthly = self.resolver.downgrade_savings(E5_LICENCE, E3_LICENCE)
                confidence = (
                    Confidence.HIGH
                    if days > s.e5_high_confidence_inactive_days
                    else Confidence.MEDIUM
                )
                recommendations.append(
                    self._recommendation(
                        user,
                        current=E5_LICENCE,
                        recommended=E3_LICENCE,
                        downgrade_type=DowngradeType.E5_TO_E3,
                        reason=(
                            f"Reduced sign-in activity ({days} days since last sign-in). "
                            "Review E5 feature usage before downgrading."
                        ),
                        monthly_savings=monthly,
                        confidence=confidence,
                    )
                )

            if has_e3 and not has_e5 and contains_any(user.department, FRONTLINE_DEPARTMENT_KEYWORDS):
                monthly = self.resolver.downgrade_savings(E3_LICENCE, F3_LICENCE)
                recommendations.append(
                    self._recommendation(
                        user,
                        current=E3_LICENCE,
                        recommended=F3_LICENCE,
                        downgrade_type=DowngradeType.E3_TO_F3,
                        reason=(
                            "Department suggests frontline worker role - F3 may be sufficient. "
                            "Department-name heuristic only; verify the role before changing."
                        ),
                        monthly_savings=monthly,
                        confidence=Confidence.LOW,
                    )
                )

        logger.info(f"Identified {len(recommendations)} downgrade candidates from {len(users)} users")
        return recommendations

    @staticmethod
    def _recommendation(
        user: LicenceUser,
        current: str,
        recommended: str,
        downgrade_type: DowngradeType,
        reason: str,
        monthly_savings: float,
        confidence: Confidence,
    ) -> DowngradeRecommendation:
        return DowngradeRecommendation(
            user_id=user.id,
            user_name=user.display_name,
            user_email=user.user_principal_name,
            department=user.department,
            current_licence=current,
            recommended_licence=recommended,
            downgrade_type=downgrade_type,
            reason=reason,
            monthly_savings=monthly_savings,
            annual_savings=monthly_savings * 12,
            confidence=confidence,
        )

    @staticmethod
    def summarise_downgrades(
        recommendations: list[DowngradeRecommendation],
    ) -> list[DowngradeSummary]:
        """Group recommendations by downgrade type, largest savings first."""
        groups: dict[DowngradeType, list[DowngradeRecommendation]] = defaultdict(list)
        for r in recommendations:
            groups[r.downgrade_type].append(r)

        summaries = [
            DowngradeSummary(
                type=downgrade_type,
                count=len(recs),
                users=recs,
                total_monthly_savings=sum(r.monthly_savings for r in recs),
                total_annual_savings=sum(r.annual_savings for r in recs),
                description=DOWNGRADE_DESCRIPTIONS[downgrade_type],
            )
            for downgrade_type, recs in groups.items()
        ]
        return sorted(summaries, key=lambda x: x.total_annual_savings, reverse=True)

    @staticmethod
    def get_total_downgrade_value(
        recommendations: list[DowngradeRecommendation],
    ) -> DowngradeTotals:
        return DowngradeTotals(
            monthly_total=sum(r.monthly_savings for r in recommendations),
            annual_total=sum(r.annual_savings for r in recommendations),
            user_count=len(recommendations),
        )
