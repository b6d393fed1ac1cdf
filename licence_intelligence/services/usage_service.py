"""User usage profiles, E5 utilisation roll-ups and feature statistics."""

import logging

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import (
    BASIC_APPS,
    CORE_APPS,
    E3_LICENCE,
    E3_SKUS,
    E5_LICENCE,
    E5_SKUS,
    F3_LICENCE,
)
from licence_intelligence.core.utils import percentage, round_half_up
from licence_intelligence.schemas.licence import AppUsageRecord, LicenceUser, UsageReport
from licence_intelligence.schemas.usage import (
    DepartmentBreakdown,
    E5Feature,
    FeatureUsageStats,
    UnusedFeature,
    UsageAnalysisSummary,
    UserUsageProfile,
)
from licence_intelligence.services.cost_resolver import CostResolver
from licence_intelligence.services.feature_usage import (
    E5_FEATURES,
    FeatureUsageStrategy,
    HeuristicFeatureUsageStrategy,
)

logger = logging.getLogger(__name__)

TOP_UNUSED_FEATURES = 5
PRIMARY_APP_COUNT = 3


class UsageService:
    """Builds per-user usage profiles and tenant-wide usage summaries."""

    def __init__(
        self,
        resolver: CostResolver,
        strategy: FeatureUsageStrategy | None = None,
        features: tuple[E5Feature, ...] = E5_FEATURES,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver
        self.strategy = strategy or HeuristicFeatureUsageStrategy(self.settings)
        self.features = features
        self._names = {f.id: f.name for f in features}

    def generate_user_usage_profiles(
        self,
        users: list[LicenceUser],
        app_usage: list[AppUsageRecord] | None = None,
        usage_reports: list[UsageReport] | None = None,
    ) -> list[UserUsageProfile]:
        """Build one profile per user, joining telemetry by principal name.

        Args:
            users: Licensed users
            app_usage: Optional app activity rows; missing users get empty
                used/unused app lists
            usage_reports: Optional storage rows

        Returns:
            Profiles in user order
        """
        app_by_upn = {
            r.user_principal_name.lower(): r for r in app_usage or [] if r.user_principal_name
        }
        storage_by_upn = {
            r.user_principal_name.lower(): r for r in usage_reports or [] if r.user_principal_name
        }

        profiles = []
        for user in users:
            upn = user.user_principal_name.lower()
            profiles.append(
                self._build_profile(user, app_by_upn.get(upn), storage_by_upn.get(upn))
            )

        logger.info(
            f"Built {len(profiles)} usage profiles ({len(app_by_upn)} with app telemetry)"
        )
        return profiles

    def _build_profile(
        self,
        user: LicenceUser,
        usage: AppUsageRecord | None,
        storage: UsageReport | None,
    ) -> UserUsageProfile:
        s = self.settings
        licences = user.licence_names
        days = user.days_since_sign_in
        has_e5 = user.has_e5 or self.resolver.holds_tier(user, E5_SKUS)
        has_e3 = user.has_e3 or self.resolver.holds_tier(user, E3_SKUS)

        apps_used: list[str] = []
        apps_not_used: list[str] = []
        if usage:
            for app in CORE_APPS:
                if usage.uses_app(app):
                    apps_used.append(app)
                else:
                    apps_not_used.append(app)

        verdicts = []
        features_used: list[str] = []
        features_not_used: list[str] = []
        e5_pct = 0
        if has_e5:
            verdicts = self.strategy.evaluate(user, apps_used, self.features)
            for v in verdicts:
                name = self._names.get(v.feature_id, v.feature_id)
                if v.used:
                    features_used.append(name)
                else:
                    features_not_used.append(name)
            e5_pct = percentage(len(features_used), len(self.features))

        can_downgrade = False
        recommended = None
        reason = ""
        confidence = 0
        monthly = 0.0

        if has_e5:
            if e5_pct < s.e5_underutilised_pct and days < s.inactive_days:
                can_downgrade = True
                recommended = E3_LICENCE
                reason = (
                    f"Only using {e5_pct}% of E5-exclusive features. "
                    f"Core apps ({', '.join(apps_used) or 'standard'}) available in E3."
                )
                confidence = 85 if e5_pct < s.e5_very_low_utilisation_pct else 65
                monthly = self.resolver.downgrade_savings(E5_LICENCE, E3_LICENCE)
            elif days >= s.inactive_days:
                can_downgrade = True
                reason = f"Inactive for {days} days. Consider removing E5 licence."
                confidence = 90
                monthly = self.resolver.cost_or_standard(E5_LICENCE)
        elif has_e3:
            # all() is vacuously true without telemetry, so E3 users with no
            # app data still qualify
            basic_only = len(apps_used) <= s.f3_max_apps and all(
                a in BASIC_APPS for a in apps_used
            )
            if basic_only and days < s.inactive_days:
                can_downgrade = True
                recommended = F3_LICENCE
                reason = (
                    f"Only using {', '.join(apps_used) or 'basic apps'}. "
                    "F3 licence may be sufficient."
                )
                confidence = 50
                monthly = self.resolver.downgrade_savings(E3_LICENCE, F3_LICENCE)

        return UserUsageProfile(
            user_id=user.id,
            user_principal_name=user.user_principal_name,
            display_name=user.display_name or user.user_principal_name or "Unknown User",
            department=user.department or "Unknown",
            current_licences=licences,
            has_e5=has_e5,
            has_e3=has_e3,
            last_sign_in=user.last_sign_in_date,
            days_since_sign_in=days,
            is_active=days < s.recent_sign_in_days,
            has_usage_data=usage is not None,
            apps_used=apps_used,
            apps_not_used=apps_not_used,
            primary_apps=apps_used[:PRIMARY_APP_COUNT],
            e5_features_used=features_used,
            e5_features_not_used=features_not_used,
            e5_feature_verdicts=verdicts,
            e5_utilisation_pct=e5_pct,
            e5_feature_usage_estimated=self.strategy.estimated,
            can_downgrade=can_downgrade,
            recommended_licence=recommended,
            downgrade_reason=reason,
            confidence_score=confidence,
            potential_monthly_savings=monthly,
            potential_annual_savings=monthly * 12,
            onedrive_used_gb=storage.onedrive_used_gb if storage else None,
            onedrive_allocated_gb=storage.onedrive_allocated_gb if storage else None,
            mailbox_used_gb=storage.mailbox_used_gb if storage else None,
            mailbox_allocated_gb=storage.mailbox_allocated_gb if storage else None,
        )

    def generate_usage_analysis_summary(
        self, profiles: list[UserUsageProfile]
    ) -> UsageAnalysisSummary:
        """Roll profiles up into E5 utilisation and downgrade totals."""
        e5_users = [p for p in profiles if p.has_e5]
        underutilised = [
            p for p in e5_users if p.e5_utilisation_pct < self.settings.e5_underutilised_pct
        ]
        candidates = [p for p in profiles if p.can_downgrade]

        average = 0
        if e5_users:
            average = round_half_up(sum(p.e5_utilisation_pct for p in e5_users) / len(e5_users))

        unused_counts = {f.name: 0 for f in self.features}
        for p in e5_users:
            for name in p.e5_features_not_used:
                if name in unused_counts:
                    unused_counts[name] += 1

        top_unused = sorted(
            (
                UnusedFeature(
                    feature=name,
                    unused_count=count,
                    pct=percentage(count, len(e5_users)),
                )
                for name, count in unused_counts.items()
            ),
            key=lambda f: f.unused_count,
            reverse=True,
        )[:TOP_UNUSED_FEATURES]

        departments: dict[str, DepartmentBreakdown] = {}
        for p in e5_users:
            dept = p.department or "Unknown"
            if dept not in departments:
                departments[dept] = DepartmentBreakdown(department=dept)
            entry = departments[dept]
            entry.e5_users += 1
            if p.can_downgrade:
                entry.can_downgrade += 1
                entry.savings += p.potential_annual_savings

        return UsageAnalysisSummary(
            total_users_analysed=len(profiles),
            e5_users_count=len(e5_users),
            e5_underutilised_count=len(underutilised),
            e5_underutilised_pct=percentage(len(underutilised), len(e5_users)),
            average_e5_utilisation_pct=average,
            downgrade_recommendations=len(candidates),
            potential_annual_savings=sum(p.potential_annual_savings for p in candidates),
            top_unused_features=top_unused,
            department_breakdown=sorted(
                departments.values(), key=lambda d: d.savings, reverse=True
            ),
        )

    def generate_feature_usage_stats(
        self, profiles: list[UserUsageProfile]
    ) -> list[FeatureUsageStats]:
        """Per-feature adoption among E5 holders, least used first."""
        e5_users = [p for p in profiles if p.has_e5]
        if not e5_users:
            return []

        stats = []
        for feature in self.features:
            using = sum(1 for p in e5_users if feature.name in p.e5_features_used)
            stats.append(
                FeatureUsageStats(
                    feature_id=feature.id,
                    feature_name=feature.name,
                    category=feature.category,
                    users_with_access=len(e5_users),
                    users_actually_using=using,
                    utilisation_pct=percentage(using, len(e5_users)),
                )
            )
        return sorted(stats, key=lambda x: x.utilisation_pct)
