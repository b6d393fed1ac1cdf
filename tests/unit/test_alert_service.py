"""Tests for alert generation."""

from datetime import date, timedelta

import pytest

from licence_intelligence.schemas.alert import AlertCategory, AlertSeverity
from licence_intelligence.schemas.downgrade import Confidence, DowngradeRecommendation, DowngradeType
from licence_intelligence.schemas.licence import LicencePricing
from licence_intelligence.services.alert_service import AlertService

TODAY = date(2024, 6, 1)


@pytest.fixture
def alert_service(classifier, settings):
    return AlertService(classifier, settings, today=TODAY)


def titles(alerts):
    return [a.title for a in alerts]


def recommendation(annual_savings: float) -> DowngradeRecommendation:
    return DowngradeRecommendation(
        user_id=1,
        user_name="Ada",
        user_email="ada@contoso.com",
        department="Finance",
        current_licence="Microsoft 365 E5",
        recommended_licence="Microsoft 365 E3",
        downgrade_type=DowngradeType.E5_TO_E3,
        reason="Reduced sign-in activity",
        monthly_savings=annual_savings / 12,
        annual_savings=annual_savings,
        confidence=Confidence.MEDIUM,
    )


class TestCapacityAlerts:
    """Tests for capacity rules."""

    def test_quiet_tenant_raises_nothing(self, alert_service, make_kpi, make_sku):
        alerts = alert_service.generate_alerts([make_sku("SPE_E3")], [], make_kpi())
        assert alerts == []

    def test_over_allocated_reports_total_seats_over(self, alert_service, make_kpi, make_sku):
        skus = [
            make_sku("SPE_E3", purchased=100, assigned=103),
            make_sku("SPE_E5", purchased=50, assigned=52),
        ]

        alerts = alert_service.generate_alerts(skus, [], make_kpi())

        over = alerts[0]
        assert over.severity == AlertSeverity.CRITICAL
        assert over.category == AlertCategory.CAPACITY
        assert over.title == "2 licence type(s) over-allocated"
        assert over.metric == "+5 over"

    def test_excluded_skus_are_ignored(self, alert_service, make_kpi, make_sku):
        skus = [make_sku("POWERAPPS_VIRAL", purchased=10, assigned=5000)]
        assert alert_service.generate_alerts(skus, [], make_kpi()) == []

    def test_near_capacity_reports_most_utilised(self, alert_service, make_kpi, make_sku):
        skus = [
            make_sku("SPE_E3", "Microsoft 365 E3", purchased=100, assigned=92),
            make_sku("SPE_E5", "Microsoft 365 E5", purchased=100, assigned=95),
            make_sku("VISIOCLIENT", "Visio Plan 2", purchased=5, assigned=5),
        ]

        alerts = alert_service.generate_alerts(skus, [], make_kpi())

        warnings = AlertService.get_alerts_by_severity(alerts, AlertSeverity.WARNING)
        assert len(warnings) == 1
        assert warnings[0].title == "Microsoft 365 E5 at 95% capacity"
        assert warnings[0].metric == "5 left"

    def test_near_capacity_needs_minimum_seats(self, alert_service, make_kpi, make_sku):
        skus = [make_sku("VISIOCLIENT", purchased=9, assigned=9)]
        skus[0] = skus[0].model_copy(update={"utilisation_pct": 95.0})
        assert alert_service.generate_alerts(skus, [], make_kpi()) == []

    def test_under_utilised_reports_total_unused(self, alert_service, make_kpi, make_sku):
        skus = [
            make_sku("SPE_E3", purchased=100, assigned=40),
            make_sku("SPE_E5", purchased=20, assigned=5),
            make_sku("VISIOCLIENT", purchased=8, assigned=1),
        ]

        alerts = alert_service.generate_alerts(skus, [], make_kpi())

        assert len(alerts) == 1
        assert alerts[0].severity == AlertSeverity.INFO
        assert alerts[0].title == "75 purchased licences unused"
        assert alerts[0].description.startswith("2 licence type(s)")


class TestCostAlerts:
    """Tests for savings rules."""

    @pytest.mark.parametrize(
        "annual,severity",
        [
            (60_000, AlertSeverity.CRITICAL),
            (50_000, AlertSeverity.CRITICAL),
            (49_999, AlertSeverity.WARNING),
            (10_000, AlertSeverity.WARNING),
        ],
    )
    def test_savings_bands(self, alert_service, make_kpi, annual, severity):
        kpi = make_kpi(potential_annual_savings=annual, potential_monthly_savings=annual / 12)

        alerts = AlertService.get_alerts_by_category(
            alert_service.generate_alerts([], [], kpi), AlertCategory.COST
        )

        assert [a.severity for a in alerts] == [severity]

    def test_small_savings_raise_nothing(self, alert_service, make_kpi):
        kpi = make_kpi(potential_annual_savings=9_999)
        assert alert_service.generate_alerts([], [], kpi) == []

    def test_savings_title_formats_currency(self, alert_service, make_kpi):
        kpi = make_kpi(potential_annual_savings=61_234.6, issues_count=12)

        alert = alert_service.generate_alerts([], [], kpi)[0]

        assert alert.title == "£61,235 annual savings identified"
        assert "12 licence issues" in alert.description

    def test_downgrade_candidates_over_floor(self, alert_service, make_kpi):
        recs = [recommendation(3_000), recommendation(2_000)]

        alerts = alert_service.generate_alerts([], [], make_kpi(), recs)

        assert titles(alerts) == ["2 downgrade candidates"]
        assert alerts[0].severity == AlertSeverity.INFO
        assert alerts[0].action_target == "optimisation"

    def test_downgrade_candidates_under_floor(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [], make_kpi(), [recommendation(4_999)])
        assert alerts == []

    def test_savings_share_of_spend(self, alert_service, make_kpi):
        kpi = make_kpi(monthly_spend=1_000, potential_monthly_savings=150)

        alerts = alert_service.generate_alerts([], [], kpi)

        assert titles(alerts) == ["15% of licence spend could be saved"]
        assert alerts[0].severity == AlertSeverity.WARNING

    def test_savings_share_needs_spend(self, alert_service, make_kpi):
        kpi = make_kpi(monthly_spend=0, potential_monthly_savings=150)
        assert alert_service.generate_alerts([], [], kpi) == []


class TestComplianceAlerts:
    """Tests for hygiene rules."""

    def test_disabled_accounts_are_critical(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [], make_kpi(disabled_count=1))

        assert titles(alerts) == ["1 disabled accounts holding licences"]
        assert alerts[0].severity == AlertSeverity.CRITICAL
        assert alerts[0].category == AlertCategory.COMPLIANCE

    def test_dual_licensed_is_warning(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [], make_kpi(dual_licensed_count=3))
        assert titles(alerts) == ["3 users with duplicate licences"]
        assert alerts[0].severity == AlertSeverity.WARNING

    @pytest.mark.parametrize(
        "inactive,total,expected",
        [(10, 100, True), (9, 100, False), (10, 1_000, False), (50, 1_000, True)],
    )
    def test_inactive_needs_count_and_share(self, alert_service, make_kpi, inactive, total, expected):
        kpi = make_kpi(inactive_count=inactive, total_licensed_users=total)

        alerts = alert_service.generate_alerts([], [], kpi)

        assert bool(alerts) is expected

    def test_inactive_with_no_users(self, alert_service, make_kpi):
        kpi = make_kpi(inactive_count=10, total_licensed_users=0)
        assert alert_service.generate_alerts([], [], kpi) == []

    def test_low_active_percentage(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [], make_kpi(active_users_pct=74))

        assert titles(alerts) == ["Only 74% of users are active"]
        assert alerts[0].severity == AlertSeverity.INFO
        assert alerts[0].action_target == "users"

    def test_active_percentage_at_floor(self, alert_service, make_kpi):
        assert alert_service.generate_alerts([], [], make_kpi(active_users_pct=75)) == []


class TestRenewalAlerts:
    """Tests for renewal windows."""

    @staticmethod
    def priced(days_until: int) -> LicencePricing:
        return LicencePricing(
            title="Microsoft 365 E5",
            monthly_cost_per_user=50,
            renewal_date=TODAY + timedelta(days=days_until),
        )

    @pytest.mark.parametrize(
        "days_until,severity",
        [
            (1, AlertSeverity.CRITICAL),
            (30, AlertSeverity.CRITICAL),
            (31, AlertSeverity.WARNING),
            (90, AlertSeverity.WARNING),
        ],
    )
    def test_renewal_windows(self, alert_service, make_kpi, days_until, severity):
        alerts = alert_service.generate_alerts([], [self.priced(days_until)], make_kpi())

        assert len(alerts) == 1
        assert alerts[0].severity == severity
        assert alerts[0].category == AlertCategory.RENEWAL
        assert alerts[0].metric == f"{days_until} days"

    @pytest.mark.parametrize("days_until", [-30, 0, 91, 365])
    def test_outside_windows(self, alert_service, make_kpi, days_until):
        assert alert_service.generate_alerts([], [self.priced(days_until)], make_kpi()) == []

    def test_renewal_alert_text(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [self.priced(14)], make_kpi())

        assert alerts[0].title == "Microsoft 365 E5 renewal in 14 days"
        assert alerts[0].description == "Contract renewal on 15/06/2024. Review licence counts."

    def test_one_alert_per_pricing_record(self, alert_service, make_kpi):
        pricing = [self.priced(10), self.priced(20), LicencePricing(title="No date")]
        alerts = alert_service.generate_alerts([], pricing, make_kpi())
        assert len(alerts) == 2

    def test_iso_timestamp_renewal_dates(self, alert_service, make_kpi):
        pricing = [
            LicencePricing.model_validate(
                {"Title": "Visio Plan 2", "MonthlyCostPerUser": 12, "RenewalDate": "2024-06-11T00:00:00Z"}
            )
        ]
        alerts = alert_service.generate_alerts([], pricing, make_kpi())
        assert alerts[0].title == "Visio Plan 2 renewal in 10 days"


class TestOrdering:
    """Tests for severity ordering and helpers."""

    def test_severity_order_is_stable(self, alert_service, make_kpi, make_sku):
        skus = [make_sku("SPE_E3", purchased=100, assigned=110)]
        kpi = make_kpi(disabled_count=2, dual_licensed_count=1, active_users_pct=50)

        alerts = alert_service.generate_alerts(skus, [], kpi)

        assert [a.severity for a in alerts] == [
            AlertSeverity.CRITICAL,
            AlertSeverity.CRITICAL,
            AlertSeverity.WARNING,
            AlertSeverity.INFO,
        ]
        # Capacity rules run before compliance rules
        assert alerts[0].category == AlertCategory.CAPACITY
        assert alerts[1].category == AlertCategory.COMPLIANCE

    def test_alert_ids_are_unique(self, alert_service, make_kpi):
        kpi = make_kpi(disabled_count=2, dual_licensed_count=1, active_users_pct=50)
        alerts = alert_service.generate_alerts([], [], kpi)
        assert len({a.id for a in alerts}) == len(alerts)

    def test_alert_counts_include_zero(self, alert_service, make_kpi):
        alerts = alert_service.generate_alerts([], [], make_kpi(disabled_count=1, active_users_pct=50))

        counts = AlertService.get_alert_counts(alerts)

        assert counts == {
            AlertSeverity.CRITICAL: 1,
            AlertSeverity.WARNING: 0,
            AlertSeverity.INFO: 1,
            AlertSeverity.SUCCESS: 0,
        }

    def test_default_today(self, classifier, settings, make_kpi):
        service = AlertService(classifier, settings)
        pricing = [
            LicencePricing(
                title="Microsoft 365 E3",
                monthly_cost_per_user=30,
                renewal_date=date.today() + timedelta(days=5),
            )
        ]
        alerts = service.generate_alerts([], pricing, make_kpi())
        assert alerts[0].severity == AlertSeverity.CRITICAL
