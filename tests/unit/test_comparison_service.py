"""Tests for month-over-month comparison and trend data."""

import pytest

from licence_intelligence.schemas.comparison import MonthComparison, Trend
from licence_intelligence.services.comparison_service import (
    NO_CHANGE_SUMMARY,
    ComparisonService,
)


@pytest.fixture
def comparison_service(classifier, settings):
    return ComparisonService(classifier, settings)


def metric(data, name):
    return ComparisonService.get_metric_trend(data.comparisons, name)


class TestMonthComparison:
    """Tests for ComparisonService.generate_month_comparison."""

    def test_needs_two_dates(self, comparison_service, make_snapshot):
        assert comparison_service.generate_month_comparison([]) is None
        snapshots = [
            make_snapshot("2024-01-01", "Microsoft 365 E5"),
            make_snapshot("2024-01-01", "Microsoft 365 E3"),
        ]
        assert comparison_service.generate_month_comparison(snapshots) is None

    def test_utilisation_improvement(self, comparison_service, make_snapshot):
        """Test utilisation 80% -> 95% is a 15 point, 19% upward move."""
        snapshots = [
            make_snapshot("2024-01-01", purchased=100, assigned=80),
            make_snapshot("2024-02-01", purchased=100, assigned=95),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        utilisation = metric(data, "Overall Utilisation")
        assert utilisation.previous_value == 80
        assert utilisation.current_value == 95
        assert utilisation.change == 15
        assert utilisation.change_pct == 19
        assert utilisation.trend == Trend.UP
        assert utilisation.is_positive is True

    def test_metrics_in_order(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)

        assert [c.metric for c in data.comparisons] == [
            "Total Licensed Users",
            "Assigned Licences",
            "Purchased Licences",
            "Overall Utilisation",
            "Disabled Accounts",
            "Inactive Users (90+)",
            "Dual-Licensed Users",
            "Total Issues",
        ]

    def test_month_labels(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)
        assert data.current_month == "May 2024"
        assert data.previous_month == "April 2024"

    def test_uses_two_latest_dates_in_any_order(self, comparison_service, make_snapshot):
        snapshots = [
            make_snapshot("2024-03-01", assigned=90),
            make_snapshot("2024-01-01", assigned=10),
            make_snapshot("2024-02-01", assigned=60),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        assigned = metric(data, "Assigned Licences")
        assert (assigned.previous_value, assigned.current_value) == (60, 90)
        assert data.previous_month == "February 2024"

    def test_totals_sum_sku_rows(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)

        assigned = metric(data, "Assigned Licences")
        purchased = metric(data, "Purchased Licences")
        utilisation = metric(data, "Overall Utilisation")
        assert (assigned.previous_value, assigned.current_value) == (210, 230)
        assert assigned.change_pct == 5
        assert purchased.trend == Trend.STABLE
        # 230 / 300
        assert utilisation.current_value == 77

    def test_tenant_counts_taken_once_per_date(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)

        users = metric(data, "Total Licensed Users")
        disabled = metric(data, "Disabled Accounts")
        assert (users.previous_value, users.current_value) == (6, 7)
        assert users.change_pct == 17
        assert (disabled.previous_value, disabled.current_value) == (2, 1)

    def test_inverted_metrics_are_positive_when_falling(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)

        disabled = metric(data, "Disabled Accounts")
        assert disabled.trend == Trend.DOWN
        assert disabled.change_pct == -50
        assert disabled.is_positive is True

    def test_inverted_metrics_are_negative_when_rising(self, comparison_service, make_snapshot):
        snapshots = [
            make_snapshot("2024-01-01", dual_count=2),
            make_snapshot("2024-02-01", dual_count=5),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        dual = metric(data, "Dual-Licensed Users")
        assert dual.trend == Trend.UP
        assert dual.is_positive is False

    def test_previous_zero(self, comparison_service, make_snapshot):
        """Test growth from zero reports 100% rather than dividing by zero."""
        snapshots = [
            make_snapshot("2024-01-01", inactive_count=0),
            make_snapshot("2024-02-01", inactive_count=4),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        inactive = metric(data, "Inactive Users (90+)")
        assert inactive.change_pct == 100
        assert inactive.trend == Trend.UP

    def test_unchanged_metrics_are_stable_and_positive(self, comparison_service, make_snapshot):
        snapshots = [make_snapshot("2024-01-01"), make_snapshot("2024-02-01")]

        data = comparison_service.generate_month_comparison(snapshots)

        assert all(c.trend == Trend.STABLE for c in data.comparisons)
        assert all(c.is_positive for c in data.comparisons)
        assert data.summary_text == NO_CHANGE_SUMMARY

    def test_headcount_changes_are_neutral(self, comparison_service, make_snapshot):
        snapshots = [
            make_snapshot("2024-01-01", total_users=100),
            make_snapshot("2024-02-01", total_users=80),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        users = metric(data, "Total Licensed Users")
        assert users.trend == Trend.DOWN
        assert users.is_positive is True

    def test_sku_filter_drops_excluded_rows(self, comparison_service, dataset, make_snapshot):
        viral = [
            make_snapshot("2024-04-01", "Power Apps (Viral)", purchased=10_000, assigned=400),
            make_snapshot("2024-05-01", "Power Apps (Viral)", purchased=10_000, assigned=500),
        ]
        snapshots = dataset.snapshots + viral

        filtered = comparison_service.generate_month_comparison(snapshots, dataset.skus)
        unfiltered = comparison_service.generate_month_comparison(snapshots)

        assert metric(filtered, "Purchased Licences").current_value == 300
        assert metric(unfiltered, "Purchased Licences").current_value == 10_300


class TestSummaryText:
    """Tests for the narrative summary."""

    def test_summary_of_dataset(self, comparison_service, dataset):
        data = comparison_service.generate_month_comparison(dataset.snapshots)

        assert data.summary_text == (
            "Licensed users increased by 1 (+17%). "
            "Utilisation improved to 77%. "
            "Great progress: 1 fewer issues to resolve. "
            "Disabled accounts reduced from 2 to 1."
        )

    def test_summary_of_deterioration(self, comparison_service, make_snapshot):
        snapshots = [
            make_snapshot("2024-01-01", assigned=90, total_users=100, disabled_count=1),
            make_snapshot("2024-02-01", assigned=70, total_users=90, disabled_count=4),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        assert data.summary_text == (
            "Licensed users decreased by 10 (-10%). "
            "Utilisation dropped to 70%. "
            "3 new issues identified requiring attention. "
            "Warning: 3 new disabled accounts with licences."
        )

    def test_cleared_disabled_accounts_are_not_mentioned(self, comparison_service, make_snapshot):
        snapshots = [
            make_snapshot("2024-01-01", disabled_count=3),
            make_snapshot("2024-02-01", disabled_count=0),
        ]

        data = comparison_service.generate_month_comparison(snapshots)

        assert data.summary_text == "Great progress: 3 fewer issues to resolve."


class TestTrendData:
    """Tests for ComparisonService.get_trend_data."""

    @pytest.fixture
    def eight_months(self, make_snapshot):
        return [
            make_snapshot(f"2024-{month:02d}-01", assigned=70 + month, utilisation_pct=70.0 + month)
            for month in range(8, 0, -1)
        ]

    def test_defaults_to_last_six_months_oldest_first(self, comparison_service, eight_months):
        points = comparison_service.get_trend_data(eight_months)

        assert [p.date for p in points] == ["Mar 24", "Apr 24", "May 24", "Jun 24", "Jul 24", "Aug 24"]
        assert points[0].assigned == 73
        assert points[-1].utilisation == 78.0

    def test_custom_window(self, comparison_service, eight_months):
        points = comparison_service.get_trend_data(eight_months, months=2)
        assert [p.date for p in points] == ["Jul 24", "Aug 24"]

    def test_one_point_per_sku_row(self, comparison_service, dataset):
        points = comparison_service.get_trend_data(dataset.snapshots)

        assert len(points) == 4
        assert [p.sku_name for p in points[:2]] == ["Microsoft 365 E5", "Microsoft 365 E3"]
        assert points[0].date == "Apr 24"

    def test_empty(self, comparison_service):
        assert comparison_service.get_trend_data([]) == []


class TestComparisonHelpers:
    """Tests for the static comparison helpers."""

    @staticmethod
    def comparison(name, trend, is_positive):
        return MonthComparison(
            metric=name,
            previous_value=1,
            current_value=1,
            change=0,
            change_pct=0,
            trend=trend,
            is_positive=is_positive,
        )

    def test_overall_trend_needs_half_positive(self):
        comparisons = [
            self.comparison("a", Trend.UP, True),
            self.comparison("b", Trend.UP, False),
        ]
        assert ComparisonService.is_overall_trend_positive(comparisons) is True
        comparisons.append(self.comparison("c", Trend.DOWN, False))
        assert ComparisonService.is_overall_trend_positive(comparisons) is False

    def test_key_highlights(self):
        comparisons = [
            self.comparison("better", Trend.DOWN, True),
            self.comparison("worse", Trend.UP, False),
            self.comparison("same", Trend.STABLE, True),
        ]

        highlights = ComparisonService.get_key_highlights(comparisons)

        assert [c.metric for c in highlights.improvements] == ["better"]
        assert [c.metric for c in highlights.concerns] == ["worse"]
        assert [c.metric for c in highlights.stable] == ["same"]

    def test_missing_metric(self):
        assert ComparisonService.get_metric_trend([], "Total Issues") is None
