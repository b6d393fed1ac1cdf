"""Month-over-month comparison and trend series from licence snapshots."""

import logging
from dataclasses import dataclass
from datetime import date

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.core.utils import percentage, round_half_up
from licence_intelligence.schemas.comparison import (
    KeyHighlights,
    MonthComparison,
    MonthComparisonData,
    Trend,
    TrendDataPoint,
)
from licence_intelligence.schemas.licence import LicenceSku, LicenceSnapshot

logger = logging.getLogger(__name__)

NO_CHANGE_SUMMARY = "No significant changes from last month."


@dataclass
class PeriodTotals:
    """Tenant totals for one snapshot date."""

    total_users: int = 0
    total_assigned: int = 0
    total_purchased: int = 0
    disabled_count: int = 0
    inactive_count: int = 0
    dual_count: int = 0
    service_count: int = 0

    @property
    def utilisation_pct(self) -> int:
        return percentage(self.total_assigned, self.total_purchased)

    @property
    def issues_count(self) -> int:
        return self.disabled_count + self.inactive_count + self.dual_count + self.service_count


def _distinct_dates_desc(snapshots: list[LicenceSnapshot]) -> list[date]:
    return sorted({s.snapshot_date for s in snapshots}, reverse=True)


class ComparisonService:
    """Service for month-over-month snapshot analysis."""

    def __init__(self, classifier: SkuClassifier | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.classifier = classifier or SkuClassifier(settings=self.settings)

    def generate_month_comparison(
        self,
        snapshots: list[LicenceSnapshot],
        skus: list[LicenceSku] | None = None,
    ) -> MonthComparisonData | None:
        """Compare the two most recent snapshot dates.

        Args:
            snapshots: Snapshot rows across any number of periods
            skus: Optional SKU list; when given, assigned/purchased totals
                only count rows whose SKU name is a paid SKU title

        Returns:
            MonthComparisonData, or None with fewer than two distinct dates
        """
        dates = _distinct_dates_desc(snapshots)
        if len(dates) < 2:
            logger.debug("Fewer than two snapshot dates; skipping comparison")
            return None

        current_date, previous_date = dates[0], dates[1]
        current = self._period_totals(
            [s for s in snapshots if s.snapshot_date == current_date], skus
        )
        previous = self._period_totals(
            [s for s in snapshots if s.snapshot_date == previous_date], skus
        )

        comparisons = [
            self._compare("Total Licensed Users", previous.total_users, current.total_users),
            self._compare("Assigned Licences", previous.total_assigned, current.total_assigned),
            self._compare("Purchased Licences", previous.total_purchased, current.total_purchased),
            self._compare(
                "Overall Utilisation",
                previous.utilisation_pct,
                current.utilisation_pct,
                up_is_positive=True,
            ),
            self._compare(
                "Disabled Accounts", previous.disabled_count, current.disabled_count, inverted=True
            ),
            self._compare(
                "Inactive Users (90+)", previous.inactive_count, current.inactive_count, inverted=True
            ),
            self._compare(
                "Dual-Licensed Users", previous.dual_count, current.dual_count, inverted=True
            ),
            self._compare(
                "Total Issues", previous.issues_count, current.issues_count, inverted=True
            ),
        ]

        return MonthComparisonData(
            current_month=current_date.strftime("%B %Y"),
            previous_month=previous_date.strftime("%B %Y"),
            comparisons=comparisons,
            summary_text=self._summary_text(comparisons),
        )

    def _period_totals(
        self,
        rows: list[LicenceSnapshot],
        skus: list[LicenceSku] | None,
    ) -> PeriodTotals:
        filtered = rows
        if skus:
            paid_titles = {s.title for s in self.classifier.paid_skus(skus)}
            filtered = [r for r in rows if r.sku_name in paid_titles]

        # Tenant-wide counts are duplicated on every row; the first is authoritative
        first = rows[0] if rows else None
        return PeriodTotals(
            total_users=first.total_users if first else 0,
            total_assigned=sum(r.assigned for r in filtered),
            total_purchased=sum(r.purchased for r in filtered),
            disabled_count=first.disabled_count if first else 0,
            inactive_count=first.inactive_count if first else 0,
            dual_count=first.dual_count if first else 0,
            service_count=first.service_count if first else 0,
        )

    @staticmethod
    def _compare(
        metric: str,
        previous_value: float,
        current_value: float,
        up_is_positive: bool = False,
        inverted: bool = False,
    ) -> MonthComparison:
        change = current_value - previous_value
        if previous_value != 0:
            change_pct = round_half_up(change / previous_value * 100)
        else:
            change_pct = 100 if current_value > 0 else 0

        if abs(change_pct) < 1:
            trend = Trend.STABLE
        else:
            trend = Trend.UP if change > 0 else Trend.DOWN

        if trend == Trend.STABLE:
            is_positive = True
        elif inverted:
            is_positive = trend == Trend.DOWN
        elif up_is_positive:
            is_positive = trend == Trend.UP
        else:
            # Headcount and seat totals are neither good nor bad
            is_positive = True

        return MonthComparison(
            metric=metric,
            previous_value=previous_value,
            current_value=current_value,
            change=change,
            change_pct=change_pct,
            trend=trend,
            is_positive=is_positive,
        )

    def _summary_text(self, comparisons: list[MonthComparison]) -> str:
        parts = []

        users = self.get_metric_trend(comparisons, "Total Licensed Users")
        if users and users.trend != Trend.STABLE:
            direction = "increased" if users.trend == Trend.UP else "decreased"
            sign = "+" if users.change_pct > 0 else ""
            parts.append(
                f"Licensed users {direction} by {abs(users.change):g} "
                f"({sign}{users.change_pct}%)."
            )

        utilisation = self.get_metric_trend(comparisons, "Overall Utilisation")
        if utilisation and utilisation.trend == Trend.UP:
            parts.append(f"Utilisation improved to {utilisation.current_value:g}%.")
        elif utilisation and utilisation.trend == Trend.DOWN:
            parts.append(f"Utilisation dropped to {utilisation.current_value:g}%.")

        issues = self.get_metric_trend(comparisons, "Total Issues")
        if issues and issues.trend == Trend.DOWN:
            parts.append(f"Great progress: {abs(issues.change):g} fewer issues to resolve.")
        elif issues and issues.trend == Trend.UP:
            parts.append(f"{issues.change:g} new issues identified requiring attention.")

        disabled = self.get_metric_trend(comparisons, "Disabled Accounts")
        if disabled and disabled.current_value > 0:
            if disabled.trend == Trend.DOWN:
                parts.append(
                    f"Disabled accounts reduced from {disabled.previous_value:g} "
                    f"to {disabled.current_value:g}."
                )
            elif disabled.trend == Trend.UP:
                parts.append(f"Warning: {disabled.change:g} new disabled accounts with licences.")

        return " ".join(parts) or NO_CHANGE_SUMMARY

    def get_trend_data(
        self,
        snapshots: list[LicenceSnapshot],
        months: int | None = None,
    ) -> list[TrendDataPoint]:
        """Per-SKU chart points for the last N snapshot dates, oldest first."""
        months = self.settings.trend_months if months is None else months
        dates = sorted(_distinct_dates_desc(snapshots)[:months])

        points = []
        for snapshot_date in dates:
            for s in snapshots:
                if s.snapshot_date != snapshot_date:
                    continue
                points.append(
                    TrendDataPoint(
                        date=snapshot_date.strftime("%b %y"),
                        sku_name=s.sku_name,
                        purchased=s.purchased,
                        assigned=s.assigned,
                        utilisation=s.utilisation_pct,
                    )
                )
        return points

    # =========================================================================
    # Comparison helpers
    # =========================================================================

    @staticmethod
    def get_metric_trend(
        comparisons: list[MonthComparison], metric: str
    ) -> MonthComparison | None:
        return next((c for c in comparisons if c.metric == metric), None)

    @staticmethod
    def is_overall_trend_positive(comparisons: list[MonthComparison]) -> bool:
        """True when at least half of the metrics moved in a good direction."""
        positive = sum(1 for c in comparisons if c.is_positive)
        return positive >= len(comparisons) / 2

    @staticmethod
    def get_key_highlights(comparisons: list[MonthComparison]) -> KeyHighlights:
        return KeyHighlights(
            improvements=[c for c in comparisons if c.is_positive and c.trend != Trend.STABLE],
            concerns=[c for c in comparisons if not c.is_positive and c.trend != Trend.STABLE],
            stable=[c for c in comparisons if c.trend == Trend.STABLE],
        )
