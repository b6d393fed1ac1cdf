"""Shared fixtures for licence analytics tests."""

import pytest

from licence_intelligence.core.config import Settings
from licence_intelligence.core.constants import IssueType
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.schemas.kpi import KpiSummary
from licence_intelligence.schemas.licence import (
    LicenceDataset,
    LicencePricing,
    LicenceSku,
    LicenceSnapshot,
    LicenceUser,
)
from licence_intelligence.services.cost_resolver import CostResolver


@pytest.fixture
def settings():
    """Settings built from defaults, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def classifier(settings):
    return SkuClassifier(settings=settings)


@pytest.fixture
def make_user():
    """Factory for LicenceUser records with sensible defaults."""
    counter = {"id": 0}

    def _make(**overrides) -> LicenceUser:
        counter["id"] += 1
        fields = {
            "id": counter["id"],
            "display_name": f"User {counter['id']}",
            "user_principal_name": f"user{counter['id']}@contoso.com",
            "account_enabled": True,
            "department": "Operations",
            "job_title": "Coordinator",
            "licences": "Microsoft 365 E3",
            "days_since_sign_in": 5,
            "issue_type": IssueType.NONE,
        }
        fields.update(overrides)
        return LicenceUser(**fields)

    return _make


@pytest.fixture
def make_sku():
    def _make(part: str, title: str | None = None, purchased: int = 100, assigned: int = 80) -> LicenceSku:
        return LicenceSku(
            sku_part_number=part,
            title=title if title is not None else part,
            purchased=purchased,
            assigned=assigned,
        )

    return _make


@pytest.fixture
def make_snapshot():
    def _make(snapshot_date: str, sku_name: str = "Microsoft 365 E5", **overrides) -> LicenceSnapshot:
        fields = {
            "snapshot_date": snapshot_date,
            "sku_name": sku_name,
            "purchased": 100,
            "assigned": 80,
            "total_users": 100,
        }
        fields.update(overrides)
        return LicenceSnapshot(**fields)

    return _make


@pytest.fixture
def make_kpi():
    """Factory for KPI summaries that trigger no alerts unless overridden."""

    def _make(**overrides) -> KpiSummary:
        fields = {
            "total_licensed_users": 100,
            "active_users_count": 100,
            "active_users_pct": 100,
            "overall_utilisation_pct": 80,
        }
        fields.update(overrides)
        return KpiSummary(**fields)

    return _make


@pytest.fixture
def pricing():
    """Curated pricing list, deliberately different from list prices."""
    return [
        LicencePricing(title="Microsoft 365 E5", monthly_cost_per_user=50.0),
        LicencePricing(title="Microsoft 365 E3", monthly_cost_per_user=30.0),
        LicencePricing(title="Microsoft 365 F3", monthly_cost_per_user=8.0),
        LicencePricing(title="Power BI Pro", monthly_cost_per_user=10.0),
    ]


@pytest.fixture
def skus(make_sku):
    return [
        make_sku("SPE_E5", "Microsoft 365 E5", purchased=100, assigned=80),
        make_sku("SPE_E3", "Microsoft 365 E3", purchased=200, assigned=150),
        make_sku("POWER_BI_PRO", "Power BI Pro", purchased=20, assigned=20),
        make_sku("POWERAPPS_VIRAL", "Power Apps (Viral)", purchased=10_000, assigned=500),
        make_sku("FLOW_FREE", "Power Automate Free", purchased=1_000_000, assigned=900),
    ]


@pytest.fixture
def resolver(pricing, skus, classifier):
    return CostResolver(pricing, skus, classifier)


@pytest.fixture
def dataset(make_user, skus, pricing, make_snapshot):
    """A small tenant with one user per issue type and two snapshot months."""
    users = [
        make_user(display_name="Ada", licences="Microsoft 365 E5", days_since_sign_in=3),
        make_user(display_name="Ben", licences="Microsoft 365 E5", days_since_sign_in=45),
        make_user(
            display_name="Cat",
            licences="Microsoft 365 E3",
            department="Retail Stores",
        ),
        make_user(
            display_name="Dan",
            account_enabled=False,
            licences="Microsoft 365 E3",
            days_since_sign_in=120,
            issue_type=IssueType.DISABLED,
        ),
        make_user(
            display_name="Eve",
            licences="Microsoft 365 E5, Microsoft 365 E3",
            issue_type=IssueType.DUAL_LICENSED,
        ),
        make_user(
            display_name="Fay",
            licences="Microsoft 365 E3",
            days_since_sign_in=150,
            issue_type=IssueType.INACTIVE_90,
        ),
        make_user(
            display_name="svc-backup",
            licences="Microsoft 365 E3",
            is_service_account=True,
            issue_type=IssueType.SERVICE_ACCOUNT,
        ),
    ]
    snapshots = [
        make_snapshot("2024-04-01", "Microsoft 365 E5", assigned=70, total_users=6, disabled_count=2),
        make_snapshot("2024-04-01", "Microsoft 365 E3", purchased=200, assigned=140, total_users=6, disabled_count=2),
        make_snapshot("2024-05-01", "Microsoft 365 E5", assigned=80, total_users=7, disabled_count=1),
        make_snapshot("2024-05-01", "Microsoft 365 E3", purchased=200, assigned=150, total_users=7, disabled_count=1),
    ]
    return LicenceDataset(users=users, skus=skus, pricing=pricing, snapshots=snapshots)
