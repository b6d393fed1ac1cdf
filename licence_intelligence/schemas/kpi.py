"""KPI and issue-category schemas."""

from pydantic import BaseModel, Field

from licence_intelligence.core.constants import IssueType


class KpiSummary(BaseModel):
    """Headline utilisation, spend and hygiene figures for one cycle.

    Purchased/assigned totals, utilisation and spend only count SKUs that
    are not excluded from aggregates.
    """

    total_licensed_users: int = 0
    active_users_count: int = 0
    active_users_pct: int = 0
    total_purchased_licences: int = 0
    total_assigned_licences: int = 0
    overall_utilisation_pct: int = Field(0, description="Unbounded above; over-allocation is valid")
    monthly_spend: float = 0.0
    annual_spend: float = 0.0
    potential_monthly_savings: float = 0.0
    potential_annual_savings: float = 0.0
    issues_count: int = 0
    disabled_count: int = 0
    dual_licensed_count: int = 0
    inactive_count: int = 0
    service_account_count: int = 0


class IssueCategory(BaseModel):
    """Users grouped by issue type with their annual savings potential."""

    type: IssueType
    count: int
    potential_savings: float = Field(..., description="Annual savings for this category")
    description: str
    severity: str  # critical, warning, info
