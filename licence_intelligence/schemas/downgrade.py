"""Downgrade recommendation and per-user costing schemas."""

from enum import Enum

from pydantic import BaseModel, Field

from licence_intelligence.core.constants import IssueType


class DowngradeType(str, Enum):
    """Licence right-sizing paths."""

    E5_TO_E3 = "E5→E3"
    E3_TO_F3 = "E3→F3"
    E3_TO_BUSINESS_BASIC = "E3→Business Basic"
    REMOVE_LICENCE = "Remove Licence"


DOWNGRADE_DESCRIPTIONS = {
    DowngradeType.E5_TO_E3: "Users with E5 who may not need premium features",
    DowngradeType.E3_TO_F3: "Knowledge workers who could move to frontline licences",
    DowngradeType.E3_TO_BUSINESS_BASIC: "Users only using basic Exchange and Teams",
    DowngradeType.REMOVE_LICENCE: "Licences that can be completely removed",
}


class Confidence(str, Enum):
    """Qualitative confidence attached to a downgrade candidate."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PricingSource(str, Enum):
    """Which resolver strategy produced a licence cost."""

    DIRECT = "direct"
    SKU_LOOKUP = "sku_lookup"
    FRIENDLY_NAME = "friendly_name"
    STANDARD = "standard"
    EXCLUDED = "excluded"
    NOT_FOUND = "not_found"


class LicenceCost(BaseModel):
    """Resolved monthly cost for a licence name."""

    cost: float = 0.0
    source: PricingSource = PricingSource.NOT_FOUND


class LicenceCostLine(BaseModel):
    """One held licence within a user's cost breakdown."""

    name: str
    sku_part_number: str | None = None
    monthly_cost: float = 0.0
    annual_cost: float = 0.0
    pricing_source: PricingSource = PricingSource.NOT_FOUND


class UserCostBreakdown(BaseModel):
    """Authoritative licence costing for a single user."""

    user_id: int
    user_name: str
    licences: list[LicenceCostLine] = Field(default_factory=list)
    total_monthly_cost: float = 0.0
    total_annual_cost: float = 0.0
    potential_monthly_savings: float = 0.0
    potential_annual_savings: float = 0.0
    issue_type: IssueType = IssueType.NONE
    savings_reason: str | None = None


class DowngradeRecommendation(BaseModel):
    """A user whose activity suggests a cheaper licence would suffice."""

    user_id: int
    user_name: str
    user_email: str
    department: str
    current_licence: str
    recommended_licence: str
    downgrade_type: DowngradeType
    reason: str
    monthly_savings: float
    annual_savings: float
    confidence: Confidence


class DowngradeSummary(BaseModel):
    """Recommendations grouped by downgrade path."""

    type: DowngradeType
    count: int
    users: list[DowngradeRecommendation] = Field(default_factory=list)
    total_monthly_savings: float = 0.0
    total_annual_savings: float = 0.0
    description: str


class DowngradeTotals(BaseModel):
    """Total value of all downgrade candidates."""

    monthly_total: float = 0.0
    annual_total: float = 0.0
    user_count: int = 0
