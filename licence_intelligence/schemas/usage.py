"""Usage profile and E5 feature-utilisation schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class E5Feature(BaseModel):
    """An E5-exclusive capability in the feature catalogue."""

    id: str
    name: str
    category: str  # security, compliance, analytics, voice, productivity


class FeatureUsageVerdict(BaseModel):
    """Whether a user is judged to use one E5 feature, and on what basis."""

    feature_id: str
    used: bool
    basis: str  # e.g. "department/title keywords", "recent sign-in", "teams activity"


class UserUsageProfile(BaseModel):
    """Licence and app-usage picture for one user.

    E5 feature usage is a heuristic estimate unless a telemetry-backed
    strategy is plugged in; e5_feature_usage_estimated says which.
    """

    user_id: int
    user_principal_name: str
    display_name: str
    department: str
    current_licences: list[str] = Field(default_factory=list)
    has_e5: bool = False
    has_e3: bool = False
    last_sign_in: datetime | None = None
    days_since_sign_in: int = 0
    is_active: bool = False

    has_usage_data: bool = False
    apps_used: list[str] = Field(default_factory=list)
    apps_not_used: list[str] = Field(default_factory=list)
    primary_apps: list[str] = Field(default_factory=list)

    e5_features_used: list[str] = Field(default_factory=list)
    e5_features_not_used: list[str] = Field(default_factory=list)
    e5_feature_verdicts: list[FeatureUsageVerdict] = Field(default_factory=list)
    e5_utilisation_pct: int = 0
    e5_feature_usage_estimated: bool = True

    can_downgrade: bool = False
    recommended_licence: str | None = None  # None with can_downgrade means remove
    downgrade_reason: str = ""
    confidence_score: int = Field(0, ge=0, le=100)
    potential_monthly_savings: float = 0.0
    potential_annual_savings: float = 0.0

    onedrive_used_gb: float | None = None
    onedrive_allocated_gb: float | None = None
    mailbox_used_gb: float | None = None
    mailbox_allocated_gb: float | None = None


class UnusedFeature(BaseModel):
    """A feature and how many E5 holders do not use it."""

    feature: str
    unused_count: int
    pct: int


class DepartmentBreakdown(BaseModel):
    """E5 holders and downgrade candidates for one department."""

    department: str
    e5_users: int = 0
    can_downgrade: int = 0
    savings: float = 0.0


class UsageAnalysisSummary(BaseModel):
    """Tenant-wide roll-up of user usage profiles."""

    total_users_analysed: int = 0
    e5_users_count: int = 0
    e5_underutilised_count: int = 0
    e5_underutilised_pct: int = 0
    average_e5_utilisation_pct: int = 0
    downgrade_recommendations: int = 0
    potential_annual_savings: float = 0.0
    top_unused_features: list[UnusedFeature] = Field(default_factory=list)
    department_breakdown: list[DepartmentBreakdown] = Field(default_factory=list)


class FeatureUsageStats(BaseModel):
    """Share of E5 holders using one catalogue feature."""

    feature_id: str
    feature_name: str
    category: str
    users_with_access: int
    users_actually_using: int
    utilisation_pct: int
    last_used_by_anyone: datetime | None = None
