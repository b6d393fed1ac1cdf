"""Licence inventory record schemas.

Field aliases match the column names of the upstream licence lists
(LicenceUsers, LicenceSkus, LicencePricing, LicenceSnapshots,
UsageReports) so rows can be validated straight from the extract. Python
field names are accepted as well.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from licence_intelligence.core.constants import IssueType
from licence_intelligence.core.utils import percentage, split_licences


class LicenceRecord(BaseModel):
    """Base for upstream list rows."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class LicenceUser(LicenceRecord):
    """One licensed account from the LicenceUsers list."""

    id: int = Field(0, alias="Id")
    display_name: str = Field("", alias="Title")
    user_principal_name: str = Field("", alias="UserPrincipalName")
    account_enabled: bool = Field(True, alias="AccountEnabled")
    department: str = Field("", alias="Department")
    job_title: str = Field("", alias="JobTitle")
    city: str = Field("", alias="City")
    licences: str = Field("", alias="Licences", description="Comma-separated licence names")
    licence_count: int = Field(0, alias="LicenceCount")
    has_e3: bool = Field(False, alias="HasE3")
    has_e5: bool = Field(False, alias="HasE5")
    last_sign_in_date: datetime | None = Field(None, alias="LastSignInDate")
    days_since_sign_in: int = Field(0, alias="DaysSinceSignIn")
    issue_type: IssueType = Field(IssueType.NONE, alias="IssueType")
    is_service_account: bool = Field(False, alias="IsServiceAccount")
    extract_date: date | None = Field(None, alias="ExtractDate")

    @field_validator(
        "display_name",
        "user_principal_name",
        "department",
        "job_title",
        "city",
        "licences",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v):
        """Blank list cells arrive as null."""
        return "" if v is None else v

    @field_validator("days_since_sign_in", "licence_count", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v

    @field_validator("issue_type", mode="before")
    @classmethod
    def default_issue_type(cls, v):
        return IssueType.NONE if v in (None, "") else v

    @field_validator("last_sign_in_date", "extract_date", mode="before")
    @classmethod
    def empty_date(cls, v):
        return None if v == "" else v

    @property
    def licence_names(self) -> list[str]:
        """Held licence names, trimmed."""
        return split_licences(self.licences)


class LicenceSku(LicenceRecord):
    """One purchasable licence type from the LicenceSkus list.

    Available may be negative: over-allocation is a valid state.
    """

    id: int = Field(0, alias="Id")
    title: str = Field("", alias="Title")
    sku_part_number: str = Field("", alias="SkuPartNumber")
    purchased: int = Field(0, alias="Purchased")
    assigned: int = Field(0, alias="Assigned")
    available: int | None = Field(None, alias="Available")
    utilisation_pct: float | None = Field(None, alias="UtilisationPct")
    extract_date: date | None = Field(None, alias="ExtractDate")

    @field_validator("title", "sku_part_number", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @model_validator(mode="after")
    def derive_counts(self):
        """Fill available/utilisation when the extract omits them."""
        if self.available is None:
            self.available = self.purchased - self.assigned
        if self.utilisation_pct is None:
            self.utilisation_pct = percentage(self.assigned, self.purchased)
        return self


class LicencePricing(LicenceRecord):
    """Per-seat pricing for a licence title from the LicencePricing list."""

    id: int = Field(0, alias="Id")
    title: str = Field("", alias="Title")
    monthly_cost_per_user: float = Field(0.0, alias="MonthlyCostPerUser")
    annual_cost_per_user: float | None = Field(None, alias="AnnualCostPerUser")
    vendor: str = Field("", alias="Vendor")
    renewal_date: date | None = Field(None, alias="RenewalDate")
    contract_term: str = Field("", alias="ContractTerm")

    @field_validator("title", "vendor", "contract_term", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("monthly_cost_per_user", mode="before")
    @classmethod
    def none_to_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("renewal_date", mode="before")
    @classmethod
    def parse_renewal_date(cls, v):
        """Accept blank cells and full ISO timestamps."""
        if v in (None, ""):
            return None
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @model_validator(mode="after")
    def derive_annual(self):
        if self.annual_cost_per_user is None:
            self.annual_cost_per_user = self.monthly_cost_per_user * 12
        return self


class LicenceSnapshot(LicenceRecord):
    """Monthly rollup for one SKU from the LicenceSnapshots list.

    Tenant-wide user and issue counts are duplicated on every SKU row of
    the same snapshot date.
    """

    id: int = Field(0, alias="Id")
    title: str = Field("", alias="Title")
    snapshot_date: date = Field(..., alias="SnapshotDate")
    sku_name: str = Field("", alias="SkuName")
    purchased: int = Field(0, alias="Purchased")
    assigned: int = Field(0, alias="Assigned")
    available: int = Field(0, alias="Available")
    utilisation_pct: float = Field(0.0, alias="UtilisationPct")
    total_users: int = Field(0, alias="TotalUsers")
    disabled_count: int = Field(0, alias="DisabledCount")
    inactive_count: int = Field(0, alias="InactiveCount")
    dual_count: int = Field(0, alias="DualCount")
    service_count: int = Field(0, alias="ServiceCount")

    @field_validator("snapshot_date", mode="before")
    @classmethod
    def parse_snapshot_date(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v

    @field_validator(
        "total_users",
        "disabled_count",
        "inactive_count",
        "dual_count",
        "service_count",
        mode="before",
    )
    @classmethod
    def none_to_zero(cls, v):
        return 0 if v is None else v


class UsageReport(LicenceRecord):
    """Per-user storage consumption from the UsageReports list."""

    id: int = Field(0, alias="Id")
    user_principal_name: str = Field("", alias="Title")
    onedrive_used_gb: float = Field(0.0, alias="OneDriveUsedGB")
    onedrive_allocated_gb: float = Field(0.0, alias="OneDriveAllocatedGB")
    mailbox_used_gb: float = Field(0.0, alias="MailboxUsedGB")
    mailbox_allocated_gb: float = Field(0.0, alias="MailboxAllocatedGB")
    extract_date: date | None = Field(None, alias="ExtractDate")


class AppUsageRecord(BaseModel):
    """Per-user Microsoft 365 app activity from the usage-reporting API."""

    user_principal_name: str = ""
    display_name: str = ""
    report_refresh_date: str = ""

    has_outlook_windows: bool = False
    has_word_windows: bool = False
    has_excel_windows: bool = False
    has_powerpoint_windows: bool = False
    has_onenote_windows: bool = False
    has_teams_windows: bool = False

    has_outlook_web: bool = False
    has_word_web: bool = False
    has_excel_web: bool = False
    has_powerpoint_web: bool = False
    has_onenote_web: bool = False
    has_teams_web: bool = False

    has_outlook_mobile: bool = False
    has_word_mobile: bool = False
    has_excel_mobile: bool = False
    has_powerpoint_mobile: bool = False
    has_onenote_mobile: bool = False
    has_teams_mobile: bool = False

    outlook_last_activity_date: str | None = None
    word_last_activity_date: str | None = None
    excel_last_activity_date: str | None = None
    powerpoint_last_activity_date: str | None = None
    onenote_last_activity_date: str | None = None
    teams_last_activity_date: str | None = None

    def uses_app(self, app: str) -> bool:
        """True if any desktop, web or mobile flag is set for the app."""
        key = app.lower()
        return any(
            getattr(self, f"has_{key}_{platform}", False)
            for platform in ("windows", "web", "mobile")
        )


class LicenceDataset(BaseModel):
    """All records loaded for one analysis cycle."""

    users: list[LicenceUser] = Field(default_factory=list)
    skus: list[LicenceSku] = Field(default_factory=list)
    pricing: list[LicencePricing] = Field(default_factory=list)
    snapshots: list[LicenceSnapshot] = Field(default_factory=list)
    usage: list[UsageReport] = Field(default_factory=list)
    last_refresh: datetime = Field(default_factory=datetime.utcnow)
