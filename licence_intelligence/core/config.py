"""Core configuration settings.

Centralized configuration using Pydantic Settings for environment
variable management with sensible defaults. Every threshold the
analytics components compare against lives here so a deployment can
tune alert bands without code changes.
"""

import logging
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from licence_intelligence.core.utils import round_half_up

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "Licence Intelligence"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Currency
    currency_code: str = Field(default="GBP", alias="CURRENCY_CODE")
    currency_symbol: str = Field(default="£", alias="CURRENCY_SYMBOL")

    # =========================================================================
    # Classification & Activity
    # =========================================================================

    # Vendors park unlimited/trial SKUs behind absurd seat counts
    viral_purchased_threshold: int = Field(default=100_000, alias="VIRAL_PURCHASED_THRESHOLD")
    # Large pools with almost nothing assigned are trial allocations
    viral_low_assignment_min_purchased: int = Field(
        default=500, alias="VIRAL_LOW_ASSIGNMENT_MIN_PURCHASED"
    )
    viral_low_assignment_max_pct: float = Field(default=5.0, alias="VIRAL_LOW_ASSIGNMENT_MAX_PCT")
    inactive_days: int = Field(default=90, alias="INACTIVE_DAYS")
    recent_sign_in_days: int = Field(default=30, alias="RECENT_SIGN_IN_DAYS")

    # =========================================================================
    # Alert Thresholds
    # =========================================================================

    capacity_min_purchased: int = Field(default=10, alias="CAPACITY_MIN_PURCHASED")
    near_capacity_pct: float = Field(default=90.0, alias="NEAR_CAPACITY_PCT")
    under_utilised_pct: float = Field(default=50.0, alias="UNDER_UTILISED_PCT")
    savings_critical_annual: float = Field(default=50_000.0, alias="SAVINGS_CRITICAL_ANNUAL")
    savings_warning_annual: float = Field(default=10_000.0, alias="SAVINGS_WARNING_ANNUAL")
    downgrade_alert_min_annual: float = Field(default=5_000.0, alias="DOWNGRADE_ALERT_MIN_ANNUAL")
    savings_share_warning_pct: float = Field(default=15.0, alias="SAVINGS_SHARE_WARNING_PCT")
    inactive_alert_min_count: int = Field(default=10, alias="INACTIVE_ALERT_MIN_COUNT")
    inactive_alert_min_pct: float = Field(default=5.0, alias="INACTIVE_ALERT_MIN_PCT")
    active_users_info_pct: float = Field(default=75.0, alias="ACTIVE_USERS_INFO_PCT")
    renewal_critical_days: int = Field(default=30, alias="RENEWAL_CRITICAL_DAYS")
    renewal_warning_days: int = Field(default=90, alias="RENEWAL_WARNING_DAYS")

    # =========================================================================
    # Downgrade & Usage Analysis
    # =========================================================================

    e5_review_min_inactive_days: int = Field(default=30, alias="E5_REVIEW_MIN_INACTIVE_DAYS")
    e5_high_confidence_inactive_days: int = Field(default=60, alias="E5_HIGH_CONFIDENCE_INACTIVE_DAYS")
    e5_underutilised_pct: float = Field(default=30.0, alias="E5_UNDERUTILISED_PCT")
    e5_very_low_utilisation_pct: float = Field(default=10.0, alias="E5_VERY_LOW_UTILISATION_PCT")
    f3_max_apps: int = Field(default=3, alias="F3_MAX_APPS")

    # Insights
    max_insights: int = Field(default=6, alias="MAX_INSIGHTS")
    trend_months: int = Field(default=6, alias="TREND_MONTHS")

    # =========================================================================
    # Validators
    # =========================================================================

    @model_validator(mode="after")
    def validate_savings_bands(self):
        """Savings alert bands must escalate: warning below critical."""
        if self.savings_warning_annual >= self.savings_critical_annual:
            logger.error(
                f"Savings warning band ({self.savings_warning_annual}) must be below "
                f"the critical band ({self.savings_critical_annual})"
            )
            raise ValueError("savings_warning_annual must be less than savings_critical_annual")
        return self

    @model_validator(mode="after")
    def validate_renewal_windows(self):
        """Renewal windows must nest: critical window inside warning window."""
        if self.renewal_critical_days >= self.renewal_warning_days:
            logger.error(
                f"Renewal critical window ({self.renewal_critical_days}d) must be shorter "
                f"than the warning window ({self.renewal_warning_days}d)"
            )
            raise ValueError("renewal_critical_days must be less than renewal_warning_days")
        return self

    # =========================================================================
    # Helpers
    # =========================================================================

    def format_currency(self, amount: float) -> str:
        """Format a whole-unit amount with the configured symbol, e.g. £12,345."""
        return f"{self.currency_symbol}{round_half_up(amount):,}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging with the platform format and configured level."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
