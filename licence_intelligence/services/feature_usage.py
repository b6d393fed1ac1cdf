"""E5-exclusive feature catalogue and usage attribution strategies.

No telemetry source reports per-user use of tenant-wide security and
compliance features, so the default strategy infers usage from who the
user is (department and job title), how recently they signed in and
whether they are active in Teams. Every verdict records its basis.
"""

from typing import Protocol

from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import CHAT_APP
from licence_intelligence.core.utils import contains_any
from licence_intelligence.schemas.licence import LicenceUser
from licence_intelligence.schemas.usage import E5Feature, FeatureUsageVerdict

E5_FEATURES = (
    E5Feature(id="defender_threat_protection", name="Defender Threat Protection", category="security"),
    E5Feature(id="information_protection", name="Information Protection", category="security"),
    E5Feature(id="cloud_app_security", name="Cloud App Security", category="security"),
    E5Feature(id="ediscovery_premium", name="eDiscovery Premium", category="compliance"),
    E5Feature(id="advanced_compliance", name="Advanced Compliance", category="compliance"),
    E5Feature(id="power_bi_pro", name="Power BI Pro", category="analytics"),
    E5Feature(id="audio_conferencing", name="Audio Conferencing", category="voice"),
    E5Feature(id="phone_system", name="Phone System", category="voice"),
    E5Feature(id="my_analytics", name="MyAnalytics", category="productivity"),
)


class FeatureUsageStrategy(Protocol):
    """Decides which E5 features a user uses."""

    # False once verdicts come from real telemetry rather than inference
    estimated: bool

    def evaluate(
        self,
        user: LicenceUser,
        apps_used: list[str],
        features: tuple[E5Feature, ...],
    ) -> list[FeatureUsageVerdict]:
        ...


class HeuristicFeatureUsageStrategy:
    """Default strategy: department/title keywords, sign-in recency, Teams activity."""

    estimated = True

    # feature id -> (department keywords, job title keywords)
    ROLE_KEYWORDS: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
        "defender_threat_protection": (
            ("security", "it", "infrastructure", "engineering"),
            ("security", "engineer", "admin"),
        ),
        "information_protection": (
            ("security", "it", "compliance", "infrastructure"),
            ("security",),
        ),
        "cloud_app_security": (
            ("security", "it", "compliance", "infrastructure"),
            ("security",),
        ),
        "ediscovery_premium": (
            ("legal", "compliance", "hr", "human"),
            ("legal", "compliance"),
        ),
        "advanced_compliance": (
            ("legal", "compliance", "hr", "human"),
            ("legal", "compliance"),
        ),
        "power_bi_pro": (
            ("finance", "analytics", "data", "business intelligence"),
            ("analyst", "data", "bi ", "reporting"),
        ),
    }
    # Features that follow Teams calling activity
    TEAMS_FEATURES = ("audio_conferencing", "phone_system")
    # Features any recently signed-in user exercises
    RECENCY_FEATURES = ("my_analytics",)
    # Defender only counts for role holders who are also active
    RECENCY_GATED_ROLE_FEATURES = ("defender_threat_protection",)

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def evaluate(
        self,
        user: LicenceUser,
        apps_used: list[str],
        features: tuple[E5Feature, ...] = E5_FEATURES,
    ) -> list[FeatureUsageVerdict]:
        recent = user.days_since_sign_in < self.settings.recent_sign_in_days
        teams_active = CHAT_APP in apps_used

        verdicts = []
        for feature in features:
            if feature.id in self.ROLE_KEYWORDS:
                dept_keywords, title_keywords = self.ROLE_KEYWORDS[feature.id]
                used = contains_any(user.department, dept_keywords) or contains_any(
                    user.job_title, title_keywords
                )
                basis = "department/title keywords"
                if feature.id in self.RECENCY_GATED_ROLE_FEATURES:
                    used = used and recent
                    basis = "department/title keywords and recent sign-in"
            elif feature.id in self.TEAMS_FEATURES:
                used = teams_active and recent
                basis = "teams activity and recent sign-in"
            elif feature.id in self.RECENCY_FEATURES:
                used = recent
                basis = "recent sign-in"
            else:
                used = False
                basis = "no signal"

            verdicts.append(FeatureUsageVerdict(feature_id=feature.id, used=used, basis=basis))

        return verdicts
