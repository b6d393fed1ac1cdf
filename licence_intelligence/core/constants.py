"""Static licence catalogue tables.

Module-level defaults for SKU naming, tier patterns, standard pricing and
the E5 feature catalogue. Components never read these directly; they are
wrapped in injectable structures (SkuCatalog, CostResolver, the feature
strategy) so tests can substitute fixtures.
"""

from enum import Enum


class SkuTier(str, Enum):
    """Classification bucket for a SKU."""

    CORE_PAID = "core-paid"
    ADD_ON = "add-on"
    FREE = "free"
    VIRAL = "viral"


class IssueType(str, Enum):
    """Licence hygiene issue assigned upstream to each user."""

    NONE = "None"
    DISABLED = "Disabled"
    DUAL_LICENSED = "Dual-Licensed"
    INACTIVE_90 = "Inactive 90+"
    SERVICE_ACCOUNT = "Service Account"


TIER_LABELS = {
    SkuTier.CORE_PAID: "Core",
    SkuTier.ADD_ON: "Add-on",
    SkuTier.FREE: "Free",
    SkuTier.VIRAL: "Trial",
}

# SkuPartNumber -> friendly name (matches the curated pricing list titles)
SKU_FRIENDLY_NAMES = {
    # Core Paid - Enterprise
    "ENTERPRISEPREMIUM": "Microsoft 365 E5",
    "ENTERPRISEPREMIUM_NOPSTNCONF": "Microsoft 365 E5 (No Audio Conf)",
    "SPE_E5": "Microsoft 365 E5",
    "ENTERPRISEPACK": "Microsoft 365 E3",
    "SPE_E3": "Microsoft 365 E3",
    "ENTERPRISEPACKWITHOUTPROPLUS": "Office 365 E3 (No ProPlus)",
    "ENTERPRISEWITHSCAL": "Office 365 E4",
    # Core Paid - Frontline & Business
    "SPE_F1": "Microsoft 365 F1",
    "M365_F1_COMM": "Microsoft 365 F3",
    "DESKLESSPACK": "Office 365 F3",
    "SPB": "Microsoft 365 Business Premium",
    "O365_BUSINESS_ESSENTIALS": "Microsoft 365 Business Basic",
    "O365_BUSINESS_PREMIUM": "Microsoft 365 Business Standard",
    "SMB_BUSINESS": "Microsoft 365 Apps for Business",
    # Core Paid - Apps
    "OFFICESUBSCRIPTION": "Microsoft 365 Apps for Enterprise",
    "O365_BUSINESS": "Microsoft 365 Apps for Business",
    # Add-ons
    "MICROSOFT_COPILOT_STUDIO": "Copilot Studio",
    "Microsoft_Copilot_for_M365": "Copilot for Microsoft 365",
    "VISIOCLIENT": "Visio Plan 2",
    "PROJECTPREMIUM": "Project Plan 5",
    "PROJECTPROFESSIONAL": "Project Plan 3",
    "POWER_BI_PRO": "Power BI Pro",
    "PBI_PREMIUM_PER_USER": "Power BI Premium Per User",
    "POWERAPPS_PER_USER": "Power Apps Per User",
    "FLOW_PER_USER": "Power Automate Per User",
    "ATP_ENTERPRISE": "Defender for Office 365 P1",
    "THREAT_INTELLIGENCE": "Defender for Office 365 P2",
    "IDENTITY_THREAT_PROTECTION": "Entra ID P2",
    "AAD_PREMIUM": "Entra ID P1",
    "AAD_PREMIUM_P2": "Entra ID P2",
    "EMSPREMIUM": "EMS E5",
    "EMS": "EMS E3",
    "INTUNE_A": "Intune Plan 1",
    "RIGHTSMANAGEMENT": "Azure Information Protection P1",
    "WIN_ENT_E5": "Windows 10/11 Enterprise E5",
    "WIN10_PRO_ENT_SUB": "Windows 10/11 Enterprise E3",
    "PHONESYSTEM_VIRTUALUSER": "Phone System Virtual User",
    "MCOCAP": "Common Area Phone",
    "MCOEV": "Phone System",
    "MCOPSTN1": "Domestic Calling Plan",
    "MCOPSTN2": "International Calling Plan",
    "MEETING_ROOM": "Teams Rooms Standard",
    "MTR_PREM": "Teams Rooms Pro",
    # Dynamics
    "DYN365_ENTERPRISE_PLAN1": "Dynamics 365 Plan 1",
    "D365_SALES_PRO": "Dynamics 365 Sales Professional",
    # Free / Viral
    "STREAM": "Microsoft Stream (Classic)",
    "FLOW_FREE": "Power Automate Free",
    "POWERAPPS_VIRAL": "Power Apps (Viral)",
    "POWER_BI_STANDARD": "Power BI Free",
    "POWER_BI_INDIVIDUAL_USER": "Power BI Free (Individual)",
    "TEAMS_EXPLORATORY": "Teams Exploratory",
    "TEAMS_COMMERCIAL_TRIAL": "Teams Commercial Trial",
    "CCIBOTS_PRIVPREV_VIRAL": "Copilot Studio Viral Trial",
    "RIGHTSMANAGEMENT_ADHOC": "Azure RMS Ad Hoc",
    "WINDOWS_STORE": "Windows Store for Business",
    "PROJECTESSENTIALS": "Project Online Essentials",
    "DYN365_ENTERPRISE_P1_IW": "Dynamics 365 P1 Trial (Viral)",
    "POWERAPPS_DEV": "Power Apps Developer",
    "FLOW_DEV": "Power Automate Developer",
    "FORMS_PRO": "Dynamics 365 Customer Voice Trial",
    "Microsoft_Teams_Exploratory": "Teams Exploratory",
}

# Capacity SKUs, suite components and sandbox allocations
ALWAYS_EXCLUDED_SKUS = (
    "INTUNE_A",
    "MICROSOFT_BUSINESS_CENTER",
    "CDS_FILE_CAPACITY",
    "M365_E5_SUITE_COMPONENTS",
    "ADALLOM_STANDALONE",
    "DYN365_ENTERPRISE_P1",
    "DYN365_ENTERPRISE_PLAN1",
)

# Exact part numbers shown as core user licence gauges
CORE_USER_SKUS = (
    "SPE_E5", "ENTERPRISEPREMIUM", "ENTERPRISEPREMIUM_NOPSTNCONF",
    "SPE_E3", "ENTERPRISEPACK", "ENTERPRISEPACKWITHOUTPROPLUS",
    "ENTERPRISEWITHSCAL",
    "SPE_F1", "M365_F1_COMM", "DESKLESSPACK",
    "SPB", "O365_BUSINESS_ESSENTIALS", "O365_BUSINESS_PREMIUM", "SMB_BUSINESS",
    "OFFICESUBSCRIPTION", "O365_BUSINESS",
    "EMSPREMIUM", "EMS",
)

VIRAL_FREE_PATTERNS = (
    "VIRAL", "FREE", "TRIAL", "TEAMS_EXPLORATORY",
    "TEAMS_COMMERCIAL_TRIAL", "CCIBOTS_PRIVPREV",
    "STREAM", "WINDOWS_STORE", "RIGHTSMANAGEMENT_ADHOC",
    "POWERAPPS_DEV", "FLOW_DEV", "FORMS_PRO",
    "POWER_BI_STANDARD", "POWER_BI_INDIVIDUAL",
    "DYN365_ENTERPRISE_P1_IW", "PROJECTESSENTIALS",
    "Microsoft_Teams_Exploratory",
)

# Substrings that mark a free/viral hit as a trial rather than a free tier
VIRAL_MARKERS = ("VIRAL", "TRIAL")

ADDON_PATTERNS = (
    "ATP", "THREAT", "IDENTITY", "AAD_PREMIUM", "EMS", "INTUNE",
    "RIGHTS", "WIN_ENT", "WIN10", "PHONE", "MCO", "MEETING_ROOM",
    "MTR_", "COPILOT", "VISIO", "PROJECT", "POWER_BI_PRO", "PBI_PREMIUM",
    "POWERAPPS_PER", "FLOW_PER", "DYN365", "D365",
)

# Standard UK list pricing, monthly per user (GBP)
STANDARD_PRICING = {
    "Microsoft 365 E5": 49.20,
    "Microsoft 365 E3": 30.20,
    "Office 365 E5": 32.00,
    "Office 365 E3": 19.00,
    "Microsoft 365 F3": 7.50,
    "Office 365 F3": 3.40,
    "Microsoft 365 Business Basic": 4.50,
    "Microsoft 365 Business Standard": 9.40,
    "Microsoft 365 Business Premium": 16.60,
    "Microsoft 365 Apps for Enterprise": 11.20,
}

# Licence family names used by downgrade paths
E5_LICENCE = "Microsoft 365 E5"
E3_LICENCE = "Microsoft 365 E3"
F3_LICENCE = "Microsoft 365 F3"

E5_SKUS = ("ENTERPRISEPREMIUM", "SPE_E5", "ENTERPRISEPREMIUM_NOPSTNCONF")
E3_SKUS = ("ENTERPRISEPACK", "SPE_E3", "ENTERPRISEPACKWITHOUTPROPLUS")

FRONTLINE_DEPARTMENT_KEYWORDS = (
    "retail",
    "store",
    "warehouse",
    "logistics",
    "call center",
    "call centre",
    "customer service",
)

# Core apps reported by the M365 app usage report
CORE_APPS = ("Outlook", "Word", "Excel", "PowerPoint", "OneNote", "Teams")
MAIL_APP = "Outlook"
CHAT_APP = "Teams"
BASIC_APPS = (MAIL_APP, CHAT_APP)
