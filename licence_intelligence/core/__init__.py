"""Core module initialization.

The SKU classifier depends on the record schemas and is imported from
licence_intelligence.core.sku_classifier directly.
"""

from licence_intelligence.core.config import (
    LOG_FORMAT,
    Settings,
    configure_logging,
    get_settings,
)
from licence_intelligence.core.constants import IssueType, SkuTier

__all__ = [
    # Config
    "LOG_FORMAT",
    "Settings",
    "configure_logging",
    "get_settings",
    # Enums
    "IssueType",
    "SkuTier",
]
