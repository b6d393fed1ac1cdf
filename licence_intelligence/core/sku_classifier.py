"""SKU classification.

Buckets a SKU part number into a tier, resolves its friendly name and
decides whether it counts towards aggregate KPIs. Aggregate exclusion is a
system-wide rule: every service asks the same classifier instance rather
than applying its own filter.
"""

import logging
from dataclasses import dataclass, field, replace

from licence_intelligence.core import constants
from licence_intelligence.core.config import Settings, get_settings
from licence_intelligence.core.constants import SkuTier
from licence_intelligence.schemas.licence import LicenceSku

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkuCatalog:
    """Static lookup tables used for classification."""

    friendly_names: dict[str, str] = field(default_factory=lambda: dict(constants.SKU_FRIENDLY_NAMES))
    viral_free_patterns: tuple[str, ...] = constants.VIRAL_FREE_PATTERNS
    viral_markers: tuple[str, ...] = constants.VIRAL_MARKERS
    addon_patterns: tuple[str, ...] = constants.ADDON_PATTERNS
    always_excluded: tuple[str, ...] = constants.ALWAYS_EXCLUDED_SKUS
    core_user_skus: tuple[str, ...] = constants.CORE_USER_SKUS


@dataclass(frozen=True)
class SkuClassification:
    """Result of classifying one SKU."""

    tier: SkuTier
    friendly_name: str
    is_excluded_from_aggregates: bool
    is_core_user_licence: bool = False

    @property
    def tier_label(self) -> str:
        return constants.TIER_LABELS[self.tier]


class SkuClassifier:
    """Classifies SKU part numbers against an injectable catalogue."""

    def __init__(self, catalog: SkuCatalog | None = None, settings: Settings | None = None):
        self.catalog = catalog or SkuCatalog()
        self.settings = settings or get_settings()
        self._always_excluded = {s.upper() for s in self.catalog.always_excluded}
        self._core_user = {s.upper() for s in self.catalog.core_user_skus}

    def friendly_name(self, sku_part_number: str) -> str:
        """Friendly name for a part number, or the part number itself."""
        return self.catalog.friendly_names.get(sku_part_number, sku_part_number)

    def classify(
        self,
        sku_part_number: str,
        purchased: int | None = None,
        assigned: int | None = None,
    ) -> SkuClassification:
        """Classify a SKU, optionally applying the seat-count heuristics.

        A SKU the patterns leave in aggregates is still treated as viral when
        its purchased count reaches the viral threshold, or when a large pool
        (at least viral_low_assignment_min_purchased seats) has fewer than
        viral_low_assignment_max_pct percent of its seats assigned.

        Args:
            sku_part_number: Raw SKU identifier
            purchased: Purchased seat count, if known
            assigned: Assigned seat count, if known

        Returns:
            Classification with tier, friendly name and exclusion flag
        """
        result = self._classify_by_pattern(sku_part_number or "")
        if result.is_excluded_from_aggregates or purchased is None:
            return result

        s = self.settings
        if purchased >= s.viral_purchased_threshold:
            # Unlimited and trial allocations are published with absurd seat counts
            logger.debug(f"SKU {sku_part_number} treated as viral: {purchased} purchased seats")
            return self._as_viral(result)

        if (
            assigned is not None
            and purchased > 0
            and purchased >= s.viral_low_assignment_min_purchased
            and assigned / purchased * 100 < s.viral_low_assignment_max_pct
        ):
            logger.debug(
                f"SKU {sku_part_number} treated as viral: {assigned} of {purchased} seats assigned"
            )
            return self._as_viral(result)

        return result

    @staticmethod
    def _as_viral(result: SkuClassification) -> SkuClassification:
        return replace(
            result,
            tier=SkuTier.VIRAL,
            is_excluded_from_aggregates=True,
            is_core_user_licence=False,
        )

    def classify_sku(self, sku: LicenceSku) -> SkuClassification:
        """Classify a SKU record using its purchased count."""
        return self.classify(sku.sku_part_number, sku.purchased, sku.assigned)

    def is_excluded(self, sku: LicenceSku) -> bool:
        return self.classify_sku(sku).is_excluded_from_aggregates

    def paid_skus(self, skus: list[LicenceSku]) -> list[LicenceSku]:
        """SKUs that count towards aggregate KPIs."""
        return [s for s in skus if not self.is_excluded(s)]

    def _classify_by_pattern(self, sku_part_number: str) -> SkuClassification:
        upper_sku = sku_part_number.upper()
        friendly_name = self.friendly_name(sku_part_number)

        if upper_sku in self._always_excluded:
            return SkuClassification(
                tier=SkuTier.ADD_ON,
                friendly_name=friendly_name,
                is_excluded_from_aggregates=True,
            )

        if any(p.upper() in upper_sku for p in self.catalog.viral_free_patterns):
            is_viral = any(m in upper_sku for m in self.catalog.viral_markers)
            return SkuClassification(
                tier=SkuTier.VIRAL if is_viral else SkuTier.FREE,
                friendly_name=friendly_name,
                is_excluded_from_aggregates=True,
            )

        is_addon = any(p.upper() in upper_sku for p in self.catalog.addon_patterns)
        return SkuClassification(
            tier=SkuTier.ADD_ON if is_addon else SkuTier.CORE_PAID,
            friendly_name=friendly_name,
            is_excluded_from_aggregates=False,
            is_core_user_licence=upper_sku in self._core_user,
        )
