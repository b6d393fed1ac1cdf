"""Shared licence cost resolution.

One CostResolver is built per analysis cycle from that cycle's pricing and
SKU lists and handed to every service that needs a price, so the KPI
aggregator, the downgrade engine and the usage profile builder can never
drift apart on how a licence name maps to money.

Strategy order for resolve(), first hit wins:

1. direct title match, then case-insensitive title match
2. SKU lookup: find the SKU by title or part number, retry pricing with
   its title
3. classifier friendly name: of the SKU's part number, then of the raw name
4. standard UK list price, where the name contains a standard licence name
5. not found (cost 0)

resolve_sku() prices a SKU record for spend totals using the curated
pricing list only (no list-price fallback).
"""

import logging

from licence_intelligence.core.constants import STANDARD_PRICING, IssueType
from licence_intelligence.core.sku_classifier import SkuClassifier
from licence_intelligence.schemas.downgrade import (
    LicenceCost,
    LicenceCostLine,
    PricingSource,
    UserCostBreakdown,
)
from licence_intelligence.schemas.licence import LicencePricing, LicenceSku, LicenceUser

logger = logging.getLogger(__name__)


def calculate_potential_savings(
    issue_type: IssueType,
    licences: list[LicenceCostLine],
) -> tuple[float, str | None]:
    """Monthly savings available for a user given their issue type.

    Disabled and inactive accounts can shed every priced licence.
    Dual-licensed users keep their most expensive licence and shed the
    rest. Service accounts are flagged for review only, never counted.

    Returns:
        Tuple of (monthly savings, human-readable reason)
    """
    total = sum(line.monthly_cost for line in licences)

    if issue_type == IssueType.DISABLED:
        return total, "Remove all licences from disabled account"

    if issue_type == IssueType.INACTIVE_90:
        return total, "Review and potentially remove all licences (90+ days inactive)"

    if issue_type == IssueType.DUAL_LICENSED:
        paid = [line for line in licences if line.monthly_cost > 0]
        if len(paid) > 1:
            ranked = sorted(paid, key=lambda line: line.monthly_cost, reverse=True)
            savings = sum(line.monthly_cost for line in ranked[1:])
            return savings, f"Remove redundant licence(s), keep {ranked[0].name}"
        return 0.0, None

    if issue_type == IssueType.SERVICE_ACCOUNT:
        return 0.0, "Service account - review licence necessity"

    return 0.0, None


class CostResolver:
    """Resolves licence names and SKUs to monthly per-seat costs."""

    def __init__(
        self,
        pricing: list[LicencePricing],
        skus: list[LicenceSku],
        classifier: SkuClassifier | None = None,
        standard_pricing: dict[str, float] | None = None,
    ):
        self.classifier = classifier or SkuClassifier()
        self.standard_pricing = dict(STANDARD_PRICING if standard_pricing is None else standard_pricing)
        self._prices: dict[str, float] = {}
        self._prices_lower: dict[str, float] = {}
        self._skus: dict[str, LicenceSku] = {}

        for p in pricing:
            self._prices[p.title] = p.monthly_cost_per_user
            self._prices_lower[p.title.lower()] = p.monthly_cost_per_user

        for s in skus:
            for key in (s.title, s.sku_part_number):
                if key:
                    self._skus[key] = s
                    self._skus[key.lower()] = s

        logger.debug(
            f"Cost resolver initialised with {len(pricing)} prices and {len(skus)} SKUs"
        )

    def _price(self, name: str) -> float | None:
        if name in self._prices:
            return self._prices[name]
        return self._prices_lower.get(name.lower())

    def find_sku(self, name: str) -> LicenceSku | None:
        """Find a SKU by title or part number, case-insensitively."""
        name = (name or "").strip()
        if not name:
            return None
        return self._skus.get(name) or self._skus.get(name.lower())

    def resolve(self, licence_name: str, include_standard: bool = True) -> LicenceCost:
        """Resolve a licence display name to a monthly cost."""
        name = (licence_name or "").strip()
        if not name:
            return LicenceCost()

        price = self._price(name)
        if price is not None:
            return LicenceCost(cost=price, source=PricingSource.DIRECT)

        sku = self.find_sku(name)
        if sku:
            price = self._price(sku.title) if sku.title else None
            if price is not None:
                return LicenceCost(cost=price, source=PricingSource.SKU_LOOKUP)
            price = self._price(self.classifier.friendly_name(sku.sku_part_number))
            if price is not None:
                return LicenceCost(cost=price, source=PricingSource.FRIENDLY_NAME)

        friendly_name = self.classifier.friendly_name(name)
        if friendly_name != name:
            price = self._price(friendly_name)
            if price is not None:
                return LicenceCost(cost=price, source=PricingSource.FRIENDLY_NAME)

        if include_standard:
            lowered = name.lower()
            for standard_name, cost in self.standard_pricing.items():
                if standard_name.lower() in lowered:
                    return LicenceCost(cost=cost, source=PricingSource.STANDARD)

        logger.debug(f"No price found for licence '{name}'")
        return LicenceCost()

    def resolve_sku(self, sku: LicenceSku) -> LicenceCost:
        """Price a SKU record from the curated pricing list."""
        price = self._price(sku.title) if sku.title else None
        if price is not None:
            return LicenceCost(cost=price, source=PricingSource.DIRECT)

        friendly_name = self.classifier.friendly_name(sku.sku_part_number)
        if friendly_name:
            price = self._price(friendly_name)
            if price is not None:
                return LicenceCost(cost=price, source=PricingSource.FRIENDLY_NAME)

        return LicenceCost()

    def standard_price(self, licence_name: str) -> float:
        """List price for an exact standard licence name, or 0."""
        return self.standard_pricing.get(licence_name, 0.0)

    def cost_or_standard(self, licence_name: str) -> float:
        """Resolved cost, falling back to the list price when resolution yields 0."""
        return self.resolve(licence_name).cost or self.standard_price(licence_name)

    def downgrade_savings(self, from_licence: str, to_licence: str) -> float:
        """Monthly per-seat difference between two licences, list prices as fallback."""
        return self.cost_or_standard(from_licence) - self.cost_or_standard(to_licence)

    def holds_tier(self, user: LicenceUser, sku_part_numbers: tuple[str, ...]) -> bool:
        """True if any held licence is one of the given SKUs.

        Each held licence name is compared whole, case-insensitively, with
        the part numbers, their catalogue friendly names and the titles of
        matching SKU records. Add-ons that merely share a suffix (EMS E5,
        Windows Enterprise E3) do not count. The upstream has_e5/has_e3
        flags are the caller's concern.
        """
        part_numbers = {p.upper() for p in sku_part_numbers}
        names = {self.classifier.friendly_name(p).lower() for p in sku_part_numbers}

        for licence in user.licence_names:
            if licence.upper() in part_numbers or licence.lower() in names:
                return True
            sku = self.find_sku(licence)
            if sku and sku.sku_part_number.upper() in part_numbers:
                return True
        return False

    def price_licence(self, licence_name: str, include_standard: bool = True) -> LicenceCostLine:
        """Price one held licence; aggregate-excluded SKUs cost nothing."""
        sku = self.find_sku(licence_name)
        if sku and self.classifier.is_excluded(sku):
            return LicenceCostLine(
                name=licence_name,
                sku_part_number=sku.sku_part_number,
                pricing_source=PricingSource.EXCLUDED,
            )

        resolved = self.resolve(licence_name, include_standard=include_standard)
        return LicenceCostLine(
            name=licence_name,
            sku_part_number=sku.sku_part_number if sku else None,
            monthly_cost=resolved.cost,
            annual_cost=resolved.cost * 12,
            pricing_source=resolved.source,
        )

    def user_cost_breakdown(
        self, user: LicenceUser, include_standard: bool = True
    ) -> UserCostBreakdown:
        """Authoritative per-user costing with issue-aware savings."""
        lines = [
            self.price_licence(name, include_standard=include_standard)
            for name in user.licence_names
        ]
        total_monthly = sum(line.monthly_cost for line in lines)
        savings, reason = calculate_potential_savings(user.issue_type, lines)

        return UserCostBreakdown(
            user_id=user.id,
            user_name=user.display_name,
            licences=lines,
            total_monthly_cost=total_monthly,
            total_annual_cost=total_monthly * 12,
            potential_monthly_savings=savings,
            potential_annual_savings=savings * 12,
            issue_type=user.issue_type,
            savings_reason=reason,
        )
