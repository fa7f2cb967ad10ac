"""Pricing feature module.

Resolves the fee tier of a candidate name, caches the registrar's tier table
and computes multi-year totals with decimal arithmetic.
"""

from namesdao_wallet.features.pricing.cache import PricingCache
from namesdao_wallet.features.pricing.service import NameQuote, PriceService
from namesdao_wallet.features.pricing.tiers import (
    FALLBACK_TIERS,
    NAME_TYPE_LABELS,
    PriceTier,
    are_fallback_prices,
    clamp_years,
    format_price,
    pick_tier_for_name,
    total_price,
)

__all__ = [
    "FALLBACK_TIERS",
    "NAME_TYPE_LABELS",
    "NameQuote",
    "PriceService",
    "PriceTier",
    "PricingCache",
    "are_fallback_prices",
    "clamp_years",
    "format_price",
    "pick_tier_for_name",
    "total_price",
]
