"""Pricing business logic: fetch, cache and resolve per-name prices."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Protocol

from namesdao_wallet.features.pricing.cache import PricingCache
from namesdao_wallet.features.pricing.tiers import (
    FALLBACK_TIERS,
    PriceTier,
    clamp_years,
    format_price,
    pick_tier_for_name,
    total_price,
)
from namesdao_wallet.shared.errors import InvalidResponseShape
from namesdao_wallet.shared.network import NetworkError, RetryConfig

logger = logging.getLogger(__name__)


class PricingSourceProtocol(Protocol):
    def get_pricing_tiers(self) -> list[PriceTier]: ...


@dataclass
class NameQuote:
    name: str
    years: int
    tier: PriceTier | None
    xch_per_year: Decimal | None
    name_per_year: Decimal | None
    xch_total: Decimal | None
    name_total: Decimal | None
    is_fallback: bool = False

    @property
    def is_priced(self) -> bool:
        return self.tier is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "years": self.years,
            "tier": self.tier.label if self.tier else None,
            "xch_per_year": format_price(self.xch_per_year),
            "name_per_year": format_price(self.name_per_year),
            "xch_total": format_price(self.xch_total),
            "name_total": format_price(self.name_total),
            "is_fallback": self.is_fallback,
        }


class PriceService:
    def __init__(
        self,
        source: PricingSourceProtocol,
        cache: PricingCache | None = None,
        retry_config: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.source = source
        self.cache = cache or PricingCache()
        self.retry_config = retry_config or RetryConfig(max_retries=2, base_delay=1.0)
        self.sleep = sleep

    def _fetch_with_retry(self) -> list[PriceTier]:
        attempts = self.retry_config.max_attempts
        for attempt in range(attempts):
            try:
                return self.source.get_pricing_tiers()
            except NetworkError as e:
                if attempt + 1 >= attempts:
                    raise
                delay = self.retry_config.calculate_delay(attempt)
                logger.warning(
                    "Pricing fetch failed (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1,
                    attempts,
                    delay,
                    e,
                )
                self.sleep(delay)
        raise RuntimeError("unreachable")

    def get_prices(self, allow_fallback: bool = True) -> list[PriceTier]:
        """Return the tier table, from cache when fresh.

        When the registrar cannot be reached or answers with a malformed
        table, the fixed fallback table is returned. With
        ``allow_fallback=False`` the failure propagates instead.
        """
        cached = self.cache.load()
        if cached:
            return cached

        try:
            tiers = self._fetch_with_retry()
        except (NetworkError, InvalidResponseShape) as e:
            if not allow_fallback:
                raise
            logger.error("Failed to fetch pricing, using fallback prices: %s", e)
            return list(FALLBACK_TIERS)

        if not tiers:
            if not allow_fallback:
                raise InvalidResponseShape("Invalid pricing data from API")
            logger.error("Registrar returned no pricing tiers, using fallback prices")
            return list(FALLBACK_TIERS)

        self.cache.save(tiers)
        return tiers

    def refresh(self) -> list[PriceTier]:
        self.cache.clear()
        return self.get_prices()

    def tier_for_name(self, name: str) -> PriceTier | None:
        return pick_tier_for_name(name, self.get_prices())

    def quote(self, name: str, years: str | int | None = 1) -> NameQuote:
        tier = self.tier_for_name(name)
        clamped = clamp_years(years)
        xch = tier.xch_price if tier else None
        name_price = tier.name_price if tier else None
        return NameQuote(
            name=name,
            years=clamped,
            tier=tier,
            xch_per_year=xch,
            name_per_year=name_price,
            xch_total=total_price(xch, clamped),
            name_total=total_price(name_price, clamped),
            is_fallback=bool(tier and tier.is_fallback),
        )
