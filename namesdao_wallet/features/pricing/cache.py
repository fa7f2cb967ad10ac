"""Persistent cache for registrar pricing tiers."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

from namesdao_wallet.features.pricing.tiers import PriceTier

logger = logging.getLogger(__name__)

CACHE_KEY = "namesdao-price-cache"
CACHE_FILENAME = "pricing_cache.json"


class PricingCache:
    CACHE_VERSION = 1

    def __init__(
        self,
        storage_dir: Path | None = None,
        ttl_seconds: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.storage_dir = storage_dir
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.cache_file = storage_dir / CACHE_FILENAME if storage_dir else None
        self._memory: dict[str, Any] | None = None

    def _read(self) -> dict[str, Any] | None:
        if self.cache_file is None:
            return self._memory
        if not self.cache_file.exists():
            return None
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read pricing cache: %s", e)
            return None
        return data.get(CACHE_KEY) if isinstance(data, dict) else None

    def _write(self, entry: dict[str, Any]) -> None:
        if self.cache_file is None:
            self._memory = entry
            return
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as f:
                json.dump({CACHE_KEY: entry}, f, indent=2)
        except OSError as e:
            logger.error("Failed to save pricing cache: %s", e)

    @staticmethod
    def _has_required_fields(tiers: Any) -> bool:
        # Entries written before SBX/AIR pricing existed are treated as stale.
        if not isinstance(tiers, list) or not tiers:
            return False
        return all(
            isinstance(tier, dict)
            and tier.get("sbx_price") is not None
            and tier.get("air_price") is not None
            for tier in tiers
        )

    def load(self) -> list[PriceTier] | None:
        entry = self._read()
        if not isinstance(entry, dict):
            return None

        try:
            if int(entry.get("version", 0)) < self.CACHE_VERSION:
                return None
            age = self.clock() - float(entry.get("last_updated", 0))
        except (TypeError, ValueError) as e:
            logger.warning("Discarding malformed pricing cache: %s", e)
            return None

        if age >= self.ttl_seconds:
            logger.debug("Pricing cache expired")
            return None

        tiers = entry.get("tiers")
        if not self._has_required_fields(tiers):
            logger.info("Pricing cache is missing required fields, refetching")
            return None

        try:
            return [PriceTier.from_dict(tier) for tier in tiers]
        except (KeyError, ValueError, ArithmeticError) as e:
            logger.warning("Discarding malformed pricing cache: %s", e)
            return None

    def save(self, tiers: list[PriceTier]) -> None:
        self._write(
            {
                "version": self.CACHE_VERSION,
                "tiers": [tier.to_dict() for tier in tiers],
                "last_updated": self.clock(),
            }
        )

    def clear(self) -> None:
        self._memory = None
        if self.cache_file is not None and self.cache_file.exists():
            self.cache_file.unlink()
