"""Runtime configuration for the Namesdao wallet engine."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from namesdao_wallet.shared.network import RetryConfig, TimeoutConfig

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.namesdao.org"
DEFAULT_LOOKUP_URLS = (
    "https://namesdaolookup.xchstorage.com/{name}.json",
    "https://storage1.xchstorage.cyou/names_lookup/{name}.json",
)
DEFAULT_POLL_INTERVAL_SECONDS = 10.0
PRICING_CACHE_TTL_SECONDS = 24 * 60 * 60


def normalize_api_base(value: str | None) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        return DEFAULT_API_BASE
    if trimmed.lower().startswith(("http://", "https://")):
        return trimmed.rstrip("/")
    return f"https://{trimmed}".rstrip("/")


def resolve_storage_dir(storage_dir: str | Path | None = None) -> Path:
    if storage_dir:
        return Path(storage_dir).expanduser()

    env_dir = os.getenv("NAMESDAO_WALLET_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "namesdao-wallet"


@dataclass
class NamesdaoConfig:
    api_base_url: str = DEFAULT_API_BASE
    lookup_urls: tuple[str, ...] = DEFAULT_LOOKUP_URLS
    storage_dir: Path | None = None
    registrar_public_key: str | None = None
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    pricing_cache_ttl_seconds: float = PRICING_CACHE_TTL_SECONDS
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    # Three attempts in total, waiting 1s then 2s.
    pricing_retry_config: RetryConfig = field(
        default_factory=lambda: RetryConfig(max_retries=2, base_delay=1.0)
    )

    def __post_init__(self):
        self.api_base_url = normalize_api_base(self.api_base_url)
        self.storage_dir = resolve_storage_dir(self.storage_dir)

    @classmethod
    def from_environment(cls) -> "NamesdaoConfig":
        poll_interval = DEFAULT_POLL_INTERVAL_SECONDS
        env_interval = os.getenv("NAMESDAO_POLL_INTERVAL")
        if env_interval:
            try:
                poll_interval = max(1.0, float(env_interval))
            except ValueError:
                logger.warning(
                    "Ignoring invalid NAMESDAO_POLL_INTERVAL value: %s", env_interval
                )

        return cls(
            api_base_url=normalize_api_base(os.getenv("NAMESDAO_API_BASE")),
            storage_dir=resolve_storage_dir(),
            registrar_public_key=os.getenv("NAMESDAO_REGISTRAR_PUBKEY") or None,
            poll_interval_seconds=poll_interval,
        )
