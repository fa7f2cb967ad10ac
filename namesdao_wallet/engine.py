"""Composition root wiring configuration, services and the wallet RPC."""

from __future__ import annotations

import logging
from typing import Callable

from namesdao_wallet.features.names.service import NamesService, OwnedNames
from namesdao_wallet.features.payment.service import PaymentSelector
from namesdao_wallet.features.pricing.cache import PricingCache
from namesdao_wallet.features.pricing.service import PriceService
from namesdao_wallet.features.registration.api import NamesdaoApiClient
from namesdao_wallet.features.registration.memo import MemoCloakingService
from namesdao_wallet.features.registration.service import RegistrationService
from namesdao_wallet.features.website.service import SetupSnapshot, WebsiteSetupSession
from namesdao_wallet.shared.config import NamesdaoConfig
from namesdao_wallet.shared.errors import NamesdaoError
from namesdao_wallet.shared.logging import LoggingConfig, setup_logging
from namesdao_wallet.shared.protocols import WalletRpcProtocol

logger = logging.getLogger(__name__)


class NamesdaoEngine:
    def __init__(
        self,
        wallet_rpc: WalletRpcProtocol,
        config: NamesdaoConfig | None = None,
        api_client: NamesdaoApiClient | None = None,
    ):
        self.wallet_rpc = wallet_rpc
        if config is None:
            config = NamesdaoConfig.from_environment()
            setup_logging(LoggingConfig.from_environment(config.storage_dir))
        self.config = config
        self.api_client = api_client or NamesdaoApiClient(
            base_url=self.config.api_base_url,
            lookup_urls=self.config.lookup_urls,
            timeout_config=self.config.timeout_config,
        )
        self.price_service = PriceService(
            self.api_client,
            cache=PricingCache(
                self.config.storage_dir,
                ttl_seconds=self.config.pricing_cache_ttl_seconds,
            ),
            retry_config=self.config.pricing_retry_config,
        )
        self.payment_selector = PaymentSelector()
        self.registration = RegistrationService(
            wallet_rpc,
            self.api_client,
            self.price_service,
            memo_service=MemoCloakingService(self.config.registrar_public_key),
            payment_selector=self.payment_selector,
        )
        self.names = NamesService(wallet_rpc)
        logger.debug("Engine ready (api=%s)", self.config.api_base_url)

    def owned_names(self) -> OwnedNames:
        return self.names.refresh()

    def website_session(
        self,
        name: str,
        on_change: Callable[[SetupSnapshot], None] | None = None,
    ) -> WebsiteSetupSession:
        entry = self.names.get_entry(name)
        if entry is None:
            self.names.refresh()
            entry = self.names.get_entry(name)
        if entry is None:
            raise NamesdaoError(f"{name} is not owned by this wallet")
        return WebsiteSetupSession(
            self.wallet_rpc,
            entry.name,
            entry.token,
            poll_interval_seconds=self.config.poll_interval_seconds,
            on_change=on_change,
        )
