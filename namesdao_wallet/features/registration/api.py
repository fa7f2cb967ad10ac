"""Client for the Namesdao registrar API and the name lookup mirrors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

import requests

from namesdao_wallet.features.pricing.tiers import PriceTier
from namesdao_wallet.shared.config import DEFAULT_API_BASE, DEFAULT_LOOKUP_URLS
from namesdao_wallet.shared.errors import (
    AddressResolutionFailure,
    InvalidNameFormat,
    InvalidResponseShape,
    NamesdaoError,
    NameInGracePeriod,
    NameNotYetAvailable,
    NameReserved,
    NameUnavailable,
)
from namesdao_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    RetryConfig,
    TimeoutConfig,
)
from namesdao_wallet.shared.validation import AddressValidator

logger = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped
URI_COMPONENT_SAFE = "-_.!~*'()"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    TAKEN = "taken"
    RESERVED = "reserved"
    GRACE_PERIOD = "grace_period"
    FUTURE = "future"
    INVALID = "invalid"
    UNKNOWN = "unknown"


@dataclass
class AvailabilityResult:
    name: str
    status: AvailabilityStatus
    raw_status: str = ""
    future_block: int | None = None
    message: str | None = None
    pricing: Any = None

    @property
    def is_available(self) -> bool:
        return self.status is AvailabilityStatus.AVAILABLE

    @property
    def user_message(self) -> str:
        name = self.name
        if self.status is AvailabilityStatus.AVAILABLE:
            return f"{name}.xch is available!"
        if self.status is AvailabilityStatus.TAKEN:
            return f"{name}.xch is already registered"
        if self.status is AvailabilityStatus.RESERVED:
            return f'The name "{name}" is reserved and cannot be registered'
        if self.status is AvailabilityStatus.GRACE_PERIOD:
            return f'The name "{name}" is in renewal grace period (owner can renew)'
        if self.status is AvailabilityStatus.FUTURE:
            return f'The name "{name}" will be available at block {self.future_block}'
        if self.status is AvailabilityStatus.INVALID:
            return f"Invalid name format: {self.message}"
        return f"Unexpected response: {self.message or 'Unknown error'}"

    def to_error(self) -> NamesdaoError | None:
        """Map a non-available outcome to its domain error."""
        if self.status is AvailabilityStatus.AVAILABLE:
            return None
        if self.status is AvailabilityStatus.TAKEN:
            return NameUnavailable(self.user_message)
        if self.status is AvailabilityStatus.RESERVED:
            return NameReserved(self.user_message)
        if self.status is AvailabilityStatus.GRACE_PERIOD:
            return NameInGracePeriod(self.user_message)
        if self.status is AvailabilityStatus.FUTURE:
            return NameNotYetAvailable(self.user_message, future_block=self.future_block)
        if self.status is AvailabilityStatus.INVALID:
            return InvalidNameFormat(self.user_message)
        return InvalidResponseShape(self.user_message)

    @classmethod
    def from_api(cls, name: str, item: dict[str, Any]) -> "AvailabilityResult":
        raw_status = str(item.get("status") or "")
        try:
            status = AvailabilityStatus(raw_status)
        except ValueError:
            status = AvailabilityStatus.UNKNOWN

        future_block = item.get("futureBlock")
        try:
            future_block = int(future_block) if future_block is not None else None
        except (TypeError, ValueError):
            future_block = None

        return cls(
            name=name,
            status=status,
            raw_status=raw_status,
            future_block=future_block,
            message=item.get("message"),
            pricing=item.get("pricing"),
        )


@dataclass
class RegistrarInfo:
    payment_address: str | None = None
    public_key: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class NamesdaoApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        lookup_urls: tuple[str, ...] = DEFAULT_LOOKUP_URLS,
        timeout_config: TimeoutConfig | None = None,
        session: requests.Session | None = None,
    ):
        self._session = session or requests.Session()
        self.timeout_config = timeout_config or TimeoutConfig()
        self.lookup_urls = lookup_urls
        # Retries are owned by callers; only pricing retries.
        self.client = NetworkClient(
            base_url,
            timeout_config=self.timeout_config,
            retry_config=RetryConfig(max_retries=0),
            session=self._session,
        )

    @property
    def base_url(self) -> str:
        return self.client.base_url

    def check_availability(self, name: str) -> AvailabilityResult:
        clean = (name or "").strip()
        data = self.client.get(
            "/v1/check_name_availability",
            context="Availability check",
            params={"name": clean},
        )
        results = data.get("results") if isinstance(data, dict) else None
        if not results or not isinstance(results[0], dict):
            raise InvalidResponseShape("Unexpected response format")
        return AvailabilityResult.from_api(clean, results[0])

    def get_info(self) -> RegistrarInfo:
        data = self.client.get("/v1/info", context="Registrar info")
        if not isinstance(data, dict):
            raise InvalidResponseShape("Unexpected response format")
        return RegistrarInfo(
            payment_address=data.get("paymentAddress") or None,
            public_key=data.get("publicKey") or None,
            raw=data,
        )

    def get_pricing_tiers(self) -> list[PriceTier]:
        data = self.client.get("/v1/get_pricing_tiers", context="Pricing tiers")
        tiers = data.get("tiers") if isinstance(data, dict) else None
        if not isinstance(tiers, list):
            raise InvalidResponseShape("Invalid pricing data from API")
        return [PriceTier.from_api(item) for item in tiers]

    def _lookup(self, url: str) -> str:
        lookup = NetworkClient(
            url,
            timeout_config=self.timeout_config,
            retry_config=RetryConfig(max_retries=0),
            session=self._session,
        )
        data = lookup.get("", context="Name lookup")
        address = data.get("address") if isinstance(data, dict) else None
        if not address:
            raise InvalidResponseShape("No address in response")
        if not AddressValidator.is_valid(address):
            raise InvalidResponseShape("Invalid address")
        return address.strip()

    def resolve_name(self, name_or_dot_xch: str) -> str:
        """Resolve a registered ``.xch`` name to its destination address.

        Mirrors are tried in order; the first one answering with a valid
        address wins. When none does, the last error is reported.
        """
        trimmed = (name_or_dot_xch or "").strip().lower()
        if not trimmed:
            raise AddressResolutionFailure("Empty name")
        lookup_name = trimmed[:-4] if trimmed.endswith(".xch") else trimmed
        encoded = quote(lookup_name, safe=URI_COMPONENT_SAFE)

        last_error: Exception | None = None
        for template in self.lookup_urls:
            url = template.format(name=encoded)
            try:
                address = self._lookup(url)
            except (NetworkError, InvalidResponseShape) as e:
                logger.warning("Lookup mirror failed for %s.xch: %s", lookup_name, e)
                last_error = e
                continue
            logger.debug("Resolved %s.xch via %s", lookup_name, url)
            return address

        detail = f": {last_error}" if last_error else ""
        raise AddressResolutionFailure(f"Failed to resolve {lookup_name}.xch{detail}")
