"""Registration business logic: availability, payload, memo and payment."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from namesdao_wallet.features.payment.service import (
    PaymentMethod,
    PaymentPlan,
    PaymentSelector,
    WalletType,
)
from namesdao_wallet.features.pricing.service import PriceService
from namesdao_wallet.features.registration.api import (
    AvailabilityResult,
    AvailabilityStatus,
    NamesdaoApiClient,
)
from namesdao_wallet.features.registration.memo import MemoCloakingService
from namesdao_wallet.features.registration.validators import NameValidator
from namesdao_wallet.shared.errors import (
    InvalidNameFormat,
    InvalidPublicKey,
    NamesdaoError,
    NameUnavailable,
)
from namesdao_wallet.shared.fees import xch_to_mojo
from namesdao_wallet.shared.logging import get_logger
from namesdao_wallet.shared.protocols import WalletRpcProtocol

DEFAULT_PAYMENT_ALIAS = "namesdao.xch"


class RegistrationMode(str, Enum):
    REGISTER = "register"
    RENEW = "renew"


@dataclass
class RegistrationReceipt:
    name: str
    mode: RegistrationMode
    plan: PaymentPlan
    payment_address: str
    memo: str
    fee_mojos: int
    transaction: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": f"{self.name}.xch",
            "mode": self.mode.value,
            "method": self.plan.method.value,
            "wallet_id": self.plan.wallet_id,
            "total": str(self.plan.total),
            "amount_mojos": self.plan.amount_mojos,
            "fee_mojos": self.fee_mojos,
            "payment_address": self.payment_address,
        }


class RegistrationService:
    def __init__(
        self,
        wallet_rpc: WalletRpcProtocol,
        api_client: NamesdaoApiClient,
        price_service: PriceService,
        memo_service: MemoCloakingService | None = None,
        payment_selector: PaymentSelector | None = None,
    ):
        self.wallet_rpc = wallet_rpc
        self.api_client = api_client
        self.price_service = price_service
        self.memo_service = memo_service or MemoCloakingService()
        self.payment_selector = payment_selector or PaymentSelector()

    def normalize_name(self, name: str) -> str:
        result = NameValidator.validate_name(name)
        if not result.is_valid:
            raise InvalidNameFormat(result.error_message)
        return result.normalized_value

    def check_availability(self, name: str) -> AvailabilityResult:
        return self.api_client.check_availability(self.normalize_name(name))

    def available_methods(self, name: str) -> list[PaymentMethod]:
        return self.payment_selector.available_methods(name)

    def _receive_address(self, wallets: list[dict[str, Any]], receive_address: str | None) -> str:
        if receive_address:
            return receive_address
        standard = next(
            (w for w in wallets if w.get("type") == WalletType.STANDARD_WALLET), None
        )
        address = self.wallet_rpc.get_current_address(int(standard["id"])) if standard else None
        if not address:
            raise NamesdaoError("Waiting for your receive address")
        return address

    def build_payload(
        self,
        name: str,
        mode: RegistrationMode,
        availability: AvailabilityResult,
        wallets: list[dict[str, Any]],
        receive_address: str | None = None,
    ) -> str:
        if mode is RegistrationMode.RENEW:
            if availability.status is AvailabilityStatus.GRACE_PERIOD:
                return f"{name}.xch:{name}.xch"
            if availability.status is AvailabilityStatus.AVAILABLE:
                return f"{name}.xch:{self._receive_address(wallets, receive_address)}"
            raise NameUnavailable("Cannot renew at this time")

        if availability.status is not AvailabilityStatus.AVAILABLE:
            error = availability.to_error()
            if isinstance(error, NameUnavailable):
                raise NameUnavailable("Name is no longer available")
            raise error
        return f"{name}.xch:{self._receive_address(wallets, receive_address)}"

    def register(
        self,
        name: str,
        mode: RegistrationMode | str = RegistrationMode.REGISTER,
        method: PaymentMethod | str = PaymentMethod.XCH,
        years: str | int | None = 1,
        fee: Decimal | str | None = None,
        receive_address: str | None = None,
    ) -> RegistrationReceipt:
        """Register or renew ``name`` and submit the payment transaction.

        Raises the availability, payment and memo errors from
        ``namesdao_wallet.shared.errors``; nothing is submitted when any
        precondition fails.
        """
        mode = RegistrationMode(mode)
        method = PaymentMethod.parse(method)
        base_name = self.normalize_name(name)

        if method not in self.available_methods(base_name):
            raise NamesdaoError(f"{method.value} payment is not offered for {base_name}.xch")

        availability = self.api_client.check_availability(base_name)
        info = self.api_client.get_info()
        payment_address = self.api_client.resolve_name(
            info.payment_address or DEFAULT_PAYMENT_ALIAS
        )

        wallets = self.wallet_rpc.get_wallets()
        payload = self.build_payload(base_name, mode, availability, wallets, receive_address)

        public_key = self.memo_service.public_key or info.public_key
        if not public_key:
            raise InvalidPublicKey("Registrar public key is missing")
        # The registrar expects the register action for renewals as well.
        memo = self.memo_service.cloak(payload, public_key=public_key, action="register")

        tier = self.price_service.tier_for_name(base_name)
        plan = self.payment_selector.select(method, tier, years, wallets)
        fee_mojos = xch_to_mojo((str(fee) if fee is not None else "").strip() or "0")

        log = get_logger(__name__, {"name": f"{base_name}.xch", "mode": mode.value})
        log.info(
            "Submitting payment of %s via wallet %d",
            plan.display_total,
            plan.wallet_id,
        )
        submit = (
            self.wallet_rpc.send_transaction
            if plan.method.is_native
            else self.wallet_rpc.cat_spend
        )
        transaction = submit(
            wallet_id=plan.wallet_id,
            address=payment_address,
            amount=plan.amount_mojos,
            fee=fee_mojos,
            memos=[memo],
        )

        return RegistrationReceipt(
            name=base_name,
            mode=mode,
            plan=plan,
            payment_address=payment_address,
            memo=memo,
            fee_mojos=fee_mojos,
            transaction=transaction or {},
        )
