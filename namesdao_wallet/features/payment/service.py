"""Payment method selection for name registration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any

from namesdao_wallet.features.pricing.tiers import (
    PriceTier,
    clamp_years,
    format_price,
    qualifies_for_underscore_tier,
    total_price,
)
from namesdao_wallet.shared.errors import MissingFundingWallet, MissingPriceForAsset
from namesdao_wallet.shared.fees import cat_to_mojo, xch_to_mojo

logger = logging.getLogger(__name__)


class WalletType(IntEnum):
    STANDARD_WALLET = 0
    CAT = 6
    DECENTRALIZED_ID = 8
    NFT = 10
    RCAT = 20
    CRCAT = 57


CAT_WALLET_TYPES = (WalletType.CAT, WalletType.RCAT, WalletType.CRCAT)


class PaymentMethod(str, Enum):
    XCH = "XCH"
    NAME = "NAME"
    SBX = "SBX"
    AIR = "AIR"

    @property
    def is_native(self) -> bool:
        return self is PaymentMethod.XCH

    @classmethod
    def parse(cls, value: "str | PaymentMethod") -> "PaymentMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as e:
            raise ValueError(f"Unsupported payment method: {value}") from e


@dataclass
class PaymentPlan:
    method: PaymentMethod
    wallet_id: int
    per_year: Decimal
    years: int
    total: Decimal
    amount_mojos: int

    @property
    def display_total(self) -> str:
        return f"{format_price(self.total)} {self.method.value}"


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def _matches_cat(wallet: dict[str, Any], method: PaymentMethod) -> bool:
    if wallet.get("type") not in CAT_WALLET_TYPES:
        return False
    meta = wallet.get("meta") or {}
    ticker = _lower(meta.get("ticker"))
    name = _lower(meta.get("name"))
    symbol = method.value.lower()

    if method is PaymentMethod.NAME:
        return ticker == "name" or name in ("namesdao name", "name")
    return ticker == symbol or symbol in name


class PaymentSelector:
    """Chooses the funding wallet and amount for a payment method."""

    def available_methods(self, name: str) -> list[PaymentMethod]:
        methods = [PaymentMethod.XCH, PaymentMethod.NAME]
        if qualifies_for_underscore_tier(name):
            methods.extend([PaymentMethod.SBX, PaymentMethod.AIR])
        return methods

    def find_wallet(
        self, method: PaymentMethod | str, wallets: list[dict[str, Any]]
    ) -> dict[str, Any] | None:
        method = PaymentMethod.parse(method)
        for wallet in wallets or []:
            if method.is_native:
                if wallet.get("type") == WalletType.STANDARD_WALLET:
                    return wallet
            elif _matches_cat(wallet, method):
                return wallet
        return None

    def select(
        self,
        method: PaymentMethod | str,
        tier: PriceTier | None,
        years: str | int | None,
        wallets: list[dict[str, Any]],
    ) -> PaymentPlan:
        method = PaymentMethod.parse(method)

        wallet = self.find_wallet(method, wallets)
        if wallet is None:
            if method.is_native:
                raise MissingFundingWallet("No standard wallet found")
            raise MissingFundingWallet(
                f"Add the {method.value} token wallet to pay with {method.value}"
            )

        per_year = tier.price_for(method.value) if tier else None
        if per_year is None:
            raise MissingPriceForAsset(f"Missing {method.value} amount")

        clamped = clamp_years(years)
        total = total_price(per_year, clamped)
        amount = xch_to_mojo(total) if method.is_native else cat_to_mojo(total)

        logger.debug(
            "Selected wallet %s for %s payment of %s",
            wallet.get("id"),
            method.value,
            format_price(total),
        )
        return PaymentPlan(
            method=method,
            wallet_id=int(wallet["id"]),
            per_year=per_year,
            years=clamped,
            total=total,
            amount_mojos=amount,
        )
