"""Payment feature module: funding wallet and asset selection."""

from namesdao_wallet.features.payment.service import (
    CAT_WALLET_TYPES,
    PaymentMethod,
    PaymentPlan,
    PaymentSelector,
    WalletType,
)

__all__ = [
    "CAT_WALLET_TYPES",
    "PaymentMethod",
    "PaymentPlan",
    "PaymentSelector",
    "WalletType",
]
