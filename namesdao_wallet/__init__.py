"""Namesdao wallet engine - .xch name lifecycle and on-chain configuration.

This package is organized into feature-based modules:
- features.pricing: Price tiers and the pricing cache
- features.payment: Payment method and funding wallet selection
- features.registration: Registrar API, private memos and registration
- features.names: Owned names and lifecycle status
- features.website: DID profile, name assignment and website record setup
- shared: Shared utilities (network, logging, polling, validation, etc.)
"""

from namesdao_wallet.engine import NamesdaoEngine
from namesdao_wallet.shared import (
    AddressValidator,
    ConfirmationPoller,
    NamesdaoConfig,
    NamesdaoError,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
    ValidationResult,
)

__version__ = "0.1.0"
__all__ = [
    "NamesdaoEngine",
    "NamesdaoConfig",
    "NamesdaoError",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "AddressValidator",
    "ConfirmationPoller",
    "ValidationResult",
]
