"""Shared utilities for the Namesdao wallet engine."""

from namesdao_wallet.shared.config import NamesdaoConfig
from namesdao_wallet.shared.errors import NamesdaoError
from namesdao_wallet.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from namesdao_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from namesdao_wallet.shared.polling import (
    CancellationToken,
    ConfirmationPoller,
    PollResult,
)
from namesdao_wallet.shared.validation import AddressValidator, ValidationResult

__all__ = [
    "NamesdaoConfig",
    "NamesdaoError",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
    "CancellationToken",
    "ConfirmationPoller",
    "PollResult",
    "AddressValidator",
    "ValidationResult",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
