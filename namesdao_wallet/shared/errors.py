"""Error taxonomy for the Namesdao wallet engine."""

from __future__ import annotations


class NamesdaoError(Exception):
    """Base class for every error raised by this package."""

    user_message = "An unexpected error occurred."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message

    def __str__(self) -> str:
        return self.message


class InvalidResponseShape(NamesdaoError):
    user_message = "Unexpected response format"


class InvalidNameFormat(NamesdaoError):
    user_message = "Invalid name format"


class NameUnavailable(NamesdaoError):
    user_message = "Name is no longer available"


class NameReserved(NamesdaoError):
    user_message = "The name is reserved and cannot be registered"


class NameInGracePeriod(NamesdaoError):
    user_message = "The name is in renewal grace period (owner can renew)"


class NameNotYetAvailable(NamesdaoError):
    user_message = "The name is not yet available"

    def __init__(self, message: str | None = None, future_block: int | None = None):
        super().__init__(message)
        self.future_block = future_block


class MissingFundingWallet(NamesdaoError):
    user_message = "No wallet found for the selected payment method"


class MissingPriceForAsset(NamesdaoError):
    user_message = "No price is available for the selected payment method"


class AddressResolutionFailure(NamesdaoError):
    user_message = "Failed to resolve .xch name"


class InvalidPublicKey(NamesdaoError):
    user_message = "The registrar public key is not valid"


class InvalidHostname(NamesdaoError):
    user_message = "Please enter a valid URL or hostname"


class AssignmentSubmissionFailure(NamesdaoError):
    user_message = "Failed to assign name to profile. Please try again."


class IdentityCreationFailure(NamesdaoError):
    user_message = "Failed to create profile. Please try again."


class ConfigurationSubmissionFailure(NamesdaoError):
    user_message = "Failed to submit configuration"


class ConfigurationVerificationFailure(NamesdaoError):
    user_message = "Failed to verify configuration"


__all__ = [
    "NamesdaoError",
    "InvalidResponseShape",
    "InvalidNameFormat",
    "NameUnavailable",
    "NameReserved",
    "NameInGracePeriod",
    "NameNotYetAvailable",
    "MissingFundingWallet",
    "MissingPriceForAsset",
    "AddressResolutionFailure",
    "InvalidPublicKey",
    "InvalidHostname",
    "AssignmentSubmissionFailure",
    "IdentityCreationFailure",
    "ConfigurationSubmissionFailure",
    "ConfigurationVerificationFailure",
]
