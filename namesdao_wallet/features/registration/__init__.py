"""Registration feature module.

This module provides .xch name registration functionality including:
- Name validation and registrar availability checks
- Registrar payment alias resolution through the lookup mirrors
- Private registration memos encrypted to the registrar key
- Payment submission in XCH or a supported CAT
"""

from namesdao_wallet.features.registration.api import (
    AvailabilityResult,
    AvailabilityStatus,
    NamesdaoApiClient,
    RegistrarInfo,
)
from namesdao_wallet.features.registration.memo import MemoCloakingService, cloak_memo
from namesdao_wallet.features.registration.service import (
    RegistrationMode,
    RegistrationReceipt,
    RegistrationService,
)
from namesdao_wallet.features.registration.validators import NameValidator

__all__ = [
    "AvailabilityResult",
    "AvailabilityStatus",
    "MemoCloakingService",
    "NameValidator",
    "NamesdaoApiClient",
    "RegistrarInfo",
    "RegistrationMode",
    "RegistrationReceipt",
    "RegistrationService",
    "cloak_memo",
]
