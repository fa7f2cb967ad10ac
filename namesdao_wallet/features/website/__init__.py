"""Website feature module for .xch.limo configuration.

This module provides the setup workflow for publishing a website record:
- Create a DID profile when the wallet has none
- Assign the name NFT to a DID profile
- Publish a CNAME record into the profile's DID metadata
"""

from namesdao_wallet.features.website.dns import (
    get_hostname_for_name,
    merge_name,
    normalize_hostname,
    parse_namesdao_string,
    serialize_namesdao,
    verify_name_configured,
)
from namesdao_wallet.features.website.identity import (
    did_from_did_id,
    did_to_did_id,
    owned_by_user,
)
from namesdao_wallet.features.website.service import (
    SetupSnapshot,
    WebsiteSetupSession,
)
from namesdao_wallet.features.website.state_machine import (
    SetupStep,
    initial_step,
    step_index,
    transition,
)

__all__ = [
    "SetupSnapshot",
    "SetupStep",
    "WebsiteSetupSession",
    "did_from_did_id",
    "did_to_did_id",
    "get_hostname_for_name",
    "initial_step",
    "merge_name",
    "normalize_hostname",
    "owned_by_user",
    "parse_namesdao_string",
    "serialize_namesdao",
    "step_index",
    "transition",
    "verify_name_configured",
]
