"""DID identifier helpers and NFT ownership checks."""

from __future__ import annotations

from typing import Any

from namesdao_wallet.shared.bech32m import decode_puzzle_hash, encode_puzzle_hash
from namesdao_wallet.shared.validation import remove_hex_prefix

DID_PREFIX = "did:chia:"


def did_to_did_id(did_hex: str) -> str:
    return encode_puzzle_hash(bytes.fromhex(remove_hex_prefix(did_hex)), DID_PREFIX)


def did_from_did_id(did_id: str) -> str | None:
    try:
        prefix, data = decode_puzzle_hash(did_id)
    except ValueError:
        return None
    if prefix != DID_PREFIX:
        return None
    return data.hex()


def to_did_id(did: str | None) -> str | None:
    """Accept a DID as bech32m id or hex and return the bech32m id."""
    if not did:
        return None
    if did.startswith(DID_PREFIX):
        return did
    try:
        return did_to_did_id(did)
    except ValueError:
        return None


def wallet_did_id(wallet: dict[str, Any]) -> str | None:
    value = wallet.get("my_did") or wallet.get("mydid")
    return value if isinstance(value, str) and value else None


def _wallet_did_hexes(did_wallets: list[dict[str, Any]]) -> set[str]:
    hexes = set()
    for wallet in did_wallets:
        did_id = wallet_did_id(wallet)
        did_hex = did_from_did_id(did_id) if did_id else None
        if did_hex:
            hexes.add(did_hex.lower())
    return hexes


def owned_by_user(owner_did: str | None, did_wallets: list[dict[str, Any]] | None) -> bool:
    """True when ``owner_did`` (hex or ``did:chia:`` id) is one of the wallet's DIDs."""
    if not owner_did or not did_wallets:
        return False

    owner_id = to_did_id(owner_did)
    if owner_id and any(wallet_did_id(w) == owner_id for w in did_wallets):
        return True

    if owner_did.startswith(DID_PREFIX):
        owner_hex = did_from_did_id(owner_did)
    else:
        owner_hex = remove_hex_prefix(owner_did)
    if not owner_hex:
        return False
    return owner_hex.lower() in _wallet_did_hexes(did_wallets)


def find_did_wallet(did: str | None, did_wallets: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    did_id = to_did_id(did)
    if not did_id:
        return None
    return next((w for w in did_wallets or [] if wallet_did_id(w) == did_id), None)


def did_exists(did_id: str, did_wallets: list[dict[str, Any]] | None) -> bool:
    return any(wallet_did_id(w) == did_id for w in did_wallets or [])


def nft_assigned_to_did(owner_did: str | None, target_did_id: str | None) -> bool:
    if not owner_did or not target_did_id:
        return False
    return to_did_id(owner_did) == target_did_id
