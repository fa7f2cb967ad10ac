"""Input validation utilities for addresses and other user inputs."""

from dataclasses import dataclass
from typing import Any

from namesdao_wallet.shared.bech32m import decode_puzzle_hash

ADDRESS_PREFIXES = ("xch", "txch")
PUZZLE_HASH_BYTES = 32


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


def remove_hex_prefix(value: str) -> str:
    if value.startswith(("0x", "0X")):
        return value[2:]
    return value


class AddressValidator:
    @staticmethod
    def validate(
        address: str | None, allowed_prefixes: tuple[str, ...] = ADDRESS_PREFIXES
    ) -> ValidationResult:
        if not address or not address.strip():
            return ValidationResult(
                is_valid=False, error_message="Address is required"
            )

        normalized = address.strip()
        try:
            prefix, puzzle_hash = decode_puzzle_hash(normalized)
        except ValueError:
            return ValidationResult(
                is_valid=False, error_message="Invalid address checksum or encoding"
            )

        if prefix not in allowed_prefixes:
            return ValidationResult(
                is_valid=False,
                error_message=f"Invalid address prefix: {prefix}",
            )

        if len(puzzle_hash) != PUZZLE_HASH_BYTES:
            return ValidationResult(
                is_valid=False, error_message="Invalid address length"
            )

        return ValidationResult(is_valid=True, normalized_value=normalized.lower())

    @classmethod
    def is_valid(cls, address: str | None) -> bool:
        return cls.validate(address).is_valid
