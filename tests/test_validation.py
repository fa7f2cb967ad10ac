from namesdao_wallet.shared.bech32m import encode_puzzle_hash
from namesdao_wallet.shared.validation import (
    AddressValidator,
    ValidationResult,
    remove_hex_prefix,
)


class TestValidationResult:
    def test_valid_result(self):
        result = ValidationResult(is_valid=True, normalized_value="xch1")
        assert result.is_valid is True
        assert result.error_message is None

    def test_invalid_result(self):
        result = ValidationResult(is_valid=False, error_message="Test error")
        assert result.is_valid is False
        assert result.normalized_value is None


class TestRemoveHexPrefix:
    def test_strips_prefix(self):
        assert remove_hex_prefix("0xabcd") == "abcd"
        assert remove_hex_prefix("0Xabcd") == "abcd"

    def test_leaves_plain_hex(self):
        assert remove_hex_prefix("abcd") == "abcd"


class TestAddressValidator:
    def test_valid_mainnet_address(self):
        address = encode_puzzle_hash(bytes(range(32)), "xch")
        result = AddressValidator.validate(address)
        assert result.is_valid is True
        assert result.normalized_value == address

    def test_valid_testnet_address(self):
        address = encode_puzzle_hash(bytes(32), "txch")
        assert AddressValidator.is_valid(address) is True

    def test_uppercase_is_normalized(self):
        address = encode_puzzle_hash(bytes(range(32)), "xch")
        result = AddressValidator.validate(address.upper())
        assert result.is_valid is True
        assert result.normalized_value == address

    def test_empty_address(self):
        result = AddressValidator.validate("   ")
        assert result.is_valid is False
        assert "required" in result.error_message

    def test_bad_checksum(self):
        address = encode_puzzle_hash(bytes(range(32)), "xch")
        tampered = address[:-1] + ("q" if address[-1] != "q" else "p")
        result = AddressValidator.validate(tampered)
        assert result.is_valid is False
        assert "checksum" in result.error_message

    def test_wrong_prefix(self):
        address = encode_puzzle_hash(bytes(32), "did:chia:")
        result = AddressValidator.validate(address)
        assert result.is_valid is False
        assert "prefix" in result.error_message

    def test_wrong_length(self):
        address = encode_puzzle_hash(bytes(20), "xch")
        result = AddressValidator.validate(address)
        assert result.is_valid is False
        assert "length" in result.error_message
