"""Name validation utilities for .xch registration."""

import re

from namesdao_wallet.shared.validation import ValidationResult

NAME_PATTERN = re.compile(r"^(?:[a-z0-9]+|_[a-z0-9]+|___[a-z0-9]+)$")
MAX_NAME_LENGTH = 100
XCH_SUFFIX = re.compile(r"\.xch$", re.IGNORECASE)


class NameValidator:
    @classmethod
    def validate_name(cls, name: str | None) -> ValidationResult:
        normalized = (name or "").strip().lower()
        if not normalized:
            return ValidationResult(is_valid=False, error_message="Please enter a name")

        normalized = XCH_SUFFIX.sub("", normalized)

        if len(normalized) > MAX_NAME_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"Name must be at most {MAX_NAME_LENGTH} characters",
            )

        if not NAME_PATTERN.match(normalized):
            return ValidationResult(
                is_valid=False,
                error_message=(
                    "Name can only contain lowercase letters and numbers; "
                    "may begin with 1 or 3 underscores"
                ),
            )

        return ValidationResult(is_valid=True, normalized_value=normalized)

    @classmethod
    def is_valid_name(cls, name: str | None) -> bool:
        return cls.validate_name(name).is_valid
