"""Fee defaults and unit conversions between XCH, CAT amounts and mojos."""

import re
from decimal import Decimal, InvalidOperation

MOJO_PER_XCH = 1_000_000_000_000
MOJO_PER_CAT = 1_000

MIN_FEE_MOJO_STR = "1"
# 1 mojo expressed in XCH
MIN_FEE_XCH = "0.000000000001"

_ALL_ZERO = re.compile(r"^0+$")


def clamp_min_fee_mojo(mojos: str | int | None) -> str:
    value = "" if mojos is None else str(mojos).strip()
    if not value or _ALL_ZERO.match(value):
        return MIN_FEE_MOJO_STR
    return value


def _to_decimal(amount: Decimal | str | int | float) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    try:
        return Decimal(str(amount).strip() or "0")
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount}") from e


def xch_to_mojo(amount: Decimal | str | int | float) -> int:
    return int(_to_decimal(amount) * MOJO_PER_XCH)


def cat_to_mojo(amount: Decimal | str | int | float) -> int:
    return int(_to_decimal(amount) * MOJO_PER_CAT)


def fee_to_mojo(fee_xch: Decimal | str | int | float | None) -> int:
    """Convert a user fee in XCH to mojos, never below the 1 mojo minimum."""
    mojos = xch_to_mojo(fee_xch if fee_xch not in (None, "") else MIN_FEE_XCH)
    return max(1, int(clamp_min_fee_mojo(mojos)))
