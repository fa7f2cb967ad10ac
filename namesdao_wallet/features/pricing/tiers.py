"""Price tier resolution for candidate .xch names."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from namesdao_wallet.shared.errors import InvalidResponseShape

MIN_TIER_NAME_LENGTH = 4
MIN_YEARS = 1
MAX_YEARS = 100

TIER_3_UNDERSCORES = "3u4"
TIER_1_UNDERSCORE = "1u4"
TIER_4_CHARS = "0u4"
TIER_5_CHARS = "0u5"
TIER_6_CHARS = "0u6"
TIER_7_PLUS_CHARS = "0u7"

NAME_TYPE_LABELS = {
    TIER_4_CHARS: "4 characters",
    TIER_5_CHARS: "5 characters",
    TIER_6_CHARS: "6 characters",
    TIER_7_PLUS_CHARS: "7+ characters",
    TIER_1_UNDERSCORE: "1 underscore (1u), 4+ characters",
    TIER_3_UNDERSCORES: "3 underscores (3u), 4+ characters",
}

_LEADING_UNDERSCORES = re.compile(r"^_+")
_XCH_SUFFIX = re.compile(r"\.xch$", re.IGNORECASE)
_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class PriceTier:
    name_type: str
    label: str
    name_price: Decimal
    xch_price: Decimal
    sbx_price: Decimal | None = None
    air_price: Decimal | None = None
    is_fallback: bool = False

    def price_for(self, asset: str) -> Decimal | None:
        return {
            "XCH": self.xch_price,
            "NAME": self.name_price,
            "SBX": self.sbx_price,
            "AIR": self.air_price,
        }.get(asset.upper())

    def to_dict(self) -> dict[str, Any]:
        return {
            "name_type": self.name_type,
            "label": self.label,
            "name_price": str(self.name_price),
            "xch_price": str(self.xch_price),
            "sbx_price": None if self.sbx_price is None else str(self.sbx_price),
            "air_price": None if self.air_price is None else str(self.air_price),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PriceTier":
        def optional(value: Any) -> Decimal | None:
            return None if value is None else Decimal(str(value))

        return cls(
            name_type=data["name_type"],
            label=data.get("label") or NAME_TYPE_LABELS.get(data["name_type"], data["name_type"]),
            name_price=Decimal(str(data["name_price"])),
            xch_price=Decimal(str(data["xch_price"])),
            sbx_price=optional(data.get("sbx_price")),
            air_price=optional(data.get("air_price")),
        )

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "PriceTier":
        """Build a tier from a ``/v1/get_pricing_tiers`` entry."""
        if not isinstance(item, dict) or not item.get("nameType"):
            raise InvalidResponseShape("Invalid price data from API")

        name_type = str(item["nameType"])
        fees = item.get("fees") or {}
        try:
            prices = {
                key: Decimal(str(fees.get(key) if fees.get(key) is not None else 0))
                for key in ("XCH", "NAME", "SBX", "AIR")
            }
        except (InvalidOperation, ValueError) as e:
            raise InvalidResponseShape(f"Invalid price for tier {name_type}") from e

        return cls(
            name_type=name_type,
            label=NAME_TYPE_LABELS.get(name_type, name_type),
            name_price=prices["NAME"],
            xch_price=prices["XCH"],
            sbx_price=prices["SBX"],
            air_price=prices["AIR"],
        )


def _fallback(name_type: str, name: str, xch: str, sbx: str = "0", air: str = "0") -> PriceTier:
    return PriceTier(
        name_type=name_type,
        label=NAME_TYPE_LABELS[name_type],
        name_price=Decimal(name),
        xch_price=Decimal(xch),
        sbx_price=Decimal(sbx),
        air_price=Decimal(air),
        is_fallback=True,
    )


FALLBACK_TIERS: tuple[PriceTier, ...] = (
    _fallback(TIER_4_CHARS, "20", "0.6"),
    _fallback(TIER_5_CHARS, "5", "0.15"),
    _fallback(TIER_6_CHARS, "2", "0.06"),
    _fallback(TIER_7_PLUS_CHARS, "1", "0.03"),
    _fallback(TIER_1_UNDERSCORE, "0.5", "0.018"),
    _fallback(TIER_3_UNDERSCORES, "0", "0.000000000001"),
)


def are_fallback_prices(tiers: list[PriceTier] | tuple[PriceTier, ...] | None) -> bool:
    return bool(tiers) and all(tier.is_fallback for tier in tiers)


def normalize_base_name(name: str | None) -> str:
    return _XCH_SUFFIX.sub("", (name or "").lower().strip())


def count_leading_underscores(name: str) -> int:
    match = _LEADING_UNDERSCORES.match(name)
    return len(match.group(0)) if match else 0


def qualifies_for_underscore_tier(name: str, minimum: int = 3) -> bool:
    base = normalize_base_name(name)
    return count_leading_underscores(base) >= minimum and len(base) >= MIN_TIER_NAME_LENGTH


def tier_type_for_name(name: str) -> str | None:
    base = normalize_base_name(name)
    if not base:
        return None

    # Tiers count every underscore; SBX/AIR eligibility counts only the prefix.
    # The name validator allows underscores only as a prefix, so both rules
    # agree for every registrable name.
    underscores = base.count("_")
    length = len(base)
    if underscores >= 3 and length >= MIN_TIER_NAME_LENGTH:
        return TIER_3_UNDERSCORES
    if underscores >= 1 and length >= MIN_TIER_NAME_LENGTH:
        return TIER_1_UNDERSCORE
    if length == 4:
        return TIER_4_CHARS
    if length == 5:
        return TIER_5_CHARS
    if length == 6:
        return TIER_6_CHARS
    if length >= 7:
        return TIER_7_PLUS_CHARS
    return None


def pick_tier_for_name(name: str, tiers: list[PriceTier] | tuple[PriceTier, ...]) -> PriceTier | None:
    """Return the tier pricing ``name``, or None when no tier applies.

    None means the price is unknown; callers must not treat it as free.
    """
    name_type = tier_type_for_name(name)
    if name_type is None:
        return None
    for tier in tiers:
        if tier.name_type == name_type:
            return tier
    return None


def clamp_years(value: str | int | None) -> int:
    match = _LEADING_INTEGER.match("" if value is None else str(value))
    years = int(match.group(1)) if match else MIN_YEARS
    if years < MIN_YEARS:
        # "0" behaves like an empty field
        return MIN_YEARS
    return min(MAX_YEARS, years)


def total_price(per_year: Decimal | None, years: str | int | None) -> Decimal | None:
    if per_year is None:
        return None
    return Decimal(per_year) * clamp_years(years)


def format_price(price: Decimal | None) -> str | None:
    if price is None:
        return None
    if price == 0:
        return "0"
    text = format(price, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
