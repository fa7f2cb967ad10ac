from decimal import Decimal

import pytest

from namesdao_wallet.shared.fees import (
    MIN_FEE_MOJO_STR,
    cat_to_mojo,
    clamp_min_fee_mojo,
    fee_to_mojo,
    xch_to_mojo,
)


class TestClampMinFee:
    @pytest.mark.parametrize("value", [None, "", "  ", "0", "000", 0])
    def test_zero_or_empty_becomes_one_mojo(self, value):
        assert clamp_min_fee_mojo(value) == MIN_FEE_MOJO_STR

    def test_positive_value_is_kept(self):
        assert clamp_min_fee_mojo("250") == "250"
        assert clamp_min_fee_mojo(7) == "7"


class TestConversions:
    def test_xch_to_mojo(self):
        assert xch_to_mojo("0.6") == 600_000_000_000
        assert xch_to_mojo("0.000000000001") == 1
        assert xch_to_mojo(Decimal("1")) == 1_000_000_000_000

    def test_cat_to_mojo(self):
        assert cat_to_mojo("20") == 20_000
        assert cat_to_mojo("0.5") == 500

    def test_blank_amount_is_zero(self):
        assert xch_to_mojo("") == 0

    def test_invalid_amount(self):
        with pytest.raises(ValueError):
            xch_to_mojo("abc")


class TestFeeToMojo:
    def test_default_is_minimum(self):
        assert fee_to_mojo(None) == 1
        assert fee_to_mojo("") == 1

    def test_zero_is_clamped(self):
        assert fee_to_mojo("0") == 1

    def test_regular_fee(self):
        assert fee_to_mojo("0.00005") == 50_000_000

    @pytest.mark.parametrize("fee", ["-1", "-0.00005", Decimal("-0.000000000001")])
    def test_negative_fee_is_clamped(self, fee):
        assert fee_to_mojo(fee) == 1

    def test_sub_mojo_fee_is_clamped(self):
        assert fee_to_mojo("0.0000000000001") == 1
