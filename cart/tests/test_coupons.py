from decimal import Decimal

import pytest
from cart.coupons import discount_for, resolve


@pytest.mark.parametrize("code", ["WELCOME15", "welcome15", "  Welcome15 "])
def test_resolve_is_case_insensitive(code):
    coupon = resolve(code)
    assert coupon is not None
    assert coupon.code == "WELCOME15"


@pytest.mark.parametrize("code", ["", None, "FREESTUFF", "WELCOME"])
def test_unknown_codes_do_not_resolve(code):
    assert resolve(code) is None


def test_percentage_discount():
    assert discount_for(Decimal("80.00"), resolve("WELCOME15")) == Decimal("12.00")
    assert discount_for(Decimal("80.00"), resolve("CONTRACTOR10")) == Decimal("8.00")


def test_fixed_discount_is_clamped_to_subtotal():
    assert discount_for(Decimal("15.00"), resolve("BUILD20")) == Decimal("15.00")
    assert discount_for(Decimal("50.00"), resolve("BUILD20")) == Decimal("20.00")


def test_percentage_discount_rounds_to_cents():
    assert discount_for(Decimal("33.33"), resolve("WELCOME15")) == Decimal("5.00")
