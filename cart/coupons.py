"""Static coupon table and discount rule."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from common.choices import CouponKind

from .pricing import round2


@dataclass(frozen=True)
class Coupon:
    code: str
    kind: str
    value: Decimal


COUPONS = {
    coupon.code: coupon
    for coupon in (
        Coupon("WELCOME15", CouponKind.PERCENTAGE, Decimal("15")),
        Coupon("BUILD20", CouponKind.FIXED, Decimal("20.00")),
        Coupon("CONTRACTOR10", CouponKind.PERCENTAGE, Decimal("10")),
    )
}


def normalize_code(code) -> str:
    return str(code or "").strip().upper()


def resolve(code) -> Optional[Coupon]:
    """Look a code up case-insensitively; None when it is not a known coupon."""
    return COUPONS.get(normalize_code(code))


def discount_for(subtotal: Decimal, coupon: Coupon) -> Decimal:
    """Discount the coupon grants on ``subtotal``, never more than the subtotal."""
    if coupon.kind == CouponKind.PERCENTAGE:
        amount = subtotal * coupon.value / Decimal("100")
    else:
        amount = coupon.value
    return round2(min(subtotal, amount))
