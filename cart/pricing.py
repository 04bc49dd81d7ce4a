"""Cart pricing.

Totals are re-derived from line items and a discount on every call. Each
aggregate is rounded half away from zero to cents on its own; line totals
arrive already rounded and are summed as they are.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

TAX_RATE = Decimal("0.0825")
FREE_SHIPPING_THRESHOLD = Decimal("75.00")
FLAT_SHIPPING_RATE = Decimal("12.99")

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round2(value) -> Decimal:
    """Round to two decimal places, half away from zero."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return round2(quantity * unit_price)


def shipping_for(subtotal: Decimal) -> Decimal:
    if subtotal == 0 or subtotal >= FREE_SHIPPING_THRESHOLD:
        return ZERO
    return FLAT_SHIPPING_RATE


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    total: Decimal = ZERO
    item_count: int = 0


def compute_totals(items: Iterable, discount: Decimal = ZERO) -> Totals:
    """Price a list of line items.

    ``items`` need ``line_total`` and ``quantity`` attributes. Inputs are
    assumed valid (quantities >= 1, prices finite and non-negative, discount
    non-negative); the cart store rejects anything else before it gets here.
    """
    items = list(items)
    subtotal = round2(sum((item.line_total for item in items), ZERO))
    tax = round2(subtotal * TAX_RATE)
    shipping = round2(shipping_for(subtotal))
    total = round2(subtotal + tax + shipping - discount)
    return Totals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=total,
        item_count=sum(item.quantity for item in items),
    )
