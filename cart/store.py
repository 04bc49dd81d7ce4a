"""Session cart: line items, coupon and derived totals.

A ``CartStore`` is built per request around a key/value storage (the visitor's
session in views, memory in tests) and a notifier. Every mutation re-prices the
cart, writes the snapshot back under ``CART_STORAGE_KEY`` and returns the new
``Cart``. Invalid input is rejected with an error notification and leaves the
cart unchanged.

Snapshot layout (JSON string)::

    {"items": [{"id", "productId", "variantId", "name", "sku", "vendorId",
                "price", "quantity", "total"}],
     "couponCode", "discount", "subtotal", "tax", "shipping", "total", "itemCount"}

Money is written as two-decimal strings. On load only the item inputs and the
coupon code are trusted; everything else is re-derived.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional, Tuple

from common.notifications import Notifier
from common.storage import KeyValueStorage

from .coupons import discount_for, resolve
from .pricing import ZERO, compute_totals, line_total

CART_STORAGE_KEY = "buildmart_cart"

logger = logging.getLogger("buildmart.cart")


class CartError(Exception):
    """Raised when a cart snapshot or input cannot be used."""


def _new_item_id() -> str:
    return f"ci-{uuid.uuid4().hex[:12]}"


def _money(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except ArithmeticError as exc:
        raise CartError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise CartError(f"Invalid amount: {value!r}")
    return amount


def _quantity(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise CartError(f"Invalid quantity: {value!r}")
    return value


@dataclass(frozen=True)
class LineItem:
    id: str
    product_id: int
    variant_id: Optional[int]
    name: str
    sku: str
    vendor_ref: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return line_total(self.quantity, self.unit_price)

    @property
    def key(self) -> Tuple[int, Optional[int]]:
        return (self.product_id, self.variant_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "variantId": self.variant_id,
            "name": self.name,
            "sku": self.sku,
            "vendorId": self.vendor_ref,
            "price": str(self.unit_price),
            "quantity": self.quantity,
            "total": str(self.line_total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        return cls(
            id=str(data["id"]),
            product_id=data["productId"],
            variant_id=data.get("variantId"),
            name=data.get("name", ""),
            sku=data.get("sku", ""),
            vendor_ref=data.get("vendorId") or "",
            unit_price=_money(data["price"]),
            quantity=_quantity(data["quantity"]),
        )


@dataclass(frozen=True)
class Cart:
    items: Tuple[LineItem, ...] = ()
    coupon_code: Optional[str] = None
    discount: Decimal = ZERO
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    shipping: Decimal = ZERO
    total: Decimal = ZERO
    item_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, item_id: str) -> Optional[LineItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "couponCode": self.coupon_code,
            "discount": str(self.discount),
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "shipping": str(self.shipping),
            "total": str(self.total),
            "itemCount": self.item_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        items = [LineItem.from_dict(raw) for raw in data.get("items") or []]
        return price_cart(items, data.get("couponCode"))


EMPTY_CART = Cart()


def price_cart(items, coupon_code: Optional[str] = None) -> Cart:
    """Build a priced cart from line items and an optional coupon code.

    The discount is derived from the coupon against the current subtotal, so it
    never exceeds the subtotal. A code that no longer resolves is dropped.
    """
    items = tuple(items)
    coupon = resolve(coupon_code) if coupon_code else None
    discount = discount_for(compute_totals(items).subtotal, coupon) if coupon else ZERO
    totals = compute_totals(items, discount)
    return Cart(
        items=items,
        coupon_code=coupon.code if coupon else None,
        discount=discount,
        subtotal=totals.subtotal,
        tax=totals.tax,
        shipping=totals.shipping,
        total=totals.total,
        item_count=totals.item_count,
    )


class CartStore:
    """Per-visitor cart bound to a storage backend and a notifier."""

    def __init__(self, storage: KeyValueStorage, notifier: Optional[Notifier] = None):
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.is_open = False
        self.cart = self._restore()

    # Drawer visibility; never persisted.
    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def reload(self) -> Cart:
        """Re-read the snapshot, picking up writes made through another store."""
        self.cart = self._restore()
        return self.cart

    def add_item(self, product, quantity: int = 1, variant=None) -> Cart:
        """Add ``quantity`` of a product (and optional variant) to the cart.

        A line for the same product/variant pair gets its quantity increased
        and keeps its original price snapshot. Otherwise a new line is created,
        priced from the variant when it carries a price and from the product
        when it does not.
        """
        try:
            quantity = _quantity(quantity)
        except CartError:
            self.notifier.error("Quantity must be at least 1")
            return self.cart

        variant_id = variant.id if variant is not None else None
        existing = next((item for item in self.cart.items if item.key == (product.id, variant_id)), None)
        if existing is not None:
            updated = replace(existing, quantity=existing.quantity + quantity)
            items = [updated if item.id == existing.id else item for item in self.cart.items]
        else:
            price = variant.price if variant is not None and variant.price is not None else product.price
            try:
                unit_price = _money(price)
            except CartError:
                self.notifier.error(f"{product.name} is not available for purchase")
                return self.cart
            items = list(self.cart.items) + [
                LineItem(
                    id=_new_item_id(),
                    product_id=product.id,
                    variant_id=variant_id,
                    name=product.name,
                    sku=variant.sku if variant is not None else getattr(product, "sku", ""),
                    vendor_ref=getattr(product, "vendor_ref", "") or "",
                    unit_price=unit_price,
                    quantity=quantity,
                )
            ]

        self._commit(
            price_cart(items, self.cart.coupon_code),
            "cart.item_added",
            product_id=product.id,
            variant_id=variant_id,
            quantity=quantity,
        )
        self.notifier.success(f"Added {product.name} to cart")
        return self.cart

    def update_quantity(self, item_id: str, quantity: int) -> Cart:
        """Set a line's quantity; values below 1 are rejected, not treated as removal."""
        try:
            quantity = _quantity(quantity)
        except CartError:
            self.notifier.error("Quantity must be at least 1")
            return self.cart
        if self.cart.get_item(item_id) is None:
            return self.cart
        items = [replace(item, quantity=quantity) if item.id == item_id else item for item in self.cart.items]
        self._commit(price_cart(items, self.cart.coupon_code), "cart.item_updated", item_id=item_id, quantity=quantity)
        return self.cart

    def remove_item(self, item_id: str) -> Cart:
        if self.cart.get_item(item_id) is None:
            return self.cart
        items = [item for item in self.cart.items if item.id != item_id]
        self._commit(price_cart(items, self.cart.coupon_code), "cart.item_removed", item_id=item_id)
        self.notifier.info("Item removed from cart")
        return self.cart

    def clear_cart(self) -> Cart:
        self.cart = EMPTY_CART
        self.storage.remove(CART_STORAGE_KEY)
        logger.info("cart.cleared", extra={"event": "cart.cleared"})
        self.notifier.info("Cart cleared")
        return self.cart

    def apply_coupon(self, code: str) -> Cart:
        coupon = resolve(code)
        if coupon is None:
            logger.info("cart.coupon_rejected", extra={"event": "cart.coupon_rejected", "code": str(code)[:32]})
            self.notifier.error("Invalid coupon code")
            return self.cart
        self._commit(price_cart(self.cart.items, coupon.code), "cart.coupon_applied", code=coupon.code)
        self.notifier.success(f"Coupon applied: {coupon.code}")
        return self.cart

    def remove_coupon(self) -> Cart:
        self._commit(price_cart(self.cart.items, None), "cart.coupon_removed")
        self.notifier.info("Coupon removed")
        return self.cart

    def _commit(self, cart: Cart, event: str, **fields) -> None:
        self.cart = cart
        self.storage.set(CART_STORAGE_KEY, json.dumps(cart.to_dict()))
        logger.info(
            event,
            extra={"event": event, "item_count": cart.item_count, "total": str(cart.total), **fields},
        )

    def _restore(self) -> Cart:
        raw = self.storage.get(CART_STORAGE_KEY)
        if not raw:
            return EMPTY_CART
        try:
            return Cart.from_dict(json.loads(raw))
        except (CartError, KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning(
                "cart.snapshot_discarded",
                extra={"event": "cart.snapshot_discarded", "error": str(exc)},
            )
            self.storage.remove(CART_STORAGE_KEY)
            return EMPTY_CART
