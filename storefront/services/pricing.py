"""
Pricing Engine

Pure functions from cart lines, an optional coupon and a shipping rule to
the order totals. Amounts are plain floats and are never rounded here;
rounding and clamping happen in `format_price` / `display_total` when a
value is shown.
"""

from typing import Iterable, Optional

from ..core.exceptions import ValidationError
from ..models.cart import ComboLineItem, SimpleLineItem
from ..models.coupon import Coupon, DiscountType
from ..models.pricing import PricingResult, ShippingMethod, ShippingRule

# Checkout delivery options
SHIPPING_METHODS: dict[str, ShippingMethod] = {
    "dhaka": ShippingMethod(
        id="dhaka",
        name="Inside Dhaka",
        price=50,
        delivery_time="1-2 business days",
        areas=["Dhaka City"],
    ),
    "suburban": ShippingMethod(
        id="suburban",
        name="Dhaka Sub-Urban",
        price=80,
        delivery_time="1-2 business days",
        areas=["Savar", "Keraniganj", "Dohar", "Tongi", "Gazipur", "Narayanganj"],
    ),
    "outside_dhaka": ShippingMethod(
        id="outside_dhaka",
        name="Outside Dhaka",
        price=120,
        delivery_time="2-3 business days",
        areas=["All other districts"],
    ),
}


def discounted_unit_price(price: float, discount_percent: Optional[float] = None) -> float:
    """Unit price after the item's own percentage discount, never negative"""
    discounted = price * (1 - (discount_percent or 0) / 100)
    return max(0.0, discounted)


def line_total(item) -> float:
    if isinstance(item, (SimpleLineItem, ComboLineItem)):
        return discounted_unit_price(item.price, item.discount_percent) * item.quantity
    raise TypeError(f"Not a cart line: {type(item).__name__}")


def subtotal(items: Iterable) -> float:
    return sum((line_total(item) for item in items), 0.0)


def product_discount(items: Iterable) -> float:
    """Total saved through per-item discounts"""
    return sum(
        (item.price * item.quantity - line_total(item) for item in items),
        0.0,
    )


def is_shipping_waiver(coupon: Optional[Coupon], base_shipping_cost: float) -> bool:
    """
    A fixed coupon worth exactly the base shipping cost waives shipping
    instead of discounting the items.
    """
    return (
        coupon is not None
        and coupon.discount_type == DiscountType.FIXED
        and coupon.discount_value == base_shipping_cost
    )


def coupon_discount(
    subtotal_amount: float,
    coupon: Optional[Coupon],
    base_shipping_cost: float,
) -> float:
    if coupon is None:
        return 0.0
    if coupon.discount_type == DiscountType.PERCENTAGE:
        return subtotal_amount * coupon.discount_value
    if coupon.discount_type == DiscountType.FIXED:
        if is_shipping_waiver(coupon, base_shipping_cost):
            return 0.0
        return coupon.discount_value
    raise ValueError(f"Unknown discount type: {coupon.discount_type}")


def shipping_cost(
    subtotal_amount: float,
    free_shipping_threshold: Optional[float],
    base_shipping_cost: float,
    coupon: Optional[Coupon] = None,
) -> float:
    if free_shipping_threshold is not None and subtotal_amount >= free_shipping_threshold:
        return 0.0
    if is_shipping_waiver(coupon, base_shipping_cost):
        return 0.0
    return base_shipping_cost


def grand_total(subtotal_amount: float, discount: float, shipping: float) -> float:
    return subtotal_amount - discount + shipping


def quote(
    items: Iterable,
    coupon: Optional[Coupon],
    rule: ShippingRule,
) -> PricingResult:
    """Compute every pricing line for a cart"""
    items = list(items)
    sub = subtotal(items)
    discount = coupon_discount(sub, coupon, rule.base_shipping_cost)
    shipping = shipping_cost(sub, rule.free_shipping_threshold, rule.base_shipping_cost, coupon)

    remaining = None
    if rule.free_shipping_threshold is not None:
        remaining = max(0.0, rule.free_shipping_threshold - sub)

    return PricingResult(
        subtotal=sub,
        product_discount=product_discount(items),
        coupon_discount=discount,
        shipping_cost=shipping,
        grand_total=grand_total(sub, discount, shipping),
        total_items=sum(item.quantity for item in items),
        shipping_waived=shipping == 0 and rule.base_shipping_cost > 0,
        amount_to_free_shipping=remaining,
    )


def shipping_rule_for_method(method_id: str) -> ShippingRule:
    """Flat-rate rule for a checkout shipping method"""
    method = SHIPPING_METHODS.get(method_id)
    if not method:
        raise ValidationError(f"Unknown shipping method: {method_id}")
    return method.to_rule()


def display_total(amount: float) -> float:
    """Total as shown to the user, never below zero"""
    return max(0.0, amount)


def format_price(amount: float) -> str:
    """Whole amounts without decimals, anything else with two"""
    rounded = round(amount, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}"
