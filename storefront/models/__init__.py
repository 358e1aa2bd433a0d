# Storefront Models

from .cart import (
    CamelModel,
    ItemKey,
    SimpleProductInput,
    ComboInput,
    ComboComponent,
    SimpleLineItem,
    ComboLineItem,
    ProductInput,
    LineItem,
    ItemAdded,
    AddResult,
    AddToCartRequest,
    UpdateCartItemRequest,
    ApplyCouponRequest,
)
from .coupon import Coupon, DiscountType
from .pricing import ShippingRule, ShippingMethod, PricingResult
from .wishlist import WishlistItem, WishlistOutcome

__all__ = [
    "CamelModel",
    "ItemKey",
    "SimpleProductInput",
    "ComboInput",
    "ComboComponent",
    "SimpleLineItem",
    "ComboLineItem",
    "ProductInput",
    "LineItem",
    "ItemAdded",
    "AddResult",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "ApplyCouponRequest",
    "Coupon",
    "DiscountType",
    "ShippingRule",
    "ShippingMethod",
    "PricingResult",
    "WishlistItem",
    "WishlistOutcome",
]
