"""Pricing models"""

from typing import Optional

from pydantic import BaseModel, Field


class ShippingRule(BaseModel):
    """How shipping is charged; no threshold means shipping is never free"""
    free_shipping_threshold: Optional[float] = None
    base_shipping_cost: float = Field(ge=0)


class ShippingMethod(BaseModel):
    """Checkout delivery option"""
    id: str
    name: str
    price: float = Field(ge=0)
    delivery_time: str
    areas: list[str] = []

    def to_rule(self) -> ShippingRule:
        return ShippingRule(free_shipping_threshold=None, base_shipping_cost=self.price)


class PricingResult(BaseModel):
    """Raw pricing arithmetic; values are not rounded or clamped"""
    subtotal: float
    product_discount: float = 0.0
    coupon_discount: float = 0.0
    shipping_cost: float = 0.0
    grand_total: float
    total_items: int = 0
    shipping_waived: bool = False
    amount_to_free_shipping: Optional[float] = None
