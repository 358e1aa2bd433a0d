"""Coupon models"""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .cart import CamelModel


class DiscountType(str, Enum):
    """How a coupon reduces the order"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class Coupon(CamelModel):
    """
    Resolved coupon descriptor.

    For percentage coupons `discount_value` is a fraction (0.1 is 10%);
    for fixed coupons it is a currency amount.
    """
    code: str = Field(min_length=1)
    discount_type: DiscountType
    discount_value: float = Field(ge=0)
    description: Optional[str] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()
