# Storage modules

from .storage import KeyValueStorage, MemoryStorage, FileStorage
from .carts import CartStore, parse_product_input
from .coupons import COUPONS, CouponResolver, CouponSession

__all__ = [
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    "CartStore",
    "parse_product_input",
    "COUPONS",
    "CouponResolver",
    "CouponSession",
]
