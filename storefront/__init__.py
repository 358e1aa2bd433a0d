"""Storefront cart, pricing, coupon and wishlist core"""

__version__ = "1.0.0"
