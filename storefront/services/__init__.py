# Storefront services

from .optimistic import optimistic_mutation
from .wishlist_client import WishlistClient
from .wishlist_sync import WishlistSync

__all__ = ["optimistic_mutation", "WishlistClient", "WishlistSync"]
