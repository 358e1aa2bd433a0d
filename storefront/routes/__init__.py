# API Routes

from .session import router as session_router
from .cart import router as cart_router
from .wishlist import router as wishlist_router

__all__ = ["session_router", "cart_router", "wishlist_router"]
