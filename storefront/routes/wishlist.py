"""Wishlist API routes"""

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..core.exceptions import StorefrontError
from ..core.session import StorefrontSession
from ..models.wishlist import WishlistItem, WishlistOutcome
from .deps import get_current_session, to_http_error

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])


class WishlistResponse(BaseModel):
    """Wishlist API response"""
    items: list[WishlistItem]
    total_items: int
    loaded: bool
    outcome: Optional[WishlistOutcome] = None


def _response(session: StorefrontSession, outcome: Optional[WishlistOutcome] = None) -> WishlistResponse:
    wishlist = session.wishlist
    return WishlistResponse(
        items=wishlist.items,
        total_items=wishlist.total_items,
        loaded=wishlist.loaded,
        outcome=outcome,
    )


@router.get("", response_model=WishlistResponse)
async def get_wishlist(session: StorefrontSession = Depends(get_current_session)):
    """Current local wishlist, including unconfirmed changes"""
    return _response(session)


@router.post("/refresh", response_model=WishlistResponse)
async def refresh_wishlist(session: StorefrontSession = Depends(get_current_session)):
    """Reload the wishlist from the remote collection"""
    try:
        await session.wishlist.refresh()
    except StorefrontError as e:
        raise to_http_error(e)
    return _response(session)


@router.post("", response_model=WishlistResponse)
async def add_to_wishlist(
    product: dict[str, Any],
    session: StorefrontSession = Depends(get_current_session),
):
    """Save a product to the wishlist"""
    try:
        outcome = await session.wishlist.add_to_wishlist(product)
    except StorefrontError as e:
        raise to_http_error(e)
    return _response(session, outcome)


@router.post("/toggle", response_model=WishlistResponse)
async def toggle_wishlist(
    product: dict[str, Any],
    session: StorefrontSession = Depends(get_current_session),
):
    """Add the product if absent, remove it if present"""
    try:
        outcome = await session.wishlist.toggle_wishlist(product)
    except StorefrontError as e:
        raise to_http_error(e)
    return _response(session, outcome)


@router.delete("/{product_code}", response_model=WishlistResponse)
async def remove_from_wishlist(
    product_code: str,
    session: StorefrontSession = Depends(get_current_session),
):
    """Remove a product from the wishlist"""
    try:
        outcome = await session.wishlist.remove_from_wishlist(product_code)
    except StorefrontError as e:
        raise to_http_error(e)
    return _response(session, outcome)


@router.delete("", response_model=WishlistResponse)
async def clear_wishlist(session: StorefrontSession = Depends(get_current_session)):
    """Remove every product from the wishlist"""
    try:
        await session.wishlist.clear_wishlist()
    except StorefrontError as e:
        raise to_http_error(e)
    return _response(session)
