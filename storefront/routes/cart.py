"""Cart API routes"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..core.config import Settings, get_settings
from ..core.exceptions import CouponNotFound, ValidationError
from ..core.session import StorefrontSession
from ..models.cart import (
    AddToCartRequest,
    ApplyCouponRequest,
    ItemKey,
    LineItem,
    UpdateCartItemRequest,
)
from ..models.coupon import Coupon
from ..models.pricing import PricingResult
from ..services import pricing
from .deps import get_current_session, to_http_error

router = APIRouter(prefix="/api/cart", tags=["Cart"])


class CartResponse(BaseModel):
    """Cart API response"""
    items: list[LineItem]
    total_items: int
    total_price: float
    coupon: Optional[Coupon] = None
    pricing: PricingResult
    display_total: str
    message: Optional[str] = None


def build_cart_response(
    session: StorefrontSession,
    settings: Settings,
    shipping_method: Optional[str] = None,
    message: Optional[str] = None,
) -> CartResponse:
    """Price the session's cart and wrap it for the API"""
    try:
        rule = (
            pricing.shipping_rule_for_method(shipping_method)
            if shipping_method
            else settings.shipping_rule()
        )
    except ValidationError as e:
        raise to_http_error(e)

    cart = session.cart
    coupon = session.coupons.current
    result = pricing.quote(cart.items, coupon, rule)
    return CartResponse(
        items=cart.items,
        total_items=cart.total_items,
        total_price=cart.total_price,
        coupon=coupon,
        pricing=result,
        display_total=pricing.format_price(pricing.display_total(result.grand_total)),
        message=message,
    )


def _item_key(kind: str, code: str, size: Optional[str]) -> ItemKey:
    if kind == "combo":
        return ItemKey.for_combo(code)
    return ItemKey.for_product(code, size)


@router.get("", response_model=CartResponse)
async def get_cart(
    shipping_method: Optional[str] = Query(None),
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Get the cart with its pricing"""
    return build_cart_response(session, settings, shipping_method)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Add a product or combo to the cart"""
    result = session.cart.add_item(request.item, request.quantity)
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.reason)

    prefix = f"{request.quantity} × " if request.quantity > 1 else ""
    return build_cart_response(
        session,
        settings,
        message=f"Added {prefix}{result.item.name} to cart",
    )


@router.put("/items/{kind}/{code}", response_model=CartResponse)
async def update_cart_item(
    kind: Literal["simple", "combo"],
    code: str,
    request: UpdateCartItemRequest,
    size: Optional[str] = Query(None),
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Update item quantity in cart"""
    item = session.cart.update_quantity(_item_key(kind, code, size), request.quantity)
    if not item:
        raise HTTPException(status_code=404, detail="Item not in cart")
    return build_cart_response(session, settings, message="Cart updated")


@router.delete("/items/{kind}/{code}", response_model=CartResponse)
async def remove_from_cart(
    kind: Literal["simple", "combo"],
    code: str,
    size: Optional[str] = Query(None),
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Remove an item from the cart"""
    removed = session.cart.remove_item(_item_key(kind, code, size))
    message = "Item removed" if removed else "Item not in cart"
    return build_cart_response(session, settings, message=message)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Clear all items from cart"""
    session.cart.clear()
    return build_cart_response(session, settings, message="Cart cleared")


@router.post("/coupon", response_model=CartResponse)
async def apply_coupon(
    request: ApplyCouponRequest,
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Apply a coupon code; an invalid code keeps the current coupon"""
    try:
        coupon = session.coupons.apply(request.code)
    except CouponNotFound as e:
        raise to_http_error(e)
    return build_cart_response(session, settings, message=f"Coupon {coupon.code} applied")


@router.delete("/coupon", response_model=CartResponse)
async def remove_coupon(
    session: StorefrontSession = Depends(get_current_session),
    settings: Settings = Depends(get_settings),
):
    """Remove the applied coupon"""
    session.coupons.remove()
    return build_cart_response(session, settings, message="Coupon removed")
