"""Shopper session routes"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.auth import UserAuth
from ..core.session import SessionManager, StorefrontSession
from .deps import get_session_manager

router = APIRouter(prefix="/api/session", tags=["Session"])


class CreateSessionRequest(BaseModel):
    """Request to start or resume a session"""
    session_id: Optional[str] = None


class SignInRequest(BaseModel):
    """Credential issued by the authentication provider"""
    user_id: str
    access_token: str


class SessionResponse(BaseModel):
    """Session details"""
    session_id: str
    created_at: datetime
    updated_at: datetime
    cart_ready: bool
    cart_items: int
    coupon: Optional[str] = None
    signed_in: bool
    wishlist_items: int


def _describe(session: StorefrontSession) -> SessionResponse:
    coupon = session.coupons.current
    return SessionResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        updated_at=session.updated_at,
        cart_ready=session.cart.ready,
        cart_items=session.cart.total_items,
        coupon=coupon.code if coupon else None,
        signed_in=session.wishlist.auth is not None,
        wishlist_items=session.wishlist.total_items,
    )


def _require_session(manager: SessionManager, session_id: str) -> StorefrontSession:
    session = manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("", response_model=SessionResponse)
async def create_session(
    request: Optional[CreateSessionRequest] = None,
    manager: SessionManager = Depends(get_session_manager),
):
    """
    Start a session.

    Passing the id of an earlier session resumes it, reloading the cart
    persisted under that id.
    """
    session_id = request.session_id if request else None
    if session_id:
        try:
            session_id = str(uuid.UUID(session_id))
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid session id")

    session = manager.get_or_create_session(session_id)
    return _describe(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Get session details"""
    return _describe(_require_session(manager, session_id))


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """End a session"""
    if manager.close_session(session_id):
        return {"message": "Session closed"}
    raise HTTPException(status_code=404, detail="Session not found")


@router.post("/{session_id}/auth", response_model=SessionResponse)
async def sign_in(
    session_id: str,
    request: SignInRequest,
    manager: SessionManager = Depends(get_session_manager),
):
    """Attach the signed-in user's credential to the session"""
    session = _require_session(manager, session_id)
    session.wishlist.sign_in(UserAuth(user_id=request.user_id, access_token=request.access_token))
    session.touch()
    return _describe(session)


@router.delete("/{session_id}/auth", response_model=SessionResponse)
async def sign_out(
    session_id: str,
    manager: SessionManager = Depends(get_session_manager),
):
    """Forget the user's credential and wishlist"""
    session = _require_session(manager, session_id)
    session.wishlist.sign_out()
    session.touch()
    return _describe(session)
