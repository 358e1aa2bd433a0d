"""Shared route dependencies"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from ..core.exceptions import (
    AuthenticationRequired,
    CouponNotFound,
    PersistenceError,
    RemoteSyncError,
    StorefrontError,
    ValidationError,
)
from ..core.session import SessionManager, StorefrontSession


def get_session_manager(request: Request) -> SessionManager:
    """Session manager created in the app lifespan"""
    return request.app.state.session_manager


def get_current_session(
    x_session_id: Optional[str] = Header(None),
    manager: SessionManager = Depends(get_session_manager),
) -> StorefrontSession:
    """Resolve the shopper session from the X-Session-Id header"""
    if not x_session_id:
        raise HTTPException(status_code=400, detail="X-Session-Id header is required")

    session = manager.get_session(x_session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    session.touch()
    return session


def to_http_error(error: StorefrontError) -> HTTPException:
    """Map a storefront error onto an HTTP status"""
    if isinstance(error, AuthenticationRequired):
        return HTTPException(status_code=401, detail=str(error))
    if isinstance(error, CouponNotFound):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, ValidationError):
        return HTTPException(status_code=400, detail=error.reason)
    if isinstance(error, RemoteSyncError):
        status_code = 503 if error.is_network else 502
        return HTTPException(status_code=status_code, detail=str(error))
    if isinstance(error, PersistenceError):
        return HTTPException(status_code=500, detail=str(error))
    return HTTPException(status_code=500, detail="Unexpected storefront error")
