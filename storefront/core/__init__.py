# Core modules

from .config import Settings, get_settings
from .exceptions import (
    StorefrontError,
    ValidationError,
    PersistenceError,
    CouponNotFound,
    AuthenticationRequired,
    RemoteSyncError,
)

__all__ = [
    "Settings",
    "get_settings",
    "StorefrontError",
    "ValidationError",
    "PersistenceError",
    "CouponNotFound",
    "AuthenticationRequired",
    "RemoteSyncError",
]
