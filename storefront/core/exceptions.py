"""Error taxonomy for the storefront cart core"""

from typing import Optional


class StorefrontError(Exception):
    """Base exception for storefront errors"""
    pass


class ValidationError(StorefrontError):
    """Invalid item input; the cart is left unchanged"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PersistenceError(StorefrontError):
    """Storage slot could not be read or written"""
    pass


class CouponNotFound(StorefrontError):
    """Coupon code is not in the coupon table"""

    def __init__(self, code: str):
        super().__init__(f"Invalid coupon code: {code}")
        self.code = code


class AuthenticationRequired(StorefrontError):
    """Operation needs a signed-in user"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class RemoteSyncError(StorefrontError):
    """
    Remote wishlist call failed.

    `kind` is "network" when no response was received and "server" when
    the server answered with an error status.
    """

    NETWORK = "network"
    SERVER = "server"

    def __init__(
        self,
        message: str,
        kind: str = SERVER,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    @property
    def is_network(self) -> bool:
        return self.kind == self.NETWORK
