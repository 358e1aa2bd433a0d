"""Credential of the signed-in user"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import jwt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAuth:
    """User id plus the bearer token attached to remote calls"""
    user_id: str
    access_token: str

    def expires_at(self) -> Optional[float]:
        """
        Expiry of a JWT access token, read without verifying the signature.

        Opaque (non-JWT) tokens have no known expiry.
        """
        try:
            claims = jwt.decode(
                self.access_token,
                options={"verify_signature": False, "verify_exp": False},
            )
        except jwt.InvalidTokenError:
            return None

        exp = claims.get("exp")
        return float(exp) if isinstance(exp, (int, float)) else None

    def is_expired(self, now: Optional[float] = None) -> bool:
        exp = self.expires_at()
        if exp is None:
            return False
        return (now if now is not None else time.time()) >= exp

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "X-User-Id": self.user_id,
        }


def usable_auth(auth: Optional[UserAuth]) -> Optional[UserAuth]:
    """The credential if present and unexpired, otherwise None"""
    if auth is None or not auth.user_id or not auth.access_token:
        return None
    if auth.is_expired():
        logger.info(f"Access token for user {auth.user_id} has expired")
        return None
    return auth
