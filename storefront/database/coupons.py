"""Static coupon table and the session's applied coupon"""

import logging
from typing import Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import CouponNotFound, PersistenceError
from ..models.coupon import Coupon, DiscountType
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

# Coupon table, fixed at build time
COUPONS: dict[str, Coupon] = {
    "WELCOME10": Coupon(
        code="WELCOME10",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=0.1,
        description="10% off your order",
    ),
    "FREESHIP": Coupon(
        code="FREESHIP",
        discount_type=DiscountType.FIXED,
        discount_value=5.99,
        description="Free standard shipping",
    ),
}


def normalize_code(raw: str) -> str:
    return (raw or "").strip().upper()


class CouponResolver:
    """Looks up user-entered codes in a coupon table"""

    def __init__(self, table: Optional[Mapping[str, Coupon]] = None):
        self.table = dict(COUPONS if table is None else table)

    def resolve(self, raw: str) -> Coupon:
        """Return the coupon for a code, or raise CouponNotFound"""
        code = normalize_code(raw)
        coupon = self.table.get(code)
        if not coupon:
            raise CouponNotFound(code)
        return coupon.model_copy()


class CouponSession:
    """At most one applied coupon, mirrored to a session-scoped slot"""

    def __init__(
        self,
        storage: KeyValueStorage,
        resolver: Optional[CouponResolver] = None,
        key: str = "appliedCoupon",
    ):
        self.storage = storage
        self.resolver = resolver or CouponResolver()
        self.key = key
        self.current: Optional[Coupon] = self._read()

    def _read(self) -> Optional[Coupon]:
        try:
            raw = self.storage.get(self.key)
        except PersistenceError as e:
            logger.error(f"Failed to read applied coupon: {e}")
            return None
        if not raw:
            return None

        try:
            return Coupon.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Discarding unreadable coupon slot: {e}")
            self._delete()
            return None

    def apply(self, raw: str) -> Coupon:
        """
        Resolve and apply a code.

        A failed lookup raises CouponNotFound and keeps any coupon that was
        already applied.
        """
        try:
            coupon = self.resolver.resolve(raw)
        except CouponNotFound:
            logger.info(f"Rejected coupon code {normalize_code(raw)!r}")
            raise

        self.current = coupon
        try:
            self.storage.set(self.key, coupon.model_dump_json(by_alias=True))
        except PersistenceError as e:
            logger.error(f"Failed to store applied coupon: {e}")
        logger.info(f"Applied coupon {coupon.code}")
        return coupon

    def remove(self) -> None:
        self.current = None
        self._delete()

    def _delete(self) -> None:
        try:
            self.storage.delete(self.key)
        except PersistenceError as e:
            logger.error(f"Failed to clear applied coupon: {e}")
