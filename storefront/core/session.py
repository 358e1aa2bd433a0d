"""Per-session ownership of the cart, coupon and wishlist state"""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..database.carts import CartStore
from ..database.coupons import CouponResolver, CouponSession
from ..database.storage import FileStorage, KeyValueStorage, MemoryStorage
from ..services.wishlist_client import WishlistClient
from ..services.wishlist_sync import WishlistSync
from .config import Settings

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StorefrontSession:
    """Stores owned by one shopper session"""
    session_id: str
    created_at: datetime
    updated_at: datetime
    cart: CartStore
    coupons: CouponSession
    wishlist: WishlistSync

    def touch(self) -> None:
        self.updated_at = _utcnow()


class SessionManager:
    """
    Creates, looks up and tears down shopper sessions.

    Each session gets a durable storage slot for its cart, a memory slot for
    its applied coupon, and its own wishlist state bound to a shared client.
    """

    def __init__(
        self,
        settings: Settings,
        wishlist_client: WishlistClient,
        durable_storage_factory: Optional[Callable[[str], KeyValueStorage]] = None,
        resolver: Optional[CouponResolver] = None,
    ):
        self.settings = settings
        self.wishlist_client = wishlist_client
        self.resolver = resolver or CouponResolver()
        self._durable_storage_factory = durable_storage_factory or self._file_storage
        self.sessions: dict[str, StorefrontSession] = {}

    def _file_storage(self, session_id: str) -> KeyValueStorage:
        return FileStorage(os.path.join(self.settings.storage_dir, session_id))

    def create_session(self, session_id: Optional[str] = None) -> StorefrontSession:
        """Create a session, loading any cart persisted under its id"""
        session_id = session_id or str(uuid.uuid4())
        cart = CartStore(
            self._durable_storage_factory(session_id),
            key=self.settings.cart_storage_key,
        )
        cart.load()

        now = _utcnow()
        session = StorefrontSession(
            session_id=session_id,
            created_at=now,
            updated_at=now,
            cart=cart,
            coupons=CouponSession(
                MemoryStorage(),
                resolver=self.resolver,
                key=self.settings.coupon_storage_key,
            ),
            wishlist=WishlistSync(
                self.wishlist_client,
                rollback_failed_add=self.settings.rollback_failed_wishlist_add,
            ),
        )
        self.sessions[session_id] = session
        logger.info(f"Created session {session_id} with {cart.total_items} cart items")
        return session

    def get_session(self, session_id: str) -> Optional[StorefrontSession]:
        return self.sessions.get(session_id)

    def get_or_create_session(self, session_id: Optional[str] = None) -> StorefrontSession:
        if session_id and session_id in self.sessions:
            return self.sessions[session_id]
        return self.create_session(session_id)

    def close_session(self, session_id: str) -> bool:
        """Drop a session; its durable cart slot is kept"""
        session = self.sessions.pop(session_id, None)
        if not session:
            return False

        session.coupons.remove()
        session.wishlist.sign_out()
        logger.info(f"Closed session {session_id}")
        return True
