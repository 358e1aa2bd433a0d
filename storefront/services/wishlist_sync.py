"""
Wishlist Synchronization

Keeps a local copy of the user's remote wishlist. Adds and removes are
applied locally first and confirmed remotely afterwards; a failed remote
call restores the captured previous state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.auth import UserAuth, usable_auth
from ..core.exceptions import AuthenticationRequired, ValidationError
from ..models.wishlist import WishlistItem, WishlistOutcome
from .optimistic import optimistic_mutation
from .wishlist_client import WishlistClient

logger = logging.getLogger(__name__)


class WishlistSync:
    """
    Local wishlist state mirrored to the remote collection.

    Operations on the same product code are serialized with a per-code lock.
    Signing in, signing out and clearing start a new epoch; failures of
    calls issued in an earlier epoch do not touch the current state.
    """

    def __init__(
        self,
        client: WishlistClient,
        auth: Optional[UserAuth] = None,
        rollback_failed_add: bool = True,
    ):
        self.client = client
        self.auth = auth
        self.rollback_failed_add = rollback_failed_add
        self.loaded = False
        self._items: dict[str, WishlistItem] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._in_flight: set[str] = set()
        self._epoch = 0

    # ==================== Session ====================

    def sign_in(self, auth: UserAuth) -> None:
        """Switch to a user; local state is reset until the next refresh"""
        self.auth = auth
        self._reset()
        logger.info(f"Wishlist bound to user {auth.user_id}")

    def sign_out(self) -> None:
        self.auth = None
        self._reset()

    def _reset(self) -> None:
        self._items = {}
        self.loaded = False
        self._epoch += 1

    def _require_auth(self) -> UserAuth:
        auth = usable_auth(self.auth)
        if auth is None:
            raise AuthenticationRequired("Please log in to manage your wishlist")
        return auth

    @asynccontextmanager
    async def _key_lock(self, code: str):
        """Serialize operations on one product code; idle locks are dropped"""
        lock = self._locks.get(code)
        if lock is None:
            lock = self._locks[code] = asyncio.Lock()
        self._lock_users[code] = self._lock_users.get(code, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[code] -= 1
            if not self._lock_users[code]:
                del self._lock_users[code]
                del self._locks[code]

    # ==================== Queries ====================

    @property
    def items(self) -> list[WishlistItem]:
        return list(self._items.values())

    @property
    def total_items(self) -> int:
        return len(self._items)

    def is_in_wishlist(self, product_code: Any) -> bool:
        if product_code is None or product_code == "":
            return False
        return str(product_code) in self._items

    def get_item(self, product_code: Any) -> Optional[WishlistItem]:
        return self._items.get(str(product_code))

    # ==================== Remote state ====================

    async def refresh(self) -> list[WishlistItem]:
        """
        Replace local state with the remote collection.

        Codes with an operation in flight keep their local state.
        """
        auth = self._require_auth()
        epoch = self._epoch
        remote_items = await self.client.fetch_all(auth)
        if epoch != self._epoch:
            logger.info("Ignoring wishlist fetched before a session change")
            return self.items

        merged = {item.product_code: item for item in remote_items}
        for code in self._in_flight:
            if code in self._items:
                merged[code] = self._items[code]
            else:
                merged.pop(code, None)

        self._items = merged
        self.loaded = True
        return self.items

    async def clear_wishlist(self) -> int:
        """Remove every saved item remotely, then locally"""
        auth = self._require_auth()
        await self.client.clear(auth)
        count = len(self._items)
        self._items = {}
        self._epoch += 1
        logger.info(f"Cleared {count} wishlist items for user {auth.user_id}")
        return count

    # ==================== Mutations ====================

    @staticmethod
    def _snapshot(product: Union[WishlistItem, Mapping[str, Any]]) -> WishlistItem:
        if isinstance(product, WishlistItem):
            return product
        try:
            return WishlistItem.from_product(product)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid wishlist product: {e.errors()[0]['msg']}") from e

    async def add_to_wishlist(
        self,
        product: Union[WishlistItem, Mapping[str, Any]],
    ) -> WishlistOutcome:
        """Save a product snapshot; a second add of the same code is a no-op"""
        auth = self._require_auth()
        snapshot = self._snapshot(product)
        code = snapshot.product_code

        async with self._key_lock(code):
            if code in self._items:
                return WishlistOutcome.ALREADY_PRESENT

            epoch = self._epoch

            def apply():
                self._items[code] = snapshot

                def inverse():
                    self._items.pop(code, None)

                return inverse

            self._in_flight.add(code)
            try:
                await optimistic_mutation(
                    apply,
                    lambda: self.client.add(auth, code, snapshot),
                    is_current=lambda: epoch == self._epoch,
                    rollback=self.rollback_failed_add,
                )
            except Exception as e:
                logger.error(f"Failed to add {code} to wishlist: {e}")
                raise
            finally:
                self._in_flight.discard(code)

        logger.info(f"Added {code} to wishlist of user {auth.user_id}")
        return WishlistOutcome.ADDED

    async def remove_from_wishlist(self, product_code: Any) -> WishlistOutcome:
        """Delete a saved product, restoring the exact snapshot on failure"""
        auth = self._require_auth()
        code = str(product_code)

        async with self._key_lock(code):
            if code not in self._items:
                logger.warning(f"Product {code} not found in local wishlist")
                await self.client.remove(auth, code)
                return WishlistOutcome.NOT_PRESENT

            epoch = self._epoch

            def apply():
                position = list(self._items).index(code)
                previous = self._items.pop(code)

                def inverse():
                    entries = list(self._items.items())
                    entries.insert(min(position, len(entries)), (code, previous))
                    self._items = dict(entries)

                return inverse

            self._in_flight.add(code)
            try:
                await optimistic_mutation(
                    apply,
                    lambda: self.client.remove(auth, code),
                    is_current=lambda: epoch == self._epoch,
                )
            except Exception as e:
                logger.error(f"Failed to remove {code} from wishlist: {e}")
                raise
            finally:
                self._in_flight.discard(code)

        logger.info(f"Removed {code} from wishlist of user {auth.user_id}")
        return WishlistOutcome.REMOVED

    async def toggle_wishlist(
        self,
        product: Union[WishlistItem, Mapping[str, Any]],
    ) -> WishlistOutcome:
        if isinstance(product, WishlistItem):
            code = product.product_code
        else:
            code = product.get("productCode") or product.get("product_code")

        if self.is_in_wishlist(code):
            return await self.remove_from_wishlist(code)
        return await self.add_to_wishlist(product)
