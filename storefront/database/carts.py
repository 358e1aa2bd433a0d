"""Persistent cart store and cart mutation API"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import PersistenceError, ValidationError
from ..models.cart import (
    AddResult,
    ComboInput,
    ComboLineItem,
    ItemAdded,
    ItemKey,
    LineItem,
    ProductInput,
    SimpleLineItem,
    SimpleProductInput,
)
from ..services.pricing import subtotal
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

CartLine = Union[SimpleLineItem, ComboLineItem]
ItemAddedListener = Callable[[ItemAdded], None]

_items_adapter = TypeAdapter(list[LineItem])
_input_adapter = TypeAdapter(ProductInput)


def _describe(error: PydanticValidationError) -> str:
    """Human-readable summary of a pydantic validation failure"""
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"] if loc not in ("simple", "combo"))
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def parse_product_input(data: Any) -> Union[SimpleProductInput, ComboInput]:
    """
    Validate add-to-cart input.

    Accepts a product/combo model or a mapping. Mappings without a `kind`
    are tagged from their `isCombo` flag.
    """
    if isinstance(data, (SimpleProductInput, ComboInput)):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError("Item must be a product or combo")

    payload = dict(data)
    if "kind" not in payload:
        payload["kind"] = "combo" if payload.get("isCombo") or payload.get("is_combo") else "simple"
    try:
        return _input_adapter.validate_python(payload)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _merge_duplicates(items: list[CartLine]) -> list[CartLine]:
    """Fold lines sharing an identity key into the first one, summing quantities"""
    merged: dict[ItemKey, CartLine] = {}
    for item in items:
        existing = merged.get(item.key)
        if existing:
            logger.warning(f"Merging duplicate cart line {item.key}")
            existing.quantity += item.quantity
        else:
            merged[item.key] = item
    return list(merged.values())


class CartStore:
    """
    Canonical in-memory cart plus its durable storage slot.

    The in-memory items are authoritative for the session; the storage slot
    is rewritten after every mutation and read once by `load()`.
    """

    def __init__(self, storage: KeyValueStorage, key: str = "cart"):
        self.storage = storage
        self.key = key
        self._items: list[CartLine] = []
        self._listeners: list[ItemAddedListener] = []
        self.last_added: Optional[ItemAdded] = None
        self.ready = False

    # ==================== Persistence ====================

    def load(self) -> None:
        """Read the persisted cart; any failure leaves an empty cart"""
        self._items = []
        try:
            raw = self.storage.get(self.key)
            if raw:
                self._items = _merge_duplicates(_items_adapter.validate_json(raw))
                logger.info(f"Loaded {len(self._items)} cart items from slot {self.key}")
        except PersistenceError as e:
            logger.error(f"Failed to load cart from storage: {e}")
        except (PydanticValidationError, ValueError) as e:
            logger.warning(f"Discarding unreadable cart in slot {self.key}: {e}")
        finally:
            self.ready = True

    def save(self) -> bool:
        """Write the current cart; failures are logged and not fatal"""
        try:
            payload = _items_adapter.dump_json(self._items, by_alias=True).decode()
            self.storage.set(self.key, payload)
            return True
        except PersistenceError as e:
            logger.error(f"Failed to save cart to storage: {e}")
            return False

    # ==================== Queries ====================

    @property
    def items(self) -> list[CartLine]:
        return list(self._items)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def total_price(self) -> float:
        return subtotal(self._items)

    def get_item(self, key: ItemKey) -> Optional[CartLine]:
        return next((item for item in self._items if item.key == key), None)

    def subscribe(self, listener: ItemAddedListener) -> Callable[[], None]:
        """Register an item-added listener; returns an unsubscribe callable"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== Mutations ====================

    def add_item(self, data: Any, quantity: int = 1) -> AddResult:
        """Add a product or combo, merging with an existing line of the same key"""
        try:
            product = parse_product_input(data)
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
                raise ValidationError("quantity: must be a whole number of at least 1")
        except ValidationError as e:
            logger.warning(f"Rejected add to cart: {e.reason}")
            return AddResult(ok=False, error=e)

        existing = self.get_item(product.key)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            fields = product.model_dump()
            if isinstance(product, ComboInput):
                item = ComboLineItem(**fields, quantity=quantity)
            else:
                item = SimpleLineItem(**fields, quantity=quantity)
            self._items.append(item)

        self.save()
        self._emit(ItemAdded(item=item.model_copy(), quantity_delta=quantity))
        logger.info(f"Added {quantity}x {item.name} ({item.key}) to cart")
        return AddResult(ok=True, item=item)

    def update_quantity(self, key: ItemKey, quantity: int) -> Optional[CartLine]:
        """Set a line quantity, never below 1; returns None when the key is absent"""
        item = self.get_item(key)
        if not item:
            return None

        item.quantity = max(1, int(quantity))
        self.save()
        return item

    def remove_item(self, key: ItemKey) -> bool:
        """Remove a line; returns whether anything was removed"""
        remaining = [item for item in self._items if item.key != key]
        if len(remaining) == len(self._items):
            return False

        self._items = remaining
        self.save()
        return True

    def clear(self) -> None:
        """Empty the cart"""
        self._items = []
        self.last_added = None
        self.save()

    def _emit(self, event: ItemAdded) -> None:
        self.last_added = event
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Item-added listener failed")
