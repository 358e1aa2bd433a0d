"""Cart models"""

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@dataclass(frozen=True)
class ItemKey:
    """Identity of a line item within the cart"""
    kind: str
    code: str
    size: Optional[str] = None

    @classmethod
    def for_product(cls, product_code: str, size: Optional[str] = None) -> "ItemKey":
        return cls(kind="simple", code=product_code, size=size or None)

    @classmethod
    def for_combo(cls, combo_code: str) -> "ItemKey":
        return cls(kind="combo", code=combo_code)

    def __str__(self) -> str:
        if self.size:
            return f"{self.kind}:{self.code}:{self.size}"
        return f"{self.kind}:{self.code}"


class _PurchasableFields(CamelModel):
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    discount_percent: float = Field(default=0, ge=0, le=100)
    image: Optional[str] = None
    selected_size: Optional[str] = None


class SimpleProductInput(_PurchasableFields):
    """A single product, optionally in a selected size"""
    kind: Literal["simple"] = "simple"
    product_code: str = Field(min_length=1)
    category: Optional[str] = None
    subcategory: Optional[str] = None

    @property
    def key(self) -> ItemKey:
        return ItemKey.for_product(self.product_code, self.selected_size)

    @property
    def is_combo(self) -> bool:
        return False


class ComboComponent(CamelModel):
    """One product inside a combo bundle"""
    product_code: str = Field(min_length=1)
    name: str
    size: Optional[str] = None
    image: Optional[str] = None


class ComboInput(_PurchasableFields):
    """A bundle of products sold as one unit"""
    kind: Literal["combo"] = "combo"
    combo_code: str = Field(min_length=1)
    products: list[ComboComponent] = Field(min_length=1)
    original_price: Optional[float] = None
    save_amount: Optional[float] = None
    description: Optional[str] = None

    @property
    def key(self) -> ItemKey:
        return ItemKey.for_combo(self.combo_code)

    @property
    def is_combo(self) -> bool:
        return True


class SimpleLineItem(SimpleProductInput):
    """Simple product in the cart"""
    quantity: int = Field(default=1, ge=1)


class ComboLineItem(ComboInput):
    """Combo in the cart"""
    quantity: int = Field(default=1, ge=1)


ProductInput = Annotated[
    Union[SimpleProductInput, ComboInput],
    Field(discriminator="kind"),
]

LineItem = Annotated[
    Union[SimpleLineItem, ComboLineItem],
    Field(discriminator="kind"),
]


@dataclass
class ItemAdded:
    """Event emitted after an item is added to the cart"""
    item: Union[SimpleLineItem, ComboLineItem]
    quantity_delta: int


@dataclass
class AddResult:
    """Outcome of an add-to-cart call"""
    ok: bool
    item: Optional[Union[SimpleLineItem, ComboLineItem]] = None
    error: Optional[Any] = None

    @property
    def reason(self) -> Optional[str]:
        return str(self.error) if self.error else None


class AddToCartRequest(BaseModel):
    """Request to add an item to the cart"""
    item: dict[str, Any]
    quantity: int = 1


class UpdateCartItemRequest(BaseModel):
    """Request to update a cart item quantity"""
    quantity: int


class ApplyCouponRequest(BaseModel):
    """Request to apply a coupon code"""
    code: str
