"""Wishlist models"""

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import Field, field_validator

from .cart import CamelModel


class WishlistOutcome(str, Enum):
    """Result of a wishlist mutation"""
    ADDED = "added"
    ALREADY_PRESENT = "already_present"
    REMOVED = "removed"
    NOT_PRESENT = "not_present"


class WishlistItem(CamelModel):
    """
    Denormalized snapshot of a product saved to a wishlist.

    The snapshot is taken when the product is saved, so the entry stays
    displayable when the catalog product later changes.
    """
    product_code: str = Field(min_length=1)
    name: str = "Unknown Product"
    price: float = 0.0
    image: str = ""
    category: str = ""
    subcategory: str = ""
    stock: int = 0
    rating: float = 0.0
    discount: float = 0.0
    added_at: Optional[datetime] = Field(default=None, alias="addedToWishlistAt")

    @field_validator("product_code", mode="before")
    @classmethod
    def coerce_code(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("image", "category", "subcategory", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @classmethod
    def from_product(cls, product: Mapping[str, Any]) -> "WishlistItem":
        """Take a snapshot of the catalog fields of a product"""
        images = product.get("images") or []
        return cls(
            product_code=product.get("productCode") or product.get("product_code"),
            name=product.get("name") or "Unknown Product",
            price=product.get("price") or 0,
            image=product.get("image") or (images[0] if images else ""),
            category=product.get("category") or "",
            subcategory=product.get("subcategory") or "",
            stock=product.get("stock") or 0,
            rating=product.get("rating") or 0,
            discount=product.get("discount") or 0,
        )

    def product_data(self) -> dict[str, Any]:
        """Payload sent to the remote collection"""
        return self.model_dump(by_alias=True, exclude={"added_at"})
