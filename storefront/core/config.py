"""Storefront configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.pricing import ShippingRule


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront Cart"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Storage slots
    storage_dir: str = ".storefront"
    cart_storage_key: str = "cart"
    coupon_storage_key: str = "appliedCoupon"

    # Pricing
    currency: str = "USD"
    free_shipping_threshold: Optional[float] = 2000.0
    base_shipping_cost: float = 5.99

    # Remote wishlist collection
    wishlist_api_url: str = "http://localhost:3000"
    wishlist_timeout: float = 8.0
    rollback_failed_wishlist_add: bool = True

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def shipping_rule(self) -> ShippingRule:
        """Default shipping rule for cart pricing"""
        return ShippingRule(
            free_shipping_threshold=self.free_shipping_threshold,
            base_shipping_cost=self.base_shipping_cost,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
