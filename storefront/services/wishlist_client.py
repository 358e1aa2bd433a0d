"""
Wishlist API Client

HTTP client for the remote wishlist collection. Every call carries the
user's bearer token; HTTP and transport failures are translated into the
storefront error taxonomy.
"""

import logging
from typing import Any, Optional

import httpx

from ..core.auth import UserAuth
from ..core.exceptions import AuthenticationRequired, RemoteSyncError
from ..models.wishlist import WishlistItem

logger = logging.getLogger(__name__)


class WishlistClient:
    """
    Client for the remote wishlist collection.

    Endpoints:
    - GET    /api/wishlist                   -> {"wishlist": [...]}
    - POST   /api/wishlist                   {productId, productData}
    - DELETE /api/wishlist?productId=<code>
    - DELETE /api/wishlist/clear
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize wishlist client.

        Args:
            base_url: Base URL of the wishlist API
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        auth: UserAuth,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make an authenticated request"""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            **auth.headers(),
        }

        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                headers=headers,
                json=json,
                params=params,
            )
        except httpx.TransportError as e:
            logger.error(f"No response for {method} {path}: {e}")
            raise RemoteSyncError(
                f"Network error: {e}",
                kind=RemoteSyncError.NETWORK,
            ) from e

        if response.status_code == 401:
            logger.warning(f"{method} {path} rejected the credential of user {auth.user_id}")
            raise AuthenticationRequired()

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise RemoteSyncError(
                f"Server error: {response.status_code}",
                kind=RemoteSyncError.SERVER,
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteSyncError(
                "Server returned an unreadable response",
                kind=RemoteSyncError.SERVER,
                status_code=response.status_code,
            ) from e

    async def fetch_all(self, auth: UserAuth) -> list[WishlistItem]:
        """Get every saved item of the user"""
        data = await self._request("GET", "/api/wishlist", auth)
        return [WishlistItem.model_validate(item) for item in data.get("wishlist") or []]

    async def add(self, auth: UserAuth, product_code: str, snapshot: WishlistItem) -> dict:
        """Save a product snapshot"""
        return await self._request(
            "POST",
            "/api/wishlist",
            auth,
            json={"productId": product_code, "productData": snapshot.product_data()},
        )

    async def remove(self, auth: UserAuth, product_code: str) -> dict:
        """Delete a saved product"""
        return await self._request(
            "DELETE",
            "/api/wishlist",
            auth,
            params={"productId": str(product_code)},
        )

    async def clear(self, auth: UserAuth) -> dict:
        """Delete every saved product of the user"""
        return await self._request("DELETE", "/api/wishlist/clear", auth)
