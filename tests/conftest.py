import asyncio
import json
from typing import Optional

import httpx
import pytest

from storefront.core.auth import UserAuth
from storefront.core.config import Settings
from storefront.database.carts import CartStore
from storefront.database.coupons import CouponSession
from storefront.database.storage import MemoryStorage
from storefront.services.wishlist_client import WishlistClient
from storefront.services.wishlist_sync import WishlistSync

WISHLIST_URL = "http://wishlist.test"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        storage_dir=str(tmp_path / "storage"),
        free_shipping_threshold=2000,
        base_shipping_cost=5.99,
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cart(storage):
    store = CartStore(storage)
    store.load()
    return store


@pytest.fixture
def coupons():
    return CouponSession(MemoryStorage())


def make_product(code="PR-0001", price=500.0, **extra):
    product = {
        "productCode": code,
        "name": f"Product {code}",
        "price": price,
        "image": f"https://img.test/{code}.jpg",
    }
    product.update(extra)
    return product


def make_combo(code="CB-01", price=1500.0, **extra):
    combo = {
        "comboCode": code,
        "name": f"Combo {code}",
        "price": price,
        "isCombo": True,
        "selectedSize": "M",
        "products": [
            {"productCode": "PR-0001", "name": "Tee", "size": "M"},
            {"productCode": "PR-0002", "name": "Shirt", "size": "M"},
            {"productCode": "PR-0003", "name": "Polo", "size": "M"},
        ],
    }
    combo.update(extra)
    return combo


def make_wishlist_product(code="PR-0001", **extra):
    product = {
        "productCode": code,
        "name": f"Product {code}",
        "price": 1200,
        "images": [f"https://img.test/{code}-1.jpg", f"https://img.test/{code}-2.jpg"],
        "category": "men",
        "subcategory": "t-shirts",
        "stock": 7,
        "rating": 4.5,
        "discount": 10,
    }
    product.update(extra)
    return product


class FakeWishlistServer:
    """In-process stand-in for the remote wishlist API"""

    def __init__(self, token: str = "good-token"):
        self.token = token
        self.items: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []
        # method -> status code to answer with, or "network"
        self.failures: dict[str, object] = {}
        # method -> event the handler waits on before answering
        self.gates: dict[str, asyncio.Event] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method

        gate = self.gates.get(method)
        if gate is not None:
            await gate.wait()

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"error": "Authentication required"})

        failure = self.failures.get(method)
        if failure == "network":
            raise httpx.ConnectError("connection refused", request=request)
        if failure:
            return httpx.Response(failure, json={"error": "Server error"})

        path = request.url.path
        if method == "GET" and path == "/api/wishlist":
            return httpx.Response(200, json={"success": True, "wishlist": list(self.items.values())})
        if method == "POST" and path == "/api/wishlist":
            body = json.loads(request.content)
            self.items[body["productId"]] = {"id": body["productId"], **body["productData"]}
            return httpx.Response(200, json={"success": True})
        if method == "DELETE" and path == "/api/wishlist/clear":
            self.items.clear()
            return httpx.Response(200, json={"success": True})
        if method == "DELETE" and path == "/api/wishlist":
            self.items.pop(request.url.params["productId"], None)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, json={"error": "Not found"})

    def calls(self, method: str) -> int:
        return sum(1 for r in self.requests if r.method == method)


@pytest.fixture
def wishlist_server():
    return FakeWishlistServer()


@pytest.fixture
def wishlist_client(wishlist_server):
    return WishlistClient(WISHLIST_URL, transport=httpx.MockTransport(wishlist_server.handler))


@pytest.fixture
def auth(wishlist_server):
    return UserAuth(user_id="user-1", access_token=wishlist_server.token)


@pytest.fixture
def wishlist(wishlist_client, auth):
    return WishlistSync(wishlist_client, auth=auth)


def saved(server: FakeWishlistServer, code: str, name: Optional[str] = None) -> dict:
    """Seed an item directly on the fake server"""
    item = {
        "id": code,
        "productCode": code,
        "name": name or f"Product {code}",
        "price": 900,
        "image": f"https://img.test/{code}.jpg",
        "category": "women",
        "subcategory": "dresses",
        "stock": 3,
        "rating": 4,
        "discount": 0,
    }
    server.items[code] = item
    return item
