import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import WISHLIST_URL, make_combo, make_product, make_wishlist_product, saved

from storefront.database.storage import MemoryStorage
from storefront.main import create_app
from storefront.services.wishlist_client import WishlistClient


@pytest.fixture
def durable():
    """Durable slots shared across sessions, keyed by session id"""
    return {}


@pytest.fixture
def client(settings, wishlist_server, durable):
    wishlist_client = WishlistClient(
        WISHLIST_URL,
        transport=httpx.MockTransport(wishlist_server.handler),
    )
    app = create_app(
        settings=settings,
        wishlist_client=wishlist_client,
        durable_storage_factory=lambda sid: durable.setdefault(sid, MemoryStorage()),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_id(client):
    r = client.post("/api/session")
    assert r.status_code == 200
    return r.json()["session_id"]


def headers(session_id):
    return {"X-Session-Id": session_id}


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_new_session_has_ready_empty_cart(client, session_id):
    r = client.get(f"/api/session/{session_id}")
    data = r.json()
    assert data["cart_ready"] is True
    assert data["cart_items"] == 0
    assert data["signed_in"] is False


def test_cart_requires_session(client):
    assert client.get("/api/cart").status_code == 400
    assert client.get("/api/cart", headers=headers("missing")).status_code == 404


def test_add_and_price_cart(client, session_id):
    r = client.post(
        "/api/cart/items",
        json={"item": make_product(price=500), "quantity": 2},
        headers=headers(session_id),
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Added 2 × Product PR-0001 to cart"

    r = client.post("/api/cart/coupon", json={"code": " welcome10 "}, headers=headers(session_id))
    assert r.status_code == 200

    data = client.get("/api/cart", headers=headers(session_id)).json()
    assert data["items"][0]["productCode"] == "PR-0001"
    assert data["total_items"] == 2
    assert data["coupon"]["code"] == "WELCOME10"
    assert data["pricing"]["subtotal"] == 1000
    assert data["pricing"]["coupon_discount"] == pytest.approx(100)
    assert data["pricing"]["shipping_cost"] == 5.99
    assert data["pricing"]["grand_total"] == pytest.approx(905.99)
    assert data["display_total"] == "905.99"


def test_invalid_item_is_rejected(client, session_id):
    r = client.post(
        "/api/cart/items",
        json={"item": {"name": "No code", "price": 10}},
        headers=headers(session_id),
    )
    assert r.status_code == 400
    assert client.get("/api/cart", headers=headers(session_id)).json()["items"] == []


def test_update_remove_and_clear(client, session_id):
    client.post("/api/cart/items", json={"item": make_product(selectedSize="M")}, headers=headers(session_id))
    client.post("/api/cart/items", json={"item": make_combo()}, headers=headers(session_id))

    r = client.put(
        "/api/cart/items/simple/PR-0001?size=M",
        json={"quantity": 0},
        headers=headers(session_id),
    )
    assert r.status_code == 200
    assert r.json()["items"][0]["quantity"] == 1

    r = client.put("/api/cart/items/simple/PR-0001", json={"quantity": 3}, headers=headers(session_id))
    assert r.status_code == 404

    r = client.delete("/api/cart/items/combo/CB-01", headers=headers(session_id))
    assert [i["kind"] for i in r.json()["items"]] == ["simple"]

    r = client.delete("/api/cart", headers=headers(session_id))
    assert r.json()["items"] == []


def test_invalid_coupon_keeps_previous(client, session_id):
    client.post("/api/cart/coupon", json={"code": "FREESHIP"}, headers=headers(session_id))

    r = client.post("/api/cart/coupon", json={"code": "NOPE"}, headers=headers(session_id))
    assert r.status_code == 404

    data = client.get("/api/cart", headers=headers(session_id)).json()
    assert data["coupon"]["code"] == "FREESHIP"

    r = client.delete("/api/cart/coupon", headers=headers(session_id))
    assert r.json()["coupon"] is None


def test_checkout_shipping_method(client, session_id):
    client.post("/api/cart/items", json={"item": make_product(price=100)}, headers=headers(session_id))

    data = client.get("/api/cart?shipping_method=outside_dhaka", headers=headers(session_id)).json()
    assert data["pricing"]["shipping_cost"] == 120

    r = client.get("/api/cart?shipping_method=moon", headers=headers(session_id))
    assert r.status_code == 400


def test_resumed_session_reloads_cart(client, durable):
    sid = str(uuid.uuid4())
    client.post("/api/session", json={"session_id": sid})
    client.post("/api/cart/items", json={"item": make_product()}, headers=headers(sid))
    assert client.delete(f"/api/session/{sid}").status_code == 200

    r = client.post("/api/session", json={"session_id": sid})
    assert r.json()["cart_items"] == 1


def test_resume_rejects_malformed_id(client):
    r = client.post("/api/session", json={"session_id": "../etc"})
    assert r.status_code == 400


def test_wishlist_requires_sign_in(client, session_id):
    r = client.post("/api/wishlist", json=make_wishlist_product(), headers=headers(session_id))
    assert r.status_code == 401


def test_wishlist_flow(client, session_id, wishlist_server):
    saved(wishlist_server, "PR-0009")
    r = client.post(
        f"/api/session/{session_id}/auth",
        json={"user_id": "user-1", "access_token": wishlist_server.token},
    )
    assert r.json()["signed_in"] is True

    r = client.post("/api/wishlist/refresh", headers=headers(session_id))
    assert [i["productCode"] for i in r.json()["items"]] == ["PR-0009"]

    r = client.post("/api/wishlist", json=make_wishlist_product(), headers=headers(session_id))
    assert r.json()["outcome"] == "added"
    r = client.post("/api/wishlist", json=make_wishlist_product(), headers=headers(session_id))
    assert r.json()["outcome"] == "already_present"

    r = client.post("/api/wishlist/toggle", json=make_wishlist_product(), headers=headers(session_id))
    assert r.json()["outcome"] == "removed"

    wishlist_server.failures["DELETE"] = 500
    r = client.delete("/api/wishlist/PR-0009", headers=headers(session_id))
    assert r.status_code == 502
    items = client.get("/api/wishlist", headers=headers(session_id)).json()["items"]
    assert [i["productCode"] for i in items] == ["PR-0009"]

    wishlist_server.failures.clear()
    r = client.delete("/api/wishlist", headers=headers(session_id))
    assert r.json()["total_items"] == 0

    r = client.delete(f"/api/session/{session_id}/auth")
    assert r.json()["signed_in"] is False


def test_wishlist_network_failure_is_503(client, session_id, wishlist_server):
    client.post(
        f"/api/session/{session_id}/auth",
        json={"user_id": "user-1", "access_token": wishlist_server.token},
    )
    wishlist_server.failures["POST"] = "network"

    r = client.post("/api/wishlist", json=make_wishlist_product(), headers=headers(session_id))
    assert r.status_code == 503
