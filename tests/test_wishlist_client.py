import httpx
import jwt
import pytest

from conftest import WISHLIST_URL, make_wishlist_product, saved

from storefront.core.auth import UserAuth
from storefront.core.exceptions import AuthenticationRequired, RemoteSyncError
from storefront.models.wishlist import WishlistItem
from storefront.services.wishlist_client import WishlistClient


@pytest.mark.anyio
async def test_fetch_all_sends_credentials(wishlist_client, wishlist_server, auth):
    saved(wishlist_server, "PR-0001")
    wishlist_server.items["PR-0001"]["addedToWishlistAt"] = "2024-05-01T10:00:00Z"

    items = await wishlist_client.fetch_all(auth)

    request = wishlist_server.requests[0]
    assert request.headers["Authorization"] == "Bearer good-token"
    assert request.headers["X-User-Id"] == "user-1"
    assert items[0].product_code == "PR-0001"
    assert items[0].added_at.year == 2024


@pytest.mark.anyio
async def test_remove_passes_product_id(wishlist_client, wishlist_server, auth):
    saved(wishlist_server, "PR 7/8")
    await wishlist_client.remove(auth, "PR 7/8")

    assert wishlist_server.requests[0].url.params["productId"] == "PR 7/8"
    assert wishlist_server.items == {}


@pytest.mark.anyio
async def test_server_error(wishlist_client, wishlist_server, auth):
    wishlist_server.failures["GET"] = 500

    with pytest.raises(RemoteSyncError) as exc:
        await wishlist_client.fetch_all(auth)

    assert exc.value.kind == RemoteSyncError.SERVER
    assert exc.value.status_code == 500


@pytest.mark.anyio
async def test_network_error(wishlist_client, wishlist_server, auth):
    wishlist_server.failures["POST"] = "network"
    snapshot = WishlistItem.from_product(make_wishlist_product())

    with pytest.raises(RemoteSyncError) as exc:
        await wishlist_client.add(auth, "PR-0001", snapshot)

    assert exc.value.is_network
    assert exc.value.status_code is None


@pytest.mark.anyio
async def test_unauthorized(wishlist_client):
    with pytest.raises(AuthenticationRequired):
        await wishlist_client.clear(UserAuth(user_id="user-1", access_token="revoked"))


@pytest.mark.anyio
async def test_unreadable_response():
    client = WishlistClient(
        WISHLIST_URL,
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
    )
    with pytest.raises(RemoteSyncError):
        await client.fetch_all(UserAuth(user_id="user-1", access_token="t"))
    await client.close()


def test_snapshot_from_product():
    item = WishlistItem.from_product(make_wishlist_product())
    assert item.image == "https://img.test/PR-0001-1.jpg"
    assert item.in_stock

    item = WishlistItem.from_product(make_wishlist_product(image="https://img.test/main.jpg", stock=0))
    assert item.image == "https://img.test/main.jpg"
    assert not item.in_stock


def test_snapshot_payload_uses_wire_names():
    data = WishlistItem.from_product(make_wishlist_product()).product_data()
    assert data["productCode"] == "PR-0001"
    assert "addedToWishlistAt" not in data


def test_token_expiry():
    token = jwt.encode({"sub": "u", "exp": 2_000}, "k", algorithm="HS256")
    auth = UserAuth(user_id="u", access_token=token)
    assert auth.expires_at() == 2_000
    assert auth.is_expired(now=2_000)
    assert not auth.is_expired(now=1_999)
    assert not UserAuth(user_id="u", access_token="opaque").is_expired()
