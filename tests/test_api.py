from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from src.api import services
from src.api.main import app
from src.chatbot.session import create_dialogue_session
from src.chatbot.state_manager import StateManager
from src.database.redis import RedisCache
from src.integrations.clients.mocks.newsletter import MockNewsletterClient
from src.storefront.orders import OrderStore
from src.storefront.reviews import ReviewBoard

SHIPPING = {
    "first_name": "Asha",
    "last_name": "Rao",
    "address": "12 Marine Drive",
    "city": "Mumbai",
    "state": "MH",
    "zip_code": "400002",
    "email": "asha@example.com",
    "phone": "9876543210",
}
PAYMENT = {"card_number": "4111111111111111", "card_name": "Asha Rao", "expiry": "12/39", "cvv": "123"}


@pytest.fixture
def newsletter_client():
    return MockNewsletterClient(existing_emails=["vip@kolzo.in"])


@pytest.fixture
def client(monkeypatch, newsletter_client):
    monkeypatch.delenv("API_KEYS", raising=False)
    cache = RedisCache()
    orders = OrderStore()
    state_manager = StateManager(
        cache,
        lambda: create_dialogue_session(newsletter_client, typing_delay_seconds=0, order_store=orders),
    )
    shoppers = services.ShopperSessions()
    board = ReviewBoard()

    app.dependency_overrides[services.get_cache] = lambda: cache
    app.dependency_overrides[services.get_newsletter_client] = lambda: newsletter_client
    app.dependency_overrides[services.get_state_manager] = lambda: state_manager
    app.dependency_overrides[services.get_order_store] = lambda: orders
    app.dependency_overrides[services.get_shopper_sessions] = lambda: shoppers
    app.dependency_overrides[services.get_review_board] = lambda: board
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/").json()["status"] == "healthy"
    body = client.get("/health").json()
    assert body["cache"] == {"redis": True}


def test_list_products_envelope_and_sorting(client):
    r = client.get("/api/products", params={"gender": "women", "sort": "price", "direction": "desc", "limit": 3})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert [p["id"] for p in data["products"]] == ["handbag-001", "handbag-002", "dress-001"]
    assert data["page"] == 1
    assert data["hasNext"] is True


def test_list_products_filters_and_search(client):
    data = client.get("/api/products", params={"search": "leather", "min_price": 1000, "max_price": 3000}).json()["data"]
    assert {p["id"] for p in data["products"]} == {"handbag-002", "loafer-001"}

    r = client.get("/api/products", params={"min_price": 500, "max_price": 100})
    assert r.status_code == 422
    assert r.json() == {"success": False, "message": "min_price cannot exceed max_price"}

    assert client.get("/api/products", params={"sort": "colour"}).status_code == 422


def test_product_detail_related_and_aggregates(client):
    assert client.get("/api/products/watch-001").json()["data"]["price"] == 5400

    r = client.get("/api/products/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Product not found"}

    related = client.get("/api/products/handbag-001/related", params={"limit": 2}).json()["data"]
    assert [p["id"] for p in related][0] == "handbag-002"
    assert len(related) == 2

    featured = client.get("/api/products/featured").json()["data"]
    assert [p["id"] for p in featured] == ["handbag-001", "lipstick-001", "watch-001", "bracelet-001"]
    assert client.get("/api/categories", params={"gender": "men"}).json()["data"] == ["Pants", "Shirt", "Shoes", "Wallet", "Watch"]
    assert client.get("/api/brands").json()["data"] == ["Kolzo", "Maison Aurelle"]


def test_newsletter_subscribe_outcomes(client, newsletter_client):
    r = client.post("/api/newsletter/subscribe", json={"email": "jane@example.com", "source": "popup", "visitorId": "v1"})
    assert r.status_code == 201
    assert r.json()["isNewSubscription"] is True
    assert newsletter_client.calls[0].source == "popup"

    r = client.post("/api/newsletter/subscribe", json={"email": "vip@kolzo.in"})
    assert r.status_code == 409
    assert r.json()["isAlreadyRegistered"] is True

    r = client.post("/api/newsletter/subscribe", json={"email": "not-an-email", "source": "fax"})
    assert r.status_code == 422
    assert r.json()["success"] is False
    assert len(r.json()["errors"]) == 2
    assert len(newsletter_client.calls) == 2


def test_newsletter_failure_maps_to_502(client):
    app.dependency_overrides[services.get_newsletter_client] = lambda: MockNewsletterClient(fail_subscribe=True)
    r = client.post("/api/newsletter/subscribe", json={"email": "jane@example.com"})
    assert r.status_code == 502
    assert r.json()["success"] is False


def test_newsletter_unsubscribe(client):
    assert client.post("/api/newsletter/unsubscribe", json={"email": "vip@kolzo.in"}).status_code == 200
    r = client.post("/api/newsletter/unsubscribe", json={"email": "vip@kolzo.in"})
    assert r.status_code == 404
    assert r.json()["message"] == "Email not found in newsletter list"


def test_newsletter_prompt_policy_endpoints(client):
    params = {"visitorId": "v9", "trigger": "exit-intent"}
    assert client.get("/api/newsletter/prompt", params=params).json()["data"]["show"] is True

    r = client.post("/api/newsletter/prompt/shown", json={"visitorId": "v9", "trigger": "exit-intent"})
    assert r.json() == {"success": True}
    assert client.get("/api/newsletter/prompt", params=params).json()["data"]["show"] is False
    assert client.get("/api/newsletter/prompt", params={"visitorId": "other", "trigger": "exit-intent"}).json()["data"]["show"] is True

    client.post("/api/newsletter/subscribe", json={"email": "new@example.com", "visitorId": "v10"})
    assert client.get("/api/newsletter/prompt", params={"visitorId": "v10", "trigger": "scroll"}).json()["data"]["show"] is False

    r = client.get("/api/newsletter/prompt", params={"visitorId": "v9", "trigger": "hover"})
    assert r.status_code == 422
    assert r.json()["success"] is False


def test_chat_session_flow(client):
    created = client.post("/api/chat/session").json()
    sid = created["session_id"]
    assert len(created["messages"]) == 1
    assert created["messages"][0]["sender"] == "bot"

    turn = client.post(f"/api/chat/{sid}/action", json={"action": "select_gender", "value": "women"}).json()
    assert len(turn["messages"]) == 1
    assert turn["context"]["selected_gender"] == "women"

    client.post(f"/api/chat/{sid}/action", json={"action": "select_category", "value": "Dress"})
    turn = client.post(f"/api/chat/{sid}/action", json={"action": "redirect_to_collection"}).json()
    assert turn["messages"] == []
    assert turn["effects"] == [{"type": "navigate", "target": "/women/dress"}]

    turn = client.post(f"/api/chat/{sid}/message", json={"text": "hello?"}).json()
    assert [m["sender"] for m in turn["messages"]] == ["user", "bot"]

    state = client.get(f"/api/chat/{sid}").json()
    assert state["context"]["current_flow"] == "category_selected"
    assert len(state["messages"]) == 5

    hidden = client.post(f"/api/chat/{sid}/visibility", json={"visible": False}).json()
    assert hidden["visible"] is False

    assert client.delete(f"/api/chat/{sid}").json() == {"message": "Session ended successfully"}
    r = client.post(f"/api/chat/{sid}/action", json={"action": "faq"})
    assert r.status_code == 404
    assert r.json()["message"] == f"Unknown chat session: {sid}"


def test_chat_newsletter_subscription(client, newsletter_client):
    sid = client.post("/api/chat/session").json()["session_id"]
    client.post(f"/api/chat/{sid}/action", json={"action": "newsletter"})
    client.post(f"/api/chat/{sid}/action", json={"action": "newsletter_email"})

    turn = client.post(f"/api/chat/{sid}/message", json={"text": "chat@example.com"}).json()

    assert turn["messages"][-1]["text"].startswith("🎉")
    assert turn["context"]["user_email"] == "chat@example.com"
    assert "chat@example.com" in newsletter_client.subscribers


def test_chat_unknown_action_returns_422(client):
    sid = client.post("/api/chat/session").json()["session_id"]
    r = client.post(f"/api/chat/{sid}/action", json={"action": "teleport"})
    assert r.status_code == 422
    assert "action" in r.json()["field_errors"]


def test_cart_checkout_and_orders(client):
    assert client.post("/api/cart/c1/items", json={"productId": "nope"}).status_code == 404

    r = client.post("/api/cart/c1/items", json={"productId": "perfume-001"})
    assert r.status_code == 400
    assert r.json()["success"] is False

    cart = client.post("/api/cart/c1/items", json={"productId": "lipstick-001", "quantity": 2, "color": "Ruby"}).json()["data"]
    assert cart["itemCount"] == 2
    assert cart["shipping"] == 25
    cart = client.patch("/api/cart/c1/items/lipstick-001", json={"quantity": 4, "color": "Ruby"}).json()["data"]
    assert cart["subtotal"] == 260
    assert cart["shipping"] == 0
    assert client.get("/api/cart/c1/validate").json()["data"] == {"isValid": True, "errors": []}

    r = client.post("/api/checkout/c1/place-order")
    assert r.status_code == 422

    bad = client.post("/api/checkout/c1/step", json={"data": {"first_name": "Asha"}})
    assert bad.status_code == 422
    assert "email" in bad.json()["field_errors"]

    assert client.post("/api/checkout/c1/step", json={"data": SHIPPING}).json()["data"]["step"] == "payment"
    assert client.post("/api/checkout/c1/back").json()["data"]["step"] == "shipping"
    client.post("/api/checkout/c1/step", json={"data": SHIPPING})
    review = client.post("/api/checkout/c1/step", json={"data": PAYMENT}).json()["data"]
    assert review["step"] == "review"
    assert review["payment"]["last_four"] == "1111"

    r = client.post("/api/checkout/c1/place-order")
    assert r.status_code == 201
    order = r.json()["data"]
    assert order["orderNumber"].startswith("ORD-")
    assert order["total"] == 280.8
    assert client.get("/api/cart/c1").json()["data"]["items"] == []

    listed = client.get("/api/orders", params={"email": "ASHA@example.com"}).json()["data"]
    assert [o["id"] for o in listed] == [order["id"]]
    assert client.get(f"/api/orders/{order['orderNumber']}").json()["data"]["id"] == order["id"]
    assert client.get("/api/orders/ORD-0").status_code == 404

    shipped = client.patch(f"/api/orders/{order['id']}/status", json={"status": "shipped"}).json()["data"]
    assert shipped["status"] == "shipped"
    assert client.patch(f"/api/orders/{order['id']}/status", json={"status": "lost"}).status_code == 422
    assert client.patch("/api/orders/missing/status", json={"status": "shipped"}).status_code == 404

    # the completed wizard keeps showing the order until a new step is submitted
    placed = client.get("/api/checkout/c1").json()["data"]
    assert placed["step"] == "review"
    assert placed["order"]["orderNumber"] == order["orderNumber"]
    restarted = client.post("/api/checkout/c1/step", json={"data": SHIPPING}).json()["data"]
    assert restarted["step"] == "payment"
    assert restarted["order"] is None


def test_reviews_endpoints(client):
    r = client.post("/api/products/nope/reviews", json={"author": "A", "rating": 5, "title": "T", "body": "B"})
    assert r.status_code == 404

    r = client.post("/api/products/watch-001/reviews", json={"author": "A", "rating": 9, "title": "T", "body": "B"})
    assert r.status_code == 422
    assert "rating" in r.json()["field_errors"]

    created = client.post("/api/products/watch-001/reviews", json={"author": "A", "rating": 4, "title": "T", "body": "B"})
    assert created.status_code == 201
    review_id = created.json()["data"]["id"]

    assert client.post(f"/api/reviews/{review_id}/helpful").json()["data"]["helpful"] == 1
    assert client.post("/api/reviews/nope/helpful").status_code == 404

    data = client.get("/api/products/watch-001/reviews").json()["data"]
    assert data["summary"] == {"averageRating": 4.0, "totalReviews": 1}
    assert data["reviews"][0]["id"] == review_id


def test_api_key_protection_is_opt_in(client, monkeypatch):
    monkeypatch.setenv("API_KEYS", "k1, k2")

    r = client.get("/api/brands")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid or missing API Key"}
    assert client.get("/api/brands", headers={"X-API-KEY": "k2"}).status_code == 200
    assert client.get("/health").status_code == 200


def test_unhandled_errors_return_generic_payload(client):
    class BrokenCatalogue:
        def list_products(self, gender=None):
            raise RuntimeError("disk on fire")

    app.dependency_overrides[services.get_catalogue] = lambda: BrokenCatalogue()
    r = TestClient(app, raise_server_exceptions=False).get("/api/brands")

    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert body["metadata"]["error"] == "RuntimeError"
    assert body["metadata"]["context"] == {"path": "/api/brands", "method": "GET"}


def test_shopper_sessions_expire_idle_carts(catalogue, clock):
    shoppers = services.ShopperSessions(ttl_seconds=3600, clock=clock)
    shoppers.cart("old").add_item(catalogue.get_product("lipstick-001"))
    clock.now += timedelta(minutes=40)
    shoppers.checkout("recent")

    clock.now += timedelta(minutes=30)
    assert shoppers.cart("recent").items == []
    assert shoppers.shopper_ids() == ["recent"]

    # an expired cart id starts over with an empty cart
    assert shoppers.cart("old").items == []
    assert shoppers.expire_idle() == 0


def test_wishlist_endpoints(client):
    r = client.post("/api/wishlist/w1/items", json={"productId": "handbag-001", "notes": "anniversary"})
    assert r.status_code == 201
    assert r.json()["data"]["count"] == 1
    assert client.post("/api/wishlist/w1/items", json={"productId": "handbag-001"}).status_code == 200
    assert client.post("/api/wishlist/w1/items", json={"productId": "nope"}).status_code == 404
    unavailable = client.post("/api/wishlist/w1/items", json={"productId": "perfume-001"})
    assert unavailable.status_code == 400
    assert unavailable.json()["success"] is False

    client.post("/api/wishlist/w1/items", json={"productId": "watch-001"})
    assert client.get("/api/wishlist/w1/count").json()["data"] == {"count": 2}
    men = client.get("/api/wishlist/w1", params={"gender": "men"}).json()["data"]
    assert [i["product"]["id"] for i in men["items"]] == ["watch-001"]
    assert men["count"] == 2

    check = client.get("/api/wishlist/w1/items/handbag-001").json()["data"]
    assert check["isInWishlist"] is True
    assert check["item"]["notes"] == "anniversary"
    assert client.get("/api/wishlist/w1/items/dress-001").json()["data"] == {"isInWishlist": False, "item": None}

    updated = client.put("/api/wishlist/w1/items/handbag-001", json={"notes": "birthday"}).json()["data"]
    assert updated["notes"] == "birthday"
    assert client.put("/api/wishlist/w1/items/dress-001", json={"notes": "x"}).status_code == 404
    assert client.get("/api/wishlist/w1/validate").json()["data"] == {"isValid": True, "errors": []}

    moved = client.post("/api/wishlist/w1/items/handbag-001/move-to-cart", json={"cartId": "c9"}).json()["data"]
    assert moved["wishlist"]["count"] == 1
    assert client.get("/api/cart/c9").json()["data"]["itemCount"] == 1
    assert client.post("/api/wishlist/w1/items/handbag-001/move-to-cart").status_code == 404

    assert client.delete("/api/wishlist/w1/items/watch-001").json()["data"]["count"] == 0
    assert client.delete("/api/wishlist/w1/items/watch-001").status_code == 404
    client.post("/api/wishlist/w1/items", json={"productId": "watch-001"})
    assert client.delete("/api/wishlist/w1").json()["message"] == "Wishlist cleared"
    assert client.get("/api/wishlist/w1").json()["data"]["items"] == []
