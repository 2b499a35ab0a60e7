from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from src.integrations.contracts.interfaces import Product, ProductStatus
from src.storefront.cart import Cart, CartError
from src.storefront.wishlist import MAX_WISHLIST_ITEMS, Wishlist, WishlistError


class TickingClock:
    """Each call is one minute later than the previous one."""

    def __init__(self):
        self.now = datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def wishlist():
    return Wishlist("w1", clock=TickingClock())


def test_add_lists_newest_first_and_ignores_repeats(wishlist, catalogue):
    wishlist.add_item(catalogue.get_product("lipstick-001"), notes="  for mum  ")
    wishlist.add_item(catalogue.get_product("watch-001"))
    again = wishlist.add_item(catalogue.get_product("lipstick-001"), notes="changed")

    assert [i.product.id for i in wishlist.items] == ["watch-001", "lipstick-001"]
    assert again.notes == "for mum"
    assert wishlist.count == 2
    assert wishlist.total == 5465
    assert wishlist.contains("watch-001")
    assert not wishlist.contains("handbag-001")


def test_add_rejects_unavailable_and_invalid_products(wishlist, catalogue):
    with pytest.raises(WishlistError, match="not available"):
        wishlist.add_item(catalogue.get_product("perfume-001"))
    with pytest.raises(WishlistError, match="Invalid product data"):
        wishlist.add_item(Product(id="", name="", description="", price=1, category="Bag"))
    with pytest.raises(WishlistError, match="at most 500"):
        wishlist.add_item(catalogue.get_product("watch-001"), notes="x" * 501)
    assert wishlist.count == 0


def test_wishlist_is_capped(wishlist):
    for n in range(MAX_WISHLIST_ITEMS):
        wishlist.add_item(Product(id=f"p{n}", name=f"P{n}", description="d", price=1, category="Bag"))

    with pytest.raises(WishlistError, match="full"):
        wishlist.add_item(Product(id="extra", name="Extra", description="d", price=1, category="Bag"))
    # an item already saved is still accepted
    assert wishlist.add_item(Product(id="p0", name="P0", description="d", price=1, category="Bag")).product.id == "p0"


def test_remove_update_notes_and_clear(wishlist, catalogue):
    wishlist.add_item(catalogue.get_product("dress-001"))

    assert wishlist.update_notes("dress-001", " size S ").notes == "size S"
    with pytest.raises(KeyError):
        wishlist.update_notes("nope", "x")

    assert wishlist.remove_item("dress-001") is True
    assert wishlist.remove_item("dress-001") is False

    wishlist.add_item(catalogue.get_product("dress-001"))
    wishlist.clear()
    assert wishlist.items == []
    assert wishlist.total == 0


def test_filter_by_category_and_gender(wishlist, catalogue):
    for pid in ("heels-001", "loafer-001", "bracelet-001", "handbag-001"):
        wishlist.add_item(catalogue.get_product(pid))

    assert [i.product.id for i in wishlist.filter(category="shoes")] == ["loafer-001", "heels-001"]
    assert [i.product.id for i in wishlist.filter(gender="men")] == ["bracelet-001", "loafer-001"]
    assert [i.product.id for i in wishlist.filter(category="Shoes", gender="women")] == ["heels-001"]
    assert len(wishlist.filter()) == 4


def test_move_to_cart_removes_entry_only_when_cart_accepts(wishlist, catalogue):
    cart = Cart("c1")
    wishlist.add_item(catalogue.get_product("lipstick-001"))
    wishlist.add_item(catalogue.get_product("wallet-001"))

    wishlist.move_to_cart("lipstick-001", cart, quantity=2)
    assert [i.product.id for i in cart.items] == ["lipstick-001"]
    assert cart.item_count == 2
    assert not wishlist.contains("lipstick-001")

    with pytest.raises(CartError):
        wishlist.move_to_cart("wallet-001", cart, quantity=11)
    assert wishlist.contains("wallet-001")

    with pytest.raises(KeyError):
        wishlist.move_to_cart("lipstick-001", cart)


def test_validate_flags_products_no_longer_available(wishlist, catalogue):
    assert wishlist.validate().is_valid
    item = wishlist.add_item(catalogue.get_product("pants-001"))
    wishlist.add_item(catalogue.get_product("shirt-001"))
    assert wishlist.validate().is_valid

    item.product = replace(item.product, status=ProductStatus.INACTIVE)

    result = wishlist.validate()
    assert result.is_valid is False
    assert result.errors == ["Item 2: Product is no longer available"]


def test_to_dict_uses_camel_case(wishlist, catalogue):
    wishlist.add_item(catalogue.get_product("bracelet-001"), notes="gift")
    data = wishlist.to_dict()
    assert data["wishlistId"] == "w1"
    assert data["count"] == 1
    assert data["total"] == 890
    assert data["items"][0]["notes"] == "gift"
    assert data["items"][0]["addedAt"] == "2025-03-14T12:01:00+00:00"
    assert data["items"][0]["product"]["id"] == "bracelet-001"
