from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from src.api.services import get_catalogue, get_shopper_sessions

api = APIRouter()
wishlist_api = api


class AddWishlistItemRequest(BaseModel):
    product_id: str = Field(alias="productId")
    notes: Optional[str] = None

    model_config = {"populate_by_name": True}


class NotesRequest(BaseModel):
    notes: str


class MoveToCartRequest(BaseModel):
    cart_id: Optional[str] = Field(default=None, alias="cartId")
    quantity: int = Field(default=1, ge=1)

    model_config = {"populate_by_name": True}


def _not_in_wishlist() -> HTTPException:
    return HTTPException(status_code=404, detail="Item not found in wishlist")


@api.get("/wishlist/{wishlist_id}", tags=["Wishlist"])
async def get_wishlist(
    wishlist_id: str,
    category: Optional[str] = Query(default=None),
    gender: Optional[str] = Query(default=None),
    shoppers=Depends(get_shopper_sessions),
):
    wishlist = shoppers.wishlist(wishlist_id)
    items = wishlist.filter(category=category, gender=gender) if (category or gender) else None
    return {"success": True, "data": wishlist.to_dict(items)}


@api.get("/wishlist/{wishlist_id}/count", tags=["Wishlist"])
async def wishlist_count(wishlist_id: str, shoppers=Depends(get_shopper_sessions)):
    return {"success": True, "data": {"count": shoppers.wishlist(wishlist_id).count}}


@api.get("/wishlist/{wishlist_id}/validate", tags=["Wishlist"])
async def validate_wishlist(wishlist_id: str, shoppers=Depends(get_shopper_sessions)):
    result = shoppers.wishlist(wishlist_id).validate()
    return {"success": True, "data": {"isValid": result.is_valid, "errors": result.errors}}


@api.post("/wishlist/{wishlist_id}/items", status_code=201, tags=["Wishlist"])
async def add_wishlist_item(
    wishlist_id: str,
    body: AddWishlistItemRequest,
    response: Response,
    shoppers=Depends(get_shopper_sessions),
    catalogue=Depends(get_catalogue),
):
    product = catalogue.get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    wishlist = shoppers.wishlist(wishlist_id)
    if wishlist.contains(product.id):
        response.status_code = 200
        return {"success": True, "message": "Product already in wishlist", "data": wishlist.to_dict()}
    wishlist.add_item(product, body.notes)
    return {"success": True, "message": "Product added to wishlist", "data": wishlist.to_dict()}


@api.get("/wishlist/{wishlist_id}/items/{product_id}", tags=["Wishlist"])
async def check_wishlist_item(wishlist_id: str, product_id: str, shoppers=Depends(get_shopper_sessions)):
    item = shoppers.wishlist(wishlist_id).get(product_id)
    return {"success": True, "data": {"isInWishlist": item is not None, "item": item.to_dict() if item else None}}


@api.put("/wishlist/{wishlist_id}/items/{product_id}", tags=["Wishlist"])
async def update_wishlist_notes(wishlist_id: str, product_id: str, body: NotesRequest, shoppers=Depends(get_shopper_sessions)):
    try:
        item = shoppers.wishlist(wishlist_id).update_notes(product_id, body.notes)
    except KeyError:
        raise _not_in_wishlist()
    return {"success": True, "message": "Wishlist item updated", "data": item.to_dict()}


@api.delete("/wishlist/{wishlist_id}/items/{product_id}", tags=["Wishlist"])
async def remove_wishlist_item(wishlist_id: str, product_id: str, shoppers=Depends(get_shopper_sessions)):
    wishlist = shoppers.wishlist(wishlist_id)
    if not wishlist.remove_item(product_id):
        raise _not_in_wishlist()
    return {"success": True, "message": "Product removed from wishlist", "data": wishlist.to_dict()}


@api.delete("/wishlist/{wishlist_id}", tags=["Wishlist"])
async def clear_wishlist(wishlist_id: str, shoppers=Depends(get_shopper_sessions)):
    shoppers.wishlist(wishlist_id).clear()
    return {"success": True, "message": "Wishlist cleared"}


@api.post("/wishlist/{wishlist_id}/items/{product_id}/move-to-cart", tags=["Wishlist"])
async def move_wishlist_item_to_cart(
    wishlist_id: str,
    product_id: str,
    body: Optional[MoveToCartRequest] = None,
    shoppers=Depends(get_shopper_sessions),
):
    body = body or MoveToCartRequest()
    cart = shoppers.cart(body.cart_id or wishlist_id)
    try:
        shoppers.wishlist(wishlist_id).move_to_cart(product_id, cart, body.quantity)
    except KeyError:
        raise _not_in_wishlist()
    return {
        "success": True,
        "message": "Product moved to cart and removed from wishlist",
        "data": {"wishlist": shoppers.wishlist(wishlist_id).to_dict(), "cart": cart.to_dict()},
    }
