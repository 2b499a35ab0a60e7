from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from src.api.services import get_catalogue, get_order_store, get_shopper_sessions
from src.storefront.orders import OrderStatus

api = APIRouter()
checkout_api = api


class AddItemRequest(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int = 1
    size: Optional[str] = None
    color: Optional[str] = None

    model_config = {"populate_by_name": True}


class UpdateItemRequest(BaseModel):
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None


class StepRequest(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)


class StatusRequest(BaseModel):
    status: OrderStatus


# --- Cart -------------------------------------------------------------------


@api.get("/cart/{cart_id}", tags=["Cart"])
async def get_cart(cart_id: str, shoppers=Depends(get_shopper_sessions)):
    return {"success": True, "data": shoppers.cart(cart_id).to_dict()}


@api.post("/cart/{cart_id}/items", tags=["Cart"])
async def add_cart_item(cart_id: str, body: AddItemRequest, shoppers=Depends(get_shopper_sessions), catalogue=Depends(get_catalogue)):
    product = catalogue.get_product(body.product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    cart = shoppers.cart(cart_id)
    cart.add_item(product, body.quantity, size=body.size, color=body.color)
    return {"success": True, "data": cart.to_dict()}


@api.patch("/cart/{cart_id}/items/{product_id}", tags=["Cart"])
async def update_cart_item(cart_id: str, product_id: str, body: UpdateItemRequest, shoppers=Depends(get_shopper_sessions)):
    cart = shoppers.cart(cart_id)
    cart.update_quantity(product_id, body.quantity, size=body.size, color=body.color)
    return {"success": True, "data": cart.to_dict()}


@api.delete("/cart/{cart_id}/items/{product_id}", tags=["Cart"])
async def remove_cart_item(
    cart_id: str,
    product_id: str,
    size: Optional[str] = None,
    color: Optional[str] = None,
    shoppers=Depends(get_shopper_sessions),
):
    cart = shoppers.cart(cart_id)
    cart.remove_item(product_id, size, color)
    return {"success": True, "data": cart.to_dict()}


@api.get("/cart/{cart_id}/validate", tags=["Cart"])
async def validate_cart(cart_id: str, shoppers=Depends(get_shopper_sessions)):
    result = shoppers.cart(cart_id).validate()
    return {"success": True, "data": {"isValid": result.is_valid, "errors": result.errors}}


# --- Checkout ---------------------------------------------------------------


@api.get("/checkout/{cart_id}", tags=["Checkout"])
async def get_checkout(cart_id: str, shoppers=Depends(get_shopper_sessions)):
    return {"success": True, "data": shoppers.checkout(cart_id).to_dict()}


@api.post("/checkout/{cart_id}/step", tags=["Checkout"])
async def submit_checkout_step(cart_id: str, body: StepRequest, shoppers=Depends(get_shopper_sessions)):
    wizard = shoppers.checkout(cart_id, restart_completed=True)
    wizard.submit_step(body.data)
    return {"success": True, "data": wizard.to_dict()}


@api.post("/checkout/{cart_id}/back", tags=["Checkout"])
async def checkout_back(cart_id: str, shoppers=Depends(get_shopper_sessions)):
    wizard = shoppers.checkout(cart_id)
    wizard.back()
    return {"success": True, "data": wizard.to_dict()}


@api.post("/checkout/{cart_id}/place-order", status_code=201, tags=["Checkout"])
async def place_order(cart_id: str, shoppers=Depends(get_shopper_sessions), orders=Depends(get_order_store)):
    wizard = shoppers.checkout(cart_id)
    order = wizard.place_order(shoppers.cart(cart_id), orders)
    return {"success": True, "data": order.to_dict()}


# --- Orders -----------------------------------------------------------------


@api.get("/orders", tags=["Orders"])
async def list_orders(email: Optional[str] = Query(default=None), orders=Depends(get_order_store)):
    items = orders.list_orders()
    if email:
        items = [o for o in items if o.customer_email.lower() == email.strip().lower()]
    return {"success": True, "data": [o.to_dict() for o in items]}


@api.get("/orders/{order_id}", tags=["Orders"])
async def get_order(order_id: str, orders=Depends(get_order_store)):
    order = orders.get_order(order_id) or orders.find_by_number(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "data": order.to_dict()}


@api.patch("/orders/{order_id}/status", tags=["Orders"])
async def update_order_status(order_id: str, body: StatusRequest, orders=Depends(get_order_store)):
    try:
        order = orders.update_status(order_id, body.status)
    except KeyError:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "data": order.to_dict()}
