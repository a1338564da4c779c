# -*- coding: utf-8 -*-
"""Order/cart endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    CartItemAddRequest,
    CartItemUpdateRequest,
    CartResponse,
    OrderDetailResponse,
    OrderListResponse,
    OrderStatusResponse,
    OrderStatusUpdateRequest,
    PlaceOrderRequest,
    PlaceOrderResponse,
)
from .storage import (
    add_item,
    get_or_create_cart,
    get_order,
    list_orders,
    place_order,
    remove_item,
    update_item_quantity,
    update_order_status,
)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("/cart", response_model=CartResponse, summary="Get (or open) my cart")
def get_cart(user: dict = Depends(get_current_user)):
    return CartResponse(cart=get_or_create_cart(user["id"]))


@router.post("/cart/items", response_model=CartResponse, status_code=201, summary="Add a product to my cart")
def add_cart_item(request: CartItemAddRequest, user: dict = Depends(get_current_user)):
    cart = add_item(user["id"], request.product_id, request.quantity)
    return CartResponse(message="Item added to cart successfully", cart=cart)


@router.put("/cart/items/{item_id}", response_model=CartResponse, summary="Change a cart line quantity")
def update_cart_item(item_id: str, request: CartItemUpdateRequest, user: dict = Depends(get_current_user)):
    cart = update_item_quantity(user["id"], item_id, request.quantity)
    return CartResponse(message="Cart item updated successfully", cart=cart)


@router.delete("/cart/items/{item_id}", response_model=CartResponse, summary="Remove a cart line")
def delete_cart_item(item_id: str, user: dict = Depends(get_current_user)):
    cart = remove_item(user["id"], item_id)
    return CartResponse(message="Item removed from cart successfully", cart=cart)


@router.post("/place-order", response_model=PlaceOrderResponse, summary="Check out my cart")
def checkout(request: PlaceOrderRequest, user: dict = Depends(get_current_user)):
    order_id = place_order(user["id"], request.shipping_address)
    return PlaceOrderResponse(message="Order placed successfully", order_id=order_id)


@router.get("", response_model=OrderListResponse, summary="List my placed orders")
def list_my_orders(
    status: str | None = Query(default=None, description="Pending | Shipped | Delivered | Cancelled"),
    user: dict = Depends(get_current_user),
):
    return OrderListResponse(orders=list_orders(user["id"], status=status or None))


@router.get("/{order_id}", response_model=OrderDetailResponse, summary="Get one of my orders")
def get_my_order(order_id: str, user: dict = Depends(get_current_user)):
    order, items = get_order(user["id"], order_id)
    return OrderDetailResponse(order=order, items=items)


@router.put("/{order_id}/status", response_model=OrderStatusResponse, summary="Move an order along its lifecycle")
def set_order_status(order_id: str, request: OrderStatusUpdateRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    order = update_order_status(order_id, request.status)
    return OrderStatusResponse(message="Order status updated successfully", order=order)
