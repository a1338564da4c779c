# -*- coding: utf-8 -*-
"""Orders/cart — Pydantic models."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import MAX_STOCK


class OrderStatus(str, Enum):
    cart = "Cart"
    pending = "Pending"
    shipped = "Shipped"
    delivered = "Delivered"
    cancelled = "Cancelled"


# Statuses an order can be moved to through the status endpoint.
POST_CART_STATUSES = (
    OrderStatus.pending.value,
    OrderStatus.shipped.value,
    OrderStatus.delivered.value,
    OrderStatus.cancelled.value,
)

# Allowed forward moves; there is no way back to Cart or out of a final state.
STATUS_TRANSITIONS = {
    OrderStatus.pending.value: {OrderStatus.shipped.value, OrderStatus.cancelled.value},
    OrderStatus.shipped.value: {OrderStatus.delivered.value, OrderStatus.cancelled.value},
}


class CartItemAddRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = Field(..., gt=0, le=MAX_STOCK)


class CartItemUpdateRequest(BaseModel):
    quantity: int = Field(..., gt=0, le=MAX_STOCK)


class PlaceOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    shipping_address: Optional[str] = Field(None, alias="shippingAddress", max_length=1000)


class OrderStatusUpdateRequest(BaseModel):
    status: str


class OrderItem(BaseModel):
    order_item_id: str
    order_id: str
    product_id: str
    quantity: int
    price_at_purchase: Decimal
    line_total: Decimal
    product_name: Optional[str] = None
    description: Optional[str] = None
    current_price: Optional[Decimal] = None


class Order(BaseModel):
    order_id: str
    user_id: str
    total_amount: Decimal
    status: OrderStatus
    shipping_address: Optional[str] = None
    order_date: Optional[str] = None
    created_at: str
    item_count: int = 0


class Cart(Order):
    items: List[OrderItem] = Field(default_factory=list)


class CartResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    cart: Cart


class PlaceOrderResponse(BaseModel):
    success: bool = True
    message: str
    order_id: str


class OrderListResponse(BaseModel):
    success: bool = True
    orders: List[Order]


class OrderDetailResponse(BaseModel):
    success: bool = True
    order: Order
    items: List[OrderItem]


class OrderStatusResponse(BaseModel):
    success: bool = True
    message: str
    order: Order
