# -*- coding: utf-8 -*-
"""Catalog — Pydantic models."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Upper bounds keep values inside SQLite INTEGER range (prices are stored as cents).
MAX_STOCK = 1_000_000
MAX_PRICE = Decimal("1000000")


class Product(BaseModel):
    product_id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int = Field(0, ge=0)
    in_stock: bool = True
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    avg_rating: float = 0.0
    review_count: int = 0
    created_at: str


class ProductCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=4000)
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)
    stock_quantity: int = Field(0, ge=0, le=MAX_STOCK)
    category_id: Optional[str] = None
    supplier_id: Optional[str] = None


class Review(BaseModel):
    review_id: str
    user_id: str
    product_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    reviewed_at: str


class ReviewCreateRequest(BaseModel):
    rating: int
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    success: bool = True
    message: str
    review: Review


class ProductResponse(BaseModel):
    success: bool = True
    product: Product
    reviews: List[Review] = Field(default_factory=list)


class Category(BaseModel):
    category_id: str
    name: str


class CategoryListResponse(BaseModel):
    success: bool = True
    categories: List[Category]


class InventoryItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock_quantity: int
    in_stock: bool = Field(..., alias="inStock")


class InventoryUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    stock_quantity: Optional[int] = Field(None, ge=0, le=MAX_STOCK)
    in_stock: Optional[bool] = Field(None, alias="inStock")
