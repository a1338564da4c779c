# -*- coding: utf-8 -*-
"""Catalog — API endpoints (product detail, reviews, supplier inventory)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    CategoryListResponse,
    InventoryItem,
    InventoryUpdateRequest,
    ProductResponse,
    ReviewCreateRequest,
    ReviewResponse,
)
from .storage import add_review, get_product, list_categories, list_inventory, list_reviews, update_inventory

router = APIRouter(prefix="/api/products", tags=["Products"])
inventory_router = APIRouter(prefix="/api/supplier-inventory", tags=["Supplier Inventory"])


@router.get("/categories/list", response_model=CategoryListResponse, summary="List product categories")
def categories(user: dict = Depends(get_current_user)):  # noqa: ARG001
    return CategoryListResponse(categories=list_categories())


@router.get("/{product_id}", response_model=ProductResponse, summary="Product detail with recent reviews")
def product_detail(product_id: str, user: dict = Depends(get_current_user)):  # noqa: ARG001
    product = get_product(product_id)
    return ProductResponse(product=product, reviews=list_reviews(product_id))


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=201,
    summary="Review a product (one review per user)",
)
def create_review(product_id: str, request: ReviewCreateRequest, user: dict = Depends(get_current_user)):
    review = add_review(
        user_id=user["id"],
        product_id=product_id,
        rating=request.rating,
        comment=request.comment,
    )
    return ReviewResponse(message="Review added successfully", review=review)


@inventory_router.get("", response_model=List[InventoryItem], summary="Supplier inventory")
def inventory(
    supplier_id: str | None = Query(default=None, description="Filter by supplier"),
    user: dict = Depends(get_current_user),  # noqa: ARG001
):
    return [InventoryItem(**item) for item in list_inventory(supplier_id)]


@inventory_router.put("", summary="Update stock level / in-stock flag")
def update_stock(request: InventoryUpdateRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    product = update_inventory(
        request.id,
        stock_quantity=request.stock_quantity,
        in_stock=request.in_stock,
    )
    return {"success": True, "product": product}
