# -*- coding: utf-8 -*-
"""Diet plan endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    DietPlanCreateRequest,
    DietPlanDetailResponse,
    DietPlanItemCreate,
    DietPlanItemResponse,
    DietPlanListResponse,
    DietPlanResponse,
    DietPlanUpdateRequest,
)
from .storage import add_item, create_plan, delete_plan, get_plan, list_plans, remove_item, update_plan

router = APIRouter(prefix="/api/diet-plans", tags=["Diet Plans"])


@router.get("", response_model=DietPlanListResponse, summary="List my diet plans with totals")
def list_my_plans(user: dict = Depends(get_current_user)):
    return DietPlanListResponse(plans=list_plans(user["id"]))


@router.get("/recent", response_model=DietPlanListResponse, summary="Most recent diet plans")
def list_recent_plans(
    limit: int = Query(default=3, ge=1, le=50),
    user: dict = Depends(get_current_user),
):
    return DietPlanListResponse(plans=list_plans(user["id"], limit=limit))


@router.get("/{plan_id}", response_model=DietPlanDetailResponse, summary="Get a diet plan with its items")
def get_my_plan(plan_id: str, user: dict = Depends(get_current_user)):
    plan, items = get_plan(user["id"], plan_id)
    return DietPlanDetailResponse(plan=plan, items=items)


@router.post("", response_model=DietPlanResponse, status_code=201, summary="Create a diet plan")
def create_my_plan(request: DietPlanCreateRequest, user: dict = Depends(get_current_user)):
    plan = create_plan(
        user_id=user["id"],
        plan_name=request.plan_name,
        start_date=request.start_date,
        end_date=request.end_date,
        items=request.all_items(),
    )
    return DietPlanResponse(message="Diet plan created successfully", plan=plan)


@router.put("/{plan_id}", response_model=DietPlanResponse, summary="Update plan name/dates")
def update_my_plan(plan_id: str, request: DietPlanUpdateRequest, user: dict = Depends(get_current_user)):
    fields = request.model_dump(include=request.model_fields_set)
    plan = update_plan(user["id"], plan_id, fields)
    return DietPlanResponse(message="Diet plan updated successfully", plan=plan)


@router.delete("/{plan_id}", summary="Delete a diet plan and its items")
def delete_my_plan(plan_id: str, user: dict = Depends(get_current_user)):
    delete_plan(user["id"], plan_id)
    return {"success": True, "message": "Diet plan deleted successfully"}


@router.post(
    "/{plan_id}/items",
    response_model=DietPlanItemResponse,
    status_code=201,
    summary="Add an item to a diet plan",
)
def add_plan_item(plan_id: str, request: DietPlanItemCreate, user: dict = Depends(get_current_user)):
    item = add_item(user["id"], plan_id, request)
    return DietPlanItemResponse(message="Item added to diet plan successfully", item=item)


@router.delete("/{plan_id}/items/{item_id}", summary="Remove an item from a diet plan")
def remove_plan_item(plan_id: str, item_id: str, user: dict = Depends(get_current_user)):
    remove_item(user["id"], plan_id, item_id)
    return {"success": True, "message": "Item removed from diet plan successfully"}
