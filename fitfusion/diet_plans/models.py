# -*- coding: utf-8 -*-
"""Diet plans — Pydantic models."""

from __future__ import annotations

from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..foods.models import MAX_PER_100G, FoodFacts

MAX_QUANTITY = 100_000.0
MAX_LINE_CALORIES = 100_000.0


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class DietPlanItemCreate(BaseModel):
    """One plan line: a food (by id, or by name + facts) or a product.

    Food lines get their calories from the food's facts; product lines carry
    no nutrition facts, so `calories` is taken as given.
    """

    meal_time: str = Field(..., min_length=1, max_length=64, description="e.g. Breakfast")
    quantity: float = Field(..., gt=0, le=MAX_QUANTITY, description="grams for foods, units for products")
    food_id: Optional[str] = None
    food_name: Optional[str] = Field(None, max_length=200)
    nutrition: Optional[FoodFacts] = Field(None, description="per-100g facts used when the food is new")
    product_id: Optional[str] = None
    calories: Optional[float] = Field(None, ge=0, le=MAX_LINE_CALORIES)

    @field_validator("meal_time", mode="before")
    @classmethod
    def _strip_meal_time(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("food_id", "food_name", "product_id", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _one_reference(self) -> "DietPlanItemCreate":
        has_food = bool(self.food_id or self.food_name)
        has_product = bool(self.product_id)
        if has_food == has_product:
            raise ValueError("each item must reference exactly one food or one product")
        return self


class FoodLineCreate(BaseModel):
    """Shorthand for a food line given by name with its per-100g facts."""

    name: str = Field(..., min_length=1, max_length=200)
    meal_time: str = Field(..., min_length=1, max_length=64)
    quantity: float = Field(100.0, gt=0, le=MAX_QUANTITY, description="grams")
    calories: float = Field(0.0, ge=0, le=MAX_PER_100G)
    protein: float = Field(0.0, ge=0, le=MAX_PER_100G)
    carbs: float = Field(0.0, ge=0, le=MAX_PER_100G)
    fat: float = Field(0.0, ge=0, le=MAX_PER_100G)

    @field_validator("name", "meal_time", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Any:
        return _strip(value)

    def to_item(self) -> DietPlanItemCreate:
        return DietPlanItemCreate(
            meal_time=self.meal_time,
            quantity=self.quantity,
            food_name=self.name,
            nutrition=FoodFacts(
                calories=self.calories,
                protein=self.protein,
                carbs=self.carbs,
                fat=self.fat,
            ),
        )


class DietPlanCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_name: Optional[str] = Field(None, alias="planName", max_length=200)
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    items: List[DietPlanItemCreate] = Field(default_factory=list)
    foods: List[FoodLineCreate] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _empty_date(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def all_items(self) -> List[DietPlanItemCreate]:
        return list(self.items) + [f.to_item() for f in self.foods]


class DietPlanUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_name: Optional[str] = Field(None, alias="planName", max_length=200)
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _empty_date(cls, value: Any) -> Any:
        return _blank_to_none(value)


class DietPlan(BaseModel):
    plan_id: str
    user_id: str
    plan_name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: str
    item_count: int = 0
    total_calories: float = 0.0


class DietPlanItem(BaseModel):
    item_id: str
    plan_id: str
    meal_time: str
    food_id: Optional[str] = None
    product_id: Optional[str] = None
    quantity: float
    calories: float
    food_name: Optional[str] = None
    calories_per_100g: Optional[float] = None
    protein_per_100g: Optional[float] = None
    carbs_per_100g: Optional[float] = None
    fat_per_100g: Optional[float] = None
    product_name: Optional[str] = None


class DietPlanListResponse(BaseModel):
    success: bool = True
    plans: List[DietPlan]


class DietPlanDetailResponse(BaseModel):
    success: bool = True
    plan: DietPlan
    items: List[DietPlanItem]


class DietPlanResponse(BaseModel):
    success: bool = True
    message: str
    plan: DietPlan


class DietPlanItemResponse(BaseModel):
    success: bool = True
    message: str
    item: DietPlanItem
