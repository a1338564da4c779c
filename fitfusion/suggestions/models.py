# -*- coding: utf-8 -*-
"""Suggestions — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SuggestionKind(str, Enum):
    food = "food-suggestions"
    exercise = "exercise-suggestions"
    diet_plan = "diet-plan"
    products = "product-recommendations"


class SuggestionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., min_length=1, description="one of SuggestionKind")
    data: Optional[Dict[str, Any]] = None
    user_profile: Optional[Dict[str, Any]] = Field(None, alias="userProfile")


class SuggestionResponse(BaseModel):
    """`suggestions` is advisory: either the model's JSON or `{"text": raw}`."""

    success: bool = True
    suggestions: Any
