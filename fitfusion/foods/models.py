# -*- coding: utf-8 -*-
"""Foods — Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel, Field


# Generous ceiling for any per-100g value; keeps derived calories finite.
MAX_PER_100G = 10_000.0


class FoodFacts(BaseModel):
    """Nutrition facts per 100g."""

    calories: float = Field(0.0, ge=0, le=MAX_PER_100G)
    protein: float = Field(0.0, ge=0, le=MAX_PER_100G)
    carbs: float = Field(0.0, ge=0, le=MAX_PER_100G)
    fat: float = Field(0.0, ge=0, le=MAX_PER_100G)
