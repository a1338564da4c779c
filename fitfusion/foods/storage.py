# -*- coding: utf-8 -*-
"""Food catalog resolver.

Foods are keyed by exact (case-sensitive) name. Resolving a name either
returns the existing row's id untouched or inserts a new row; nutrition
facts of an existing food are never overwritten.

All helpers take the caller's connection so they run inside the enclosing
transaction: if the diet-plan write that triggered the insert fails, the new
food row is rolled back with it.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from ..errors import ValidationError
from .models import FoodFacts


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _lookup_id(conn: sqlite3.Connection, name: str) -> Optional[str]:
    row = conn.execute("SELECT id FROM foods WHERE name = ?", (name,)).fetchone()
    return row["id"] if row else None


def resolve_food_id(conn: sqlite3.Connection, name: str, facts: FoodFacts | None = None) -> str:
    """Return the id of the food called `name`, inserting it on first use."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Food name is required")
    facts = facts or FoodFacts()

    existing = _lookup_id(conn, name)
    if existing:
        return existing

    food_id = str(uuid4())
    try:
        conn.execute(
            """
            INSERT INTO foods (
                id, name, calories_per_100g, protein_per_100g, carbs_per_100g, fat_per_100g, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (food_id, name, facts.calories, facts.protein, facts.carbs, facts.fat, _iso_now()),
        )
    except sqlite3.IntegrityError:
        # Another writer inserted the same name first; theirs is canonical.
        existing = _lookup_id(conn, name)
        if existing:
            return existing
        raise
    return food_id


def get_food(conn: sqlite3.Connection, food_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute("SELECT * FROM foods WHERE id = ?", (food_id,)).fetchone()
    if not row:
        return None
    return {
        "food_id": row["id"],
        "name": row["name"],
        "calories_per_100g": float(row["calories_per_100g"]),
        "protein_per_100g": float(row["protein_per_100g"]),
        "carbs_per_100g": float(row["carbs_per_100g"]),
        "fat_per_100g": float(row["fat_per_100g"]),
    }
