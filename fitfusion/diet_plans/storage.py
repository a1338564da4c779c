# -*- coding: utf-8 -*-
"""Diet plan storage helpers (SQLite).

Every read and write is scoped to the owning user: a plan that belongs to
someone else is reported exactly like a missing one. Multi-row writes run in
a single `transaction()`, so a failing item rolls back the plan and any food
rows resolved on its behalf.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn, transaction
from ..errors import NotFound, ValidationError
from ..foods.storage import get_food, resolve_food_id
from .models import DietPlanItemCreate

logger = logging.getLogger(__name__)

_PLAN_SELECT = """
    SELECT dp.*,
           COUNT(dpi.id) AS item_count,
           COALESCE(SUM(dpi.calories), 0) AS total_calories
    FROM diet_plans dp
    LEFT JOIN diet_plan_items dpi ON dp.id = dpi.plan_id
"""

_ITEM_SELECT = """
    SELECT dpi.*, f.name AS food_name, f.calories_per_100g, f.protein_per_100g,
           f.carbs_per_100g, f.fat_per_100g, p.name AS product_name
    FROM diet_plan_items dpi
    LEFT JOIN foods f ON dpi.food_id = f.id
    LEFT JOIN products p ON dpi.product_id = p.id
"""


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _iso_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Plan name is required")
    return cleaned


def _row_to_plan(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "plan_id": row.get("id"),
        "user_id": row.get("user_id"),
        "plan_name": row.get("name"),
        "start_date": row.get("start_date"),
        "end_date": row.get("end_date"),
        "created_at": row.get("created_at"),
        "item_count": int(row.get("item_count") or 0),
        "total_calories": round(float(row.get("total_calories") or 0.0), 1),
    }


def _row_to_item(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "item_id": row.get("id"),
        "plan_id": row.get("plan_id"),
        "meal_time": row.get("meal_time"),
        "food_id": row.get("food_id"),
        "product_id": row.get("product_id"),
        "quantity": float(row.get("quantity") or 0.0),
        "calories": float(row.get("calories") or 0.0),
        "food_name": row.get("food_name"),
        "calories_per_100g": row.get("calories_per_100g"),
        "protein_per_100g": row.get("protein_per_100g"),
        "carbs_per_100g": row.get("carbs_per_100g"),
        "fat_per_100g": row.get("fat_per_100g"),
        "product_name": row.get("product_name"),
    }


def _fetch_plan(conn: sqlite3.Connection, user_id: str, plan_id: str) -> Dict[str, Any]:
    row = conn.execute(
        _PLAN_SELECT + " WHERE dp.id = ? AND dp.user_id = ? GROUP BY dp.id",
        (plan_id, user_id),
    ).fetchone()
    if not row:
        raise NotFound("Diet plan not found")
    return _row_to_plan(dict(row))


def _require_owned_plan(conn: sqlite3.Connection, user_id: str, plan_id: str) -> None:
    row = conn.execute(
        "SELECT id FROM diet_plans WHERE id = ? AND user_id = ?",
        (plan_id, user_id),
    ).fetchone()
    if not row:
        raise NotFound("Diet plan not found")


def _resolve_reference(conn: sqlite3.Connection, item: DietPlanItemCreate) -> Tuple[Optional[str], Optional[str], float]:
    """Return (food_id, product_id, calories) for an item."""
    if item.product_id:
        if not conn.execute("SELECT 1 FROM products WHERE id = ?", (item.product_id,)).fetchone():
            raise NotFound("Product not found")
        return None, item.product_id, round(float(item.calories or 0.0), 1)

    food_id = item.food_id or resolve_food_id(conn, item.food_name or "", item.nutrition)
    food = get_food(conn, food_id)
    if not food:
        raise NotFound("Food not found")

    calories = round(food["calories_per_100g"] * float(item.quantity) / 100.0, 1)
    return food["food_id"], None, calories


def _insert_item(conn: sqlite3.Connection, plan_id: str, item: DietPlanItemCreate) -> str:
    food_id, product_id, calories = _resolve_reference(conn, item)
    item_id = str(uuid4())
    conn.execute(
        """
        INSERT INTO diet_plan_items (id, plan_id, meal_time, food_id, product_id, quantity, calories, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            item_id,
            plan_id,
            item.meal_time.strip(),
            food_id,
            product_id,
            float(item.quantity),
            calories,
            _iso_now(),
        ),
    )
    return item_id


def _fetch_item(conn: sqlite3.Connection, plan_id: str, item_id: str) -> Dict[str, Any]:
    row = conn.execute(
        _ITEM_SELECT + " WHERE dpi.id = ? AND dpi.plan_id = ?",
        (item_id, plan_id),
    ).fetchone()
    if not row:
        raise NotFound("Diet plan item not found")
    return _row_to_item(dict(row))


def create_plan(
    *,
    user_id: str,
    plan_name: Optional[str],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    items: Iterable[DietPlanItemCreate] = (),
) -> Dict[str, Any]:
    name = _clean_name(plan_name)
    plan_id = str(uuid4())
    with transaction() as conn:
        conn.execute(
            """
            INSERT INTO diet_plans (id, user_id, name, start_date, end_date, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (plan_id, user_id, name, _iso_date(start_date), _iso_date(end_date), _iso_now()),
        )
        for item in items:
            _insert_item(conn, plan_id, item)
        plan = _fetch_plan(conn, user_id, plan_id)

    logger.info("diet plan created user=%s plan=%s items=%s", user_id, plan_id, plan["item_count"])
    return plan


def list_plans(user_id: str, *, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = _PLAN_SELECT + " WHERE dp.user_id = ? GROUP BY dp.id ORDER BY dp.created_at DESC, dp.rowid DESC"
    params: list[Any] = [user_id]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))
    with db_conn() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_plan(dict(r)) for r in rows]


def get_plan(user_id: str, plan_id: str) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    with db_conn() as conn:
        plan = _fetch_plan(conn, user_id, plan_id)
        rows = conn.execute(
            _ITEM_SELECT + " WHERE dpi.plan_id = ? ORDER BY dpi.meal_time, dpi.rowid",
            (plan_id,),
        ).fetchall()
    return plan, [_row_to_item(dict(r)) for r in rows]


def update_plan(user_id: str, plan_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Update name/start_date/end_date; keys absent from `fields` are left as they are."""
    assignments: list[str] = []
    params: list[Any] = []
    if "plan_name" in fields:
        assignments.append("name = ?")
        params.append(_clean_name(fields["plan_name"]))
    if "start_date" in fields:
        assignments.append("start_date = ?")
        params.append(_iso_date(fields["start_date"]))
    if "end_date" in fields:
        assignments.append("end_date = ?")
        params.append(_iso_date(fields["end_date"]))

    with transaction() as conn:
        _require_owned_plan(conn, user_id, plan_id)
        if assignments:
            conn.execute(
                f"UPDATE diet_plans SET {', '.join(assignments)} WHERE id = ? AND user_id = ?",
                (*params, plan_id, user_id),
            )
        plan = _fetch_plan(conn, user_id, plan_id)
    return plan


def delete_plan(user_id: str, plan_id: str) -> None:
    with transaction() as conn:
        _require_owned_plan(conn, user_id, plan_id)
        # Explicit item delete: no orphans even if the FK cascade is disabled.
        conn.execute("DELETE FROM diet_plan_items WHERE plan_id = ?", (plan_id,))
        conn.execute("DELETE FROM diet_plans WHERE id = ? AND user_id = ?", (plan_id, user_id))
    logger.info("diet plan deleted user=%s plan=%s", user_id, plan_id)


def add_item(user_id: str, plan_id: str, item: DietPlanItemCreate) -> Dict[str, Any]:
    with transaction() as conn:
        _require_owned_plan(conn, user_id, plan_id)
        item_id = _insert_item(conn, plan_id, item)
        return _fetch_item(conn, plan_id, item_id)


def remove_item(user_id: str, plan_id: str, item_id: str) -> None:
    with transaction() as conn:
        _require_owned_plan(conn, user_id, plan_id)
        cur = conn.execute(
            "DELETE FROM diet_plan_items WHERE id = ? AND plan_id = ?",
            (item_id, plan_id),
        )
        if cur.rowcount == 0:
            raise NotFound("Diet plan item not found")
