# -*- coding: utf-8 -*-
"""Catalog storage helpers (SQLite).

Prices are stored as integer cents and exposed as `Decimal`.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from ..app_db import db_conn, transaction
from ..errors import Conflict, NotFound, ValidationError
from .models import MAX_STOCK, ProductCreateRequest

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

_PRODUCT_SELECT = """
    SELECT p.*, c.name AS category_name, s.name AS supplier_name,
           COALESCE(AVG(r.rating), 0) AS avg_rating,
           COUNT(r.id) AS review_count
    FROM products p
    LEFT JOIN categories c ON p.category_id = c.id
    LEFT JOIN suppliers s ON p.supplier_id = s.id
    LEFT JOIN reviews r ON p.id = r.product_id
"""


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_cents(value: Decimal | int | float | str) -> int:
    amount = Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
    return int(amount * 100)


def from_cents(cents: Optional[int]) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(_CENT)


def _row_to_product(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "product_id": row.get("id"),
        "name": row.get("name"),
        "description": row.get("description"),
        "price": from_cents(row.get("price_cents")),
        "stock_quantity": int(row.get("stock_quantity") or 0),
        "in_stock": bool(row.get("in_stock")),
        "category_id": row.get("category_id"),
        "category_name": row.get("category_name"),
        "supplier_id": row.get("supplier_id"),
        "supplier_name": row.get("supplier_name"),
        "avg_rating": round(float(row.get("avg_rating") or 0.0), 2),
        "review_count": int(row.get("review_count") or 0),
        "created_at": row.get("created_at"),
    }


def _row_to_review(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "review_id": row.get("id"),
        "user_id": row.get("user_id"),
        "product_id": row.get("product_id"),
        "rating": row.get("rating"),
        "comment": row.get("comment"),
        "reviewed_at": row.get("reviewed_at"),
    }


def create_category(name: str) -> Dict[str, Any]:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    category_id = str(uuid4())
    try:
        with db_conn() as conn:
            conn.execute(
                "INSERT INTO categories (id, name, created_at) VALUES (?, ?, ?)",
                (category_id, name, _iso_now()),
            )
    except sqlite3.IntegrityError as exc:
        raise Conflict("Category already exists") from exc
    return {"category_id": category_id, "name": name}


def list_categories() -> List[Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute("SELECT id, name FROM categories ORDER BY name").fetchall()
    return [{"category_id": r["id"], "name": r["name"]} for r in rows]


def create_supplier(name: str) -> Dict[str, Any]:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Supplier name is required")
    supplier_id = str(uuid4())
    with db_conn() as conn:
        conn.execute(
            "INSERT INTO suppliers (id, name, created_at) VALUES (?, ?, ?)",
            (supplier_id, name, _iso_now()),
        )
    return {"supplier_id": supplier_id, "name": name}


def list_suppliers() -> List[Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute("SELECT id, name FROM suppliers ORDER BY name, rowid").fetchall()
    return [{"supplier_id": r["id"], "name": r["name"]} for r in rows]


def create_product(request: ProductCreateRequest) -> Dict[str, Any]:
    product_id = str(uuid4())
    try:
        with db_conn() as conn:
            conn.execute(
                """
                INSERT INTO products (
                    id, name, description, price_cents, stock_quantity, in_stock,
                    category_id, supplier_id, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    product_id,
                    request.name.strip(),
                    request.description,
                    to_cents(request.price),
                    request.stock_quantity,
                    1 if request.stock_quantity > 0 else 0,
                    request.category_id,
                    request.supplier_id,
                    _iso_now(),
                ),
            )
    except sqlite3.IntegrityError as exc:
        # Only the category/supplier foreign keys can fail here.
        raise NotFound("Category or supplier not found") from exc
    return get_product(product_id)


def get_product(product_id: str) -> Dict[str, Any]:
    with db_conn() as conn:
        row = conn.execute(
            _PRODUCT_SELECT + " WHERE p.id = ? GROUP BY p.id",
            (product_id,),
        ).fetchone()
    if not row:
        raise NotFound("Product not found")
    return _row_to_product(dict(row))


def list_reviews(product_id: str, *, limit: int = 10) -> List[Dict[str, Any]]:
    with db_conn() as conn:
        rows = conn.execute(
            """
            SELECT * FROM reviews
            WHERE product_id = ?
            ORDER BY reviewed_at DESC
            LIMIT ?
            """,
            (product_id, limit),
        ).fetchall()
    return [_row_to_review(dict(r)) for r in rows]


def add_review(*, user_id: str, product_id: str, rating: int, comment: Optional[str]) -> Dict[str, Any]:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")

    review_id = str(uuid4())
    now = _iso_now()
    with transaction() as conn:
        if not conn.execute("SELECT 1 FROM products WHERE id = ?", (product_id,)).fetchone():
            raise NotFound("Product not found")
        existing = conn.execute(
            "SELECT id FROM reviews WHERE user_id = ? AND product_id = ?",
            (user_id, product_id),
        ).fetchone()
        if existing:
            raise Conflict("You have already reviewed this product")
        conn.execute(
            """
            INSERT INTO reviews (id, user_id, product_id, rating, comment, reviewed_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (review_id, user_id, product_id, rating, comment, now),
        )

    return {
        "review_id": review_id,
        "user_id": user_id,
        "product_id": product_id,
        "rating": rating,
        "comment": comment,
        "reviewed_at": now,
    }


def list_inventory(supplier_id: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = "SELECT id, name, description, price_cents, stock_quantity, in_stock FROM products"
    params: list[Any] = []
    if supplier_id:
        sql += " WHERE supplier_id = ?"
        params.append(supplier_id)
    sql += " ORDER BY name"

    with db_conn() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [
        {
            "id": r["id"],
            "name": r["name"],
            "description": r["description"],
            "price": from_cents(r["price_cents"]),
            "stock_quantity": int(r["stock_quantity"]),
            "in_stock": bool(r["in_stock"]),
        }
        for r in rows
    ]


def update_inventory(
    product_id: str,
    *,
    stock_quantity: Optional[int] = None,
    in_stock: Optional[bool] = None,
) -> Dict[str, Any]:
    if stock_quantity is not None and not 0 <= stock_quantity <= MAX_STOCK:
        raise ValidationError(f"stock_quantity must be between 0 and {MAX_STOCK}")

    with transaction() as conn:
        row = conn.execute("SELECT * FROM products WHERE id = ?", (product_id,)).fetchone()
        if not row:
            raise NotFound("Product not found")
        new_stock = int(row["stock_quantity"]) if stock_quantity is None else stock_quantity
        if in_stock is not None:
            new_flag = in_stock
        elif stock_quantity is not None:
            # Restocking without an explicit flag follows the new level.
            new_flag = stock_quantity > 0
        else:
            new_flag = bool(row["in_stock"])
        conn.execute(
            "UPDATE products SET stock_quantity = ?, in_stock = ? WHERE id = ?",
            (new_stock, 1 if new_flag else 0, product_id),
        )

    logger.info("inventory updated product=%s stock=%s in_stock=%s", product_id, new_stock, new_flag)
    return get_product(product_id)
