# -*- coding: utf-8 -*-
"""Order/cart storage helpers (SQLite).

A user's cart is the single order row in status `Cart`; a partial unique
index guarantees there is never more than one. Every cart mutation
recomputes `total_amount_cents` from the lines inside the same transaction,
and checkout re-checks stock and decrements it while holding the database
write lock, so concurrent checkouts cannot oversell.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from ..app_db import db_conn, transaction
from ..catalog.storage import from_cents
from ..errors import EmptyCart, NotFound, OutOfStock, ValidationError
from .models import POST_CART_STATUSES, STATUS_TRANSITIONS, OrderStatus

logger = logging.getLogger(__name__)

_CART = OrderStatus.cart.value


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Valid quantity is required")
    return quantity


def _row_to_order(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "order_id": row.get("id"),
        "user_id": row.get("user_id"),
        "total_amount": from_cents(row.get("total_amount_cents")),
        "status": row.get("status"),
        "shipping_address": row.get("shipping_address"),
        "order_date": row.get("order_date"),
        "created_at": row.get("created_at"),
        "item_count": int(row.get("item_count") or 0),
    }


def _row_to_item(row: Dict[str, Any]) -> Dict[str, Any]:
    quantity = int(row.get("quantity") or 0)
    price_cents = int(row.get("price_at_purchase_cents") or 0)
    current = row.get("current_price_cents")
    return {
        "order_item_id": row.get("id"),
        "order_id": row.get("order_id"),
        "product_id": row.get("product_id"),
        "quantity": quantity,
        "price_at_purchase": from_cents(price_cents),
        "line_total": from_cents(quantity * price_cents),
        "product_name": row.get("product_name"),
        "description": row.get("description"),
        "current_price": from_cents(current) if current is not None else None,
    }


def _find_cart_id(conn: sqlite3.Connection, user_id: str) -> Optional[str]:
    row = conn.execute(
        "SELECT id FROM orders WHERE user_id = ? AND status = ?",
        (user_id, _CART),
    ).fetchone()
    return row["id"] if row else None


def _get_or_create_cart_id(conn: sqlite3.Connection, user_id: str) -> str:
    existing = _find_cart_id(conn, user_id)
    if existing:
        return existing
    cart_id = str(uuid4())
    try:
        conn.execute(
            "INSERT INTO orders (id, user_id, total_amount_cents, status, created_at) VALUES (?, ?, 0, ?, ?)",
            (cart_id, user_id, _CART, _iso_now()),
        )
    except sqlite3.IntegrityError:
        # Lost the race against a concurrent first request: use the winner's cart.
        existing = _find_cart_id(conn, user_id)
        if existing:
            return existing
        raise
    return cart_id


def _recompute_total(conn: sqlite3.Connection, order_id: str) -> int:
    row = conn.execute(
        "SELECT COALESCE(SUM(quantity * price_at_purchase_cents), 0) AS total FROM order_items WHERE order_id = ?",
        (order_id,),
    ).fetchone()
    total = int(row["total"])
    conn.execute("UPDATE orders SET total_amount_cents = ? WHERE id = ?", (total, order_id))
    return total


def _load_items(conn: sqlite3.Connection, order_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT oi.*, p.name AS product_name, p.description, p.price_cents AS current_price_cents
        FROM order_items oi
        JOIN products p ON oi.product_id = p.id
        WHERE oi.order_id = ?
        ORDER BY oi.rowid
        """,
        (order_id,),
    ).fetchall()
    return [_row_to_item(dict(r)) for r in rows]


def _load_order(conn: sqlite3.Connection, order_id: str, user_id: Optional[str] = None) -> Dict[str, Any]:
    sql = """
        SELECT o.*, COUNT(oi.id) AS item_count
        FROM orders o
        LEFT JOIN order_items oi ON o.id = oi.order_id
        WHERE o.id = ?
    """
    params: list[Any] = [order_id]
    if user_id is not None:
        sql += " AND o.user_id = ?"
        params.append(user_id)
    sql += " GROUP BY o.id"
    row = conn.execute(sql, params).fetchone()
    if not row:
        raise NotFound("Order not found")
    return _row_to_order(dict(row))


def _load_cart(conn: sqlite3.Connection, cart_id: str) -> Dict[str, Any]:
    cart = _load_order(conn, cart_id)
    cart["items"] = _load_items(conn, cart_id)
    return cart


def _require_cart_item(conn: sqlite3.Connection, user_id: str, item_id: str) -> Dict[str, Any]:
    row = conn.execute(
        """
        SELECT oi.*, p.stock_quantity
        FROM order_items oi
        JOIN orders o ON oi.order_id = o.id
        JOIN products p ON oi.product_id = p.id
        WHERE oi.id = ? AND o.user_id = ? AND o.status = ?
        """,
        (item_id, user_id, _CART),
    ).fetchone()
    if not row:
        raise NotFound("Cart item not found")
    return dict(row)


def get_or_create_cart(user_id: str) -> Dict[str, Any]:
    with transaction() as conn:
        cart_id = _get_or_create_cart_id(conn, user_id)
        return _load_cart(conn, cart_id)


def add_item(user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
    """Add `quantity` of a product to the cart, merging with an existing line."""
    quantity = _require_quantity(quantity)
    with transaction() as conn:
        product = conn.execute(
            "SELECT id, price_cents, stock_quantity FROM products WHERE id = ?",
            (product_id,),
        ).fetchone()
        if not product:
            raise NotFound("Product not found")

        cart_id = _get_or_create_cart_id(conn, user_id)
        line = conn.execute(
            "SELECT id, quantity FROM order_items WHERE order_id = ? AND product_id = ?",
            (cart_id, product_id),
        ).fetchone()

        new_quantity = quantity + (int(line["quantity"]) if line else 0)
        if new_quantity > int(product["stock_quantity"]):
            raise OutOfStock("Insufficient stock available")

        if line:
            conn.execute("UPDATE order_items SET quantity = ? WHERE id = ?", (new_quantity, line["id"]))
        else:
            conn.execute(
                """
                INSERT INTO order_items (id, order_id, product_id, quantity, price_at_purchase_cents, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(uuid4()), cart_id, product_id, quantity, int(product["price_cents"]), _iso_now()),
            )
        _recompute_total(conn, cart_id)
        return _load_cart(conn, cart_id)


def update_item_quantity(user_id: str, item_id: str, quantity: int) -> Dict[str, Any]:
    quantity = _require_quantity(quantity)
    with transaction() as conn:
        item = _require_cart_item(conn, user_id, item_id)
        if quantity > int(item["stock_quantity"]):
            raise OutOfStock("Insufficient stock available")
        conn.execute("UPDATE order_items SET quantity = ? WHERE id = ?", (quantity, item_id))
        _recompute_total(conn, item["order_id"])
        return _load_cart(conn, item["order_id"])


def remove_item(user_id: str, item_id: str) -> Dict[str, Any]:
    with transaction() as conn:
        item = _require_cart_item(conn, user_id, item_id)
        conn.execute("DELETE FROM order_items WHERE id = ?", (item_id,))
        _recompute_total(conn, item["order_id"])
        return _load_cart(conn, item["order_id"])


def place_order(user_id: str, shipping_address: Optional[str]) -> str:
    """Turn the cart into a Pending order; returns the order id."""
    address = (shipping_address or "").strip()
    if not address:
        raise ValidationError("Shipping address is required")

    with transaction() as conn:
        cart_id = _find_cart_id(conn, user_id)
        if not cart_id:
            raise EmptyCart()

        lines = conn.execute(
            """
            SELECT oi.product_id, oi.quantity, p.name AS product_name, p.stock_quantity
            FROM order_items oi
            JOIN products p ON oi.product_id = p.id
            WHERE oi.order_id = ?
            """,
            (cart_id,),
        ).fetchall()
        if not lines:
            raise EmptyCart()

        for line in lines:
            if int(line["stock_quantity"]) < int(line["quantity"]):
                raise OutOfStock(f"Insufficient stock for product: {line['product_name']}")

        for line in lines:
            cur = conn.execute(
                """
                UPDATE products
                SET stock_quantity = stock_quantity - ?,
                    in_stock = CASE WHEN stock_quantity - ? > 0 THEN in_stock ELSE 0 END
                WHERE id = ? AND stock_quantity >= ?
                """,
                (line["quantity"], line["quantity"], line["product_id"], line["quantity"]),
            )
            if cur.rowcount != 1:
                raise OutOfStock(f"Insufficient stock for product: {line['product_name']}")

        _recompute_total(conn, cart_id)
        conn.execute(
            "UPDATE orders SET status = ?, shipping_address = ?, order_date = ? WHERE id = ?",
            (OrderStatus.pending.value, address, _iso_now(), cart_id),
        )

    logger.info("order placed user=%s order=%s lines=%s", user_id, cart_id, len(lines))
    return cart_id


def list_orders(user_id: str, *, status: Optional[str] = None) -> List[Dict[str, Any]]:
    sql = """
        SELECT o.*, COUNT(oi.id) AS item_count
        FROM orders o
        LEFT JOIN order_items oi ON o.id = oi.order_id
        WHERE o.user_id = ? AND o.status != ?
    """
    params: list[Any] = [user_id, _CART]
    if status:
        if status not in POST_CART_STATUSES:
            raise ValidationError("Invalid order status")
        sql += " AND o.status = ?"
        params.append(status)
    sql += " GROUP BY o.id ORDER BY o.order_date DESC, o.rowid DESC"

    with db_conn() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_order(dict(r)) for r in rows]


def get_order(user_id: str, order_id: str) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    with db_conn() as conn:
        order = _load_order(conn, order_id, user_id)
        items = _load_items(conn, order_id)
    return order, items


def update_order_status(order_id: str, status: str) -> Dict[str, Any]:
    if status not in POST_CART_STATUSES:
        raise ValidationError("Invalid order status")

    with transaction() as conn:
        row = conn.execute("SELECT status FROM orders WHERE id = ?", (order_id,)).fetchone()
        if not row:
            raise NotFound("Order not found")
        current = row["status"]
        if current == _CART:
            raise ValidationError("Order has not been placed yet")
        if current != status:
            if status not in STATUS_TRANSITIONS.get(current, set()):
                logger.warning("rejected status change order=%s %s -> %s", order_id, current, status)
                raise ValidationError(f"Cannot change order status from {current} to {status}")
            conn.execute("UPDATE orders SET status = ? WHERE id = ?", (status, order_id))
            logger.info("order status changed order=%s %s -> %s", order_id, current, status)
        return _load_order(conn, order_id)
