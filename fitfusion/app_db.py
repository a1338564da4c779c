# -*- coding: utf-8 -*-
"""App database (catalog/diet plans/orders) — SQLite helpers."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    # isolation_level=None: transactions are opened explicitly by `transaction()`.
    conn = sqlite3.connect(
        str(db_path),
        timeout=settings.db_timeout,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def init_app_db(db_path: Path | None = None) -> None:
    conn = connect(db_path or settings.db_path)
    try:
        cur = conn.cursor()
        cur.execute("PRAGMA journal_mode = WAL;")
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS categories (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS suppliers (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                price_cents INTEGER NOT NULL CHECK (price_cents >= 0),
                stock_quantity INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
                in_stock INTEGER NOT NULL DEFAULT 1,
                category_id TEXT,
                supplier_id TEXT,
                created_at TEXT NOT NULL,
                FOREIGN KEY(category_id) REFERENCES categories(id) ON DELETE SET NULL,
                FOREIGN KEY(supplier_id) REFERENCES suppliers(id) ON DELETE SET NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_products_supplier ON products(supplier_id);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS reviews (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                product_id TEXT NOT NULL,
                rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
                comment TEXT,
                reviewed_at TEXT NOT NULL,
                UNIQUE (user_id, product_id),
                FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE CASCADE
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS foods (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL UNIQUE,
                calories_per_100g REAL NOT NULL DEFAULT 0,
                protein_per_100g REAL NOT NULL DEFAULT 0,
                carbs_per_100g REAL NOT NULL DEFAULT 0,
                fat_per_100g REAL NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS diet_plans (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                name TEXT NOT NULL,
                start_date TEXT,
                end_date TEXT,
                created_at TEXT NOT NULL
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diet_plans_user_created ON diet_plans(user_id, created_at DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS diet_plan_items (
                id TEXT PRIMARY KEY,
                plan_id TEXT NOT NULL,
                meal_time TEXT NOT NULL,
                food_id TEXT,
                product_id TEXT,
                quantity REAL NOT NULL CHECK (quantity > 0),
                calories REAL NOT NULL DEFAULT 0 CHECK (calories >= 0),
                created_at TEXT NOT NULL,
                CHECK ((food_id IS NULL) <> (product_id IS NULL)),
                FOREIGN KEY(plan_id) REFERENCES diet_plans(id) ON DELETE CASCADE,
                FOREIGN KEY(food_id) REFERENCES foods(id),
                FOREIGN KEY(product_id) REFERENCES products(id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_diet_plan_items_plan ON diet_plan_items(plan_id);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS orders (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                total_amount_cents INTEGER NOT NULL DEFAULT 0,
                status TEXT NOT NULL CHECK (status IN ('Cart', 'Pending', 'Shipped', 'Delivered', 'Cancelled')),
                shipping_address TEXT,
                order_date TEXT,
                created_at TEXT NOT NULL
            );
            """
        )
        # One open cart per user.
        cur.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_orders_one_cart_per_user ON orders(user_id) WHERE status = 'Cart';"
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_orders_user_status_date ON orders(user_id, status, order_date DESC);"
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS order_items (
                id TEXT PRIMARY KEY,
                order_id TEXT NOT NULL,
                product_id TEXT NOT NULL,
                quantity INTEGER NOT NULL CHECK (quantity > 0),
                price_at_purchase_cents INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                UNIQUE (order_id, product_id),
                FOREIGN KEY(order_id) REFERENCES orders(id) ON DELETE CASCADE,
                FOREIGN KEY(product_id) REFERENCES products(id)
            );
            """
        )
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Autocommit connection for reads and single-statement writes."""
    conn = connect(db_path or settings.db_path)
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def transaction(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Scoped write transaction: COMMIT on success, ROLLBACK on any exception.

    BEGIN IMMEDIATE takes the database write lock before the first read, so
    check-then-write sequences (stock checks, get-or-create) are serialized
    against every other writer. The connection is closed on every exit path.
    """
    conn = connect(db_path or settings.db_path)
    try:
        conn.execute("BEGIN IMMEDIATE;")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK;")
            raise
        conn.execute("COMMIT;")
    finally:
        conn.close()
