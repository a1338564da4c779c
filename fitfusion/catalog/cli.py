# -*- coding: utf-8 -*-
"""
CLI tool for filling the product catalog.

Usage:
    python -m fitfusion.catalog.cli category <name>
    python -m fitfusion.catalog.cli supplier <name>
    python -m fitfusion.catalog.cli product <name> --price 19.99 [--stock 10] [--category NAME] [--supplier NAME]
    python -m fitfusion.catalog.cli load <seed.json>
    python -m fitfusion.catalog.cli list

A seed file looks like:
    {"categories": ["Supplements"],
     "suppliers": ["Peak Nutrition"],
     "products": [{"name": "Whey", "price": "54.90", "stock_quantity": 20,
                   "category": "Supplements", "supplier": "Peak Nutrition"}]}
Categories and suppliers that already exist are reused by name.
"""

from __future__ import annotations

import argparse
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as ModelValidationError

from ..app_db import init_app_db
from ..errors import AppError
from .models import ProductCreateRequest
from .storage import (
    create_category,
    create_product,
    create_supplier,
    list_categories,
    list_inventory,
    list_suppliers,
)


def _category_id(name: str) -> str:
    for cat in list_categories():
        if cat["name"] == name.strip():
            return cat["category_id"]
    return create_category(name)["category_id"]


def _supplier_id(name: str) -> str:
    for sup in list_suppliers():
        if sup["name"] == name.strip():
            return sup["supplier_id"]
    return create_supplier(name)["supplier_id"]


def _add_product(entry: Dict[str, Any]) -> Dict[str, Any]:
    category = entry.get("category")
    supplier = entry.get("supplier")
    request = ProductCreateRequest(
        name=entry.get("name") or "",
        description=entry.get("description"),
        price=Decimal(str(entry.get("price", "0"))),
        stock_quantity=int(entry.get("stock_quantity", 0)),
        category_id=_category_id(category) if category else None,
        supplier_id=_supplier_id(supplier) if supplier else None,
    )
    return create_product(request)


def cmd_category(args: argparse.Namespace) -> int:
    print(f"Category {args.name}: {_category_id(args.name)}")
    return 0


def cmd_supplier(args: argparse.Namespace) -> int:
    print(f"Supplier {args.name}: {_supplier_id(args.name)}")
    return 0


def cmd_product(args: argparse.Namespace) -> int:
    product = _add_product(
        {
            "name": args.name,
            "description": args.description,
            "price": args.price,
            "stock_quantity": args.stock,
            "category": args.category,
            "supplier": args.supplier,
        }
    )
    print(f"Product {product['name']}: {product['product_id']}")
    return 0


def cmd_load(args: argparse.Namespace) -> int:
    """Load categories, suppliers and products from a JSON seed file."""
    source = Path(args.source)
    if not source.exists():
        print(f"Error: Seed file not found: {source}")
        return 1

    seed = json.loads(source.read_text(encoding="utf-8"))
    for name in seed.get("categories") or []:
        _category_id(name)
    for name in seed.get("suppliers") or []:
        _supplier_id(name)
    products: List[Dict[str, Any]] = seed.get("products") or []
    for entry in products:
        _add_product(entry)

    print(f"Loaded {len(products)} products from {source}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:  # noqa: ARG001
    items = list_inventory()
    if not items:
        print("Catalog is empty.")
        return 0
    for item in items:
        flag = "in stock" if item["in_stock"] else "out of stock"
        print(f"{item['id']}  {item['name']}  {item['price']}  qty={item['stock_quantity']} ({flag})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="FitFusion catalog CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    category_parser = subparsers.add_parser("category", help="Add a category (reused if it exists)")
    category_parser.add_argument("name")

    supplier_parser = subparsers.add_parser("supplier", help="Add a supplier (reused if it exists)")
    supplier_parser.add_argument("name")

    product_parser = subparsers.add_parser("product", help="Add a product")
    product_parser.add_argument("name")
    product_parser.add_argument("--price", required=True, help="Unit price, e.g. 19.99")
    product_parser.add_argument("--stock", type=int, default=0, help="Initial stock (default: 0)")
    product_parser.add_argument("--description")
    product_parser.add_argument("--category", help="Category name")
    product_parser.add_argument("--supplier", help="Supplier name")

    load_parser = subparsers.add_parser("load", help="Load a JSON seed file")
    load_parser.add_argument("source", help="Path to seed JSON")

    subparsers.add_parser("list", help="List products with stock")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "category": cmd_category,
        "supplier": cmd_supplier,
        "product": cmd_product,
        "load": cmd_load,
        "list": cmd_list,
    }
    init_app_db()
    try:
        return commands[args.command](args)
    except AppError as exc:
        print(f"Error: {exc.message}")
        return 1
    except (ModelValidationError, InvalidOperation) as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
