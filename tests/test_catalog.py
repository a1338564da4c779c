# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import unittest
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient


class TestCatalog(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fitfusion-test-"))
        os.environ["FITFUSION_DATA_ROOT"] = str(cls._tmp)
        os.environ["FITFUSION_DB_PATH"] = str(cls._tmp / "fitfusion.db")
        os.environ["FITFUSION_JWT_SECRET"] = "test-secret"

        for name in list(sys.modules.keys()):
            if name.startswith("fitfusion"):
                sys.modules.pop(name, None)

        from fitfusion.api import app  # noqa: WPS433
        from fitfusion.auth.security import create_access_token  # noqa: WPS433
        from fitfusion.catalog import storage  # noqa: WPS433
        from fitfusion.catalog.models import ProductCreateRequest  # noqa: WPS433
        from fitfusion import errors  # noqa: WPS433

        cls.client = TestClient(app)
        cls.catalog = storage
        cls.errors = errors
        cls.ProductCreateRequest = ProductCreateRequest
        cls.headers = {"Authorization": f"Bearer {create_access_token(user_id='reviewer')}"}
        cls.other = {"Authorization": f"Bearer {create_access_token(user_id='second-reviewer')}"}

        cls.category = storage.create_category("Supplements")
        cls.supplier = storage.create_supplier("Peak Nutrition")

    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _product(self, name: str, price: str = "10.00", stock: int = 10) -> dict:
        return self.catalog.create_product(
            self.ProductCreateRequest(
                name=name,
                price=Decimal(price),
                stock_quantity=stock,
                category_id=self.category["category_id"],
                supplier_id=self.supplier["supplier_id"],
            )
        )

    def test_money_round_trips_through_cents(self) -> None:
        self.assertEqual(self.catalog.to_cents(Decimal("19.99")), 1999)
        self.assertEqual(self.catalog.to_cents("0.005"), 1)
        self.assertEqual(self.catalog.from_cents(1999), Decimal("19.99"))
        self.assertEqual(self.catalog.from_cents(None), Decimal("0.00"))

    def test_duplicate_category_conflicts(self) -> None:
        with self.assertRaises(self.errors.Conflict):
            self.catalog.create_category("Supplements")

    def test_unknown_category_is_not_found(self) -> None:
        with self.assertRaises(self.errors.NotFound):
            self.catalog.create_product(self.ProductCreateRequest(name="Orphan", price=Decimal("1"), category_id="nope"))

    def test_list_categories(self) -> None:
        resp = self.client.get("/api/products/categories/list", headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertIn("Supplements", [c["name"] for c in resp.json()["categories"]])

    def test_product_detail_includes_names_and_rating(self) -> None:
        product = self._product("Whey Isolate", "54.90")
        product_id = product["product_id"]

        resp = self.client.post(
            f"/api/products/{product_id}/reviews",
            json={"rating": 5, "comment": "Mixes well"},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        resp = self.client.post(f"/api/products/{product_id}/reviews", json={"rating": 2}, headers=self.other)
        self.assertEqual(resp.status_code, 201, resp.text)

        resp = self.client.get(f"/api/products/{product_id}", headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["product"]["category_name"], "Supplements")
        self.assertEqual(body["product"]["supplier_name"], "Peak Nutrition")
        self.assertEqual(body["product"]["review_count"], 2)
        self.assertAlmostEqual(body["product"]["avg_rating"], 3.5)
        self.assertEqual(len(body["reviews"]), 2)

    def test_unknown_product_is_not_found(self) -> None:
        resp = self.client.get("/api/products/missing", headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "not_found")

    def test_second_review_conflicts(self) -> None:
        product_id = self._product("BCAA Powder")["product_id"]
        first = self.client.post(f"/api/products/{product_id}/reviews", json={"rating": 4}, headers=self.headers)
        self.assertEqual(first.status_code, 201, first.text)

        again = self.client.post(f"/api/products/{product_id}/reviews", json={"rating": 1}, headers=self.headers)
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["error"], "conflict")

        reviews = self.catalog.list_reviews(product_id)
        self.assertEqual([r["rating"] for r in reviews], [4])

    def test_rating_must_be_one_to_five(self) -> None:
        product_id = self._product("Fish Oil")["product_id"]
        for rating in (0, 6):
            resp = self.client.post(f"/api/products/{product_id}/reviews", json={"rating": rating}, headers=self.headers)
            self.assertEqual(resp.status_code, 400, rating)
        resp = self.client.post("/api/products/missing/reviews", json={"rating": 3}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_inventory_listing_and_update(self) -> None:
        product_id = self._product("Electrolyte Tabs", "7.25", 12)["product_id"]

        resp = self.client.get(
            "/api/supplier-inventory",
            params={"supplier_id": self.supplier["supplier_id"]},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        row = next(r for r in resp.json() if r["id"] == product_id)
        self.assertEqual(row["stock_quantity"], 12)
        self.assertTrue(row["inStock"])
        self.assertEqual(row["price"], "7.25")

        resp = self.client.put(
            "/api/supplier-inventory",
            json={"id": product_id, "stock_quantity": 0, "inStock": False},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["product"]["stock_quantity"], 0)
        self.assertFalse(resp.json()["product"]["in_stock"])

        resp = self.client.put(
            "/api/supplier-inventory",
            json={"id": product_id, "stock_quantity": -1},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put("/api/supplier-inventory", json={"id": "missing", "inStock": True}, headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_oversized_stock_is_rejected(self) -> None:
        product_id = self._product("Massage Gun", "89.00", 3)["product_id"]
        resp = self.client.put(
            "/api/supplier-inventory",
            json={"id": product_id, "stock_quantity": 10**20},
            headers=self.headers,
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "validation_error")
        self.assertEqual(self.catalog.get_product(product_id)["stock_quantity"], 3)

        with self.assertRaises(self.errors.ValidationError):
            self.catalog.update_inventory(product_id, stock_quantity=10**20)

    def test_restock_without_flag_follows_stock_level(self) -> None:
        product_id = self._product("Lifting Belt", "35.00", 2)["product_id"]

        resp = self.client.put("/api/supplier-inventory", json={"id": product_id, "stock_quantity": 0}, headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertFalse(resp.json()["product"]["in_stock"])

        resp = self.client.put("/api/supplier-inventory", json={"id": product_id, "stock_quantity": 6}, headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertTrue(resp.json()["product"]["in_stock"])

        # An explicit flag still wins.
        resp = self.client.put(
            "/api/supplier-inventory",
            json={"id": product_id, "stock_quantity": 6, "inStock": False},
            headers=self.headers,
        )
        self.assertFalse(resp.json()["product"]["in_stock"])

        # Flag-only updates keep the stock level.
        product = self.catalog.update_inventory(product_id, in_stock=True)
        self.assertEqual(product["stock_quantity"], 6)
        self.assertTrue(product["in_stock"])

    def test_health_is_public(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"ok": True})


if __name__ == "__main__":
    unittest.main()
