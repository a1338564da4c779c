# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import threading
import unittest
from pathlib import Path


class TestFoodResolver(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fitfusion-test-"))
        os.environ["FITFUSION_DATA_ROOT"] = str(cls._tmp)
        os.environ["FITFUSION_DB_PATH"] = str(cls._tmp / "fitfusion.db")

        for name in list(sys.modules.keys()):
            if name.startswith("fitfusion"):
                sys.modules.pop(name, None)

        from fitfusion import app_db, errors  # noqa: WPS433
        from fitfusion.foods import storage  # noqa: WPS433
        from fitfusion.foods.models import FoodFacts  # noqa: WPS433

        app_db.init_app_db()
        cls.app_db = app_db
        cls.errors = errors
        cls.foods = storage
        cls.FoodFacts = FoodFacts

    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _count(self, name: str) -> int:
        with self.app_db.db_conn() as conn:
            return conn.execute("SELECT COUNT(*) AS n FROM foods WHERE name = ?", (name,)).fetchone()["n"]

    def test_same_name_returns_same_id(self) -> None:
        with self.app_db.transaction() as conn:
            first = self.foods.resolve_food_id(conn, "Brown Rice", self.FoodFacts(calories=111, carbs=23))
        with self.app_db.transaction() as conn:
            second = self.foods.resolve_food_id(conn, "Brown Rice")
        self.assertEqual(first, second)
        self.assertEqual(self._count("Brown Rice"), 1)

    def test_existing_facts_are_not_overwritten(self) -> None:
        with self.app_db.transaction() as conn:
            food_id = self.foods.resolve_food_id(conn, "Banana", self.FoodFacts(calories=89, carbs=23))
            again = self.foods.resolve_food_id(conn, "Banana", self.FoodFacts(calories=500, carbs=1))
            food = self.foods.get_food(conn, food_id)
        self.assertEqual(food_id, again)
        self.assertEqual(food["calories_per_100g"], 89.0)
        self.assertEqual(food["carbs_per_100g"], 23.0)

    def test_match_is_case_sensitive(self) -> None:
        with self.app_db.transaction() as conn:
            lower = self.foods.resolve_food_id(conn, "apple")
            upper = self.foods.resolve_food_id(conn, "Apple")
        self.assertNotEqual(lower, upper)

    def test_blank_name_is_rejected(self) -> None:
        with self.app_db.transaction() as conn:
            with self.assertRaises(self.errors.ValidationError):
                self.foods.resolve_food_id(conn, "   ")

    def test_insert_rolls_back_with_enclosing_transaction(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.app_db.transaction() as conn:
                self.foods.resolve_food_id(conn, "Doomed Lentils")
                raise RuntimeError("downstream failure")
        self.assertEqual(self._count("Doomed Lentils"), 0)

    def test_concurrent_first_calls_create_one_row(self) -> None:
        barrier = threading.Barrier(6)
        ids: list[str] = []
        failures: list[BaseException] = []

        def worker() -> None:
            try:
                barrier.wait()
                with self.app_db.transaction() as conn:
                    ids.append(self.foods.resolve_food_id(conn, "Greek Yogurt", self.FoodFacts(calories=59)))
            except BaseException as exc:  # noqa: BLE001
                failures.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(failures, [])
        self.assertEqual(len(set(ids)), 1)
        self.assertEqual(self._count("Greek Yogurt"), 1)

    def test_unique_violation_is_treated_as_existing(self) -> None:
        # Simulate a writer that inserted the name between our lookup and insert.
        with self.app_db.transaction() as conn:
            winner = self.foods.resolve_food_id(conn, "Quinoa")

        original_lookup = self.foods._lookup_id
        calls = {"n": 0}

        def stale_first_lookup(c, name):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return original_lookup(c, name)

        self.foods._lookup_id = stale_first_lookup
        try:
            with self.app_db.transaction() as conn:
                resolved = self.foods.resolve_food_id(conn, "Quinoa")
        finally:
            self.foods._lookup_id = original_lookup

        self.assertEqual(resolved, winner)
        self.assertEqual(self._count("Quinoa"), 1)


if __name__ == "__main__":
    unittest.main()
