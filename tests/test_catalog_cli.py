# -*- coding: utf-8 -*-

from __future__ import annotations

import io
import json
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from decimal import Decimal
from pathlib import Path


class TestCatalogCli(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="fitfusion-test-"))
        os.environ["FITFUSION_DATA_ROOT"] = str(cls._tmp)
        os.environ["FITFUSION_DB_PATH"] = str(cls._tmp / "fitfusion.db")

        for name in list(sys.modules.keys()):
            if name.startswith("fitfusion"):
                sys.modules.pop(name, None)

        from fitfusion.catalog import cli, storage  # noqa: WPS433

        cls.cli = cli
        cls.catalog = storage

    @classmethod
    def tearDownClass(cls) -> None:
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out):
            code = self.cli.main(list(argv))
        return code, out.getvalue()

    def test_load_seed_file(self) -> None:
        seed = self._tmp / "seed.json"
        seed.write_text(
            json.dumps(
                {
                    "categories": ["Recovery"],
                    "suppliers": ["Northside Labs"],
                    "products": [
                        {
                            "name": "Magnesium Glycinate",
                            "price": "18.50",
                            "stock_quantity": 40,
                            "category": "Recovery",
                            "supplier": "Northside Labs",
                        },
                        {"name": "Sleep Mask", "price": 9, "category": "Recovery"},
                    ],
                }
            ),
            encoding="utf-8",
        )

        code, out = self._run("load", str(seed))
        self.assertEqual(code, 0, out)
        self.assertIn("Loaded 2 products", out)

        names = {p["name"]: p for p in self.catalog.list_inventory()}
        self.assertEqual(names["Magnesium Glycinate"]["price"], Decimal("18.50"))
        self.assertEqual(names["Magnesium Glycinate"]["stock_quantity"], 40)
        self.assertTrue(names["Magnesium Glycinate"]["in_stock"])
        self.assertFalse(names["Sleep Mask"]["in_stock"])

        product = self.catalog.get_product(names["Magnesium Glycinate"]["id"])
        self.assertEqual(product["category_name"], "Recovery")
        self.assertEqual(product["supplier_name"], "Northside Labs")

    def test_category_and_supplier_are_reused_by_name(self) -> None:
        self.assertEqual(self._run("category", "Hydration")[0], 0)
        self.assertEqual(self._run("category", "Hydration")[0], 0)
        self.assertEqual(self._run("supplier", "Aqua Co")[0], 0)
        self.assertEqual(self._run("supplier", "Aqua Co")[0], 0)

        self.assertEqual([c["name"] for c in self.catalog.list_categories()].count("Hydration"), 1)
        self.assertEqual([s["name"] for s in self.catalog.list_suppliers()].count("Aqua Co"), 1)

    def test_product_command_and_list(self) -> None:
        code, out = self._run("product", "Jump Box", "--price", "120.00", "--stock", "3", "--supplier", "Box Works")
        self.assertEqual(code, 0, out)

        code, out = self._run("list")
        self.assertEqual(code, 0)
        self.assertIn("Jump Box", out)
        self.assertIn("qty=3 (in stock)", out)

    def test_bad_input_is_reported(self) -> None:
        code, out = self._run("product", "Broken", "--price", "not-a-price")
        self.assertEqual(code, 1)
        self.assertIn("Error", out)

        code, out = self._run("product", "Too Many", "--price", "1", "--stock", str(10**20))
        self.assertEqual(code, 1)
        self.assertIn("Error", out)

        code, out = self._run("load", str(self._tmp / "missing.json"))
        self.assertEqual(code, 1)
        self.assertIn("not found", out)


if __name__ == "__main__":
    unittest.main()
