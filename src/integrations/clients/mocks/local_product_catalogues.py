"""
Local Product Catalogue Client (Mock/Local).

Purpose:
- Acts as the storefront's product catalogue source while product data ships with the app.
- Loads product records from the bundled JSON files under data/catalog/:
    products-f.json  women's collection, grouped by category
    products-m.json  men's collection, grouped by category
    products.json    homepage selections (featured product ids)

Usage:
- Wired in src/api/services.py
- Read by the /api/products endpoints through the CatalogueClient interface

Records failing validate_product() are skipped with a warning instead of
breaking the whole catalogue.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from src.catalog.query import validate_product
from src.integrations.contracts.interfaces import CatalogueClient, Gender, Product

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[4] / "data" / "catalog"

_COLLECTION_FILES = {
    Gender.WOMEN: "products-f.json",
    Gender.MEN: "products-m.json",
}


class LocalProductCatalogueClient(CatalogueClient):
    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self._collections: Dict[Gender, List[Product]] = {}
        self._featured_ids: List[str] = []
        self.reload()

    def reload(self) -> None:
        """Re-read the bundled JSON files."""
        self._collections = {
            gender: self._load_collection(self.data_dir / filename)
            for gender, filename in _COLLECTION_FILES.items()
        }
        highlights = self._read_json(self.data_dir / "products.json")
        self._featured_ids = [str(pid) for pid in highlights.get("featured", [])]
        logger.info(
            "Loaded catalogue from %s: %d women, %d men products",
            self.data_dir,
            len(self._collections[Gender.WOMEN]),
            len(self._collections[Gender.MEN]),
        )

    def _read_json(self, path: Path) -> dict:
        if not path.exists():
            logger.warning("Catalogue file not found: %s", path)
            return {}
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f) or {}

    def _load_collection(self, path: Path) -> List[Product]:
        products: List[Product] = []
        seen = set()
        for category, records in self._read_json(path).items():
            for record in records:
                result = validate_product(record)
                if not result.is_valid:
                    logger.warning("Skipping invalid product in %s/%s: %s", path.name, category, result.errors)
                    continue
                try:
                    product = Product.from_dict(record)
                except ValueError as e:
                    logger.warning("Skipping product with unknown value in %s/%s: %s", path.name, category, e)
                    continue
                if product.id in seen:
                    logger.warning("Skipping duplicate product id %s in %s", product.id, path.name)
                    continue
                seen.add(product.id)
                products.append(product)
        return products

    # -- CatalogueClient ------------------------------------------------------

    def list_products(self, gender: Optional[Gender] = None) -> List[Product]:
        if gender is not None:
            return list(self._collections.get(Gender(gender), []))
        combined: List[Product] = []
        seen = set()
        for gender_key in (Gender.WOMEN, Gender.MEN):
            for product in self._collections.get(gender_key, []):
                if product.id not in seen:
                    seen.add(product.id)
                    combined.append(product)
        return combined

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None

    def featured_products(self) -> List[Product]:
        by_id = {p.id: p for p in self.list_products()}
        return [by_id[pid] for pid in self._featured_ids if pid in by_id]
