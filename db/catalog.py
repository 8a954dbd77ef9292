"""
Product catalog file.

The catalog is a JSON document ``{"products": [...]}``. Products are read at
the start of a run and written back at the end with their updated status.
"""

import json
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from models.errors import CatalogError
from models.models import Product


logger = logging.getLogger(__name__)


class Catalog:
    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> List[Product]:
        """
        Read every product from the catalog.

        Raises:
            CatalogError: The file is missing, not JSON, or a record is invalid.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise CatalogError(f"catalog not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise CatalogError(f"catalog {self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("products", []), list):
            raise CatalogError(f"catalog {self.path} must be an object with a 'products' list")

        try:
            products = [Product.model_validate(record) for record in data.get("products", [])]
        except ValidationError as e:
            raise CatalogError(f"invalid product in {self.path}: {e}") from e

        logger.info("Loaded %d products from %s", len(products), self.path)
        return products

    def save(self, products: List[Product]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"products": [p.model_dump(mode="json", by_alias=True) for p in products]}

        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise CatalogError(f"could not write catalog {self.path}: {e}") from e

        logger.info("Saved %d products to %s", len(products), self.path)
