"""
In-memory Catalog Store

Read-only holder of the creators, products and sale records the engine
works on. The engine itself never touches storage: routes fetch the
collections they need from this store and pass them to the orchestrator.

Data Source:
- A JSON snapshot with top-level "creators", "products" and "sales" arrays,
  validated through the pydantic reference models
- An empty store when no snapshot is configured

Listing Helpers:
- Creators: filter by platform / category / name search, sort by name,
  followers, engagement or join date
- Products: filter by category / price range / text search, sort by name,
  price or category
- Page-based pagination with total/totalPages/hasNext/hasPrev
"""

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from creator_match.core.errors import EntityNotFoundError
from creator_match.models import Creator, Pagination, Product, SaleRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREATOR_SORT_FIELDS = ("name", "followers", "engagement", "createdAt")
PRODUCT_SORT_FIELDS = ("name", "price", "category")


def paginate(items: Sequence[T], page: int, limit: int) -> Tuple[List[T], Pagination]:
    """
    Slice one page out of a list.

    Args:
        items: Full, already filtered and sorted list
        page: 1-based page number
        limit: Page size

    Returns:
        (page items, Pagination block)
    """
    total = len(items)
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    start = (page - 1) * limit

    return list(items[start:start + limit]), Pagination(
        page=page,
        limit=limit,
        total=total,
        totalPages=total_pages,
        hasNext=page < total_pages,
        hasPrev=page > 1,
    )


class CatalogStore:
    """
    In-memory creators, products and sales.

    Args:
        creators: Creator reference records
        products: Product reference records
        sales: Sale records for any creator/product
    """

    def __init__(
        self,
        creators: Sequence[Creator] = (),
        products: Sequence[Product] = (),
        sales: Sequence[SaleRecord] = (),
    ):
        self._creators: Dict[str, Creator] = {creator.id: creator for creator in creators}
        self._products: Dict[str, Product] = {product.id: product for product in products}
        self._sales: List[SaleRecord] = list(sales)

        self._sales_by_creator: Dict[str, List[SaleRecord]] = {}
        self._sales_by_product: Dict[str, List[SaleRecord]] = {}
        for sale in self._sales:
            self._sales_by_creator.setdefault(sale.creatorId, []).append(sale)
            self._sales_by_product.setdefault(sale.productId, []).append(sale)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "CatalogStore":
        """
        Load a snapshot file.

        Raises:
            FileNotFoundError: The path does not exist
            pydantic.ValidationError: A record does not match its model
        """
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)

        store = cls(
            creators=[Creator.model_validate(item) for item in raw.get("creators", [])],
            products=[Product.model_validate(item) for item in raw.get("products", [])],
            sales=[SaleRecord.model_validate(item) for item in raw.get("sales", [])],
        )
        logger.info(
            f"Loaded catalog from {path}: {len(store._creators)} creators, "
            f"{len(store._products)} products, {len(store._sales)} sales"
        )
        return store

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def list_creators(self) -> List[Creator]:
        return list(self._creators.values())

    def list_products(self) -> List[Product]:
        return list(self._products.values())

    def get_creator(self, creator_id: str) -> Creator:
        creator = self._creators.get(creator_id)
        if creator is None:
            raise EntityNotFoundError("Creator", creator_id)
        return creator

    def get_product(self, product_id: str) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise EntityNotFoundError("Product", product_id)
        return product

    def products_by_id(self) -> Mapping[str, Product]:
        return dict(self._products)

    def sales_for_creator(self, creator_id: str) -> List[SaleRecord]:
        return list(self._sales_by_creator.get(creator_id, []))

    def sales_for_product(self, product_id: str) -> List[SaleRecord]:
        return list(self._sales_by_product.get(product_id, []))

    def sales_by_creator(self) -> Dict[str, List[SaleRecord]]:
        return {creator_id: list(sales) for creator_id, sales in self._sales_by_creator.items()}

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def query_creators(
        self,
        platform: Optional[str] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = "name",
        order: str = "asc",
    ) -> List[Creator]:
        """Filter and sort creators. Text filters are case-insensitive."""
        creators = self.list_creators()

        if platform:
            creators = [c for c in creators if c.platform.value.lower() == platform.lower()]
        if category:
            wanted = category.lower()
            creators = [c for c in creators if any(cat.lower() == wanted for cat in c.categories)]
        if search:
            needle = search.lower()
            creators = [c for c in creators if needle in c.name.lower()]

        sort_keys = {
            "name": lambda c: c.name,
            "followers": lambda c: c.followers,
            "engagement": lambda c: c.engagementRate,
            "createdAt": lambda c: c.joinedAt.timestamp() if c.joinedAt else 0.0,
        }
        creators.sort(key=sort_keys.get(sort, sort_keys["name"]), reverse=(order == "desc"))
        return creators

    def query_products(
        self,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        sort: str = "name",
        order: str = "asc",
    ) -> List[Product]:
        """Filter and sort products. search matches name, brand or description."""
        products = self.list_products()

        if category:
            products = [p for p in products if p.category.lower() == category.lower()]
        if min_price is not None:
            products = [p for p in products if p.price >= min_price]
        if max_price is not None:
            products = [p for p in products if p.price <= max_price]
        if search:
            needle = search.lower()
            products = [
                p for p in products
                if needle in p.name.lower()
                or needle in p.brand.lower()
                or needle in p.description.lower()
            ]

        sort_keys = {
            "name": lambda p: p.name,
            "price": lambda p: p.price,
            "category": lambda p: p.category,
        }
        products.sort(key=sort_keys.get(sort, sort_keys["name"]), reverse=(order == "desc"))
        return products
