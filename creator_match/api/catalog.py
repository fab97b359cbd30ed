"""
FastAPI router for browsing creators and products.

Implements:
- GET /creators: paginated, filterable creator list
- GET /creators/{creator_id}: one creator with headline sales stats
- GET /products: paginated, filterable product list
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Query

from creator_match.core.dependencies import CatalogDep
from creator_match.models import (
    CreatorDetailResponse,
    CreatorListResponse,
    CreatorWithStats,
    ProductListResponse,
)
from creator_match.services.aggregation import compute_creator_stats
from creator_match.services.catalog import paginate

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@router.get("/creators", response_model=CreatorListResponse)
async def list_creators(
    catalog: CatalogDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    platform: Optional[str] = Query(default=None, description="Instagram, YouTube, TikTok or Blog"),
    category: Optional[str] = Query(default=None, description="Category affinity"),
    search: Optional[str] = Query(default=None, description="Substring of the creator name"),
    sort: Literal["name", "followers", "engagement", "createdAt"] = Query(default="name"),
    order: Literal["asc", "desc"] = Query(default="asc"),
) -> CreatorListResponse:
    """
    List creators.

    Example Request:
        GET /creators?platform=instagram&sort=followers&order=desc&page=1&limit=20
    """
    creators = catalog.query_creators(
        platform=platform,
        category=category,
        search=search,
        sort=sort,
        order=order,
    )
    items, pagination = paginate(creators, page, limit)
    return CreatorListResponse(data=items, pagination=pagination)


@router.get("/creators/{creator_id}", response_model=CreatorDetailResponse)
async def get_creator(creator_id: str, catalog: CatalogDep) -> CreatorDetailResponse:
    """
    Get one creator with totals, average conversion rate, top category and top product.

    Raises:
        404 NOT_FOUND: Unknown creator
    """
    creator = catalog.get_creator(creator_id)
    stats = compute_creator_stats(catalog.sales_for_creator(creator_id), catalog.products_by_id())
    return CreatorDetailResponse(data=CreatorWithStats(**creator.model_dump(), stats=stats))


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    catalog: CatalogDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[str] = Query(default=None),
    minPrice: Optional[float] = Query(default=None, ge=0),
    maxPrice: Optional[float] = Query(default=None, ge=0),
    search: Optional[str] = Query(default=None, description="Matches name, brand or description"),
    sort: Literal["name", "price", "category"] = Query(default="name"),
    order: Literal["asc", "desc"] = Query(default="asc"),
) -> ProductListResponse:
    """List products with category, price-range and text filters."""
    products = catalog.query_products(
        category=category,
        min_price=minPrice,
        max_price=maxPrice,
        search=search,
        sort=sort,
        order=order,
    )
    items, pagination = paginate(products, page, limit)
    return ProductListResponse(data=items, pagination=pagination)
