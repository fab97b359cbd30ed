"""
API package initialization.

Router modules:
- analysis: creator analysis, product/creator matching, cache invalidation
- catalog: creator and product browsing
"""

from fastapi import APIRouter

from creator_match.api.analysis import router as analysis_router
from creator_match.api.catalog import router as catalog_router

# Create main API router
api_router = APIRouter()

api_router.include_router(analysis_router, tags=["analysis"])
api_router.include_router(catalog_router, tags=["catalog"])

__all__ = [
    "api_router",
    "analysis_router",
    "catalog_router",
]
