"""
FastAPI router for creator analysis and matching.

Implements:
- POST /analyze: AI insight for one creator
- POST /match: products ranked for one creator
- POST /match/creators: creators ranked for one product
- POST /cache/invalidate: purge cached results

Handlers stay thin: resolve ids through the catalog, hand collections to the
orchestrator, wrap the result in the {"success": true, "data": ...}
envelope. MatchEngineError subclasses propagate to the application-level
exception handler, which renders them as structured error bodies.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.exceptions import RequestValidationError

from creator_match.core.config import Settings
from creator_match.core.dependencies import CatalogDep, OrchestratorDep, SettingsDep
from creator_match.core.errors import MatchEngineError
from creator_match.models import (
    AnalyzeRequest,
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheInvalidateResult,
    CreatorMatchesResponse,
    CreatorMatchRequest,
    InsightResponse,
    ProductMatchesResponse,
    ProductMatchRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_limit(limit: Optional[int], settings: Settings) -> None:
    """Reject a limit above max_match_limit as a request validation error."""
    if limit is not None and limit > settings.max_match_limit:
        raise RequestValidationError([
            {
                "type": "less_than_equal",
                "loc": ("body", "limit"),
                "msg": f"Input should be less than or equal to {settings.max_match_limit}",
                "input": limit,
                "ctx": {"le": settings.max_match_limit},
            }
        ])


@router.post("/analyze", response_model=InsightResponse)
async def analyze_creator(
    body: AnalyzeRequest,
    orchestrator: OrchestratorDep,
    catalog: CatalogDep,
) -> InsightResponse:
    """
    Analyze a creator's sales history.

    Args:
        body: {"creatorId": "creator-001"}

    Returns:
        {"success": true, "data": CreatorInsight}

    Raises:
        404 NOT_FOUND: Unknown creator
        400 INSUFFICIENT_DATA: Fewer than 5 sale records
        429/500/503: Reasoning-service failures (no fallback for analysis)
    """
    try:
        creator = catalog.get_creator(body.creatorId)
        sales = catalog.sales_for_creator(creator.id)
        insight = await orchestrator.analyze_creator(creator, sales)
        return InsightResponse(data=insight)
    except MatchEngineError:
        raise
    except Exception as e:
        logger.error(f"Error analyzing creator {body.creatorId}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to analyze creator") from e


@router.post("/match", response_model=ProductMatchesResponse)
async def match_products(
    body: ProductMatchRequest,
    orchestrator: OrchestratorDep,
    catalog: CatalogDep,
    settings: SettingsDep,
) -> ProductMatchesResponse:
    """
    Rank catalog products for a creator.

    Falls back to heuristic scores when the reasoning service is
    unavailable, so reasoning failures never surface here.

    Args:
        body: {"creatorId": "creator-001", "limit": 10}

    Returns:
        {"success": true, "data": [ProductMatch, ...]}
    """
    _check_limit(body.limit, settings)

    try:
        creator = catalog.get_creator(body.creatorId)
        matches = await orchestrator.match_products(
            creator,
            catalog.sales_for_creator(creator.id),
            catalog.list_products(),
            body.limit,
        )
        return ProductMatchesResponse(data=matches)
    except MatchEngineError:
        raise
    except Exception as e:
        logger.error(f"Error matching products for {body.creatorId}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to match products") from e


@router.post("/match/creators", response_model=CreatorMatchesResponse)
async def match_creators(
    body: CreatorMatchRequest,
    orchestrator: OrchestratorDep,
    catalog: CatalogDep,
    settings: SettingsDep,
) -> CreatorMatchesResponse:
    """
    Rank creators for a product.

    Args:
        body: {"productId": "product-001", "limit": 10}

    Returns:
        {"success": true, "data": [CreatorMatch, ...]}
    """
    _check_limit(body.limit, settings)

    try:
        product = catalog.get_product(body.productId)
        matches = await orchestrator.match_creators(
            product,
            catalog.list_creators(),
            catalog.sales_by_creator(),
            body.limit,
        )
        return CreatorMatchesResponse(data=matches)
    except MatchEngineError:
        raise
    except Exception as e:
        logger.error(f"Error matching creators for {body.productId}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to match creators") from e


@router.post("/cache/invalidate", response_model=CacheInvalidateResponse)
async def invalidate_cache(
    body: CacheInvalidateRequest,
    orchestrator: OrchestratorDep,
) -> CacheInvalidateResponse:
    """
    Purge cached results for one creator, or everything when creatorId is omitted.

    Returns:
        {"success": true, "data": {"removed": <entries removed>}}
    """
    if body.creatorId:
        removed = orchestrator.invalidate_creator_cache(body.creatorId)
    else:
        removed = len(orchestrator.cache)
        orchestrator.clear_cache()
        logger.info(f"Cleared result cache ({removed} entries)")

    return CacheInvalidateResponse(data=CacheInvalidateResult(removed=removed))
