"""
Package initialization file for the matching engine models.

Re-exports every Pydantic schema and enumeration from schemas.py and enums.py
so other modules can import data models from creator_match.models directly.

Usage:
    from creator_match.models import (
        Creator,
        Product,
        SaleRecord,
        ProductMatch,
        # ... etc
    )
"""

# =============================================================================
# Enums
# =============================================================================

from creator_match.models.enums import (
    Platform,
    Category,
    Season,
    CacheOperation,
    MatchSource,
    ErrorKind,
    TransientReason,
    FatalReason,
)


# =============================================================================
# Schemas
# =============================================================================

from creator_match.models.schemas import (
    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------
    Creator,
    Product,
    SaleRecord,

    # -------------------------------------------------------------------------
    # Aggregated profile
    # -------------------------------------------------------------------------
    CreatorSnapshot,
    ProfileSummary,
    CategoryBreakdown,
    PriceBucketSummary,
    SeasonalSummary,
    TopProduct,
    AggregatedProfile,

    # -------------------------------------------------------------------------
    # Scoring and prediction
    # -------------------------------------------------------------------------
    CATEGORY_WEIGHT,
    PRICE_WEIGHT,
    SEASON_WEIGHT,
    AUDIENCE_WEIGHT,
    ScoreBreakdown,
    RevenuePrediction,

    # -------------------------------------------------------------------------
    # Output records
    # -------------------------------------------------------------------------
    CategoryScore,
    PriceRange,
    SeasonalTrend,
    CreatorInsight,
    ProductMatch,
    CreatorMatch,

    # -------------------------------------------------------------------------
    # Reasoning-service response schemas
    # -------------------------------------------------------------------------
    TopCategoryReasoning,
    PriceRangeReasoning,
    SeasonalTrendReasoning,
    InsightReasoningResponse,
    PredictedRevenueReasoning,
    ProductMatchReasoning,
    ProductMatchListResponse,
    CreatorMatchReasoning,
    CreatorMatchListResponse,

    # -------------------------------------------------------------------------
    # Creator statistics
    # -------------------------------------------------------------------------
    TopProductStat,
    CreatorStats,

    # -------------------------------------------------------------------------
    # HTTP request / response
    # -------------------------------------------------------------------------
    AnalyzeRequest,
    ProductMatchRequest,
    CreatorMatchRequest,
    CacheInvalidateRequest,
    Pagination,
    CreatorWithStats,
    InsightResponse,
    ProductMatchesResponse,
    CreatorMatchesResponse,
    CreatorListResponse,
    CreatorDetailResponse,
    ProductListResponse,
    CacheInvalidateResult,
    CacheInvalidateResponse,
)


__all__ = [
    # Enums
    'Platform',
    'Category',
    'Season',
    'CacheOperation',
    'MatchSource',
    'ErrorKind',
    'TransientReason',
    'FatalReason',
    # Reference data
    'Creator',
    'Product',
    'SaleRecord',
    # Aggregated profile
    'CreatorSnapshot',
    'ProfileSummary',
    'CategoryBreakdown',
    'PriceBucketSummary',
    'SeasonalSummary',
    'TopProduct',
    'AggregatedProfile',
    # Scoring and prediction
    'CATEGORY_WEIGHT',
    'PRICE_WEIGHT',
    'SEASON_WEIGHT',
    'AUDIENCE_WEIGHT',
    'ScoreBreakdown',
    'RevenuePrediction',
    # Output records
    'CategoryScore',
    'PriceRange',
    'SeasonalTrend',
    'CreatorInsight',
    'ProductMatch',
    'CreatorMatch',
    # Reasoning-service response schemas
    'TopCategoryReasoning',
    'PriceRangeReasoning',
    'SeasonalTrendReasoning',
    'InsightReasoningResponse',
    'PredictedRevenueReasoning',
    'ProductMatchReasoning',
    'ProductMatchListResponse',
    'CreatorMatchReasoning',
    'CreatorMatchListResponse',
    # Creator statistics
    'TopProductStat',
    'CreatorStats',
    # HTTP request / response
    'AnalyzeRequest',
    'ProductMatchRequest',
    'CreatorMatchRequest',
    'CacheInvalidateRequest',
    'Pagination',
    'CreatorWithStats',
    'InsightResponse',
    'ProductMatchesResponse',
    'CreatorMatchesResponse',
    'CreatorListResponse',
    'CreatorDetailResponse',
    'ProductListResponse',
    'CacheInvalidateResult',
    'CacheInvalidateResponse',
]
