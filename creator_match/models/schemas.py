"""
Pydantic models for the creator-product matching engine.

This module provides type-safe validation and serialization for every data
contract the engine touches:

- Reference data supplied by the data-access layer (Creator, Product, SaleRecord)
- The aggregated statistical profile built from a creator's sale history
- Output records (CreatorInsight, ProductMatch, CreatorMatch) with their
  ScoreBreakdown and RevenuePrediction parts
- Reasoning-service response schemas, used to validate model output before
  it is mapped into output records
- HTTP request/response envelopes for the thin API layer

Field names are camelCase because they are the JSON contract consumed by the
presentation layer. All models use Pydantic v2 syntax.

Numeric ranges enforced here:
- Every score sub-field and matchScore: [0, 100]
- Confidence: [0, 1] on every path
- RevenuePrediction: minimum <= expected <= maximum
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from creator_match.models.enums import MatchSource, Platform


# =============================================================================
# Reference Data Models
# =============================================================================


class Creator(BaseModel):
    """
    A content creator whose historical sales are analyzed.

    Immutable reference data supplied by the caller. Creators are expected
    to declare two or three category affinities.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "creator-001",
                "name": "김지은",
                "platform": "Instagram",
                "followers": 250000,
                "engagementRate": 4.2,
                "categories": ["Beauty", "Fashion"],
                "totalSales": 1520,
                "totalRevenue": 68400000,
            }
        }
    )

    id: str = Field(..., min_length=1, description="Creator identifier (creator-XXX)")
    name: str = Field(..., min_length=1, description="Display name")
    platform: Platform = Field(..., description="Primary publishing platform")
    followers: int = Field(..., ge=0, description="Follower count")
    engagementRate: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Engagement rate in percent"
    )
    categories: List[str] = Field(
        ...,
        min_length=2,
        max_length=3,
        description="Category affinities (2-3)"
    )
    totalSales: int = Field(default=0, ge=0, description="Lifetime units sold")
    totalRevenue: float = Field(default=0.0, ge=0.0, description="Lifetime revenue")
    profileImage: Optional[str] = Field(default=None, description="Profile image URL")
    email: Optional[str] = Field(default=None, description="Contact email")
    joinedAt: Optional[datetime] = Field(default=None, description="Join timestamp")

    @field_validator("platform", mode="before")
    @classmethod
    def _match_platform(cls, value):
        # Older data carries lowercase platform names ("blog")
        if isinstance(value, str):
            for platform in Platform:
                if platform.value.lower() == value.lower():
                    return platform
        return value


class Product(BaseModel):
    """
    A catalog product that can be promoted by a creator.

    avgCommissionRate is expressed in percent (15.0 means 15%).
    seasonality holds free-text season tags such as "Spring", "summer",
    "봄" or "all".
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "product-001",
                "name": "수분 크림",
                "brand": "라네즈",
                "category": "Beauty",
                "price": 45000,
                "seasonality": ["Spring", "Fall"],
                "targetAudience": ["20대 여성"],
                "avgCommissionRate": 15.0,
            }
        }
    )

    id: str = Field(..., min_length=1, description="Product identifier (product-XXX)")
    name: str = Field(..., min_length=1, description="Product name")
    brand: str = Field(default="", description="Brand name")
    category: str = Field(..., min_length=1, description="Product category")
    subcategory: Optional[str] = Field(default=None, description="Product subcategory")
    price: float = Field(..., ge=0.0, description="Sale price")
    originalPrice: Optional[float] = Field(default=None, ge=0.0, description="List price")
    description: str = Field(default="", description="Product description")
    imageUrl: Optional[str] = Field(default=None, description="Product image URL")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    targetAudience: List[str] = Field(default_factory=list, description="Target audience tags")
    seasonality: List[str] = Field(default_factory=list, description="Season tags")
    avgCommissionRate: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        description="Average commission rate in percent"
    )


class SaleRecord(BaseModel):
    """
    A single creator-product transaction.

    Immutable historical fact. The optional season field is informational
    only; aggregation always derives the season from the sale date.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Sale identifier (sale-XXXXX)")
    creatorId: str = Field(..., min_length=1)
    productId: str = Field(..., min_length=1)
    productName: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: float = Field(..., ge=0.0, description="Unit price at time of sale")
    quantity: int = Field(..., ge=1, description="Units sold")
    revenue: float = Field(..., ge=0.0)
    commission: float = Field(default=0.0, ge=0.0)
    date: datetime = Field(..., description="Sale timestamp")
    clickCount: int = Field(default=0, ge=0)
    conversionRate: float = Field(default=0.0, ge=0.0, le=100.0, description="Percent")
    originalPrice: Optional[float] = Field(default=None, ge=0.0)
    discountRate: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    commissionRate: Optional[float] = Field(default=None, ge=0.0)
    platform: Optional[str] = None
    season: Optional[str] = None


# =============================================================================
# Aggregated Profile Models
# =============================================================================


class CreatorSnapshot(BaseModel):
    """Creator identity fields carried inside an aggregated profile."""
    id: str
    name: str
    platform: str
    followers: int
    engagementRate: float


class ProfileSummary(BaseModel):
    """Totals over a creator's whole sale history."""
    totalRevenue: float = 0.0
    totalSales: int = 0
    averageOrderValue: float = 0.0


class CategoryBreakdown(BaseModel):
    """Per-category revenue summary. revenueShare is a percentage of total revenue."""
    category: str
    revenue: float
    salesCount: int
    averagePrice: float
    revenueShare: float


class PriceBucketSummary(BaseModel):
    """Sales inside one 10,000-unit price bucket, labelled "lower-upper"."""
    priceRange: str
    salesCount: int
    revenue: float


class SeasonalSummary(BaseModel):
    """Sales falling in one calendar season."""
    season: str
    salesCount: int
    revenue: float


class TopProduct(BaseModel):
    """A best-selling product, aggregated by product name."""
    name: str
    category: str
    price: float
    salesCount: int
    revenue: float


class AggregatedProfile(BaseModel):
    """
    Statistical profile derived from a creator's sale records.

    Built fresh per call by services.aggregation.aggregate_sales and never
    persisted.
    """
    creator: CreatorSnapshot
    summary: ProfileSummary
    categoryBreakdown: List[CategoryBreakdown] = Field(default_factory=list)
    priceDistribution: List[PriceBucketSummary] = Field(default_factory=list)
    seasonalPattern: List[SeasonalSummary] = Field(default_factory=list)
    topProducts: List[TopProduct] = Field(default_factory=list)

    @property
    def top_category(self) -> Optional[str]:
        """The single highest-revenue category, or None for an empty history."""
        if not self.categoryBreakdown:
            return None
        return self.categoryBreakdown[0].category


# =============================================================================
# Scoring and Prediction Models
# =============================================================================

# Weights applied to the four sub-scores to form matchScore
CATEGORY_WEIGHT: float = 0.4
PRICE_WEIGHT: float = 0.3
SEASON_WEIGHT: float = 0.2
AUDIENCE_WEIGHT: float = 0.1


class ScoreBreakdown(BaseModel):
    """
    Four sub-scores behind an overall matchScore, each in [0, 100].

    Weighted 40/30/20/10 (category/price/season/audience).
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "categoryFit": 92,
                "priceFit": 88,
                "seasonFit": 90,
                "audienceFit": 85,
            }
        }
    )

    categoryFit: float = Field(..., ge=0.0, le=100.0)
    priceFit: float = Field(..., ge=0.0, le=100.0)
    seasonFit: float = Field(..., ge=0.0, le=100.0)
    audienceFit: float = Field(..., ge=0.0, le=100.0)

    def weighted_score(self) -> float:
        """Combine sub-scores with the 40/30/20/10 weights."""
        return (
            self.categoryFit * CATEGORY_WEIGHT
            + self.priceFit * PRICE_WEIGHT
            + self.seasonFit * SEASON_WEIGHT
            + self.audienceFit * AUDIENCE_WEIGHT
        )


class RevenuePrediction(BaseModel):
    """
    Predicted revenue range for a creator-product pairing.

    Invariant: minimum <= expected <= maximum.
    """
    minimum: float = Field(..., ge=0.0)
    expected: float = Field(..., ge=0.0)
    maximum: float = Field(..., ge=0.0)
    predictedQuantity: int = Field(default=0, ge=0)
    predictedCommission: float = Field(default=0.0, ge=0.0)
    basis: str = Field(..., description="Human-readable note on how the range was computed")

    @model_validator(mode="after")
    def _check_ordering(self) -> "RevenuePrediction":
        if not (self.minimum <= self.expected <= self.maximum):
            raise ValueError(
                f"Revenue prediction must satisfy minimum <= expected <= maximum "
                f"(got {self.minimum}, {self.expected}, {self.maximum})"
            )
        return self


# =============================================================================
# Output Records
# =============================================================================


class CategoryScore(BaseModel):
    """A category's share of a creator's revenue, as reported in an insight."""
    category: str
    score: float = Field(..., ge=0.0, le=100.0, description="Revenue share in percent")
    salesCount: int = Field(default=0, ge=0)
    totalRevenue: float = Field(default=0.0, ge=0.0)


class PriceRange(BaseModel):
    """Observed price range with its average."""
    min: float
    max: float
    average: float


class SeasonalTrend(BaseModel):
    """Season-level sales figures reported in an insight."""
    season: str
    salesCount: int = Field(..., ge=0)
    revenue: float = Field(..., ge=0.0)


class CreatorInsight(BaseModel):
    """
    Qualitative analysis of a single creator's sales behaviour.

    Produced only by the reasoning service; there is no heuristic variant.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "insight-3f9a1c2b7d",
                "creatorId": "creator-001",
                "summary": "뷰티 카테고리 중심의 안정적인 판매 성향을 보입니다.",
                "strengths": ["뷰티 매출 비중 71.4%"],
                "topCategories": [
                    {"category": "Beauty", "score": 71.43, "salesCount": 12, "totalRevenue": 600000}
                ],
                "priceRange": {"min": 20000, "max": 60000, "average": 42000},
                "seasonalTrends": [{"season": "spring", "salesCount": 12, "revenue": 600000}],
                "recommendations": ["봄 시즌 스킨케어 제품 확대"],
                "confidence": 0.82,
                "analyzedAt": "2026-03-15T09:00:00Z",
            }
        }
    )

    id: str
    creatorId: str
    summary: str
    strengths: List[str] = Field(default_factory=list)
    topCategories: List[CategoryScore] = Field(default_factory=list)
    priceRange: PriceRange
    seasonalTrends: List[SeasonalTrend] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    analyzedAt: datetime


class ProductMatch(BaseModel):
    """A product recommended to a creator, with its score and revenue prediction."""
    product: Product
    matchScore: float = Field(..., ge=0.0, le=100.0)
    scoreBreakdown: ScoreBreakdown
    predictedRevenue: RevenuePrediction
    reasoning: str
    confidence: float = Field(..., ge=0.0, le=1.0, description="matchScore / 100")
    source: MatchSource = MatchSource.AI


class CreatorMatch(BaseModel):
    """A creator recommended for a product, with its score and revenue prediction."""
    creator: Creator
    matchScore: float = Field(..., ge=0.0, le=100.0)
    scoreBreakdown: ScoreBreakdown
    predictedRevenue: RevenuePrediction
    reasoning: str
    confidence: float = Field(..., ge=0.0, le=1.0, description="matchScore / 100")
    source: MatchSource = MatchSource.AI


# =============================================================================
# Reasoning-Service Response Schemas
# =============================================================================
# The model is asked for these shapes in JSON mode. Anything that fails
# validation here is reported as an invalid response by the gateway.


class TopCategoryReasoning(BaseModel):
    category: str
    percentage: float


class PriceRangeReasoning(BaseModel):
    min: float
    max: float
    average: float


class SeasonalTrendReasoning(BaseModel):
    season: str
    salesCount: float
    revenue: float


class InsightReasoningResponse(BaseModel):
    """Expected shape of the reasoning service's creator analysis."""
    summary: str
    strengths: List[str]
    topCategories: List[TopCategoryReasoning]
    priceRange: PriceRangeReasoning
    seasonalTrends: List[SeasonalTrendReasoning]
    recommendations: List[str]
    confidence: float = Field(..., ge=0.0, le=1.0)


class PredictedRevenueReasoning(BaseModel):
    """Predicted revenue as returned by the model; average is the expected value."""
    min: float = Field(..., ge=0.0)
    max: float = Field(..., ge=0.0)
    average: float = Field(..., ge=0.0)
    predictedQuantity: Optional[float] = Field(default=None, ge=0.0)
    predictedCommission: Optional[float] = Field(default=None, ge=0.0)

    @model_validator(mode="after")
    def _check_ordering(self) -> "PredictedRevenueReasoning":
        if not (self.min <= self.average <= self.max):
            raise ValueError("predictedRevenue must satisfy min <= average <= max")
        return self


class ProductMatchReasoning(BaseModel):
    productId: str
    matchScore: float = Field(..., ge=0.0, le=100.0)
    scoreBreakdown: ScoreBreakdown
    predictedRevenue: PredictedRevenueReasoning
    reasoning: str


class ProductMatchListResponse(BaseModel):
    """Expected shape of the reasoning service's product ranking."""
    matches: List[ProductMatchReasoning]


class CreatorMatchReasoning(BaseModel):
    creatorId: str
    matchScore: float = Field(..., ge=0.0, le=100.0)
    scoreBreakdown: ScoreBreakdown
    predictedRevenue: PredictedRevenueReasoning
    reasoning: str


class CreatorMatchListResponse(BaseModel):
    """Expected shape of the reasoning service's creator ranking."""
    matches: List[CreatorMatchReasoning]


# =============================================================================
# Creator Statistics
# =============================================================================


class TopProductStat(BaseModel):
    id: str
    name: str
    salesCount: int


class CreatorStats(BaseModel):
    """Headline sales statistics for a creator profile page."""
    totalSales: int = 0
    totalRevenue: float = 0.0
    totalCommission: float = 0.0
    averageConversionRate: float = 0.0
    topCategory: Optional[str] = None
    topProduct: Optional[TopProductStat] = None


# =============================================================================
# HTTP Request / Response Models
# =============================================================================


class AnalyzeRequest(BaseModel):
    creatorId: str = Field(..., min_length=1)


class ProductMatchRequest(BaseModel):
    creatorId: str = Field(..., min_length=1)
    limit: Optional[int] = Field(default=None, ge=1, description="Defaults to default_match_limit; capped by max_match_limit")


class CreatorMatchRequest(BaseModel):
    productId: str = Field(..., min_length=1)
    limit: Optional[int] = Field(default=None, ge=1, description="Defaults to default_match_limit; capped by max_match_limit")


class CacheInvalidateRequest(BaseModel):
    """Omit creatorId to clear the whole cache."""
    creatorId: Optional[str] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class CreatorWithStats(Creator):
    stats: CreatorStats


class InsightResponse(BaseModel):
    success: bool = True
    data: CreatorInsight


class ProductMatchesResponse(BaseModel):
    success: bool = True
    data: List[ProductMatch]


class CreatorMatchesResponse(BaseModel):
    success: bool = True
    data: List[CreatorMatch]


class CreatorListResponse(BaseModel):
    success: bool = True
    data: List[Creator]
    pagination: Pagination


class CreatorDetailResponse(BaseModel):
    success: bool = True
    data: CreatorWithStats


class ProductListResponse(BaseModel):
    success: bool = True
    data: List[Product]
    pagination: Pagination


class CacheInvalidateResult(BaseModel):
    removed: int


class CacheInvalidateResponse(BaseModel):
    success: bool = True
    data: CacheInvalidateResult
