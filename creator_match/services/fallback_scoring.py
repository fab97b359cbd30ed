"""
Fallback Scoring Service.

Deterministic, purely numeric replacement for the reasoning service on the
matching path. Produces the same ScoreBreakdown / RevenuePrediction /
reasoning / confidence shape as the AI path, so callers cannot tell the two
apart structurally (records carry source=heuristic).

Sub-scores (each in [0, 100]):

| Sub-score   | Rule                                                               |
|-------------|--------------------------------------------------------------------|
| categoryFit | 92 if the product category is the creator's top revenue category,  |
|             | 75 if it is one of the creator's declared affinities, otherwise 35 |
| priceFit    | 100 - 100 * |price - AOV| / AOV, clamped to [0, 100];             |
|             | 50 when the creator has no average order value                     |
| seasonFit   | 90 if the current season is in the product's season tags, else 50  |
| audienceFit | 85 * engagementRate / 3.0, clamped to [70, 100]                    |

matchScore is the 40/30/20/10 weighted sum of the sub-scores.

Revenue prediction:
    predictedQuantity = round(10 + 10 * matchScore / 100)
    expected = price * predictedQuantity, minimum = 0.7x, maximum = 1.3x
    predictedCommission = expected * avgCommissionRate / 100

Eligibility: creators with fewer than 3 sale records are never scored.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Set, Tuple

import numpy as np

from creator_match.models import (
    AggregatedProfile,
    Creator,
    CreatorMatch,
    MatchSource,
    Product,
    ProductMatch,
    RevenuePrediction,
    SaleRecord,
    ScoreBreakdown,
    Season,
)
from creator_match.services.aggregation import aggregate_sales, average_conversion_rate

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TOP_CATEGORY_FIT = 92.0
AFFINITY_CATEGORY_FIT = 75.0
UNRELATED_CATEGORY_FIT = 35.0

UNKNOWN_PRICE_FIT = 50.0

IN_SEASON_FIT = 90.0
OFF_SEASON_FIT = 50.0

# Engagement rate (%) that maps to an audienceFit of 85
BASELINE_ENGAGEMENT_RATE = 3.0
BASELINE_AUDIENCE_FIT = 85.0
AUDIENCE_FIT_FLOOR = 70.0

BASE_PREDICTED_QUANTITY = 10
PREDICTION_LOW_FACTOR = 0.7
PREDICTION_HIGH_FACTOR = 1.3

MIN_SALES_FOR_FALLBACK = 3

HEURISTIC_BASIS = "Heuristic estimate from creator sales history (reasoning service unavailable)"


# =============================================================================
# Season Tags
# =============================================================================

_SEASON_ALIASES = {
    "spring": Season.SPRING,
    "봄": Season.SPRING,
    "summer": Season.SUMMER,
    "여름": Season.SUMMER,
    "fall": Season.FALL,
    "autumn": Season.FALL,
    "가을": Season.FALL,
    "winter": Season.WINTER,
    "겨울": Season.WINTER,
}

_ALL_SEASON_TAGS = {"all", "all season", "all-season", "allseason", "사계절", "연중"}


def normalize_season_tags(tags: Sequence[str]) -> Set[Season]:
    """
    Normalize free-text seasonality tags to a set of seasons.

    Example:
        >>> sorted(s.value for s in normalize_season_tags(["Spring", "가을"]))
        ['fall', 'spring']
        >>> len(normalize_season_tags(["All"]))
        4
    """
    seasons: Set[Season] = set()
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned in _ALL_SEASON_TAGS:
            return set(Season)
        season = _SEASON_ALIASES.get(cleaned)
        if season is not None:
            seasons.add(season)
    return seasons


# =============================================================================
# Creator Signal
# =============================================================================


@dataclass(frozen=True)
class CreatorSignal:
    """Everything fallback scoring needs to know about one creator."""
    creator: Creator
    profile: AggregatedProfile
    sale_count: int
    conversion_rate: float

    @classmethod
    def from_sales(cls, creator: Creator, sales: Sequence[SaleRecord]) -> "CreatorSignal":
        return cls(
            creator=creator,
            profile=aggregate_sales(creator, sales),
            sale_count=len(sales),
            conversion_rate=average_conversion_rate(sales),
        )

    def is_eligible(self, min_sales: int = MIN_SALES_FOR_FALLBACK) -> bool:
        return self.sale_count >= min_sales


# =============================================================================
# Sub-scores
# =============================================================================


def category_fit(product: Product, signal: CreatorSignal) -> float:
    if product.category == signal.profile.top_category:
        return TOP_CATEGORY_FIT
    if product.category in signal.creator.categories:
        return AFFINITY_CATEGORY_FIT
    return UNRELATED_CATEGORY_FIT


def price_fit(price: float, average_order_value: float) -> float:
    if average_order_value <= 0:
        return UNKNOWN_PRICE_FIT
    relative_distance = abs(price - average_order_value) / average_order_value
    return float(np.clip(100.0 - relative_distance * 100.0, 0.0, 100.0))


def season_fit(product: Product, season: Season) -> float:
    return IN_SEASON_FIT if season in normalize_season_tags(product.seasonality) else OFF_SEASON_FIT


def audience_fit(engagement_rate: float) -> float:
    scaled = engagement_rate / BASELINE_ENGAGEMENT_RATE * BASELINE_AUDIENCE_FIT
    return float(np.clip(scaled, AUDIENCE_FIT_FLOOR, 100.0))


def score_pair(product: Product, signal: CreatorSignal, season: Season) -> Tuple[ScoreBreakdown, float]:
    """
    Compute the score breakdown and overall matchScore for one pair.

    Returns:
        (ScoreBreakdown, matchScore) with every value rounded to 2 dp
    """
    breakdown = ScoreBreakdown(
        categoryFit=round(category_fit(product, signal), 2),
        priceFit=round(price_fit(product.price, signal.profile.summary.averageOrderValue), 2),
        seasonFit=round(season_fit(product, season), 2),
        audienceFit=round(audience_fit(signal.creator.engagementRate), 2),
    )
    match_score = float(np.clip(round(breakdown.weighted_score(), 2), 0.0, 100.0))
    return breakdown, match_score


def predict_revenue(product: Product, match_score: float, conversion_rate: float) -> RevenuePrediction:
    quantity = int(round(BASE_PREDICTED_QUANTITY + BASE_PREDICTED_QUANTITY * match_score / 100))
    expected = product.price * quantity
    return RevenuePrediction(
        minimum=round(expected * PREDICTION_LOW_FACTOR, 2),
        expected=round(expected, 2),
        maximum=round(expected * PREDICTION_HIGH_FACTOR, 2),
        predictedQuantity=quantity,
        predictedCommission=round(expected * product.avgCommissionRate / 100, 2),
        basis=f"{HEURISTIC_BASIS}; creator conversion rate {conversion_rate:.2f}%",
    )


def _reasoning(product: Product, signal: CreatorSignal, season: Season, breakdown: ScoreBreakdown) -> str:
    aov = signal.profile.summary.averageOrderValue
    return (
        f"[자동 산출] {signal.creator.name}님의 판매 이력을 바탕으로 계산된 점수입니다. "
        f"{product.category} 카테고리 적합도 {breakdown.categoryFit:.0f}점, "
        f"평균 주문 가치 {round(aov):,}원 대비 가격 {round(product.price):,}원의 가격 적합도 "
        f"{breakdown.priceFit:.0f}점, 현재 시즌({season.value}) 적합도 {breakdown.seasonFit:.0f}점, "
        f"참여율 {signal.creator.engagementRate}% 기반 오디언스 적합도 {breakdown.audienceFit:.0f}점."
    )


# =============================================================================
# Public API
# =============================================================================


def score_product_for_creator(product: Product, signal: CreatorSignal, season: Season) -> ProductMatch:
    breakdown, match_score = score_pair(product, signal, season)
    return ProductMatch(
        product=product,
        matchScore=match_score,
        scoreBreakdown=breakdown,
        predictedRevenue=predict_revenue(product, match_score, signal.conversion_rate),
        reasoning=_reasoning(product, signal, season, breakdown),
        confidence=match_score / 100,
        source=MatchSource.HEURISTIC,
    )


def score_creator_for_product(product: Product, signal: CreatorSignal, season: Season) -> CreatorMatch:
    breakdown, match_score = score_pair(product, signal, season)
    return CreatorMatch(
        creator=signal.creator,
        matchScore=match_score,
        scoreBreakdown=breakdown,
        predictedRevenue=predict_revenue(product, match_score, signal.conversion_rate),
        reasoning=_reasoning(product, signal, season, breakdown),
        confidence=match_score / 100,
        source=MatchSource.HEURISTIC,
    )


def fallback_product_matches(
    signal: CreatorSignal,
    products: Sequence[Product],
    season: Season,
    limit: int,
    min_sales: int = MIN_SALES_FOR_FALLBACK,
) -> List[ProductMatch]:
    """
    Score every catalog product for one creator.

    Args:
        signal: The creator and their aggregated history
        products: Candidate catalog
        season: Current calendar season
        limit: Maximum matches to return
        min_sales: Sale records required before any score is produced

    Returns:
        ProductMatch list sorted by matchScore descending, truncated to
        limit. Empty if the creator is not eligible.
    """
    if not signal.is_eligible(min_sales):
        logger.debug(f"Creator {signal.creator.id} has too few sales for fallback scoring")
        return []

    matches = [score_product_for_creator(product, signal, season) for product in products]
    matches.sort(key=lambda match: match.matchScore, reverse=True)
    return matches[:limit]


def fallback_creator_matches(
    product: Product,
    signals: Sequence[CreatorSignal],
    season: Season,
    limit: int,
    min_sales: int = MIN_SALES_FOR_FALLBACK,
) -> List[CreatorMatch]:
    """
    Score every eligible creator for one product.

    Creators with fewer than min_sales sale records are left out of the
    result entirely.

    Returns:
        CreatorMatch list sorted by matchScore descending, truncated to limit
    """
    matches: List[CreatorMatch] = []
    for signal in signals:
        if not signal.is_eligible(min_sales):
            logger.debug(f"Skipping creator {signal.creator.id} in fallback: {signal.sale_count} sale(s)")
            continue
        matches.append(score_creator_for_product(product, signal, season))

    matches.sort(key=lambda match: match.matchScore, reverse=True)
    return matches[:limit]
