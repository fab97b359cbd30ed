"""
Match Orchestrator Service.

Composes aggregation, prompt building, the result cache, the reasoning
gateway and fallback scoring into the engine's public operations:

    analyze_creator(creator, sales) -> CreatorInsight
    match_products(creator, sales, products, limit) -> List[ProductMatch]
    match_creators(product, creators, sales_by_creator, limit) -> List[CreatorMatch]

Flow per call:
    cache check -> thresholds -> aggregate -> prompt -> gateway (or fallback)
    -> map to output records -> drop unknown ids -> sort -> truncate -> cache

Thresholds:
    - analysis and single-creator matching need at least 5 sale records
    - catalog-wide creator matching skips creators with fewer than 3
    - matching needs a non-empty catalog

Failure policy:
    - analysis propagates every reasoning error
    - matching replaces reasoning errors with fallback scores; fallback
      results are returned but never cached

Concurrent callers for the same uncached key share one in-flight reasoning
call.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from creator_match.core.config import Settings
from creator_match.core.errors import (
    EmptyCatalogError,
    InsufficientDataError,
    MatchEngineError,
    is_reasoning_failure,
)
from creator_match.models import (
    AggregatedProfile,
    CacheOperation,
    CategoryScore,
    Creator,
    CreatorInsight,
    CreatorMatch,
    CreatorMatchListResponse,
    InsightReasoningResponse,
    PredictedRevenueReasoning,
    PriceRange,
    Product,
    ProductMatch,
    ProductMatchListResponse,
    RevenuePrediction,
    SaleRecord,
    Season,
    SeasonalTrend,
)
from creator_match.services.aggregation import aggregate_sales, current_season
from creator_match.services.fallback_scoring import (
    CreatorSignal,
    fallback_creator_matches,
    fallback_product_matches,
)
from creator_match.services.prompts import (
    build_creator_match_prompt,
    build_insight_prompt,
    build_product_match_prompt,
)
from creator_match.services.reasoning_gateway import ReasoningGateway, ReasoningOptions
from creator_match.services.result_cache import ResultCache, cache_key

logger = logging.getLogger(__name__)

AI_BASIS = "AI analysis based on creator sales history"


def _to_prediction(predicted: PredictedRevenueReasoning) -> RevenuePrediction:
    return RevenuePrediction(
        minimum=predicted.min,
        expected=predicted.average,
        maximum=predicted.max,
        predictedQuantity=int(round(predicted.predictedQuantity or 0)),
        predictedCommission=predicted.predictedCommission or 0.0,
        basis=AI_BASIS,
    )


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class MatchOrchestrator:
    """
    Entry point for creator analysis and creator-product matching.

    Args:
        gateway: Reasoning gateway used for AI calls
        cache: Result cache owned by this orchestrator
        settings: Thresholds, limits and model parameters
        season_provider: Returns the current season; injectable for tests
        clock: Returns the current UTC time used for analyzedAt
    """

    def __init__(
        self,
        gateway: ReasoningGateway,
        cache: ResultCache,
        settings: Settings,
        season_provider: Callable[[], Season] = current_season,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.gateway = gateway
        self.cache = cache
        self.settings = settings
        self._season_provider = season_provider
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._in_flight: Dict[str, "asyncio.Task[Any]"] = {}

    # =========================================================================
    # Cache Management
    # =========================================================================

    def invalidate_creator_cache(self, creator_id: str) -> int:
        """
        Drop every cached result whose key mentions the creator id.

        In-flight calls for those keys are detached: they still answer their
        current waiters but no longer store results, and later callers start
        a fresh reasoning call.

        Returns:
            Number of cache entries removed
        """
        removed = self.cache.invalidate_containing(creator_id)
        detached = [key for key in self._in_flight if creator_id in key]
        for key in detached:
            del self._in_flight[key]
        logger.info(
            f"Invalidated {removed} cache entr{'y' if removed == 1 else 'ies'} for {creator_id}"
            f" ({len(detached)} in-flight call(s) detached)"
        )
        return removed

    def clear_cache(self) -> None:
        self._in_flight.clear()
        self.cache.clear()

    def _store(self, key: str, value: Any) -> None:
        """Cache a result unless its call was detached by invalidation."""
        if self._in_flight.get(key) is not asyncio.current_task():
            logger.debug(f"Discarding result for invalidated key {key}")
            return
        self.cache.set(key, value)

    def _resolve_limit(self, limit: Optional[int]) -> int:
        """Default a missing limit and clamp the rest to [1, max_match_limit]."""
        if limit is None:
            return self.settings.default_match_limit
        return min(max(limit, 1), self.settings.max_match_limit)

    def _cached(self, key: str) -> Optional[Any]:
        cached = self.cache.get(key)
        if cached is None:
            logger.debug(f"Cache miss for {key}")
        else:
            logger.debug(f"Cache hit for {key}")
        return cached

    async def _shared(self, key: str, factory: Callable[[], Awaitable[Any]]) -> Any:
        """Run factory once per key; concurrent callers await the same task."""
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._in_flight[key] = task

            def _release(done: "asyncio.Task[Any]") -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]
                # Mark the exception retrieved when every waiter was cancelled
                if not done.cancelled():
                    done.exception()

            task.add_done_callback(_release)

        return await asyncio.shield(task)

    # =========================================================================
    # Creator Analysis
    # =========================================================================

    async def analyze_creator(self, creator: Creator, sales: Sequence[SaleRecord]) -> CreatorInsight:
        """
        Produce a qualitative insight for one creator.

        Raises:
            InsufficientDataError: Fewer than min_sales_for_analysis records
            TransientReasoningError / FatalReasoningError / UnknownReasoningError:
                Propagated from the gateway; there is no fallback insight
        """
        key = cache_key(CacheOperation.ANALYZE, creator.id)
        cached = self._cached(key)
        if cached is not None:
            return cached

        required = self.settings.min_sales_for_analysis
        if len(sales) < required:
            raise InsufficientDataError(required=required, actual=len(sales))

        return await self._shared(key, lambda: self._run_analysis(key, creator, sales))

    async def _run_analysis(self, key: str, creator: Creator, sales: Sequence[SaleRecord]) -> CreatorInsight:
        profile = aggregate_sales(creator, sales)
        prompt = build_insight_prompt(profile)

        response = await self.gateway.call(
            prompt.system,
            prompt.user,
            InsightReasoningResponse,
            ReasoningOptions(
                temperature=self.settings.insight_temperature,
                max_tokens=self.settings.insight_max_tokens,
            ),
        )

        insight = self._to_insight(creator, profile, response)
        self._store(key, insight)
        return insight

    def _to_insight(
        self,
        creator: Creator,
        profile: AggregatedProfile,
        response: InsightReasoningResponse,
    ) -> CreatorInsight:
        breakdown = {cat.category: cat for cat in profile.categoryBreakdown}

        top_categories = []
        for item in response.topCategories:
            known = breakdown.get(item.category)
            top_categories.append(
                CategoryScore(
                    category=item.category,
                    score=_clamp(item.percentage, 0.0, 100.0),
                    salesCount=known.salesCount if known else 0,
                    totalRevenue=known.revenue if known else 0.0,
                )
            )

        return CreatorInsight(
            id=f"insight-{uuid4().hex[:10]}",
            creatorId=creator.id,
            summary=response.summary,
            strengths=response.strengths,
            topCategories=top_categories,
            priceRange=PriceRange(**response.priceRange.model_dump()),
            seasonalTrends=[
                SeasonalTrend(
                    season=trend.season,
                    salesCount=max(0, int(round(trend.salesCount))),
                    revenue=max(0.0, trend.revenue),
                )
                for trend in response.seasonalTrends
            ],
            recommendations=response.recommendations,
            confidence=response.confidence,
            analyzedAt=self._clock(),
        )

    # =========================================================================
    # Product Matching (one creator, many products)
    # =========================================================================

    async def match_products(
        self,
        creator: Creator,
        sales: Sequence[SaleRecord],
        products: Sequence[Product],
        limit: Optional[int] = None,
    ) -> List[ProductMatch]:
        """
        Rank catalog products for a creator.

        Falls back to heuristic scores when the reasoning service fails. A
        missing limit uses default_match_limit; others are clamped to
        [1, max_match_limit].

        Raises:
            InsufficientDataError: Fewer than min_sales_for_analysis records
            EmptyCatalogError: No candidate products
        """
        limit = self._resolve_limit(limit)
        key = cache_key(CacheOperation.MATCH, creator.id, limit)
        cached = self._cached(key)
        if cached is not None:
            return list(cached)

        required = self.settings.min_sales_for_analysis
        if len(sales) < required:
            raise InsufficientDataError(required=required, actual=len(sales))
        if not products:
            raise EmptyCatalogError()

        signal = CreatorSignal.from_sales(creator, sales)
        season = self._season_provider()

        # Only matching has a numeric fallback; analysis errors propagate.
        # Revisit if a heuristic insight is ever added.
        try:
            matches = await self._shared(
                key, lambda: self._run_product_matching(key, signal, products, season, limit)
            )
        except MatchEngineError as error:
            if not is_reasoning_failure(error):
                raise
            logger.warning(f"Reasoning failed for {creator.id} ({error.code}), using fallback scores")
            return fallback_product_matches(
                signal,
                products,
                season,
                limit,
                min_sales=self.settings.min_sales_for_creator_matching,
            )

        return list(matches)

    async def _run_product_matching(
        self,
        key: str,
        signal: CreatorSignal,
        products: Sequence[Product],
        season: Season,
        limit: int,
    ) -> List[ProductMatch]:
        prompt = build_product_match_prompt(
            signal.profile, products, season, limit, min_score=self.settings.min_match_score
        )
        response = await self.gateway.call(
            prompt.system,
            prompt.user,
            ProductMatchListResponse,
            self._match_options(),
        )

        products_by_id = {product.id: product for product in products}
        matches: List[ProductMatch] = []
        unknown: List[str] = []

        for item in response.matches:
            product = products_by_id.get(item.productId)
            if product is None:
                unknown.append(item.productId)
                continue
            matches.append(
                ProductMatch(
                    product=product,
                    matchScore=item.matchScore,
                    scoreBreakdown=item.scoreBreakdown,
                    predictedRevenue=_to_prediction(item.predictedRevenue),
                    reasoning=item.reasoning,
                    confidence=item.matchScore / 100,
                )
            )

        if unknown:
            logger.warning(f"Dropped {len(unknown)} match(es) with unknown product ids: {unknown}")

        matches.sort(key=lambda match: match.matchScore, reverse=True)
        matches = matches[:limit]
        self._store(key, matches)
        return matches

    # =========================================================================
    # Creator Matching (one product, many creators)
    # =========================================================================

    async def match_creators(
        self,
        product: Product,
        creators: Sequence[Creator],
        sales_by_creator: Mapping[str, Sequence[SaleRecord]],
        limit: Optional[int] = None,
    ) -> List[CreatorMatch]:
        """
        Rank creators for a product.

        Creators with fewer than min_sales_for_creator_matching records are
        skipped. If none are eligible the result is empty.

        Raises:
            EmptyCatalogError: No candidate creators
        """
        limit = self._resolve_limit(limit)
        key = cache_key(CacheOperation.MATCH, product.id, limit)
        cached = self._cached(key)
        if cached is not None:
            return list(cached)

        if not creators:
            raise EmptyCatalogError()

        required = self.settings.min_sales_for_creator_matching
        signals: List[CreatorSignal] = []
        for creator in creators:
            sales = sales_by_creator.get(creator.id, [])
            if len(sales) < required:
                logger.debug(f"Skipping creator {creator.id}: {len(sales)} sale(s), {required} required")
                continue
            signals.append(CreatorSignal.from_sales(creator, sales))

        if not signals:
            return []

        season = self._season_provider()

        try:
            matches = await self._shared(
                key, lambda: self._run_creator_matching(key, product, signals, season, limit)
            )
        except MatchEngineError as error:
            if not is_reasoning_failure(error):
                raise
            logger.warning(f"Reasoning failed for {product.id} ({error.code}), using fallback scores")
            return fallback_creator_matches(product, signals, season, limit, min_sales=required)

        return list(matches)

    async def _run_creator_matching(
        self,
        key: str,
        product: Product,
        signals: Sequence[CreatorSignal],
        season: Season,
        limit: int,
    ) -> List[CreatorMatch]:
        prompt = build_creator_match_prompt(
            product,
            [(signal.creator, signal.profile) for signal in signals],
            season,
            limit,
            min_score=self.settings.min_match_score,
        )
        response = await self.gateway.call(
            prompt.system,
            prompt.user,
            CreatorMatchListResponse,
            self._match_options(),
        )

        creators_by_id = {signal.creator.id: signal.creator for signal in signals}
        matches: List[CreatorMatch] = []
        unknown: List[str] = []

        for item in response.matches:
            creator = creators_by_id.get(item.creatorId)
            if creator is None:
                unknown.append(item.creatorId)
                continue
            matches.append(
                CreatorMatch(
                    creator=creator,
                    matchScore=item.matchScore,
                    scoreBreakdown=item.scoreBreakdown,
                    predictedRevenue=_to_prediction(item.predictedRevenue),
                    reasoning=item.reasoning,
                    confidence=item.matchScore / 100,
                )
            )

        if unknown:
            logger.warning(f"Dropped {len(unknown)} match(es) with unknown creator ids: {unknown}")

        matches.sort(key=lambda match: match.matchScore, reverse=True)
        matches = matches[:limit]
        self._store(key, matches)
        return matches

    def _match_options(self) -> ReasoningOptions:
        return ReasoningOptions(
            temperature=self.settings.match_temperature,
            max_tokens=self.settings.match_max_tokens,
        )
