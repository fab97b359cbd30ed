"""
Matching Engine Services

Business logic for creator analysis and creator-product matching.

Services:
- aggregation: Sale history -> statistical profile, creator stats
- prompts: Profile/catalog -> system+user prompt pairs
- reasoning_gateway: LLM invocation with retry, classification and validation
- result_cache: TTL cache for reasoning results
- fallback_scoring: Deterministic scores used when reasoning fails
- matching: MatchOrchestrator composing all of the above
- catalog: In-memory creators/products/sales store

Only matching and reasoning_gateway suspend (network calls and backoff);
everything else is synchronous and pure.
"""

# =============================================================================
# Aggregation
# =============================================================================

from creator_match.services.aggregation import (
    aggregate_sales,
    average_conversion_rate,
    compute_creator_stats,
    current_season,
    season_from_month,
)

# =============================================================================
# Prompt Building
# =============================================================================

from creator_match.services.prompts import (
    PromptPair,
    build_creator_match_prompt,
    build_insight_prompt,
    build_product_match_prompt,
)

# =============================================================================
# Reasoning Gateway
# =============================================================================

from creator_match.services.reasoning_gateway import (
    ReasoningGateway,
    ReasoningOptions,
    RetryPolicy,
    classify_provider_error,
)

# =============================================================================
# Result Cache
# =============================================================================

from creator_match.services.result_cache import (
    CacheEntry,
    ResultCache,
    cache_key,
)

# =============================================================================
# Fallback Scoring
# =============================================================================

from creator_match.services.fallback_scoring import (
    CreatorSignal,
    fallback_creator_matches,
    fallback_product_matches,
    normalize_season_tags,
    score_creator_for_product,
    score_product_for_creator,
)

# =============================================================================
# Orchestration and Data Access
# =============================================================================

from creator_match.services.matching import MatchOrchestrator
from creator_match.services.catalog import CatalogStore, paginate


__all__ = [
    # Aggregation
    'aggregate_sales',
    'average_conversion_rate',
    'compute_creator_stats',
    'current_season',
    'season_from_month',
    # Prompt building
    'PromptPair',
    'build_creator_match_prompt',
    'build_insight_prompt',
    'build_product_match_prompt',
    # Reasoning gateway
    'ReasoningGateway',
    'ReasoningOptions',
    'RetryPolicy',
    'classify_provider_error',
    # Result cache
    'CacheEntry',
    'ResultCache',
    'cache_key',
    # Fallback scoring
    'CreatorSignal',
    'fallback_creator_matches',
    'fallback_product_matches',
    'normalize_season_tags',
    'score_creator_for_product',
    'score_product_for_creator',
    # Orchestration and data access
    'MatchOrchestrator',
    'CatalogStore',
    'paginate',
]
