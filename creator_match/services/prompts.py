"""
Prompt builders for the reasoning service.

Each builder renders an aggregated profile (plus catalog or creator metadata
for matching) into a system/user prompt pair. Prompts are written in Korean,
the language of the platform's users, with explicit number formatting:
currency values are rounded and comma-grouped with a 원 suffix.

Three prompt pairs exist:
    - insight: single creator analysis
    - product matching: rank catalog products for one creator
    - creator matching: rank creators for one product

Matching prompts spell out the JSON output shape, the 40/30/20/10 scoring
weights, the minimum score to keep and the descending sort order.

All builders are pure and deterministic. The current season is a parameter
rather than read from the clock.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from creator_match.models import AggregatedProfile, Creator, Product, Season


@dataclass(frozen=True)
class PromptPair:
    """System instruction plus user content for one reasoning call."""
    system: str
    user: str


# Calendar months shown next to the current season in matching prompts
SEASON_MONTHS = {
    Season.SPRING: "3-5월",
    Season.SUMMER: "6-8월",
    Season.FALL: "9-11월",
    Season.WINTER: "12-2월",
}


def format_won(value: float) -> str:
    """Round and comma-group a currency amount, e.g. 1234567.4 -> '1,234,567원'."""
    return f"{round(value):,}원"


def format_count(value: float) -> str:
    return f"{round(value):,}"


# =============================================================================
# System Prompts
# =============================================================================

INSIGHT_SYSTEM_PROMPT = """당신은 소셜 커머스 플랫폼 ZVZO의 크리에이터 판매 데이터 분석 전문가입니다.

역할:
- 크리에이터의 과거 판매 데이터를 분석하여 판매 성향과 강점을 파악합니다
- 데이터 기반으로 최적의 제품 카테고리와 가격대를 추천합니다
- 구체적이고 실행 가능한 인사이트를 제공합니다

분석 원칙:
1. 정량적 데이터를 우선하되, 질적 인사이트를 함께 제공합니다
2. 매출 비중, 전환율, 계절성 등 다각도로 분석합니다
3. 강점은 명확히, 개선점은 건설적으로 제시합니다
4. 실행 가능한 구체적 전략을 제안합니다

출력 형식:
- 반드시 유효한 JSON 형식으로 응답하세요
- 모든 텍스트는 한국어로 작성하세요
- 숫자는 소수점 2자리까지 반올림하세요"""

_SCORING_RUBRIC = """평가 기준 (총 100점):
1. categoryFit (40점): 크리에이터의 강점 카테고리와 제품 카테고리의 일치도
2. priceFit (30점): 크리에이터의 평균 객단가와 제품 가격의 일치도
3. seasonFit (20점): 현재 시즌과 제품 시즌성의 일치도
4. audienceFit (10점): 크리에이터 오디언스와 제품 타겟의 일치도

matchScore는 네 항목 점수(각 0-100)에 0.4, 0.3, 0.2, 0.1 가중치를 적용한 합계입니다."""

PRODUCT_MATCH_SYSTEM_PROMPT = f"""당신은 ZVZO 플랫폼의 제품-크리에이터 매칭 전문가입니다.

역할:
- 크리에이터의 판매 성향과 제품 정보를 매칭하여 최적의 제품을 추천합니다
- 카테고리, 가격대, 시즌, 타겟 오디언스 등 다각도로 적합도를 평가합니다
- 각 제품에 대한 매칭 스코어와 구체적인 이유를 제공합니다

{_SCORING_RUBRIC}

출력 형식:
- 반드시 유효한 JSON 형식으로 응답하세요
- 매칭 스코어 높은 순으로 정렬하세요
- 각 제품마다 구체적인 매칭 이유를 제공하세요"""

CREATOR_MATCH_SYSTEM_PROMPT = f"""당신은 ZVZO 플랫폼의 제품-크리에이터 매칭 전문가입니다.

역할:
- 제품 정보와 크리에이터들의 판매 성향을 비교하여 제품을 가장 잘 판매할 크리에이터를 추천합니다
- 카테고리, 가격대, 시즌, 타겟 오디언스 등 다각도로 적합도를 평가합니다
- 각 크리에이터에 대한 매칭 스코어와 구체적인 이유를 제공합니다

{_SCORING_RUBRIC}

출력 형식:
- 반드시 유효한 JSON 형식으로 응답하세요
- 매칭 스코어 높은 순으로 정렬하세요
- 각 크리에이터마다 구체적인 매칭 이유를 제공하세요"""


# =============================================================================
# Insight
# =============================================================================


def _bullet_lines(lines: Sequence[str]) -> str:
    return "\n".join(lines) if lines else "- (데이터 없음)"


def build_insight_prompt(profile: AggregatedProfile) -> PromptPair:
    """
    Render the single-creator analysis prompt.

    Args:
        profile: Aggregated sales profile of the creator

    Returns:
        PromptPair asking for the insight JSON shape
    """
    creator = profile.creator
    summary = profile.summary

    categories = [
        f"- {cat.category}: 매출 {format_won(cat.revenue)} ({cat.revenueShare:.1f}%), "
        f"판매 {cat.salesCount}건, 평균 가격 {format_won(cat.averagePrice)}"
        for cat in profile.categoryBreakdown
    ]
    prices = [
        f"- {bucket.priceRange}원: 판매 {bucket.salesCount}건, 매출 {format_won(bucket.revenue)}"
        for bucket in profile.priceDistribution
    ]
    seasons = [
        f"- {season.season}: 판매 {season.salesCount}건, 매출 {format_won(season.revenue)}"
        for season in profile.seasonalPattern
    ]
    products = [
        f"{rank}. {product.name} ({product.category}): 판매 {product.salesCount}건, "
        f"매출 {format_won(product.revenue)}"
        for rank, product in enumerate(profile.topProducts, start=1)
    ]

    user = f"""다음 크리에이터의 판매 데이터를 분석해주세요:

## 크리에이터 정보
- 이름: {creator.name}
- 플랫폼: {creator.platform}
- 팔로워 수: {format_count(creator.followers)}명
- 참여율: {creator.engagementRate:.2f}%

## 판매 요약
- 총 매출: {format_won(summary.totalRevenue)}
- 총 판매 건수: {format_count(summary.totalSales)}건
- 평균 주문 가치: {format_won(summary.averageOrderValue)}

## 카테고리별 성과
{_bullet_lines(categories)}

## 가격대별 분포
{_bullet_lines(prices)}

## 시즌별 판매 패턴
{_bullet_lines(seasons)}

## 상위 판매 제품
{_bullet_lines(products)}

위 데이터를 기반으로 다음 JSON 형식으로 분석을 제공해주세요:
{{
  "summary": "크리에이터 판매 성향 종합 분석 (200-300자)",
  "strengths": ["구체적 데이터 기반 강점 1", "강점 2", "강점 3"],
  "topCategories": [{{"category": "카테고리명", "percentage": 비율}}, ...],
  "priceRange": {{"min": 최소가격, "max": 최대가격, "average": 평균가격}},
  "seasonalTrends": [{{"season": "시즌", "salesCount": 판매건수, "revenue": 매출}}, ...],
  "recommendations": ["실행 가능한 추천 1", "추천 2", "추천 3"],
  "confidence": 0.0에서 1.0 사이의 신뢰도
}}"""

    return PromptPair(system=INSIGHT_SYSTEM_PROMPT, user=user)


# =============================================================================
# Matching
# =============================================================================


def _match_output_contract(id_field: str, id_label: str, min_score: int, limit: int, noun: str) -> str:
    return f"""다음 JSON 형식으로 반환해주세요:
{{
  "matches": [
    {{
      "{id_field}": "{id_label}",
      "matchScore": 0-100 사이의 매칭 점수,
      "scoreBreakdown": {{
        "categoryFit": 0-100,
        "priceFit": 0-100,
        "seasonFit": 0-100,
        "audienceFit": 0-100
      }},
      "predictedRevenue": {{
        "min": 최소 예상 매출,
        "max": 최대 예상 매출,
        "average": 평균 예상 매출,
        "predictedQuantity": 예상 판매 수량,
        "predictedCommission": 예상 수수료
      }},
      "reasoning": "매칭 이유 (100-200자)"
    }}
  ]
}}

매칭 스코어 {min_score}점 이상인 {noun}만 포함하고, 최대 {limit}개까지 반환하세요.
점수가 높은 순으로 정렬해주세요."""


def _season_strength(profile: AggregatedProfile) -> str:
    if not profile.seasonalPattern:
        return "데이터 없음"
    return ", ".join(f"{s.season}({s.salesCount}건)" for s in profile.seasonalPattern)


def build_product_match_prompt(
    profile: AggregatedProfile,
    products: Sequence[Product],
    season: Season,
    limit: int,
    min_score: int = 70,
) -> PromptPair:
    """
    Render the prompt that ranks catalog products for one creator.

    Every product is enumerated with its id, name, category, price and
    season tags.

    Args:
        profile: Aggregated sales profile of the creator
        products: Candidate catalog
        season: Current calendar season
        limit: Maximum number of matches to request
        min_score: Score floor the model is told to apply

    Returns:
        PromptPair asking for {"matches": [...]} keyed by productId
    """
    creator = profile.creator
    categories = ", ".join(c.category for c in profile.categoryBreakdown) or "데이터 없음"

    catalog_lines: List[str] = []
    for index, product in enumerate(products, start=1):
        catalog_lines.append(
            f"""
제품 {index}:
- ID: {product.id}
- 이름: {product.name}
- 카테고리: {product.category}
- 가격: {format_won(product.price)}
- 시즌: {', '.join(product.seasonality) or '-'}"""
        )

    user = f"""다음 크리에이터에게 적합한 제품을 매칭해주세요:

## 크리에이터 정보
- 이름: {creator.name}
- 플랫폼: {creator.platform}
- 팔로워: {format_count(creator.followers)}명
- 참여율: {creator.engagementRate}%

## 판매 성향
- 주요 카테고리: {categories}
- 평균 주문 가치: {format_won(profile.summary.averageOrderValue)}
- 시즌 성과: {_season_strength(profile)}

## 현재 시즌
{season.value} ({SEASON_MONTHS[season]})

## 매칭 대상 제품 목록 ({len(products)}개)
{chr(10).join(catalog_lines)}

위 제품들을 크리에이터와 매칭하여 {_match_output_contract("productId", "제품 ID", min_score, limit, "제품")}"""

    return PromptPair(system=PRODUCT_MATCH_SYSTEM_PROMPT, user=user)


def build_creator_match_prompt(
    product: Product,
    candidates: Sequence[Tuple[Creator, AggregatedProfile]],
    season: Season,
    limit: int,
    min_score: int = 70,
) -> PromptPair:
    """
    Render the prompt that ranks creators for one product.

    Args:
        product: The product to place
        candidates: (Creator, AggregatedProfile) pairs for eligible creators
        season: Current calendar season
        limit: Maximum number of matches to request
        min_score: Score floor the model is told to apply

    Returns:
        PromptPair asking for {"matches": [...]} keyed by creatorId
    """
    creator_lines: List[str] = []
    for index, (creator, profile) in enumerate(candidates, start=1):
        top_categories = ", ".join(c.category for c in profile.categoryBreakdown[:3]) or "데이터 없음"
        creator_lines.append(
            f"""
크리에이터 {index}:
- ID: {creator.id}
- 이름: {creator.name}
- 플랫폼: {creator.platform.value}
- 팔로워: {format_count(creator.followers)}명
- 참여율: {creator.engagementRate}%
- 주요 카테고리: {top_categories}
- 평균 주문 가치: {format_won(profile.summary.averageOrderValue)}
- 시즌 성과: {_season_strength(profile)}"""
        )

    user = f"""다음 제품을 가장 잘 판매할 크리에이터를 매칭해주세요:

## 제품 정보
- ID: {product.id}
- 이름: {product.name}
- 브랜드: {product.brand or '-'}
- 카테고리: {product.category}
- 가격: {format_won(product.price)}
- 시즌: {', '.join(product.seasonality) or '-'}
- 타겟 오디언스: {', '.join(product.targetAudience) or '-'}
- 평균 수수료율: {product.avgCommissionRate}%

## 현재 시즌
{season.value} ({SEASON_MONTHS[season]})

## 매칭 대상 크리에이터 목록 ({len(candidates)}명)
{chr(10).join(creator_lines)}

위 크리에이터들을 제품과 매칭하여 {_match_output_contract("creatorId", "크리에이터 ID", min_score, limit, "크리에이터")}"""

    return PromptPair(system=CREATOR_MATCH_SYSTEM_PROMPT, user=user)
