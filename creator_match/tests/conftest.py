"""
Pytest Configuration and Shared Fixtures for the Matching Engine Tests.

Provides:
- Factories for Creator, Product and SaleRecord test data
- A Settings instance isolated from the environment and .env files
- Fake OpenAI chat-completion responses and a mocked AsyncOpenAI client
- Real openai exception instances built over httpx request/response objects,
  used to drive error classification
- A MatchOrchestrator wired to a mocked gateway, a fixed season and a fixed
  clock

Async tests are marked explicitly with @pytest.mark.asyncio.
"""

import json
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from creator_match.core.config import Settings
from creator_match.models import Creator, Product, SaleRecord, Season
from creator_match.services.matching import MatchOrchestrator
from creator_match.services.reasoning_gateway import ReasoningGateway
from creator_match.services.result_cache import ResultCache


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - scenario: end-to-end behaviours described by concrete examples
    """
    config.addinivalue_line(
        'markers',
        'scenario: marks tests reproducing a concrete documented example'
    )


# ============================================================
# DATA FACTORIES
# ============================================================

FIXED_NOW = datetime(2026, 4, 15, 9, 0, tzinfo=timezone.utc)


def make_creator(creator_id: str = "creator-001", **overrides: Any) -> Creator:
    data: Dict[str, Any] = {
        "id": creator_id,
        "name": "김지은",
        "platform": "Instagram",
        "followers": 250000,
        "engagementRate": 4.2,
        "categories": ["Beauty", "Fashion"],
        "totalSales": 120,
        "totalRevenue": 5400000,
    }
    data.update(overrides)
    return Creator(**data)


def make_product(product_id: str = "product-001", **overrides: Any) -> Product:
    data: Dict[str, Any] = {
        "id": product_id,
        "name": "수분 크림",
        "brand": "라네즈",
        "category": "Beauty",
        "price": 45000,
        "description": "고보습 데일리 수분 크림",
        "seasonality": ["Spring", "Fall"],
        "targetAudience": ["20대 여성"],
        "avgCommissionRate": 15.0,
    }
    data.update(overrides)
    return Product(**data)


_sale_counter = {"value": 0}


def make_sale(
    creator_id: str = "creator-001",
    product_id: str = "product-001",
    product_name: str = "수분 크림",
    category: str = "Beauty",
    price: float = 45000,
    quantity: int = 1,
    revenue: Optional[float] = None,
    date: Optional[datetime] = None,
    **overrides: Any,
) -> SaleRecord:
    _sale_counter["value"] += 1
    data: Dict[str, Any] = {
        "id": f"sale-{_sale_counter['value']:05d}",
        "creatorId": creator_id,
        "productId": product_id,
        "productName": product_name,
        "category": category,
        "price": price,
        "quantity": quantity,
        "revenue": revenue if revenue is not None else price * quantity,
        "commission": 0.0,
        "date": date or datetime(2026, 4, 1, tzinfo=timezone.utc),
        "clickCount": 100,
        "conversionRate": 3.0,
    }
    data.update(overrides)
    return SaleRecord(**data)


def make_sales(count: int, creator_id: str = "creator-001", **kwargs: Any) -> List[SaleRecord]:
    return [make_sale(creator_id=creator_id, **kwargs) for _ in range(count)]


# ============================================================
# DOMAIN FIXTURES
# ============================================================

@pytest.fixture
def creator() -> Creator:
    return make_creator()


@pytest.fixture
def products() -> List[Product]:
    """Small catalog spanning three categories."""
    return [
        make_product("product-001"),
        make_product(
            "product-002",
            name="린넨 셔츠",
            brand="무신사 스탠다드",
            category="Fashion",
            price=39000,
            seasonality=["summer"],
            avgCommissionRate=10.0,
        ),
        make_product(
            "product-003",
            name="무선 이어폰",
            brand="삼성",
            category="Tech",
            price=159000,
            seasonality=["all"],
            avgCommissionRate=5.0,
        ),
    ]


@pytest.fixture
def creator_sales() -> List[SaleRecord]:
    """Six sales: mostly Beauty around 42,000 per unit, one Fashion."""
    return [
        make_sale(price=40000, quantity=2, date=datetime(2026, 3, 5, tzinfo=timezone.utc)),
        make_sale(price=45000, quantity=1, date=datetime(2026, 4, 10, tzinfo=timezone.utc)),
        make_sale(price=42000, quantity=3, date=datetime(2026, 5, 20, tzinfo=timezone.utc)),
        make_sale(price=44000, quantity=1, date=datetime(2026, 7, 2, tzinfo=timezone.utc)),
        make_sale(price=41000, quantity=2, date=datetime(2025, 10, 11, tzinfo=timezone.utc)),
        make_sale(
            product_id="product-002",
            product_name="린넨 셔츠",
            category="Fashion",
            price=39000,
            quantity=1,
            date=datetime(2025, 12, 24, tzinfo=timezone.utc),
        ),
    ]


# ============================================================
# SETTINGS
# ============================================================

@pytest.fixture
def settings() -> Settings:
    """Settings that ignore the process environment and any .env file."""
    return Settings(_env_file=None, openai_api_key="sk-test")


# ============================================================
# OPENAI FAKES
# ============================================================

OPENAI_URL = "https://api.openai.com/v1/chat/completions"


def make_completion(content: Optional[str]) -> SimpleNamespace:
    """Build an object shaped like a ChatCompletion with one choice."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def json_completion(payload: Dict[str, Any]) -> SimpleNamespace:
    return make_completion(json.dumps(payload, ensure_ascii=False))


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", OPENAI_URL))


def rate_limit_error() -> openai.RateLimitError:
    return openai.RateLimitError(
        "Rate limit reached",
        response=_response(429),
        body={"code": "rate_limit_exceeded", "type": "requests"},
    )


def quota_error() -> openai.RateLimitError:
    return openai.RateLimitError(
        "You exceeded your current quota",
        response=_response(429),
        body={"code": "insufficient_quota", "type": "insufficient_quota"},
    )


def auth_error() -> openai.AuthenticationError:
    return openai.AuthenticationError("Incorrect API key", response=_response(401), body=None)


def server_error() -> openai.InternalServerError:
    return openai.InternalServerError("Server error", response=_response(500), body=None)


def bad_request_error() -> openai.BadRequestError:
    return openai.BadRequestError("Bad request", response=_response(400), body=None)


def timeout_error() -> openai.APITimeoutError:
    return openai.APITimeoutError(request=httpx.Request("POST", OPENAI_URL))


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(request=httpx.Request("POST", OPENAI_URL))


@pytest.fixture
def mock_openai_client() -> MagicMock:
    """AsyncOpenAI stand-in whose chat.completions.create is an AsyncMock."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def no_sleep() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def gateway(settings: Settings, mock_openai_client: MagicMock, no_sleep: AsyncMock) -> ReasoningGateway:
    return ReasoningGateway(settings, client=mock_openai_client, sleep=no_sleep)


# ============================================================
# REASONING PAYLOADS
# ============================================================

def insight_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "summary": "뷰티 카테고리 중심의 안정적인 판매 성향을 보입니다.",
        "strengths": ["뷰티 매출 비중이 높음", "4만원대 가격대 강세"],
        "topCategories": [
            {"category": "Beauty", "percentage": 84.5},
            {"category": "Fashion", "percentage": 15.5},
        ],
        "priceRange": {"min": 39000, "max": 45000, "average": 42000},
        "seasonalTrends": [{"season": "spring", "salesCount": 6, "revenue": 255000}],
        "recommendations": ["봄 시즌 스킨케어 제품 확대"],
        "confidence": 0.82,
    }
    payload.update(overrides)
    return payload


def match_item(entity_id: str, score: float, id_field: str = "productId") -> Dict[str, Any]:
    return {
        id_field: entity_id,
        "matchScore": score,
        "scoreBreakdown": {
            "categoryFit": score,
            "priceFit": score,
            "seasonFit": score,
            "audienceFit": score,
        },
        "predictedRevenue": {
            "min": 300000,
            "max": 700000,
            "average": 500000,
            "predictedQuantity": 11,
            "predictedCommission": 75000,
        },
        "reasoning": "카테고리와 가격대가 크리에이터의 판매 이력과 잘 맞습니다.",
    }


# ============================================================
# ORCHESTRATOR
# ============================================================

@pytest.fixture
def mock_gateway() -> MagicMock:
    gateway = MagicMock(spec=ReasoningGateway)
    gateway.call = AsyncMock()
    return gateway


@pytest.fixture
def orchestrator(mock_gateway: MagicMock, settings: Settings) -> MatchOrchestrator:
    return MatchOrchestrator(
        mock_gateway,
        ResultCache(ttl_seconds=settings.cache_ttl_seconds),
        settings,
        season_provider=lambda: Season.SPRING,
        clock=lambda: FIXED_NOW,
    )
