"""
HTTP contract tests.

The orchestrator and catalog are swapped in through app.dependency_overrides,
so the lifespan (and any real OpenAI client) is never used.
"""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from creator_match.core.config import Settings
from creator_match.core.dependencies import get_catalog, get_orchestrator, get_settings_dependency
from creator_match.core.errors import TransientReasoningError
from creator_match.main import app
from creator_match.models import (
    InsightReasoningResponse,
    ProductMatchListResponse,
    TransientReason,
)
from creator_match.services.catalog import CatalogStore
from creator_match.tests.conftest import insight_payload, make_creator, match_item


@pytest.fixture
def catalog(creator, products, creator_sales) -> CatalogStore:
    creators = [
        creator,
        make_creator("creator-002", name="박서준", platform="YouTube", followers=900000,
                     categories=["Tech", "Lifestyle"], engagementRate=2.1),
        make_creator("creator-003", name="이하늘", platform="TikTok", followers=50000,
                     categories=["Food", "Beauty"], engagementRate=7.5),
    ]
    return CatalogStore(creators=creators, products=products, sales=creator_sales)


@pytest.fixture
def client(orchestrator, catalog, settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings_dependency] = lambda: settings
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAnalyzeEndpoint:

    def test_returns_insight_envelope(self, client, mock_gateway) -> None:
        mock_gateway.call.return_value = InsightReasoningResponse.model_validate(insight_payload())

        response = client.post("/analyze", json={"creatorId": "creator-001"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["creatorId"] == "creator-001"
        assert 0 <= body["data"]["confidence"] <= 1

    def test_unknown_creator_is_404(self, client) -> None:
        response = client.post("/analyze", json={"creatorId": "creator-999"})

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Creator not found: creator-999"},
        }

    def test_insufficient_sales_is_400(self, client) -> None:
        response = client.post("/analyze", json={"creatorId": "creator-002"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INSUFFICIENT_DATA"
        assert error["details"] == {"required": 5, "actual": 0}

    def test_rate_limit_after_retries_is_429(self, client, mock_gateway) -> None:
        mock_gateway.call.side_effect = TransientReasoningError(
            TransientReason.RATE_LIMITED, "rate limited", attempts=3
        )

        response = client.post("/analyze", json={"creatorId": "creator-001"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "OPENAI_RATE_LIMITED"
        assert response.json()["error"]["details"]["attempts"] == 3

    def test_missing_body_field_is_invalid_request(self, client) -> None:
        response = client.post("/analyze", json={})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"


class TestMatchEndpoints:

    def test_match_products(self, client, mock_gateway) -> None:
        mock_gateway.call.return_value = ProductMatchListResponse.model_validate(
            {"matches": [match_item("product-001", 91)]}
        )

        response = client.post("/match", json={"creatorId": "creator-001", "limit": 5})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data[0]["product"]["id"] == "product-001"
        assert data[0]["source"] == "ai"

    def test_match_products_falls_back(self, client, mock_gateway) -> None:
        mock_gateway.call.side_effect = TransientReasoningError(TransientReason.TIMEOUT, "timeout")

        response = client.post("/match", json={"creatorId": "creator-001"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 3
        assert {item["source"] for item in data} == {"heuristic"}

    @pytest.mark.parametrize("limit", [0, 51])
    def test_limit_out_of_range(self, client, limit: int) -> None:
        response = client.post("/match", json={"creatorId": "creator-001", "limit": limit})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_limit_bounded_by_configured_maximum(self, client) -> None:
        app.dependency_overrides[get_settings_dependency] = lambda: Settings(
            _env_file=None, max_match_limit=2
        )

        rejected = client.post("/match", json={"creatorId": "creator-001", "limit": 3})
        also_rejected = client.post("/match/creators", json={"productId": "product-001", "limit": 3})

        assert rejected.status_code == 400
        assert rejected.json()["error"]["code"] == "INVALID_REQUEST"
        assert rejected.json()["error"]["details"][0]["loc"] == ["body", "limit"]
        assert also_rejected.status_code == 400

    def test_default_limit_applies_when_omitted(self, client, mock_gateway, orchestrator) -> None:
        mock_gateway.call.return_value = ProductMatchListResponse.model_validate(
            {"matches": [match_item("product-001", 91)]}
        )

        client.post("/match", json={"creatorId": "creator-001"})

        assert "match:creator-001-10" in orchestrator.cache

    def test_match_creators_unknown_product(self, client) -> None:
        response = client.post("/match/creators", json={"productId": "product-999"})

        assert response.status_code == 404

    def test_match_creators_only_eligible(self, client, mock_gateway) -> None:
        mock_gateway.call.side_effect = TransientReasoningError(TransientReason.SERVER_ERROR, "down")

        response = client.post("/match/creators", json={"productId": "product-001"})

        assert response.status_code == 200
        assert [item["creator"]["id"] for item in response.json()["data"]] == ["creator-001"]


class TestCacheEndpoint:

    def test_invalidate_creator(self, client, mock_gateway, orchestrator) -> None:
        mock_gateway.call.return_value = InsightReasoningResponse.model_validate(insight_payload())
        client.post("/analyze", json={"creatorId": "creator-001"})

        response = client.post("/cache/invalidate", json={"creatorId": "creator-001"})

        assert response.json() == {"success": True, "data": {"removed": 1}}
        assert len(orchestrator.cache) == 0

    def test_clear_all(self, client, orchestrator) -> None:
        orchestrator.cache.set("analyze:creator-001", object())
        orchestrator.cache.set("analyze:creator-002", object())

        response = client.post("/cache/invalidate", json={})

        assert response.json()["data"]["removed"] == 2
        assert len(orchestrator.cache) == 0


class TestCatalogEndpoints:

    def test_list_creators_paginated(self, client) -> None:
        response = client.get("/creators", params={"limit": 2})

        body = response.json()
        assert response.status_code == 200
        assert [c["id"] for c in body["data"]] == ["creator-001", "creator-002"]
        assert body["pagination"] == {
            "page": 1,
            "limit": 2,
            "total": 3,
            "totalPages": 2,
            "hasNext": True,
            "hasPrev": False,
        }

    def test_list_creators_filter_and_sort(self, client) -> None:
        response = client.get(
            "/creators", params={"category": "beauty", "sort": "followers", "order": "desc"}
        )

        assert [c["id"] for c in response.json()["data"]] == ["creator-001", "creator-003"]

    def test_list_creators_by_platform(self, client) -> None:
        response = client.get("/creators", params={"platform": "youtube"})

        assert [c["id"] for c in response.json()["data"]] == ["creator-002"]

    def test_creator_detail_with_stats(self, client) -> None:
        response = client.get("/creators/creator-001")

        data = response.json()["data"]
        assert data["id"] == "creator-001"
        assert data["stats"]["totalSales"] == 10
        assert data["stats"]["topCategory"] == "Beauty"
        assert data["stats"]["topProduct"]["id"] == "product-001"

    def test_creator_detail_unknown(self, client) -> None:
        response = client.get("/creators/creator-999")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_list_products_price_filter(self, client) -> None:
        response = client.get("/products", params={"minPrice": 40000, "sort": "price", "order": "desc"})

        assert [p["id"] for p in response.json()["data"]] == ["product-003", "product-001"]

    def test_list_products_search(self, client) -> None:
        response = client.get("/products", params={"search": "삼성"})

        assert [p["id"] for p in response.json()["data"]] == ["product-003"]


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
