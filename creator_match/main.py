"""
FastAPI application entry point for the creator matching API.

Wires the process-lifetime engine objects in the lifespan:
    CatalogStore -> ResultCache -> ReasoningGateway -> MatchOrchestrator
and stores them on app.state for the dependency providers in
creator_match.core.dependencies.

Error bodies share one envelope:
    {"success": false, "error": {"code": ..., "message": ..., "details": ...}}
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from creator_match.api import api_router
from creator_match.core.config import get_settings
from creator_match.core.errors import MatchEngineError
from creator_match.services.catalog import CatalogStore
from creator_match.services.matching import MatchOrchestrator
from creator_match.services.reasoning_gateway import ReasoningGateway
from creator_match.services.result_cache import ResultCache

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_catalog() -> CatalogStore:
    """Load the configured snapshot, or start with an empty store."""
    if not settings.catalog_data_path:
        logger.warning("CATALOG_DATA_PATH not set; starting with an empty catalog")
        return CatalogStore()
    return CatalogStore.from_json_file(settings.catalog_data_path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for application startup and shutdown.

    On startup:
        - Load the catalog store
        - Build the result cache, reasoning gateway and orchestrator

    On shutdown:
        - Drop cached results
    """
    logger.info("Creator Match API starting")

    app.state.catalog = build_catalog()
    cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)
    gateway = ReasoningGateway(settings)
    app.state.orchestrator = MatchOrchestrator(gateway, cache, settings)

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; analysis will fail and matching will use fallback scores")

    yield

    logger.info("Creator Match API shutting down")
    cache.clear()


# Create FastAPI application
app = FastAPI(
    title="Creator Match API",
    version="1.0.0",
    description=(
        "Creator sales analysis and creator-product matching backed by an "
        "LLM, with deterministic fallback scoring."
    ),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(MatchEngineError)
async def match_engine_error_handler(request: Request, exc: MatchEngineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.to_payload()},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": {
                "code": "INVALID_REQUEST",
                "message": "Invalid request",
                "details": jsonable_encoder(exc.errors()),
            },
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "INTERNAL_ERROR" if exc.status_code >= 500 else "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": {"code": code, "message": str(exc.detail)}},
    )


# Register API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer probes.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "creator_match.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
