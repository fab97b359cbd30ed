"""
FastAPI dependency injection module for the matching engine.

The orchestrator and catalog store are process-lifetime objects created in
the application lifespan and kept on app.state. Routes receive them through
the dependencies below, so tests can swap them with
app.dependency_overrides.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: cached Settings singleton
- get_orchestrator / OrchestratorDep: the MatchOrchestrator
- get_catalog / CatalogDep: the CatalogStore

Usage Examples:
    @router.post("/analyze")
    async def analyze(
        body: AnalyzeRequest,
        orchestrator: OrchestratorDep,
        catalog: CatalogDep,
    ) -> InsightResponse:
        creator = catalog.get_creator(body.creatorId)
        ...
"""

from typing import Annotated

from fastapi import Depends, Request

from creator_match.core.config import Settings, get_settings
from creator_match.services.catalog import CatalogStore
from creator_match.services.matching import MatchOrchestrator


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """Return the cached Settings singleton."""
    return get_settings()


# =============================================================================
# Engine Dependencies
# =============================================================================

def get_orchestrator(request: Request) -> MatchOrchestrator:
    """
    Return the orchestrator built during application startup.

    Raises:
        RuntimeError: If the lifespan has not run (app used without startup)
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise RuntimeError("Match orchestrator not initialized. Was the lifespan run?")
    return orchestrator


def get_catalog(request: Request) -> CatalogStore:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise RuntimeError("Catalog store not initialized. Was the lifespan run?")
    return catalog


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
"""Inject the application Settings."""

OrchestratorDep = Annotated[MatchOrchestrator, Depends(get_orchestrator)]
"""Inject the MatchOrchestrator."""

CatalogDep = Annotated[CatalogStore, Depends(get_catalog)]
"""Inject the CatalogStore."""
