"""
Core infrastructure package for the matching engine.

Provides:
- Configuration management via pydantic-settings
- The engine's error taxonomy
- FastAPI dependency injection utilities

Re-exports the common pieces so callers can write:

    from creator_match.core import get_settings, MatchEngineError

Components Re-exported:
    Settings, get_settings: Configuration
    MatchEngineError and subclasses: Structured engine errors

The dependency aliases (SettingsDep, OrchestratorDep, CatalogDep) depend on
the services package and are imported from creator_match.core.dependencies.
"""

from creator_match.core.config import Settings, get_settings
from creator_match.core.errors import (
    EmptyCatalogError,
    EntityNotFoundError,
    FatalReasoningError,
    InsufficientDataError,
    MatchEngineError,
    TransientReasoningError,
    UnknownReasoningError,
    is_reasoning_failure,
)


__all__ = [
    # Configuration
    'Settings',
    'get_settings',
    # Errors
    'MatchEngineError',
    'InsufficientDataError',
    'EmptyCatalogError',
    'TransientReasoningError',
    'FatalReasoningError',
    'UnknownReasoningError',
    'EntityNotFoundError',
    'is_reasoning_failure',
]
