"""
Creator Match Package.

FastAPI service for creator sales analysis and creator-product matching.
An LLM produces insights and match scores from aggregated sales profiles;
a deterministic scorer takes over for matching when the LLM is unavailable.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, error taxonomy and dependencies
    - models: Pydantic schemas and enums
    - services: Aggregation, prompts, reasoning gateway, caching, scoring
"""

__version__ = "1.0.0"
