"""
Enumeration definitions for the creator-product matching engine.

All enums inherit from both `str` and `Enum` so they serialize cleanly inside
Pydantic models and JSON API responses.

Groups:
- Reference data: Platform, Category, Season
- Engine operations: CacheOperation, MatchSource
- Error taxonomy tags: ErrorKind, TransientReason, FatalReason
"""

from enum import Enum


class Platform(str, Enum):
    """
    Social platform a creator publishes on.

    Values: 'Instagram' | 'YouTube' | 'TikTok' | 'Blog'
    """
    INSTAGRAM = "Instagram"
    YOUTUBE = "YouTube"
    TIKTOK = "TikTok"
    BLOG = "Blog"


class Category(str, Enum):
    """
    Product categories and creator expertise areas.

    Sale records and products carry the category as a plain string, so this
    enum is the reference list used for prompts and request validation
    rather than a hard constraint on stored data.
    """
    BEAUTY = "Beauty"
    FASHION = "Fashion"
    LIFESTYLE = "Lifestyle"
    FOOD = "Food"
    TECH = "Tech"
    HOME_LIVING = "HomeLiving"
    HEALTH = "Health"
    BABY_KIDS = "BabyKids"
    PET = "Pet"
    STATIONERY = "Stationery"


class Season(str, Enum):
    """
    Calendar season derived from a sale date.

    Month ranges:
    - spring: March - May
    - summer: June - August
    - fall: September - November
    - winter: December - February
    """
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class CacheOperation(str, Enum):
    """Cache namespace prefixes, one per cached engine operation."""
    ANALYZE = "analyze"
    MATCH = "match"


class MatchSource(str, Enum):
    """
    Which path produced a match result.

    - ai: validated reasoning-service output
    - heuristic: deterministic fallback scoring
    """
    AI = "ai"
    HEURISTIC = "heuristic"


class ErrorKind(str, Enum):
    """
    Closed set of engine error kinds.

    Every MatchEngineError subclass is tagged with exactly one of these so
    callers can branch on the kind instead of comparing code strings.
    """
    INSUFFICIENT_DATA = "insufficient_data"
    EMPTY_CATALOG = "empty_catalog"
    TRANSIENT_REASONING = "transient_reasoning"
    FATAL_REASONING = "fatal_reasoning"
    UNKNOWN = "unknown"
    NOT_FOUND = "not_found"


class TransientReason(str, Enum):
    """Reasoning-service failures expected to clear up on retry."""
    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    CONNECTION_ERROR = "connection_error"


class FatalReason(str, Enum):
    """Reasoning-service failures that are never retried."""
    AUTHENTICATION = "authentication"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_RESPONSE = "invalid_response"
    PROVIDER_ERROR = "provider_error"
