"""
Error taxonomy for the matching engine.

Every failure the engine surfaces is a MatchEngineError subclass tagged with
exactly one ErrorKind. Each subclass carries only the fields relevant to its
kind, plus a stable code and HTTP status for the API boundary:

| Class                   | Kind                | Code(s)                         | Status  |
|-------------------------|---------------------|---------------------------------|---------|
| InsufficientDataError   | INSUFFICIENT_DATA   | INSUFFICIENT_DATA               | 400     |
| EmptyCatalogError       | EMPTY_CATALOG       | PRODUCT_CATALOG_EMPTY           | 400     |
| TransientReasoningError | TRANSIENT_REASONING | OPENAI_RATE_LIMITED, ...        | 429/503 |
| FatalReasoningError     | FATAL_REASONING     | OPENAI_INVALID_KEY, ...         | 500     |
| UnknownReasoningError   | UNKNOWN             | ANALYSIS_FAILED                 | 500     |
| EntityNotFoundError     | NOT_FOUND           | NOT_FOUND                       | 404     |

Only TransientReasoningError is retried by the reasoning gateway.
"""

from typing import Any, Dict, Optional

from creator_match.models.enums import ErrorKind, FatalReason, TransientReason


class MatchEngineError(Exception):
    """Base class for all structured engine errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        raise NotImplementedError

    @property
    def details(self) -> Optional[Dict[str, Any]]:
        return None

    def to_payload(self) -> Dict[str, Any]:
        """Render the error as the JSON body returned to API clients."""
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        details = self.details
        if details:
            payload["details"] = details
        return payload


class InsufficientDataError(MatchEngineError):
    """Fewer sale records than the requested operation needs."""

    kind = ErrorKind.INSUFFICIENT_DATA
    status_code = 400

    def __init__(self, required: int, actual: int) -> None:
        super().__init__(
            f"Not enough sales data: {actual} record(s), at least {required} required"
        )
        self.required = required
        self.actual = actual

    @property
    def code(self) -> str:
        return "INSUFFICIENT_DATA"

    @property
    def details(self) -> Dict[str, Any]:
        return {"required": self.required, "actual": self.actual}


class EmptyCatalogError(MatchEngineError):
    """Matching was requested against zero candidates."""

    kind = ErrorKind.EMPTY_CATALOG
    status_code = 400

    def __init__(self) -> None:
        super().__init__("No candidate products to match against")

    @property
    def code(self) -> str:
        return "PRODUCT_CATALOG_EMPTY"


_TRANSIENT_CODES: Dict[TransientReason, str] = {
    TransientReason.RATE_LIMITED: "OPENAI_RATE_LIMITED",
    TransientReason.TIMEOUT: "OPENAI_TIMEOUT",
    TransientReason.SERVER_ERROR: "OPENAI_SERVER_ERROR",
    TransientReason.CONNECTION_ERROR: "OPENAI_CONNECTION_ERROR",
}

_FATAL_CODES: Dict[FatalReason, str] = {
    FatalReason.AUTHENTICATION: "OPENAI_INVALID_KEY",
    FatalReason.QUOTA_EXCEEDED: "OPENAI_QUOTA_EXCEEDED",
    FatalReason.INVALID_RESPONSE: "ANALYSIS_INVALID_RESPONSE",
    FatalReason.PROVIDER_ERROR: "OPENAI_ERROR",
}


class TransientReasoningError(MatchEngineError):
    """
    A reasoning-service failure expected to clear up on retry.

    Surfaced to callers only after the retry budget is exhausted; attempts
    records how many calls were made.
    """

    kind = ErrorKind.TRANSIENT_REASONING

    def __init__(
        self,
        reason: TransientReason,
        message: str,
        attempts: int = 1,
        provider_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.attempts = attempts
        self.provider_status = provider_status

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 429 if self.reason == TransientReason.RATE_LIMITED else 503

    @property
    def code(self) -> str:
        return _TRANSIENT_CODES[self.reason]

    @property
    def details(self) -> Dict[str, Any]:
        return {"reason": self.reason.value, "attempts": self.attempts}


class FatalReasoningError(MatchEngineError):
    """
    A reasoning-service failure that retrying will not fix.

    Covers bad credentials, exhausted quota, malformed or schema-violating
    responses, and unrecognized provider errors. detail holds the underlying
    parse or validation message when there is one.
    """

    kind = ErrorKind.FATAL_REASONING
    status_code = 500

    def __init__(
        self,
        reason: FatalReason,
        message: str,
        detail: Optional[str] = None,
        provider_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.detail = detail
        self.provider_status = provider_status

    @property
    def code(self) -> str:
        return _FATAL_CODES[self.reason]

    @property
    def details(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {"reason": self.reason.value}
        if self.detail:
            details["detail"] = self.detail
        return details


class UnknownReasoningError(MatchEngineError):
    """Any exception raised during a reasoning call that is not a provider error."""

    kind = ErrorKind.UNKNOWN
    status_code = 500

    def __init__(self, cause: BaseException) -> None:
        super().__init__("Unknown error during reasoning call")
        self.cause = cause

    @property
    def code(self) -> str:
        return "ANALYSIS_FAILED"


class EntityNotFoundError(MatchEngineError):
    """A creator or product id that the catalog does not know."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id

    @property
    def code(self) -> str:
        return "NOT_FOUND"


def is_reasoning_failure(error: MatchEngineError) -> bool:
    """True for the kinds the matching path replaces with fallback scores."""
    return error.kind in (
        ErrorKind.TRANSIENT_REASONING,
        ErrorKind.FATAL_REASONING,
        ErrorKind.UNKNOWN,
    )
