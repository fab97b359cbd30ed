"""
Reasoning Gateway Service.

Single entry point for calls to the external LLM. The gateway owns three
concerns and nothing else (result caching lives in the orchestrator):

1. Invocation: chat completion in JSON mode with per-operation model,
   temperature and output-token budget.
2. Validation: the reply must be non-empty JSON that satisfies the
   operation's pydantic schema. Anything else is an invalid response.
3. Failure handling: provider exceptions are classified into the engine's
   error taxonomy. Transient failures (rate limit, timeout, upstream server
   error, connection error) are retried per RetryPolicy; every other failure
   is raised immediately.

Retry Policy (defaults):
    - 3 attempts in total (one call plus two retries)
    - 1.0s before the second attempt, 2.0s before the third
    - backoff suspends via an awaited sleep, never a blocking one

The OpenAI SDK's built-in retry is disabled so that RetryPolicy is the only
retry layer.

Dependencies:
    - openai: AsyncOpenAI client and its exception classes
    - pydantic: response schema validation
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from creator_match.core.config import Settings
from creator_match.core.errors import (
    FatalReasoningError,
    MatchEngineError,
    TransientReasoningError,
    UnknownReasoningError,
)
from creator_match.models import ErrorKind, FatalReason, TransientReason

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# =============================================================================
# Retry Policy
# =============================================================================


def is_transient(error: MatchEngineError) -> bool:
    return error.kind == ErrorKind.TRANSIENT_REASONING


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff policy for reasoning calls.

    Attributes:
        max_attempts: Total attempts including the first call
        base_delay_seconds: Delay before the first retry
        multiplier: Growth factor for each later delay
        retryable: Predicate deciding whether an error may be retried
    """
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    multiplier: float = 2.0
    retryable: Callable[[MatchEngineError], bool] = is_transient

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay_seconds=settings.retry_base_delay_seconds,
            multiplier=settings.retry_backoff_multiplier,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return self.base_delay_seconds * (self.multiplier ** (attempt - 1))

    def should_retry(self, error: MatchEngineError, attempt: int) -> bool:
        return attempt < self.max_attempts and self.retryable(error)


@dataclass(frozen=True)
class ReasoningOptions:
    """Per-call model parameters. model=None uses the configured default."""
    temperature: float = 0.2
    max_tokens: int = 3000
    model: Optional[str] = None


# =============================================================================
# Error Classification
# =============================================================================


def _is_quota_error(exc: openai.APIError) -> bool:
    return "insufficient_quota" in (getattr(exc, "code", None), getattr(exc, "type", None))


def classify_provider_error(exc: Exception) -> MatchEngineError:
    """
    Map an exception raised by the OpenAI client to the engine taxonomy.

    Order matters: APITimeoutError is a subclass of APIConnectionError, and a
    429 can mean either a rate limit (transient) or an exhausted quota
    (fatal).

    Args:
        exc: Exception raised while calling the provider

    Returns:
        TransientReasoningError, FatalReasoningError or UnknownReasoningError
    """
    if isinstance(exc, openai.APITimeoutError):
        return TransientReasoningError(TransientReason.TIMEOUT, "Reasoning service request timed out")

    if isinstance(exc, openai.APIConnectionError):
        return TransientReasoningError(
            TransientReason.CONNECTION_ERROR, "Could not connect to reasoning service"
        )

    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code

        if isinstance(exc, openai.RateLimitError) or status == 429:
            if _is_quota_error(exc):
                return FatalReasoningError(
                    FatalReason.QUOTA_EXCEEDED,
                    "Reasoning service quota exhausted",
                    provider_status=status,
                )
            return TransientReasoningError(
                TransientReason.RATE_LIMITED,
                "Reasoning service rate limit exceeded",
                provider_status=status,
            )

        if isinstance(exc, openai.InternalServerError) or status >= 500:
            return TransientReasoningError(
                TransientReason.SERVER_ERROR,
                f"Reasoning service returned server error {status}",
                provider_status=status,
            )

        if isinstance(exc, openai.AuthenticationError) or status == 401:
            return FatalReasoningError(
                FatalReason.AUTHENTICATION,
                "Invalid reasoning service API key",
                provider_status=status,
            )

        return FatalReasoningError(
            FatalReason.PROVIDER_ERROR,
            f"Reasoning service error: {exc.message}",
            provider_status=status,
        )

    if isinstance(exc, openai.OpenAIError):
        return FatalReasoningError(FatalReason.PROVIDER_ERROR, f"Reasoning service error: {exc}")

    return UnknownReasoningError(exc)


# =============================================================================
# Gateway
# =============================================================================


class ReasoningGateway:
    """
    Invokes the reasoning service with retry and schema validation.

    Args:
        settings: Application settings (model, key, timeout)
        client: Pre-built AsyncOpenAI client; built lazily from settings if omitted
        retry_policy: Backoff policy; derived from settings if omitted
        sleep: Awaitable delay function, injectable for tests

    Example:
        >>> gateway = ReasoningGateway(get_settings())
        >>> result = await gateway.call(system, user, InsightReasoningResponse,
        ...                             ReasoningOptions(temperature=0.3, max_tokens=2000))
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[AsyncOpenAI] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.settings = settings
        self.retry_policy = retry_policy or RetryPolicy.from_settings(settings)
        self._client = client
        self._sleep = sleep

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.settings.openai_api_key:
                raise FatalReasoningError(
                    FatalReason.AUTHENTICATION,
                    "OPENAI_API_KEY is not configured",
                )
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                timeout=self.settings.openai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def call(
        self,
        system_prompt: str,
        user_prompt: str,
        response_schema: Type[ModelT],
        options: Optional[ReasoningOptions] = None,
    ) -> ModelT:
        """
        Run one reasoning call, retrying transient failures.

        Args:
            system_prompt: Role, rules and output contract
            user_prompt: Rendered data
            response_schema: Pydantic model the JSON reply must satisfy
            options: Temperature, token budget and model override

        Returns:
            Validated instance of response_schema

        Raises:
            TransientReasoningError: Transient failure after the retry budget
            FatalReasoningError: Auth, quota, invalid response or provider error
            UnknownReasoningError: Any non-provider exception
        """
        options = options or ReasoningOptions()
        attempt = 1

        while True:
            try:
                return await self._attempt(system_prompt, user_prompt, response_schema, options)
            except TransientReasoningError as error:
                error.attempts = attempt
                if not self.retry_policy.should_retry(error, attempt):
                    logger.error(
                        f"Reasoning call failed after {attempt} attempt(s): {error.code}"
                    )
                    raise

                delay = self.retry_policy.delay_for(attempt)
                logger.warning(
                    f"Reasoning call attempt {attempt} failed ({error.code}), "
                    f"retrying in {delay:.1f}s"
                )
                await self._sleep(delay)
                attempt += 1

    async def _attempt(
        self,
        system_prompt: str,
        user_prompt: str,
        response_schema: Type[ModelT],
        options: ReasoningOptions,
    ) -> ModelT:
        client = self._get_client()

        try:
            response = await client.chat.completions.create(
                model=options.model or self.settings.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            error = classify_provider_error(e)
            if not isinstance(error, TransientReasoningError):
                logger.error(f"Reasoning service call failed: {error.code}", exc_info=True)
            raise error from e

        return self._parse(response, response_schema)

    def _parse(self, response: Any, response_schema: Type[ModelT]) -> ModelT:
        """Extract, decode and validate the completion content."""
        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content:
            raise FatalReasoningError(
                FatalReason.INVALID_RESPONSE,
                "Empty response from reasoning service",
            )

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise FatalReasoningError(
                FatalReason.INVALID_RESPONSE,
                "Reasoning service returned malformed JSON",
                detail=str(e),
            ) from e

        try:
            return response_schema.model_validate(data)
        except ValidationError as e:
            raise FatalReasoningError(
                FatalReason.INVALID_RESPONSE,
                "Reasoning service response failed schema validation",
                detail=str(e),
            ) from e
