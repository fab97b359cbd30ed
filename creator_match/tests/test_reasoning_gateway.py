"""
Tests for the reasoning gateway.

The AsyncOpenAI client is an AsyncMock; provider failures are real openai
exception instances so classification runs against the actual SDK types.
Backoff sleeps are injected and never wait.

Test Categories:
- TestRetryPolicy: delay schedule and retry predicate
- TestClassifyProviderError: provider exception -> engine error kind
- TestGatewayCall: retry, validation and request parameters
"""

from types import SimpleNamespace

import pytest

from creator_match.core.config import Settings
from creator_match.core.errors import (
    FatalReasoningError,
    TransientReasoningError,
    UnknownReasoningError,
)
from creator_match.models import (
    FatalReason,
    InsightReasoningResponse,
    ProductMatchListResponse,
    TransientReason,
)
from creator_match.services.reasoning_gateway import (
    ReasoningGateway,
    ReasoningOptions,
    RetryPolicy,
    classify_provider_error,
)
from creator_match.tests.conftest import (
    auth_error,
    bad_request_error,
    connection_error,
    insight_payload,
    json_completion,
    make_completion,
    match_item,
    quota_error,
    rate_limit_error,
    server_error,
    timeout_error,
)


class TestRetryPolicy:

    def test_default_delays_double(self) -> None:
        policy = RetryPolicy()

        assert policy.delay_for(1) == 1.0
        assert policy.delay_for(2) == 2.0

    def test_retries_only_transient_within_budget(self) -> None:
        policy = RetryPolicy(max_attempts=3)
        transient = TransientReasoningError(TransientReason.TIMEOUT, "timeout")
        fatal = FatalReasoningError(FatalReason.AUTHENTICATION, "bad key")

        assert policy.should_retry(transient, 1)
        assert policy.should_retry(transient, 2)
        assert not policy.should_retry(transient, 3)
        assert not policy.should_retry(fatal, 1)

    def test_from_settings(self) -> None:
        settings = Settings(_env_file=None, retry_max_attempts=5, retry_base_delay_seconds=0.5)

        policy = RetryPolicy.from_settings(settings)

        assert policy.max_attempts == 5
        assert policy.delay_for(3) == 2.0


class TestClassifyProviderError:

    @pytest.mark.parametrize(
        "factory,reason",
        [
            (rate_limit_error, TransientReason.RATE_LIMITED),
            (timeout_error, TransientReason.TIMEOUT),
            (connection_error, TransientReason.CONNECTION_ERROR),
            (server_error, TransientReason.SERVER_ERROR),
        ],
    )
    def test_transient_errors(self, factory, reason) -> None:
        error = classify_provider_error(factory())

        assert isinstance(error, TransientReasoningError)
        assert error.reason == reason

    def test_rate_limit_status_and_code(self) -> None:
        error = classify_provider_error(rate_limit_error())

        assert error.status_code == 429
        assert error.code == "OPENAI_RATE_LIMITED"

    def test_quota_is_fatal(self) -> None:
        error = classify_provider_error(quota_error())

        assert isinstance(error, FatalReasoningError)
        assert error.reason == FatalReason.QUOTA_EXCEEDED
        assert error.code == "OPENAI_QUOTA_EXCEEDED"

    def test_authentication_is_fatal(self) -> None:
        error = classify_provider_error(auth_error())

        assert isinstance(error, FatalReasoningError)
        assert error.code == "OPENAI_INVALID_KEY"

    def test_unrecognized_provider_error(self) -> None:
        error = classify_provider_error(bad_request_error())

        assert isinstance(error, FatalReasoningError)
        assert error.reason == FatalReason.PROVIDER_ERROR
        assert error.code == "OPENAI_ERROR"

    def test_non_provider_exception_is_unknown(self) -> None:
        cause = KeyError("boom")

        error = classify_provider_error(cause)

        assert isinstance(error, UnknownReasoningError)
        assert error.cause is cause
        assert error.code == "ANALYSIS_FAILED"


class TestGatewayCall:

    @pytest.mark.asyncio
    async def test_returns_validated_result(self, gateway, mock_openai_client) -> None:
        mock_openai_client.chat.completions.create.return_value = json_completion(insight_payload())

        result = await gateway.call("system", "user", InsightReasoningResponse)

        assert isinstance(result, InsightReasoningResponse)
        assert result.confidence == pytest.approx(0.82)

    @pytest.mark.asyncio
    async def test_request_uses_json_mode_and_options(self, gateway, mock_openai_client) -> None:
        mock_openai_client.chat.completions.create.return_value = json_completion(insight_payload())

        await gateway.call(
            "system text",
            "user text",
            InsightReasoningResponse,
            ReasoningOptions(temperature=0.3, max_tokens=2000),
        )

        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2000
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]

    @pytest.mark.asyncio
    @pytest.mark.scenario
    async def test_two_rate_limits_then_success_takes_three_attempts(
        self, gateway, mock_openai_client, no_sleep
    ) -> None:
        mock_openai_client.chat.completions.create.side_effect = [
            rate_limit_error(),
            rate_limit_error(),
            json_completion(insight_payload()),
        ]

        result = await gateway.call("s", "u", InsightReasoningResponse)

        assert result.summary
        assert mock_openai_client.chat.completions.create.await_count == 3
        assert [c.args[0] for c in no_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_transient_failure_surfaces_after_budget(
        self, gateway, mock_openai_client, no_sleep
    ) -> None:
        mock_openai_client.chat.completions.create.side_effect = timeout_error()

        with pytest.raises(TransientReasoningError) as exc_info:
            await gateway.call("s", "u", InsightReasoningResponse)

        assert exc_info.value.reason == TransientReason.TIMEOUT
        assert exc_info.value.attempts == 3
        assert exc_info.value.status_code == 503
        assert mock_openai_client.chat.completions.create.await_count == 3
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_fatal_failure_is_not_retried(self, gateway, mock_openai_client, no_sleep) -> None:
        mock_openai_client.chat.completions.create.side_effect = auth_error()

        with pytest.raises(FatalReasoningError):
            await gateway.call("s", "u", InsightReasoningResponse)

        assert mock_openai_client.chat.completions.create.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.scenario
    async def test_null_content_is_invalid_response_without_retry(
        self, gateway, mock_openai_client, no_sleep
    ) -> None:
        mock_openai_client.chat.completions.create.return_value = make_completion(None)

        with pytest.raises(FatalReasoningError) as exc_info:
            await gateway.call("s", "u", InsightReasoningResponse)

        assert exc_info.value.code == "ANALYSIS_INVALID_RESPONSE"
        assert mock_openai_client.chat.completions.create.await_count == 1
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_choice_without_message_is_invalid_response(
        self, gateway, mock_openai_client, no_sleep
    ) -> None:
        mock_openai_client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=None)]
        )

        with pytest.raises(FatalReasoningError) as exc_info:
            await gateway.call("s", "u", InsightReasoningResponse)

        assert exc_info.value.reason == FatalReason.INVALID_RESPONSE
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_json(self, gateway, mock_openai_client) -> None:
        mock_openai_client.chat.completions.create.return_value = make_completion("{not json")

        with pytest.raises(FatalReasoningError) as exc_info:
            await gateway.call("s", "u", InsightReasoningResponse)

        assert exc_info.value.reason == FatalReason.INVALID_RESPONSE
        assert exc_info.value.detail

    @pytest.mark.asyncio
    async def test_schema_violation_carries_validation_detail(self, gateway, mock_openai_client) -> None:
        bad = {"matches": [match_item("product-001", 140)]}
        mock_openai_client.chat.completions.create.return_value = json_completion(bad)

        with pytest.raises(FatalReasoningError) as exc_info:
            await gateway.call("s", "u", ProductMatchListResponse)

        assert exc_info.value.code == "ANALYSIS_INVALID_RESPONSE"
        assert "matchScore" in exc_info.value.details["detail"]

    @pytest.mark.asyncio
    async def test_missing_api_key_is_authentication_error(self, no_sleep) -> None:
        gateway = ReasoningGateway(Settings(_env_file=None, openai_api_key=None), sleep=no_sleep)

        with pytest.raises(FatalReasoningError) as exc_info:
            await gateway.call("s", "u", InsightReasoningResponse)

        assert exc_info.value.reason == FatalReason.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_unknown(self, gateway, mock_openai_client) -> None:
        mock_openai_client.chat.completions.create.side_effect = RuntimeError("socket exploded")

        with pytest.raises(UnknownReasoningError):
            await gateway.call("s", "u", InsightReasoningResponse)

        assert mock_openai_client.chat.completions.create.await_count == 1
