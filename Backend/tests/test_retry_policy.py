# tests/test_retry_policy.py
"""
Unit tests for RetryPolicy and the client's retry behaviour.
"""
import pytest

from artifact_studio.core.exceptions import (
    AuthError,
    BadRequestError,
    MalformedResponseError,
    NetworkUnreachableError,
    RateLimitError,
    RunCancelledError,
    ServerError,
)
from artifact_studio.orchestration.cancellation import CancellationToken
from artifact_studio.orchestration.retry_policy import RetryPolicy

from tests.utils.call_counter import CallCounter
from tests.utils.stubs import RecordingSleep, StubProvider, always_raise, artifact_response, fail_then


class TestRetryDelay:
    def test_delays_grow_by_multiplier(self):
        policy = RetryPolicy(initial_delay=5.0, multiplier=1.5)
        assert policy.get_retry_delay(0) == 5.0
        assert policy.get_retry_delay(1) == 7.5
        assert policy.get_retry_delay(2) == pytest.approx(11.25)

    @pytest.mark.parametrize("error,expected", [
        (RateLimitError("stub", "slow down"), True),
        (ServerError("stub", "boom"), True),
        (NetworkUnreachableError("stub", "dns"), True),
        (AuthError("stub", "bad key"), False),
        (BadRequestError("stub", "bad"), False),
        (MalformedResponseError("stub", "garbage"), False),
    ])
    def test_should_retry_by_category(self, error, expected):
        assert RetryPolicy.should_retry(error) is expected


class TestRetryRun:
    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds_within_three_attempts(self):
        sleep = RecordingSleep()
        policy = RetryPolicy(initial_delay=5.0, multiplier=1.5, sleep=sleep)
        counter = CallCounter()
        handler = fail_then([ServerError("stub", "500"), ServerError("stub", "502")], lambda _: "ok")

        async def call():
            counter.inc("call")
            return handler("")

        result = await policy.run(call, max_attempts=3, label="test")

        assert result == "ok"
        counter.assert_exact("call", 3)
        assert len(sleep.delays) == 2
        assert sleep.delays[1] == pytest.approx(sleep.delays[0] * 1.5)

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self):
        sleep = RecordingSleep()
        policy = RetryPolicy(sleep=sleep)

        async def call():
            raise RateLimitError("stub", "429")

        with pytest.raises(RateLimitError):
            await policy.run(call, max_attempts=2, label="test")
        assert sleep.delays == [5.0]

    @pytest.mark.asyncio
    async def test_auth_error_is_not_retried(self):
        sleep = RecordingSleep()
        policy = RetryPolicy(sleep=sleep)
        counter = CallCounter()

        async def call():
            counter.inc("call")
            raise AuthError("stub", "401")

        with pytest.raises(AuthError):
            await policy.run(call, max_attempts=5, label="test")
        counter.assert_exact("call", 1)
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_cancelled_token_stops_before_first_attempt(self):
        token = CancellationToken("run-1")
        token.cancel()
        counter = CallCounter()

        async def call():
            counter.inc("call")
            return "ok"

        with pytest.raises(RunCancelledError):
            await RetryPolicy(sleep=RecordingSleep()).run(call, max_attempts=2, cancel_token=token)
        counter.assert_exact("call", 0)


class TestClientRetries:
    @pytest.mark.asyncio
    async def test_client_recovers_after_transient_failures(self, make_client, sleep):
        stub = StubProvider(artifact=fail_then(
            [RateLimitError("stub", "429"), ServerError("stub", "503")], artifact_response
        ))
        client = make_client(stub)

        text = await client.generate("system", 'Generate the "Cache Manager" module', max_attempts=3)

        assert "class CacheManager" in text
        stub.counter.assert_exact("artifact", 3)
        assert sleep.delays == [5.0, 7.5]

    @pytest.mark.asyncio
    async def test_client_auth_error_fails_immediately(self, make_client, sleep):
        stub = StubProvider(artifact=always_raise(AuthError("stub", "invalid key")))
        client = make_client(stub)

        result = await client.try_generate("system", 'Generate the "X" module', max_attempts=2)

        assert not result.is_ok()
        assert isinstance(result.error, AuthError)
        stub.counter.assert_exact("artifact", 1)
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_unexpected_provider_exception_becomes_server_error(self, make_client):
        stub = StubProvider(artifact=always_raise(RuntimeError("socket exploded")))
        client = make_client(stub)

        result = await client.try_generate("system", 'Generate the "X" module', max_attempts=2)

        assert isinstance(result.error, ServerError)
        stub.counter.assert_exact("artifact", 2)

    @pytest.mark.asyncio
    async def test_empty_response_is_malformed(self, make_client):
        stub = StubProvider(artifact=lambda _: "   \n")
        client = make_client(stub)

        result = await client.try_generate("system", 'Generate the "X" module', max_attempts=2)

        assert isinstance(result.error, MalformedResponseError)
        stub.counter.assert_exact("artifact", 1)
