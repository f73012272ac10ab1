from __future__ import annotations

from typing import List

import pytest

from agentchain.agent_core.providers.base import ProviderResponse
from agentchain.agent_core.providers.errors import (
    AuthenticationError,
    InvalidRequestError,
    ProviderServerError,
    ProviderTransportError,
    RateLimitError,
)
from agentchain.agent_core.runtime.errors import AgentExecutionError, WorkflowCancelledError
from agentchain.agent_core.runtime.executor import MAX_RETRIES, AgentExecutor
from agentchain.agent_core.schemas.domain import BuiltInProvider, TokenUsage

pytestmark = pytest.mark.asyncio


class _ScriptedAdapter:
    """Raise the scripted errors in order, then succeed."""

    def __init__(self, failures: List[Exception]) -> None:
        self._failures = list(failures)
        self.calls = 0

    async def call(self, provider, model: str, prompt: str, credentials: str) -> ProviderResponse:
        self.calls += 1
        if self._failures:
            raise self._failures.pop(0)
        return ProviderResponse(text=f"ok after {self.calls}", usage=TokenUsage(input_tokens=1, output_tokens=1))


class _RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


async def test_succeeds_after_exactly_max_retries_rate_limits() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")] * MAX_RETRIES)
    sleep = _RecordingSleep()
    executor = AgentExecutor(adapter, base_delay=2.0, sleep=sleep)

    outcome = await executor.execute(BuiltInProvider.openai, "m", "p", "k")

    assert adapter.calls == MAX_RETRIES + 1
    assert outcome.retry_count == MAX_RETRIES
    assert outcome.response.text == f"ok after {MAX_RETRIES + 1}"
    assert sleep.delays == [2.0, 4.0, 8.0]


async def test_fails_after_one_more_rate_limit_than_budget() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")] * (MAX_RETRIES + 1))
    executor = AgentExecutor(adapter, sleep=_RecordingSleep())

    with pytest.raises(AgentExecutionError) as ei:
        await executor.execute(BuiltInProvider.openai, "m", "p", "k")

    assert adapter.calls == MAX_RETRIES + 1
    assert ei.value.retry_count == MAX_RETRIES
    assert isinstance(ei.value.cause, RateLimitError)


async def test_transport_errors_are_retried() -> None:
    adapter = _ScriptedAdapter([ProviderTransportError("dns"), ProviderTransportError("reset")])
    executor = AgentExecutor(adapter, base_delay=0.5, sleep=_RecordingSleep())

    outcome = await executor.execute(BuiltInProvider.google, "m", "p", "k")

    assert outcome.retry_count == 2
    assert adapter.calls == 3


@pytest.mark.parametrize(
    "error",
    [
        AuthenticationError("bad key", status_code=401),
        InvalidRequestError("bad request", status_code=400),
        ProviderServerError("boom", status_code=500),
    ],
)
async def test_non_retryable_errors_fail_immediately(error: Exception) -> None:
    adapter = _ScriptedAdapter([error])
    sleep = _RecordingSleep()
    executor = AgentExecutor(adapter, sleep=sleep)

    with pytest.raises(AgentExecutionError) as ei:
        await executor.execute(BuiltInProvider.anthropic, "m", "p", "k")

    assert adapter.calls == 1
    assert sleep.delays == []
    assert ei.value.retry_count == 0
    assert ei.value.cause is error
    assert str(ei.value) == str(error)


async def test_unexpected_exceptions_become_agent_failures() -> None:
    adapter = _ScriptedAdapter([KeyError("weird")])
    executor = AgentExecutor(adapter, sleep=_RecordingSleep())

    with pytest.raises(AgentExecutionError) as ei:
        await executor.execute(BuiltInProvider.openai, "m", "p", "k")
    assert isinstance(ei.value.cause, KeyError)
    assert adapter.calls == 1


async def test_zero_retry_budget() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")])
    executor = AgentExecutor(adapter, max_retries=0, sleep=_RecordingSleep())

    with pytest.raises(AgentExecutionError):
        await executor.execute(BuiltInProvider.openai, "m", "p", "k")
    assert adapter.calls == 1


async def test_on_retry_callback_reports_progress() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429"), RateLimitError("429")])
    seen: List[tuple[int, float]] = []
    executor = AgentExecutor(adapter, base_delay=1.0, sleep=_RecordingSleep())

    await executor.execute(
        BuiltInProvider.openai, "m", "p", "k", on_retry=lambda n, delay, err: seen.append((n, delay))
    )

    assert seen == [(1, 1.0), (2, 2.0)]


async def test_stop_before_retry_cancels_without_sleeping() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")])
    sleep = _RecordingSleep()
    executor = AgentExecutor(adapter, sleep=sleep)

    with pytest.raises(WorkflowCancelledError):
        await executor.execute(BuiltInProvider.openai, "m", "p", "k", should_continue=lambda: False)

    assert adapter.calls == 1
    assert sleep.delays == []


async def test_stop_during_backoff_prevents_next_attempt() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")])
    flags = {"running": True}

    async def _sleep_then_stop(delay: float) -> None:
        flags["running"] = False

    executor = AgentExecutor(adapter, sleep=_sleep_then_stop)

    with pytest.raises(WorkflowCancelledError):
        await executor.execute(
            BuiltInProvider.openai, "m", "p", "k", should_continue=lambda: flags["running"]
        )
    assert adapter.calls == 1


async def test_elapsed_time_includes_backoff_sleeps() -> None:
    adapter = _ScriptedAdapter([RateLimitError("429")])
    executor = AgentExecutor(adapter, base_delay=0.05)

    outcome = await executor.execute(BuiltInProvider.openai, "m", "p", "k")

    assert outcome.retry_count == 1
    assert outcome.elapsed_ms >= 40
