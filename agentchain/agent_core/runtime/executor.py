from __future__ import annotations

"""Agent executor: one provider call wrapped in a retry/backoff policy.

Retry policy
------------

- ``RateLimitError`` and ``ProviderTransportError`` (the ``retryable``
  provider errors) are retried after ``base_delay * 2**retry_count`` seconds,
  at most ``max_retries`` times beyond the first attempt.
- Every other error is terminal immediately.
- The optional ``should_continue`` callback is consulted before and after each
  backoff sleep; a False answer raises ``WorkflowCancelledError`` instead of
  issuing the next attempt.

The reported elapsed time covers every attempt and every backoff sleep.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from ..providers.base import ProviderAdapter, ProviderDescriptor, ProviderResponse
from ..providers.errors import ProviderError
from .errors import AgentExecutionError, WorkflowCancelledError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BASE_DELAY = 2.0

RetryCallback = Callable[[int, float, ProviderError], None]


@dataclass(frozen=True)
class ExecutionOutcome:
    """Successful result of ``AgentExecutor.execute``."""

    response: ProviderResponse
    elapsed_ms: int
    retry_count: int


class AgentExecutor:
    """Execute one agent's provider call with bounded exponential backoff."""

    def __init__(
        self,
        adapter: ProviderAdapter,
        *,
        max_retries: int = MAX_RETRIES,
        base_delay: float = RETRY_BASE_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            adapter: Provider adapter (usually a ``ProviderRouter``).
            max_retries: Retries allowed beyond the first attempt.
            base_delay: Delay in seconds before the first retry.
            sleep: Awaitable sleep, injectable for tests.
        """
        self._adapter = adapter
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def backoff_delay(self, retry_count: int) -> float:
        """Seconds to wait before retry number ``retry_count + 1``."""
        return self._base_delay * (2**retry_count)

    async def execute(
        self,
        provider: ProviderDescriptor,
        model: str,
        prompt: str,
        credentials: str,
        *,
        on_retry: Optional[RetryCallback] = None,
        should_continue: Optional[Callable[[], bool]] = None,
    ) -> ExecutionOutcome:
        """Call the provider until it succeeds or the retry budget is spent.

        Raises:
            AgentExecutionError: On a non-retryable error or exhausted retries.
            WorkflowCancelledError: If ``should_continue`` turns False before a retry.
        """
        started = time.perf_counter()
        retry_count = 0
        while True:
            try:
                response = await self._adapter.call(provider, model, prompt, credentials)
                return ExecutionOutcome(
                    response=response, elapsed_ms=_elapsed_ms(started), retry_count=retry_count
                )
            except ProviderError as e:
                if not e.retryable or retry_count >= self._max_retries:
                    if e.retryable:
                        logger.warning("Giving up after %s retries: %s", retry_count, e)
                    raise AgentExecutionError(
                        e, retry_count=retry_count, elapsed_ms=_elapsed_ms(started)
                    ) from e
                if should_continue is not None and not should_continue():
                    raise WorkflowCancelledError("Stopped before retry") from e
                delay = self.backoff_delay(retry_count)
                logger.info(
                    "%s; retrying in %ss (attempt %s/%s)",
                    type(e).__name__,
                    delay,
                    retry_count + 1,
                    self._max_retries,
                )
                retry_count += 1
                if on_retry is not None:
                    on_retry(retry_count, delay, e)
                await self._sleep(delay)
                if should_continue is not None and not should_continue():
                    raise WorkflowCancelledError("Stopped during backoff") from e
            except Exception as e:
                raise AgentExecutionError(e, retry_count=retry_count, elapsed_ms=_elapsed_ms(started)) from e


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
