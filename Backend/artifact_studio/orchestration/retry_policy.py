# artifact_studio/orchestration/retry_policy.py
"""
Bounded retry with multiplicative backoff for generation calls.

Rules:
- Only transient categories are retried (rate limit, 5xx, timeout, network)
- Auth / bad request / malformed response fail on the first attempt
- The delay grows by `multiplier` after every failed attempt
"""
import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from artifact_studio.core.exceptions import GenerationError
from artifact_studio.core.logging import log
from artifact_studio.orchestration.cancellation import CancellationToken

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy:
    """
    Retry policy for generation service calls.

    Philosophy:
    - Transient failures MIGHT clear up (throttling, provider hiccup)
    - Caller/config errors never will: retrying only burns quota
    - The last error is re-raised unchanged so callers keep its category
    """

    def __init__(
        self,
        initial_delay: float = 5.0,
        multiplier: float = 1.5,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.initial_delay = initial_delay
        self.multiplier = multiplier
        self._sleep = sleep or asyncio.sleep

    def get_retry_delay(self, attempt: int) -> float:
        """
        Delay before the retry that follows `attempt` (0-indexed).

        Example with defaults: 5s, 7.5s, 11.25s...
        """
        return self.initial_delay * (self.multiplier ** attempt)

    @staticmethod
    def should_retry(error: GenerationError) -> bool:
        return error.retryable

    async def run(
        self,
        call_fn: Callable[[], Awaitable[T]],
        *,
        max_attempts: int,
        label: str = "",
        cancel_token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Execute `call_fn` up to `max_attempts` times.

        Raises:
            GenerationError: The last error once attempts are exhausted,
                or the first non-retryable one
            RunCancelledError: If the token is cancelled before an attempt
        """
        max_attempts = max(1, max_attempts)

        for attempt in range(max_attempts):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            if attempt > 0:
                log("RETRY", f"🔄 Attempt {attempt + 1}/{max_attempts} for {label}")

            try:
                return await call_fn()
            except GenerationError as e:
                if not self.should_retry(e):
                    log("RETRY", f"⛔ {label}: {e.category.value} is not retryable - failing immediately")
                    raise

                if attempt + 1 >= max_attempts:
                    log("RETRY", f"🔒 {label}: attempts exhausted ({max_attempts}) - last error {e.category.value}")
                    raise

                delay = self.get_retry_delay(attempt)
                log("RETRY", f"⏳ {label}: {e.category.value}, waiting {delay:.1f}s before retry...")
                await self._sleep(delay)

        # Unreachable: the loop either returns or raises
        raise RuntimeError("retry loop exited without result")
