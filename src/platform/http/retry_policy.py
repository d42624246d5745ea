import random
from typing import Awaitable, Callable, TypeVar

import anyio
import attrs

from src.platform.logging.loguru_io import Logger


T = TypeVar('T')


@attrs.define(frozen=True)
class RetryPolicy:
    """
    Bounded exponential backoff for outbound calls.

    delay(attempt) = min(base_delay * 2^(attempt-1), max_delay) * (1 ± jitter)

    Injected into upstream clients so tests can pass `RetryPolicy(base_delay=0)`.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: float = 0.1

    def delay_for(self, *, attempt: int) -> float:
        delay = min(self.base_delay * (2 ** max(attempt - 1, 0)), self.max_delay)
        if self.jitter and delay:
            delay *= random.uniform(1 - self.jitter, 1 + self.jitter)
        return max(delay, 0.0)

    def worst_case_delay(self) -> float:
        """Upper bound of the total backoff slept across every retry."""
        return sum(
            min(self.base_delay * (2 ** (attempt - 1)), self.max_delay) * (1 + self.jitter)
            for attempt in range(1, self.max_attempts)
        )

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retryable: Callable[[Exception], bool],
        label: str,
        on_retry: Callable[[], None] | None = None,
    ) -> T:
        """Run operation, retrying while `retryable(error)` holds and attempts remain."""
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts or not retryable(e):
                    raise
                delay = self.delay_for(attempt=attempt)
                Logger.base.warning(
                    f'⏳ [{label}] attempt {attempt}/{self.max_attempts} failed, '
                    f'retrying in {delay:.2f}s | {e}'
                )
                if on_retry:
                    on_retry()
                await anyio.sleep(delay)
                attempt += 1
