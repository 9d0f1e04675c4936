"""Backoff policy for calls to the recommendation service."""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Tuple, Type

from hackathon_recs.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently a request is attempted.

    A call is tried again when it raises one of ``retryable`` or when
    ``retry_if`` says its result is worth another go. After the last attempt
    the exception propagates, or the last result is returned as-is.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    backoff_factor: float = 2.0
    jitter: bool = True

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed ``attempt`` (1-based)."""
        wait = min(self.base_delay * self.backoff_factor ** (attempt - 1), self.max_delay)
        if self.jitter:
            wait *= random.uniform(0.5, 1.5)
        return wait

    def call(
        self,
        fn: Callable[..., Any],
        *args: Any,
        retryable: Tuple[Type[BaseException], ...] = (),
        retry_if: Callable[[Any], bool] | None = None,
        label: str = "",
    ) -> Any:
        label = label or getattr(fn, "__qualname__", repr(fn))
        attempts = max(1, self.max_attempts)
        for attempt in range(1, attempts + 1):
            last = attempt == attempts
            try:
                result = fn(*args)
            except retryable as exc:
                if last:
                    log.error("%s gave up after %d attempt(s): %s", label, attempts, exc)
                    raise
                reason = str(exc)
            else:
                if last or retry_if is None or not retry_if(result):
                    return result
                reason = f"unusable result {result!r}"

            wait = self.delay(attempt)
            log.warning("%s attempt %d/%d: %s; next try in %.1fs", label, attempt, attempts, reason, wait)
            time.sleep(wait)
