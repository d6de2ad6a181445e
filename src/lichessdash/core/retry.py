"""Fixed-delay retry policy for outbound calls."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Per-call retry policy: a fixed number of retries with a fixed delay.

    There is no backoff, no jitter and no budget shared across calls.  The
    error raised by the final attempt is the one surfaced to the caller.

    Attributes:
        retries: Additional attempts after the first one fails.
        delay: Seconds to wait between attempts.
        retry_on: Exception types that trigger a retry.  Anything else
            propagates immediately.
        sleep: Sleep function used between attempts.  Injectable for tests.
    """

    retries: int = 2
    delay: float = 1.0
    retry_on: tuple[type[BaseException], ...] = (Exception,)
    sleep: Callable[[float], None] = time.sleep

    @property
    def attempts(self) -> int:
        """Total number of attempts, the first one included."""
        return self.retries + 1

    def call(
        self,
        fn: Callable[..., T],
        *args,
        logger: logging.Logger | None = None,
        **kwargs,
    ) -> T:
        """Call ``fn(*args, **kwargs)`` under this policy.

        Args:
            fn: The callable to invoke.
            *args: Positional arguments for *fn*.
            logger: When given, each retry is logged at WARNING level.
            **kwargs: Keyword arguments for *fn*.

        Returns:
            Whatever *fn* returns on its first successful attempt.

        Raises:
            Exception: The exception raised by the final attempt.
        """
        retrying = Retrying(
            retry=retry_if_exception_type(self.retry_on),
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.delay),
            sleep=self.sleep,
            reraise=True,
            before_sleep=(
                before_sleep_log(logger, logging.WARNING) if logger else None
            ),
        )
        return retrying(fn, *args, **kwargs)
