"""Bounded exponential-backoff retry for downstream delivery calls."""

import asyncio
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from live_transcriber.exceptions import ExpectedInactiveDestinationError
from live_transcriber.logging import setup_logging

logger = setup_logging(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RetryPolicy(BaseModel, frozen=True):
    """
    Retry policy for delivery actions.

    Attempts are counted from 1 and the wait after failed attempt ``n`` is
    ``base_delay * multiplier ** n``; with the defaults that is 1.0s after
    the first failure and 2.0s after the second, then the action is abandoned.
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=0.5, ge=0)
    multiplier: float = Field(default=2.0, ge=1)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt."""
        return self.base_delay * self.multiplier**attempt


SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)


async def deliver_with_retry(
    action: Callable[[], Awaitable[None]],
    policy: RetryPolicy,
    description: str,
    context: dict | None = None,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """
    Runs a delivery action under the retry policy.

    Never raises for delivery failures: the outcome is logged and returned.
    An inactive destination ends the loop at once without a warning.

    Args:
        action: Zero-argument coroutine function performing one attempt.
        policy: Attempt count and backoff.
        description: Human-readable name of the action for logs.
        context: Extra log fields (language, result id, ...).
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        True if an attempt succeeded, False if the action was abandoned.
    """
    log_extra = {"action": description, **(context or {})}

    for attempt in range(1, policy.max_attempts + 1):
        try:
            await action()
            return True
        except ExpectedInactiveDestinationError:
            logger.info("Destination not active, skipping delivery", extra=log_extra)
            return False
        except Exception as e:
            logger.warning(
                "Delivery attempt failed",
                extra={
                    **log_extra,
                    "attempt": attempt,
                    "max_attempts": policy.max_attempts,
                    "error": str(e),
                },
            )
            if attempt >= policy.max_attempts:
                break
            await sleep(policy.delay_for(attempt))

    logger.warning(
        "Giving up on delivery",
        extra={**log_extra, "attempts": policy.max_attempts},
    )
    return False
