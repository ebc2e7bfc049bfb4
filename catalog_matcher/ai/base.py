"""Timeout and retry handling shared by every external call."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from ..config import AISettings
from ..utils.errors import ProviderError, RateLimitError, ServiceUnavailableError

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Per-call timeout and retry budget."""

    timeout_seconds: float = 60.0
    max_retries: int = 2
    retry_delay: float = 2.0
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    @classmethod
    def from_settings(cls, ai_settings: AISettings) -> "RetryPolicy":
        """Create a policy from the AI settings group."""
        return cls(
            timeout_seconds=ai_settings.request_timeout,
            max_retries=ai_settings.max_retries,
            retry_delay=ai_settings.retry_delay,
        )

    async def run(self, call: Callable[[], Awaitable[T]], description: str = "external call") -> T:
        """Run ``call`` with a timeout, retrying transient failures.

        Args:
            call: Zero-argument coroutine factory; invoked once per attempt
            description: Label used in log messages

        Returns:
            Whatever the call returns

        Raises:
            RateLimitError: If the rate limit persists after all retries
            ProviderError: If the provider keeps failing or timing out
            ServiceUnavailableError: If an upstream stays unreachable
            Exception: Anything else is not retried and propagates immediately
        """
        retries = 0
        while True:
            try:
                return await asyncio.wait_for(call(), timeout=self.timeout_seconds)

            except RateLimitError as e:
                if retries >= self.max_retries:
                    raise
                wait_time = e.retry_after or self.retry_delay
                self.logger.debug(f"Rate limit exceeded on {description}, waiting {wait_time} seconds")
                await asyncio.sleep(wait_time)

            except asyncio.TimeoutError:
                if retries >= self.max_retries:
                    raise ProviderError(
                        f"{description} timed out after {self.timeout_seconds}s",
                        status_code=504,
                        details={"attempts": retries + 1},
                    )
                self.logger.warning(f"{description} timed out, retrying ({retries + 1}/{self.max_retries})")

            except (ProviderError, ServiceUnavailableError) as e:
                if retries >= self.max_retries:
                    raise
                self.logger.debug(f"Retrying {description} after error: {e}")
                await asyncio.sleep(self.retry_delay)

            retries += 1


async def call_with_retries(
    call: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    description: str = "external call",
) -> T:
    """Shortcut for ``policy.run`` with the default policy."""
    return await (policy or RetryPolicy()).run(call, description)
