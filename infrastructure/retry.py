"""
Retry policy for Azure management operations.

Management calls against ARM fail transiently far more often than data-plane
calls: 409 while another operation on the namespace is in flight, 429 when
the subscription is throttled, 5xx during regional hiccups. The policy
re-runs an async operation with exponential backoff and re-raises the LAST
failure unchanged once attempts are exhausted or the failure is not
transient.

Exports:
    RetryPolicy: Async retry executor
    is_transient_error: Default transient classification
    create_retry_policy: Factory reading settings from config
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from azure.core.exceptions import HttpResponseError, ServiceRequestError, ServiceResponseError

from config.defaults import RetryDefaults
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RetryPolicy")

T = TypeVar("T")


def is_transient_error(error: Exception) -> bool:
    """
    Classify an exception as transient (worth retrying).

    Transient:
        - connection / read failures (ServiceRequestError, ServiceResponseError)
        - HTTP 408, 409, 429 and 5xx gateway errors
        - asyncio timeouts
    Everything else (auth failures, 400, 404, programming errors) is final.
    """
    if isinstance(error, (ServiceRequestError, ServiceResponseError, asyncio.TimeoutError)):
        return True
    if isinstance(error, HttpResponseError):
        return error.status_code in RetryDefaults.TRANSIENT_STATUS_CODES
    return False


class RetryPolicy:
    """
    Re-runs an async operation with exponential backoff.

    Example:
        policy = RetryPolicy(max_attempts=5, base_delay=1.0)
        hub = await policy.execute(
            lambda: client.event_hubs.create_or_update(rg, ns, name, params)
        )
    """

    def __init__(
        self,
        max_attempts: int = RetryDefaults.MAX_ATTEMPTS,
        base_delay: float = RetryDefaults.BASE_DELAY_SECONDS,
        max_delay: float = RetryDefaults.MAX_DELAY_SECONDS,
        is_transient: Callable[[Exception], bool] = is_transient_error,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._is_transient = is_transient
        self._sleep = sleep

    def delay_for_attempt(self, attempt: int) -> float:
        """Backoff before retry number `attempt` (1-based), capped at max_delay."""
        return min(self.base_delay * (2 ** (attempt - 1)), self.max_delay)

    async def execute(self, operation: Callable[[], Awaitable[T]], operation_name: Optional[str] = None) -> T:
        """
        Run `operation` until it succeeds, fails permanently, or attempts run out.

        Args:
            operation: Zero-argument callable returning an awaitable. Called
                once per attempt so each attempt issues a fresh request.
            operation_name: Label for log messages.

        Returns:
            Result of the first successful attempt.

        Raises:
            The exception from the last attempt, unchanged.
        """
        name = operation_name or getattr(operation, "__name__", "operation")

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except Exception as e:
                if not self._is_transient(e):
                    logger.debug(f"{name}: non-transient {type(e).__name__}, not retrying")
                    raise
                if attempt == self.max_attempts:
                    logger.error(f"❌ {name}: all {self.max_attempts} attempts failed ({type(e).__name__}: {e})")
                    raise

                wait_time = self.delay_for_attempt(attempt)
                logger.warning(
                    f"⚠️ {name}: attempt {attempt}/{self.max_attempts} failed "
                    f"({type(e).__name__}: {e}). Retrying in {wait_time}s..."
                )
                await self._sleep(wait_time)

        # max_attempts >= 1 guarantees the loop returns or raises
        raise AssertionError("unreachable")


def create_retry_policy(config=None) -> RetryPolicy:
    """
    Build a RetryPolicy from configuration.

    Args:
        config: EventHubsTestConfig, or None to use config defaults.
    """
    if config is None:
        return RetryPolicy()
    return RetryPolicy(
        max_attempts=config.retry_max_attempts,
        base_delay=config.retry_base_delay_seconds,
        max_delay=config.retry_max_delay_seconds,
    )
