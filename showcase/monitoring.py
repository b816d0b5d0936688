"""Monitoring utilities: error tracking and retry policy for remote reads."""

import logging

import httpx
import sentry_sdk
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from showcase.config import get_settings

logger = logging.getLogger(__name__)


def capture_exception(error: Exception, context: dict | None = None) -> None:
    """Capture exception to Sentry if configured."""
    settings = get_settings()
    if settings.sentry_dsn:
        with sentry_sdk.new_scope() as scope:
            if context:
                for key, value in context.items():
                    scope.set_extra(key, value)
            sentry_sdk.capture_exception(error)
    logger.error("error_captured", extra={"error_type": type(error).__name__, "error": str(error)}, exc_info=error)


# Transient errors worth retrying (network issues, timeouts)
RETRYABLE_EXCEPTIONS = (
    httpx.TransportError,  # Connect/read errors and timeouts
    ConnectionError,
    TimeoutError,
)

# Retry decorator for remote table store calls
remote_read_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
    reraise=True,
    before_sleep=lambda retry_state: logger.warning(
        f"Retrying {retry_state.fn.__name__} after error: {retry_state.outcome.exception()}, "
        f"attempt {retry_state.attempt_number}/3"
    ),
)
