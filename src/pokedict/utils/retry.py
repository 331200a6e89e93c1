# ABOUTME: Retry policies for network collaborators using the tenacity library
# ABOUTME: Only transient HTTP failures are retried; everything else surfaces immediately

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pokedict.utils.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class TransientHTTPError(Exception):
    """Raised for HTTP responses worth retrying (rate limits, gateway hiccups)."""

    def __init__(self, url: str, status_code: int):
        super().__init__(f"transient HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def _log_before_sleep(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying after transient failure",
        attempt=retry_state.attempt_number,
        sleep_seconds=round(retry_state.next_action.sleep, 3) if retry_state.next_action else None,
        error=str(exc) if exc else None,
        error_type=type(exc).__name__ if exc else None,
    )


def transient_http_retrying(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
) -> Retrying:
    """Build a tenacity policy that retries transport errors and transient statuses.

    The last exception is re-raised unchanged once attempts run out.
    """
    return Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type((TransientHTTPError, httpx.TransportError)),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
