"""Linear-backoff retry for provider calls.

Only :class:`TransientProviderError` is retried. Anything else, including
``NoResultsError``, surfaces on the first attempt. A cancellation that
arrives during a backoff wait aborts immediately and is reported as
cancellation, not as a failed attempt.

Usage::

    policy = RetryPolicy(max_attempts=3, backoff_base_seconds=0.6)
    payload = await with_retry(lambda: client.get_json(url), policy=policy, token=token)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import TypeVar

import httpx

from ...domain.shared.cancellation import CancellationToken
from ...domain.shared.exceptions import (
    AcquisitionError,
    ProviderResponseError,
    TransientProviderError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_STATUSES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt cap and backoff for provider calls."""

    max_attempts: int = 3
    backoff_base_seconds: float = 0.6
    retryable_statuses: frozenset[int] = field(default_factory=lambda: DEFAULT_RETRYABLE_STATUSES)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.backoff_base_seconds < 0:
            raise ValueError("backoff_base_seconds must be non-negative")
        object.__setattr__(self, "retryable_statuses", frozenset(self.retryable_statuses))

    @classmethod
    def from_values(
        cls, max_attempts: int, backoff_base_seconds: float, retryable_statuses: Iterable[int]
    ) -> RetryPolicy:
        return cls(
            max_attempts=max_attempts,
            backoff_base_seconds=backoff_base_seconds,
            retryable_statuses=frozenset(retryable_statuses),
        )

    def delay_for(self, attempt: int) -> float:
        """Wait before the attempt following *attempt* (1-based). Linear."""
        return self.backoff_base_seconds * attempt

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in self.retryable_statuses or 500 <= status_code < 600


def classify_http_error(error: httpx.HTTPError, policy: RetryPolicy) -> AcquisitionError:
    """Translate an httpx failure into the acquisition error taxonomy."""
    if isinstance(error, httpx.TimeoutException):
        return TransientProviderError(ErrorMessages.PROVIDER_TIMEOUT.format(detail=error.__class__.__name__))
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        message = ErrorMessages.PROVIDER_HTTP_STATUS.format(status=status)
        if policy.is_retryable_status(status):
            return TransientProviderError(message, status_code=status)
        return ProviderResponseError(message, status_code=status)
    if isinstance(error, httpx.NetworkError | httpx.RemoteProtocolError):
        return TransientProviderError(ErrorMessages.PROVIDER_UNREACHABLE.format(detail=error.__class__.__name__))
    return ProviderResponseError(ErrorMessages.PROVIDER_UNEXPECTED.format(detail=str(error) or error.__class__.__name__))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    token: CancellationToken | None = None,
    description: str = "provider call",
) -> T:
    """Run *operation* until it succeeds or the attempt cap is reached.

    Raises:
        TransientProviderError: After ``policy.max_attempts`` transient failures,
            with ``attempts`` set to the number of attempts made.
        AcquisitionCancelledError: If *token* fires before an attempt or
            during a backoff wait.
        AcquisitionError: Any non-transient failure, unchanged, on first sight.
    """
    last_error: TransientProviderError | None = None

    for attempt in range(1, policy.max_attempts + 1):
        if token is not None:
            token.raise_if_cancelled()
        try:
            return await operation()
        except TransientProviderError as exc:
            last_error = exc
            if attempt == policy.max_attempts:
                break
            delay = policy.delay_for(attempt)
            logger.warning(
                LogTemplates.PROVIDER_RETRY,
                description,
                attempt,
                policy.max_attempts,
                exc.message,
                delay,
            )
            if token is not None:
                await token.sleep(delay)
            else:
                await asyncio.sleep(delay)

    if last_error is None:
        raise RuntimeError(f"{description} made no attempts")
    logger.error(LogTemplates.PROVIDER_RETRIES_EXHAUSTED, description, policy.max_attempts, last_error.message)
    raise TransientProviderError(
        last_error.message,
        status_code=last_error.status_code,
        attempts=policy.max_attempts,
    ) from last_error
