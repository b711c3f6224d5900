"""Storage read-after-write probe.

A HEAD right after a signed PUT can miss the object on eventually-consistent
stores, so the probe retries with linear backoff (backoff * attempt).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_incrementing,
)

from lawdesk.application.dtos.upload import StoredObject
from lawdesk.application.interfaces.storage import IStorageService
from lawdesk.domain.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


def _give_up(retry_state: RetryCallState) -> None:
    """Last attempt missed: None for a miss, re-raise an unavailable error."""
    outcome = retry_state.outcome
    if outcome is not None and outcome.failed:
        raise outcome.exception()
    return None


async def head_object_with_retry(
    storage: IStorageService,
    key: str,
    max_attempts: int = 3,
    backoff_seconds: float = 0.25,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> StoredObject | None:
    """Return object metadata, or None if it never became visible.

    StorageUnavailableError is retried like a miss; if the final attempt
    fails with it, it is re-raised.
    """
    retrying = AsyncRetrying(
        retry=retry_if_result(lambda found: found is None)
        | retry_if_exception_type(StorageUnavailableError),
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=backoff_seconds, increment=backoff_seconds),
        sleep=sleep,
        before_sleep=lambda retry_state: logger.warning(
            "Storage HEAD attempt %s/%s missed for %s",
            retry_state.attempt_number,
            max_attempts,
            key,
        ),
        retry_error_callback=_give_up,
    )
    return await retrying(storage.head_object, key)
