"""Retry helper shared by services that call external providers."""

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


async def call_with_retry(
    func: "Callable[[], Awaitable[object]]",
    *,
    action: str,
    retry_attempts: int,
    retry_delay_seconds: float,
) -> object:
    """Call an async function, retrying a bounded number of times."""
    attempt = 0
    while True:
        try:
            return await func()
        except Exception as exc:
            attempt += 1
            _logger.warning(
                "Upstream %s failed (attempt %s/%s, status=%s): %s",
                action,
                attempt,
                retry_attempts + 1,
                status_code_from_exception(exc),
                exc,
            )
            if attempt > retry_attempts:
                raise
            await asyncio.sleep(retry_delay_seconds)


def status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
