"""
Per-request deadlines.

The HTTP layer wraps each request in ``with_deadline``; when the deadline
expires the in-flight store calls are cancelled and the caller sees a
TransientError.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .errors import TransientError


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_deadline(awaitable: Awaitable[T], timeout: Optional[float]) -> T:
    if timeout is None or timeout <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        logger.warning(f"Request deadline of {timeout}s exceeded")
        raise TransientError("Request deadline exceeded") from exc
