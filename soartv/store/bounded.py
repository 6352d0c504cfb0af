from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from ..config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def bounded_call(
    awaitable: Awaitable[T],
    fallback: T,
    *,
    timeout: float = DEFAULT_CONFIG.store_timeout,
    label: str = "store call",
) -> T:
    """
    Await an external call with a timeout.

    Returns ``fallback`` when the call times out or raises. Cancellation of
    the surrounding task still propagates.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.1fs, using fallback", label, timeout)
    except Exception:
        logger.warning("%s failed, using fallback", label, exc_info=True)
    return fallback
