"""
Time budgets for blocking analysis work.

Synchronous, CPU-bound steps run in a worker thread and are awaited with
asyncio.wait_for. When the budget runs out the caller gets an
AnalysisTimeoutError; the worker thread is not interrupted and finishes on
its own, so the work it does must not touch shared mutable state.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from analyst.core.errors import AnalysisTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """Await `awaitable`, raising AnalysisTimeoutError after `timeout_seconds`."""
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.error(f"{operation} exceeded its {timeout_seconds:g}s budget")
        raise AnalysisTimeoutError(operation, timeout_seconds) from None


async def run_with_timeout(func: Callable[..., T], timeout_seconds: float, operation: str,
                           *args: Any, **kwargs: Any) -> T:
    """Run a blocking callable in a worker thread under a time budget."""
    return await with_timeout(asyncio.to_thread(func, *args, **kwargs), timeout_seconds, operation)
