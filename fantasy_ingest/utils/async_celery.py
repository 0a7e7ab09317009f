"""
Shared event loop for Celery async tasks.

The Leaguepedia client and the poller hold loop-bound state (the httpx
connection pool, the rate limiter's slot), so every task invocation in a
worker runs on the same loop instead of creating a new one.
"""
import asyncio
import logging
from typing import Any, Coroutine, TypeVar

logger = logging.getLogger(__name__)

_loop: asyncio.AbstractEventLoop | None = None

T = TypeVar("T")


def get_event_loop() -> asyncio.AbstractEventLoop:
    global _loop

    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
        logger.debug("Created new shared event loop for Celery tasks")

    return _loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion on the shared loop.

    Example:
        @celery_app.task
        def poll_once():
            return run_async(_poll_once())
    """
    return get_event_loop().run_until_complete(coro)


def cleanup_event_loop() -> None:
    """Cancel pending tasks and close the shared loop (worker shutdown)."""
    global _loop

    if _loop is None or _loop.is_closed():
        _loop = None
        return

    try:
        pending = asyncio.all_tasks(_loop)
        for task in pending:
            task.cancel()
        if pending:
            _loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        _loop.close()
        logger.info("Shared event loop cleaned up")
    except RuntimeError as e:
        logger.error(f"Error cleaning up event loop: {e}")
    finally:
        _loop = None
