"""Awaitables raced against a deadline."""

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


async def run_with_deadline(
    awaitable: Awaitable[T],
    timeout_s: float,
    on_timeout: Callable[[float], Exception],
) -> T:
    """Await with a deadline; on expiry the task is cancelled and on_timeout(timeout_s) raised.

    Example:
        text = await run_with_deadline(model.complete(prompt), 8.5, LlmTimeout)
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_s)
    except asyncio.TimeoutError as exc:
        raise on_timeout(timeout_s) from exc
