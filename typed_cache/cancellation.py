"""
Typed Cache - Cooperative Cancellation

A CancellationToken is an explicit signal threaded through every suspending
call of the typed helpers. Firing it aborts whatever is being awaited
(a store read or write, or a value factory) and surfaces
asyncio.CancelledError to the caller. Nothing already written is rolled back.

Usage:
    token = CancellationToken()
    token.cancel_after(2.0)
    user = await get_value(cache, "user:42", User, cancellation=token)
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class CancellationToken:
    """Cancellation signal backed by an asyncio.Event."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @staticmethod
    def none() -> CancellationToken:
        """Return a token that can never be cancelled."""
        return _NEVER_CANCELLED

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def can_be_cancelled(self) -> bool:
        return True

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    def cancel_after(self, delay: float) -> asyncio.TimerHandle:
        """Schedule cancellation after ``delay`` seconds on the running loop."""
        return asyncio.get_running_loop().call_later(delay, self.cancel)

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise asyncio.CancelledError("operation was cancelled")

    async def wait(self) -> None:
        """Suspend until the token is cancelled."""
        await self._event.wait()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        The awaitable runs as its own task; if the token wins the race the
        task is cancelled and asyncio.CancelledError is raised.
        """
        if self.is_cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise asyncio.CancelledError("operation was cancelled")

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        done: set[asyncio.Future] = set()
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if task not in done:
                task.cancel()

        if task in done:
            return task.result()

        with contextlib.suppress(asyncio.CancelledError):
            await task
        raise asyncio.CancelledError("operation was cancelled")


class _NeverCancelledToken(CancellationToken):
    """Token used when the caller supplies none; awaits directly."""

    @property
    def can_be_cancelled(self) -> bool:
        return False

    def cancel(self) -> None:
        raise RuntimeError("CancellationToken.none() cannot be cancelled")

    def cancel_after(self, delay: float) -> asyncio.TimerHandle:
        raise RuntimeError("CancellationToken.none() cannot be cancelled")

    async def wait(self) -> None:
        await asyncio.get_running_loop().create_future()

    async def run(self, awaitable: Awaitable[T]) -> T:
        return await awaitable


_NEVER_CANCELLED = _NeverCancelledToken()
