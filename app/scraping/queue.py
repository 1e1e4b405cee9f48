"""
Bounded-concurrency admission queue for company crawls.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

T = TypeVar("T")


class CancellationToken:
    """
    Run-level stop flag; safe to trigger from any thread.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class ConcurrencyQueue:
    """
    Admits at most `concurrency` tasks at once.

    Once the cancellation token fires, waiting tasks are not admitted and
    resolve to None; tasks already running finish normally.
    """

    def __init__(
        self,
        *,
        concurrency: int = 2,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.concurrency = max(1, concurrency)
        self._semaphore = asyncio.Semaphore(self.concurrency)
        self._cancel_token = cancel_token or CancellationToken()
        self.in_flight = 0
        self.peak_in_flight = 0

    async def add(self, factory: Callable[[], Awaitable[T]]) -> T | None:
        async with self._semaphore:
            if self._cancel_token.cancelled:
                return None
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
            try:
                return await factory()
            finally:
                self.in_flight -= 1

    async def drain(self, factories: Iterable[Callable[[], Awaitable[T]]]) -> list[T | None]:
        """
        Run every factory through the queue and wait until all have finished.
        """

        return list(await asyncio.gather(*(self.add(factory) for factory in factories)))
