"""De-duplication of concurrent requests for the same key.

This is not a cache: a result is shared only between callers that overlap
with the pending request. Once the request settles, the next call for the
same key starts a new one.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCoalescer(Generic[T]):
    """At most one in-flight request per key; concurrent callers share it."""

    def __init__(self, name: str = "coalescer"):
        self.name = name
        self._pending: dict[str, asyncio.Task[T]] = {}

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the pending request for ``key``, or start one with ``factory``.

        Every waiter receives the same value or the same exception. A waiter
        being cancelled does not cancel the shared request.
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            # Runs before any awaiting caller resumes, so a caller that reacts
            # to the result by calling run() again always gets a fresh request.
            task.add_done_callback(lambda done, key=key: self._settle(key, done))
        else:
            logger.debug(f"[{self.name}] joining pending request: {key}")
        return await asyncio.shield(task)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def aclose(self) -> None:
        """Cancel every pending request and wait for it to finish."""
        tasks = list(self._pending.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def pending_keys(self) -> list[str]:
        return list(self._pending)

    def _settle(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Retrieve the exception so a failure nobody awaited is not reported
        # as "never retrieved"; waiters still receive it through the shield.
        if not task.cancelled():
            task.exception()
