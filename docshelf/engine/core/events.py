"""Typed publish/subscribe for notifications consumed by the UI layer.

Carries document loads (with headings and tags), index rebuilds and cache
clears. Handlers run synchronously in publish order; a failing
handler is logged and does not affect the publisher or other handlers.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar

from ...models import Heading, IndexBuildReport

logger = logging.getLogger(__name__)

E = TypeVar("E")


@dataclass(frozen=True)
class DocumentLoaded:
    """A document was fetched from upstream (not emitted on cache hits)."""

    path: str
    headings: list[Heading] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class IndexRebuilt:
    """The search index finished a build."""

    report: IndexBuildReport


@dataclass(frozen=True)
class CacheCleared:
    """A component's cache was cleared. ``path`` is None for a full clear."""

    component: str
    path: str | None = None
    at: datetime = field(default_factory=lambda: datetime.now(UTC))


class EventBus(Generic[E]):
    """Minimal synchronous event emitter."""

    def __init__(self, name: str = "events"):
        self.name = name
        self._handlers: list[Callable[[E], None]] = []

    def subscribe(
        self,
        handler: Callable[[E], None],
        event_type: type | None = None,
    ) -> Callable[[], None]:
        """Register ``handler``, optionally only for events of ``event_type``.

        Returns a function that unsubscribes it.
        """
        if event_type is not None:
            target = handler

            def handler(event: E) -> None:
                if isinstance(event, event_type):
                    target(event)

        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: E) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.warning(f"{self.name} handler {handler!r} failed on {event!r}: {e}")

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)


DocShelfEvent = DocumentLoaded | IndexRebuilt | CacheCleared
