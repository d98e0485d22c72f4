"""Directory structure store.

Loads the document tree one directory at a time, caching each listing
under ``structure:<path>`` and coalescing concurrent loads of the same
directory.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ...errors import DirectoryLoadError
from ...models import CacheStats, ContentItem, LoadState
from ..cache import KeyedTtlCache, RequestCoalescer
from ..core import CacheCleared, EventBus, normalize_path
from .base import DirectoryFetcher

logger = logging.getLogger(__name__)

CACHE_PREFIX = "structure:"


def structure_cache_key(path: str) -> str:
    return f"{CACHE_PREFIX}{path}"


class StructureStore:
    """Cached, coalesced access to directory listings.

    Args:
        fetcher: Directory listing collaborator
        cache_ttl: Seconds a listing stays fresh
        max_size: Maximum number of cached listings
        events: Optional bus receiving CacheCleared notifications
        clock: Time source for the cache
    """

    def __init__(
        self,
        fetcher: DirectoryFetcher,
        cache_ttl: float = 300.0,
        max_size: int = 50,
        events: EventBus | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetcher = fetcher
        self.cache_ttl = cache_ttl
        self._events = events
        self._cache: KeyedTtlCache[list[ContentItem]] = KeyedTtlCache(
            max_size=max_size, default_ttl=cache_ttl, clock=clock, name="structure"
        )
        self._coalescer: RequestCoalescer[list[ContentItem]] = RequestCoalescer("structure")
        self._background: set[asyncio.Task] = set()

    async def get_directory(self, path: str = "", skip_cache: bool = False) -> list[ContentItem]:
        """Return the items of directory ``path`` ('' is the root).

        Raises:
            DirectoryLoadError: the listing could not be fetched
        """
        path = normalize_path(path)
        key = structure_cache_key(path)

        if not skip_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Directory cache hit: '{path}'")
                return list(cached)

        items = await self._coalescer.run(key, lambda: self._load(path, key))
        return list(items)

    async def load_children(self, item: ContentItem, skip_cache: bool = False) -> ContentItem:
        """Return a copy of directory ``item`` with its children loaded.

        The original item is left untouched; files are returned as-is.
        """
        if not item.is_directory:
            return item
        children = await self.get_directory(item.path, skip_cache=skip_cache)
        return item.with_children(children)

    def preload(self, path: str = "") -> None:
        """Start loading ``path`` in the background if it is not cached or pending.

        Must be called from within a running event loop. Failures are logged.
        """
        path = normalize_path(path)
        key = structure_cache_key(path)
        if self._coalescer.is_pending(key) or self._cache.has(key):
            return

        task = asyncio.create_task(self.get_directory(path))
        self._background.add(task)
        task.add_done_callback(self._preload_done)

    def load_state(self, path: str) -> LoadState:
        """Whether the children of ``path`` are unloaded, loading or loaded."""
        key = structure_cache_key(normalize_path(path))
        if self._coalescer.is_pending(key):
            return LoadState.LOADING
        if self._cache.has(key):
            return LoadState.LOADED
        return LoadState.NOT_LOADED

    async def clear_cache(self, path: str | None = None) -> None:
        """Drop one cached listing, or every listing when ``path`` is None.

        In-flight loads are not cancelled; they will repopulate the cache.
        """
        if path is not None:
            normalized = normalize_path(path)
            self._cache.delete(structure_cache_key(normalized))
            logger.debug(f"Cleared structure cache for '{normalized}'")
        else:
            for key in self._cache.keys():
                if key.startswith(CACHE_PREFIX):
                    self._cache.delete(key)
            logger.info("Cleared structure cache")
        if self._events is not None:
            self._events.publish(CacheCleared(component="structure", path=path))

    def cache_stats(self) -> CacheStats:
        return self._cache.stats

    async def aclose(self) -> None:
        """Cancel background preloads and in-flight loads."""
        background = list(self._background)
        for task in background:
            task.cancel()
        if background:
            await asyncio.gather(*background, return_exceptions=True)
        await self._coalescer.aclose()

    async def _load(self, path: str, key: str) -> list[ContentItem]:
        logger.debug(f"Fetching directory structure: '{path}'")
        try:
            items = list(await self._fetcher.fetch_directory(path))
        except Exception as e:
            logger.error(f"Error loading directory structure '{path}': {e}")
            raise DirectoryLoadError(path, e) from e

        self._cache.set(key, items, self.cache_ttl)
        logger.debug(f"Loaded {len(items)} items for directory '{path}'")
        return items

    def _preload_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Directory preload failed: {error}")
