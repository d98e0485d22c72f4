"""Rendered document store.

Callers may pass paths with or without the ``.md`` extension; both map to
the same cache entry. The extension is always present on the path handed to
the fetch collaborator.
"""

import logging
import time
from collections.abc import Callable

from ...errors import DocumentLoadError, DocumentNotFoundError, NotFoundError
from ...models import DocumentCacheStats, DocumentPayload
from ..cache import KeyedTtlCache, RequestCoalescer
from ..core import (
    CacheCleared,
    DocumentLoaded,
    EventBus,
    ensure_markdown_extension,
    strip_markdown_extension,
    validate_document_path,
)
from .base import DocumentFetcher

logger = logging.getLogger(__name__)


class DocumentStore:
    """Cached, coalesced access to rendered documents.

    Args:
        fetcher: Document collaborator
        cache_ttl: Seconds a document stays fresh
        max_size: Maximum number of cached documents
        events: Optional bus receiving DocumentLoaded and CacheCleared
        clock: Time source for the cache
    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        cache_ttl: float = 300.0,
        max_size: int = 50,
        events: EventBus | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetcher = fetcher
        self.cache_ttl = cache_ttl
        self._events = events
        self._cache: KeyedTtlCache[DocumentPayload] = KeyedTtlCache(
            max_size=max_size, default_ttl=cache_ttl, clock=clock, name="document"
        )
        self._coalescer: RequestCoalescer[DocumentPayload] = RequestCoalescer("document")

    @staticmethod
    def cache_key(path: str) -> str:
        """Cache key for ``path``: validated, normalized, without .md."""
        return strip_markdown_extension(validate_document_path(path))

    async def get_document(self, path: str, force_refresh: bool = False) -> DocumentPayload:
        """Return the rendered document at ``path``.

        Raises:
            MissingPathError: path is empty
            InvalidPathError: path contains '..' segments
            DocumentNotFoundError: upstream answered 404
            DocumentLoadError: any other fetch failure
        """
        key = self.cache_key(path)

        if not force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Document cache hit: '{key}'")
                return cached

        return await self._coalescer.run(key, lambda: self._load(key))

    async def get_tags(self, path: str) -> list[str]:
        """Tags from the document's front matter."""
        document = await self.get_document(path)
        return document.tags

    async def clear_cache(self, path: str | None = None) -> None:
        """Drop one cached document, or all of them when ``path`` is None."""
        if path is not None:
            key = self.cache_key(path)
            self._cache.delete(key)
            logger.debug(f"Cleared document cache for '{key}'")
        else:
            self._cache.clear()
            logger.info("Cleared document cache")
        if self._events is not None:
            self._events.publish(CacheCleared(component="document", path=path))

    async def aclose(self) -> None:
        """Cancel in-flight loads."""
        await self._coalescer.aclose()

    def get_cache_stats(self) -> DocumentCacheStats:
        stats = self._cache.stats
        return DocumentCacheStats(
            size=stats.size,
            hits=stats.hits,
            misses=stats.misses,
            hit_rate=stats.hit_ratio,
        )

    async def _load(self, key: str) -> DocumentPayload:
        fetch_path = ensure_markdown_extension(key)
        logger.debug(f"Fetching document: '{fetch_path}'")
        try:
            document = await self._fetcher.fetch_document(fetch_path)
        except Exception as e:
            status = getattr(e, "status", None)
            if status == 404 or isinstance(e, NotFoundError):
                logger.warning(f"Document not found: '{fetch_path}'")
                raise DocumentNotFoundError(key, e) from e
            logger.error(f"Error loading document '{fetch_path}': {e}")
            raise DocumentLoadError(key, status, e) from e

        self._cache.set(key, document, self.cache_ttl)
        if self._events is not None:
            self._events.publish(
                DocumentLoaded(path=key, headings=list(document.headings), tags=document.tags)
            )
        return document
