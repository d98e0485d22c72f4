"""docshelf engine: caches, stores, search index and related documents.

Usage:
    from docshelf.engine import DocShelf

    shelf = DocShelf.from_settings(settings)
    items = await shelf.structure.get_directory("")
    document = await shelf.documents.get_document("guides/install")
    await shelf.index.rebuild()
    results = shelf.index.search("install")
    related = await shelf.related.get_related("guides/install")
    await shelf.aclose()
"""

import logging
import time
from collections.abc import Callable

from ..config import Settings
from ..services.content_api import ContentApiClient
from ..services.index_scheduler import IndexScheduler
from .core import DocShelfEvent, EventBus
from .related import RelatednessEngine
from .search import SearchIndex
from .stores import ContentFetcher, DocumentStore, StructureStore

logger = logging.getLogger(__name__)


class DocShelf:
    """Wires one instance of every component around a fetch collaborator.

    Args:
        settings: Application settings
        fetcher: Directory and document source
        clock: Time source shared by every cache
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: ContentFetcher,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.settings = settings
        self.fetcher = fetcher
        self.events: EventBus[DocShelfEvent] = EventBus("docshelf")

        self.structure = StructureStore(
            fetcher,
            cache_ttl=settings.structure_cache_ttl,
            max_size=settings.structure_cache_size,
            events=self.events,
            clock=clock,
        )
        self.documents = DocumentStore(
            fetcher,
            cache_ttl=settings.document_cache_ttl,
            max_size=settings.document_cache_size,
            events=self.events,
            clock=clock,
        )
        self.index = SearchIndex(
            self.structure,
            self.documents,
            max_results=settings.search_max_results,
            preview_length=settings.preview_length,
            highlight_tag=settings.highlight_tag,
            concurrency=settings.index_concurrency,
            max_recent_searches=settings.max_recent_searches,
            events=self.events,
        )
        self.related = RelatednessEngine(
            self.structure,
            self.documents,
            cache_ttl=settings.related_cache_ttl,
            max_size=settings.related_cache_size,
            default_limit=settings.related_limit,
            events=self.events,
            clock=clock,
        )
        self.scheduler = IndexScheduler(self.index, settings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DocShelf":
        """Build a DocShelf backed by the HTTP content API."""
        client = ContentApiClient(
            settings.content_api_url,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
        )
        return cls(settings, client)

    async def clear_all_caches(self) -> None:
        await self.structure.clear_cache()
        await self.documents.clear_cache()
        await self.related.clear_cache()
        logger.info("Cleared all caches")

    async def aclose(self) -> None:
        """Stop background work, then close the fetcher if it holds resources."""
        await self.scheduler.stop()
        await self.index.aclose()
        await self.structure.aclose()
        await self.documents.aclose()
        close = getattr(self.fetcher, "aclose", None)
        if close is not None:
            await close()


__all__ = ["DocShelf"]
