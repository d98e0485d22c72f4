"""Related documents by directory proximity and shared tags.

Candidates for a document are the other Markdown files in its directory
and, unless it sits at the root, the Markdown files of the parent
directory. Each candidate is scored with
:func:`~docshelf.engine.related.scoring.calculate_relevance`.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from ...errors import DirectoryLoadError
from ...models import ContentItem, RelatedDocument
from ..cache import KeyedTtlCache, RequestCoalescer
from ..core import (
    CacheCleared,
    EventBus,
    document_key,
    file_stem,
    is_markdown,
    parent_directory,
    strip_markdown_extension,
    validate_document_path,
)
from ..stores import DocumentStore, StructureStore
from .scoring import (
    PARENT_DIRECTORY_WEIGHT,
    SAME_DIRECTORY_WEIGHT,
    calculate_relevance,
    common_tags,
    rank_related,
)

logger = logging.getLogger(__name__)


class RelatednessEngine:
    """Computes and caches related documents.

    Args:
        structure: Source of directory listings
        documents: Source of document metadata
        cache_ttl: Seconds a computed list stays fresh
        max_size: Capacity of the private cache (expired entries are swept
            before evicting the least recently used one)
        default_limit: Results returned when no limit is given
        events: Optional bus receiving CacheCleared
        clock: Time source for the cache
    """

    def __init__(
        self,
        structure: StructureStore,
        documents: DocumentStore,
        cache_ttl: float = 300.0,
        max_size: int = 100,
        default_limit: int = 5,
        events: EventBus | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._structure = structure
        self._documents = documents
        self.cache_ttl = cache_ttl
        self.default_limit = default_limit
        self._events = events
        self._cache: KeyedTtlCache[list[RelatedDocument]] = KeyedTtlCache(
            max_size=max_size,
            default_ttl=cache_ttl,
            purge_expired_first=True,
            clock=clock,
            name="related",
        )
        self._coalescer: RequestCoalescer[list[RelatedDocument]] = RequestCoalescer("related")

    async def get_related(
        self,
        document_path: str,
        limit: int | None = None,
        skip_cache: bool = False,
    ) -> list[RelatedDocument]:
        """Return up to ``limit`` documents related to ``document_path``.

        Raises:
            MissingPathError: path is empty (raised before any I/O)
            InvalidPathError: path contains '..' segments
            DocumentNotFoundError: the target document does not exist
            DocumentLoadError: the target document could not be loaded
            DirectoryLoadError: the target's own directory could not be listed
        """
        key = strip_markdown_extension(validate_document_path(document_path))
        limit = self.default_limit if limit is None else limit
        if limit <= 0:
            return []

        if not skip_cache:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug(f"Related cache hit: '{key}'")
                return cached[:limit]

        related = await self._coalescer.run(key, lambda: self._compute(key))
        return related[:limit]

    async def clear_cache(self, path: str | None = None) -> None:
        if path is not None:
            self._cache.delete(document_key(path))
        else:
            self._cache.clear()
            logger.info("Cleared related-documents cache")
        if self._events is not None:
            self._events.publish(CacheCleared(component="related", path=path))

    @property
    def cache_size(self) -> int:
        return self._cache.size

    async def _compute(self, key: str) -> list[RelatedDocument]:
        target = await self._documents.get_document(key)
        current_tags = target.tags

        candidates = await self._candidates(key)
        scored = await asyncio.gather(
            *(self._score_candidate(item, weight, current_tags) for item, weight in candidates)
        )
        related = rank_related([document for document in scored if document is not None])

        self._cache.set(key, related, self.cache_ttl)
        logger.debug(f"Computed {len(related)} related documents for '{key}'")
        return related

    async def _candidates(self, key: str) -> list[tuple[ContentItem, int]]:
        directory = parent_directory(key)
        candidates = [
            (item, SAME_DIRECTORY_WEIGHT)
            for item in await self._structure.get_directory(directory)
            if self._is_candidate(item, key)
        ]

        if directory:
            try:
                parent_items = await self._structure.get_directory(parent_directory(directory))
            except DirectoryLoadError as e:
                logger.warning(f"Parent directory unavailable for '{key}', using siblings only: {e}")
                parent_items = []
            candidates.extend(
                (item, PARENT_DIRECTORY_WEIGHT)
                for item in parent_items
                if self._is_candidate(item, key)
            )
        return candidates

    @staticmethod
    def _is_candidate(item: ContentItem, key: str) -> bool:
        return (
            not item.is_directory
            and is_markdown(item.path)
            and document_key(item.path) != key
        )

    async def _score_candidate(
        self,
        item: ContentItem,
        weight: int,
        current_tags: list[str],
    ) -> RelatedDocument | None:
        try:
            document = await self._documents.get_document(item.path)
        except Exception as e:
            logger.warning(f"Skipping related candidate '{item.path}': {e}")
            return None

        shared = common_tags(document.tags, current_tags)
        return RelatedDocument(
            path=item.path,
            title=item.metadata.title or document.metadata.title or file_stem(item.path),
            common_tags=shared,
            common_tags_count=len(shared),
            relevance=calculate_relevance(weight, len(shared)),
        )
