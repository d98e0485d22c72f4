"""In-memory full-text search index over the document tree.

The index is a flat list of IndexedDocument records built from every
Markdown file reachable from the root directory. Queries are
case-insensitive substring matches scored on title and preview:

- term in title: +3
- term in preview: +1

Results keep discovery order among equal scores. Queries always read the
last completed snapshot, so searching during a rebuild is safe.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from ...errors import DirectoryLoadError, PartialIndexError
from ...models import (
    ContentItem,
    DocumentPayload,
    IndexBuildReport,
    IndexState,
    SearchMatch,
    SearchResult,
)
from ..cache import RequestCoalescer
from ..core import (
    EventBus,
    IndexRebuilt,
    document_key,
    ensure_markdown_extension,
    file_stem,
    is_markdown,
    validate_document_path,
)
from ..stores import DocumentStore, StructureStore
from .highlight import highlight, make_preview, strip_html
from .recent import RecentSearches

logger = logging.getLogger(__name__)

TITLE_MATCH_SCORE = 3
PREVIEW_MATCH_SCORE = 1

# Failures kept on the build report
MAX_FAILURE_SAMPLES = 5

_REBUILD_KEY = "rebuild"


@dataclass(frozen=True)
class IndexedDocument:
    """A searchable document.

    Attributes:
        path: Path of the file in the tree (with its extension)
        title: Display title
        preview_text: Plain-text preview, truncated with '...'
        tags: Front matter tags
        item_title: Title from the tree listing, if any
    """

    path: str
    title: str
    preview_text: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    item_title: str | None = None


class SearchIndex:
    """Builds and queries the document index.

    Args:
        structure: Source of the directory tree
        documents: Source of document content
        max_results: Maximum results returned by :meth:`search`
        preview_length: Characters kept in each preview
        highlight_tag: HTML tag wrapped around matches
        concurrency: Maximum documents fetched at once while building
        max_recent_searches: Capacity of the recent-search list
        events: Optional bus receiving IndexRebuilt
    """

    def __init__(
        self,
        structure: StructureStore,
        documents: DocumentStore,
        max_results: int = 20,
        preview_length: int = 200,
        highlight_tag: str = "mark",
        concurrency: int = 8,
        max_recent_searches: int = 10,
        events: EventBus | None = None,
    ):
        self._structure = structure
        self._documents = documents
        self.max_results = max_results
        self.preview_length = preview_length
        self.highlight_tag = highlight_tag
        self.concurrency = concurrency
        self._events = events

        self._state = IndexState.EMPTY
        self._snapshot: tuple[IndexedDocument, ...] = ()
        self._builds: RequestCoalescer[IndexBuildReport] = RequestCoalescer("search-index")
        self._last_report: IndexBuildReport | None = None
        self.recent = RecentSearches(max_recent_searches)

    # ============ STATE ============

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == IndexState.READY

    @property
    def is_building(self) -> bool:
        return self._builds.is_pending(_REBUILD_KEY)

    @property
    def documents(self) -> tuple[IndexedDocument, ...]:
        """The current snapshot."""
        return self._snapshot

    @property
    def last_report(self) -> IndexBuildReport | None:
        return self._last_report

    @property
    def recent_searches(self) -> list[str]:
        return self.recent.items()

    def clear_recent_searches(self) -> None:
        self.recent.clear()

    async def aclose(self) -> None:
        """Cancel a build in progress. The previous snapshot stays in place."""
        await self._builds.aclose()

    # ============ BUILD ============

    async def rebuild(self) -> IndexBuildReport:
        """Rebuild the whole index. Concurrent calls share one build.

        Individual documents that fail to load are skipped and counted on the
        report. A failure to list the root directory aborts the build, leaves
        the previous snapshot in place and is re-raised.
        """
        return await self._builds.run(_REBUILD_KEY, self._build)

    async def _build(self) -> IndexBuildReport:
        previous_state = self._state
        self._state = IndexState.BUILDING
        started = time.perf_counter()
        logger.info("Search index build started")

        try:
            files = await self._discover_files()
            semaphore = asyncio.Semaphore(self.concurrency)
            outcomes = await asyncio.gather(
                *(self._index_file(item, semaphore) for item in files)
            )
        except asyncio.CancelledError:
            self._state = previous_state
            logger.info("Search index build cancelled")
            raise
        except Exception as e:
            self._state = previous_state
            logger.error(f"Search index build aborted: {e}")
            raise

        indexed: list[IndexedDocument] = []
        failures: list[str] = []
        for document, failure in outcomes:
            if document is not None:
                indexed.append(document)
            else:
                failures.append(failure)

        self._snapshot = tuple(indexed)
        self._state = IndexState.READY

        report = IndexBuildReport(
            indexed=len(indexed),
            failed=len(failures),
            failure_samples=failures[:MAX_FAILURE_SAMPLES],
            duration_ms=int((time.perf_counter() - started) * 1000),
            built_at=datetime.now(UTC),
        )
        self._last_report = report

        if failures:
            partial = PartialIndexError(len(failures), report.failure_samples)
            logger.warning(f"Search index built with gaps: {partial}")
        logger.info(
            f"Search index ready: {report.indexed} documents in {report.duration_ms}ms "
            f"({report.failed} failed)"
        )
        if self._events is not None:
            self._events.publish(IndexRebuilt(report=report))
        return report

    async def _discover_files(self) -> list[ContentItem]:
        """Depth-first list of the Markdown files in the tree."""
        root = await self._structure.get_directory("")
        files: list[ContentItem] = []
        await self._collect(root, files, visited=set())
        logger.debug(f"Found {len(files)} markdown files to index")
        return files

    async def _collect(
        self,
        items: list[ContentItem],
        files: list[ContentItem],
        visited: set[str],
    ) -> None:
        for item in items:
            if not item.is_directory:
                if is_markdown(item.path):
                    files.append(item)
                continue

            if item.path in visited:
                continue
            visited.add(item.path)

            children = item.children
            if children is None:
                try:
                    children = await self._structure.get_directory(item.path)
                except DirectoryLoadError as e:
                    logger.warning(f"Skipping directory '{item.path}' while indexing: {e}")
                    continue
            await self._collect(children, files, visited)

    async def _index_file(
        self,
        item: ContentItem,
        semaphore: asyncio.Semaphore,
    ) -> tuple[IndexedDocument | None, str | None]:
        async with semaphore:
            try:
                document = await self._documents.get_document(item.path)
            except Exception as e:
                logger.warning(f"Error indexing {item.path}: {e}")
                return None, f"{item.path}: {e}"
        return self._make_document(item.path, item.metadata.title, document), None

    def _make_document(
        self,
        path: str,
        item_title: str | None,
        document: DocumentPayload,
    ) -> IndexedDocument:
        text = strip_html(document.html) or (document.markdown or "").strip()
        return IndexedDocument(
            path=path,
            title=item_title or document.metadata.title or file_stem(path) or "Untitled",
            preview_text=make_preview(text, self.preview_length),
            tags=tuple(document.tags),
            item_title=item_title,
        )

    async def reindex_document(self, path: str) -> IndexedDocument:
        """Re-fetch one document and swap it into the index.

        The entry with the same path is replaced; a document not yet in the
        index is appended. Removing documents still needs :meth:`rebuild`.

        Raises:
            DocumentLoadError: the document could not be fetched
        """
        key = document_key(validate_document_path(path))
        document = await self._documents.get_document(key, force_refresh=True)

        snapshot = list(self._snapshot)
        for position, existing in enumerate(snapshot):
            if document_key(existing.path) == key:
                refreshed = self._make_document(existing.path, existing.item_title, document)
                snapshot[position] = refreshed
                break
        else:
            refreshed = self._make_document(ensure_markdown_extension(key), None, document)
            snapshot.append(refreshed)

        self._snapshot = tuple(snapshot)
        logger.debug(f"Re-indexed '{refreshed.path}'")
        return refreshed

    # ============ QUERY ============

    def search(self, term: str) -> list[SearchResult]:
        """Score the current snapshot against ``term``.

        Returns an empty list for a blank term.
        """
        needle = term.strip().lower()
        if not needle:
            return []

        self.recent.add(needle)
        if not self.is_ready:
            logger.debug(f"Search for '{needle}' while index is {self._state}")

        scored = (self._score(document, needle) for document in self._snapshot)
        results = [result for result in scored if result is not None]
        # list.sort is stable, so equal scores keep discovery order
        results.sort(key=lambda result: result.score, reverse=True)
        logger.debug(f"Search '{needle}': {len(results)} matches")
        return results[: self.max_results]

    def _score(self, document: IndexedDocument, needle: str) -> SearchResult | None:
        score = 0
        matches: list[SearchMatch] = []

        if needle in document.title.lower():
            score += TITLE_MATCH_SCORE
            matches.append(
                SearchMatch(
                    line=0,
                    content=document.title,
                    highlighted=highlight(document.title, needle, self.highlight_tag),
                )
            )

        if needle in document.preview_text.lower():
            score += PREVIEW_MATCH_SCORE
            for number, line in enumerate(document.preview_text.split("\n"), start=1):
                if needle in line.lower():
                    matches.append(
                        SearchMatch(
                            line=number,
                            content=line,
                            highlighted=highlight(line, needle, self.highlight_tag),
                        )
                    )

        if score == 0:
            return None
        return SearchResult(
            path=document.path,
            title=document.title,
            preview=document.preview_text,
            score=score,
            matches=matches,
        )
