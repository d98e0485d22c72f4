"""Tests for the search index."""

import asyncio

import pytest

from docshelf.engine.core import IndexRebuilt
from docshelf.engine.search import SearchIndex, highlight, make_preview, strip_html
from docshelf.engine.stores import DocumentStore, StructureStore
from docshelf.errors import DirectoryLoadError, TransportError
from docshelf.models import IndexState
from tests.conftest import FakeContentApi, document, file_item


@pytest.fixture
def index(structure, documents, events) -> SearchIndex:
    return SearchIndex(structure, documents, events=events)


def flat_content(count: int) -> FakeContentApi:
    paths = [f"doc{n}.md" for n in range(count)]
    return FakeContentApi(
        {"": [file_item(path) for path in paths]},
        {path: document(path, f"<p>shared text {path}</p>") for path in paths},
    )


class TestBuild:
    async def test_starts_empty(self, index):
        assert index.state == IndexState.EMPTY
        assert not index.is_ready
        assert index.search("install") == []

    async def test_rebuild_indexes_every_markdown_file(self, index):
        report = await index.rebuild()

        assert index.state == IndexState.READY
        assert report.indexed == 5
        assert report.failed == 0
        assert not report.is_partial
        assert sorted(doc.path for doc in index.documents) == [
            "README.md",
            "guides/advanced/cache.md",
            "guides/advanced/tuning.md",
            "guides/faq.md",
            "guides/install.md",
        ]

    async def test_discovery_is_depth_first(self, index):
        await index.rebuild()
        assert [doc.path for doc in index.documents] == [
            "guides/advanced/tuning.md",
            "guides/advanced/cache.md",
            "guides/install.md",
            "guides/faq.md",
            "README.md",
        ]

    async def test_preview_is_plain_text(self, index):
        await index.rebuild()
        cache_doc = next(doc for doc in index.documents if doc.path.endswith("cache.md"))
        assert cache_doc.preview_text == "Cache settings & limits"
        assert cache_doc.tags == ("perf",)

    async def test_non_markdown_files_are_skipped(self, structure, documents, content):
        content.directories[""].append(file_item("logo.png"))
        index = SearchIndex(structure, documents)
        report = await index.rebuild()
        assert report.indexed == 5
        assert content.document_calls["logo.png"] == 0

    async def test_preloaded_children_are_not_refetched(self, structure, documents, content):
        guides = await structure.load_children(content.directories[""][0])
        content.directories[""] = [guides]
        index = SearchIndex(structure, documents)

        await index.rebuild()
        assert content.directory_calls["guides"] == 1

    async def test_partial_failure(self, clock):
        content = flat_content(5)
        content.document_failures["doc2.md"] = TransportError("HTTP 500", status=500)
        index = SearchIndex(StructureStore(content, clock=clock), DocumentStore(content, clock=clock))
        report = await index.rebuild()

        assert index.is_ready
        assert report.indexed == 4
        assert report.failed == 1
        assert report.failure_samples[0].startswith("doc2.md")
        assert len(index.search("shared")) == 4

    async def test_failing_subdirectory_is_skipped(self, index, content):
        content.directory_failures["guides/advanced"] = TransportError("HTTP 500", status=500)
        report = await index.rebuild()
        assert report.indexed == 3
        assert index.is_ready

    async def test_root_failure_restores_previous_state(self, index, content):
        content.directory_failures[""] = TransportError("HTTP 502", status=502)

        with pytest.raises(DirectoryLoadError):
            await index.rebuild()
        assert index.state == IndexState.EMPTY
        assert index.documents == ()

    async def test_failed_rebuild_keeps_last_snapshot(self, index, structure, content):
        await index.rebuild()
        await structure.clear_cache()
        content.directory_failures[""] = TransportError("HTTP 502", status=502)

        with pytest.raises(DirectoryLoadError):
            await index.rebuild()
        assert index.state == IndexState.READY
        assert len(index.documents) == 5

    async def test_concurrent_rebuilds_share_one_build(self, index, content):
        first, second = await asyncio.gather(index.rebuild(), index.rebuild())
        assert first is second
        assert content.directory_calls[""] == 1

    async def test_is_building_while_pending(self, index, content):
        content.hold()
        task = asyncio.create_task(index.rebuild())
        for _ in range(5):
            await asyncio.sleep(0)
        assert index.is_building
        assert index.state == IndexState.BUILDING
        assert index.search("install") == []

        content.release()
        await task
        assert not index.is_building

    async def test_search_reads_last_snapshot_during_rebuild(
        self, index, structure, documents, content
    ):
        await index.rebuild()
        await structure.clear_cache()
        await documents.clear_cache()

        content.hold()
        task = asyncio.create_task(index.rebuild())
        for _ in range(5):
            await asyncio.sleep(0)

        assert index.state == IndexState.BUILDING
        assert [r.title for r in index.search("install")] == ["Install Guide", "FAQ"]

        content.release()
        await task
        assert index.state == IndexState.READY

    async def test_aclose_cancels_first_build(self, index, structure, content):
        content.hold()
        task = asyncio.create_task(index.rebuild())
        for _ in range(5):
            await asyncio.sleep(0)

        await index.aclose()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert index.state == IndexState.EMPTY
        assert not index.is_building
        await structure.aclose()
        content.release()

    async def test_aclose_keeps_previous_snapshot(self, index, structure, content):
        await index.rebuild()
        await structure.clear_cache()

        content.hold()
        task = asyncio.create_task(index.rebuild())
        for _ in range(5):
            await asyncio.sleep(0)
        await index.aclose()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert index.state == IndexState.READY
        assert len(index.documents) == 5
        await structure.aclose()
        content.release()

    async def test_publishes_rebuilt_event(self, index, events):
        reports = []
        events.subscribe(lambda event: reports.append(event.report), IndexRebuilt)
        report = await index.rebuild()
        assert reports == [report]


class TestSearch:
    async def test_title_and_preview_scoring(self, index):
        await index.rebuild()
        results = index.search("install")

        assert [(r.title, r.score) for r in results] == [("Install Guide", 4), ("FAQ", 1)]

    async def test_matches_are_highlighted(self, index):
        await index.rebuild()
        top = index.search("INSTALL")[0]

        assert top.matches[0].line == 0
        assert top.matches[0].highlighted == "<mark>Install</mark> Guide"
        assert top.matches[1].line == 1
        assert top.matches[1].highlighted == "run npm <mark>install</mark>"

    async def test_equal_scores_keep_discovery_order(self, clock):
        content = flat_content(4)
        index = SearchIndex(StructureStore(content, clock=clock), DocumentStore(content, clock=clock))
        await index.rebuild()

        results = index.search("shared")
        assert {r.score for r in results} == {1}
        assert [r.path for r in results] == ["doc0.md", "doc1.md", "doc2.md", "doc3.md"]

    async def test_blank_term(self, index):
        await index.rebuild()
        assert index.search("   ") == []
        assert index.recent_searches == []

    async def test_max_results(self, clock):
        content = flat_content(30)
        index = SearchIndex(
            StructureStore(content, clock=clock),
            DocumentStore(content, clock=clock),
            max_results=20,
        )
        await index.rebuild()
        results = index.search("shared")
        assert len(results) == 20
        assert results[0].path == "doc0.md"

    async def test_recent_searches(self, index):
        index.search("install")
        index.search("faq")
        index.search("  Install ")
        assert index.recent_searches == ["install", "faq"]

        index.clear_recent_searches()
        assert index.recent_searches == []


class TestReindex:
    async def test_replaces_existing_entry(self, index, content):
        await index.rebuild()
        content.documents["guides/faq.md"] = document(
            "guides/faq.md", "<p>nothing relevant</p>", title="Questions"
        )

        refreshed = await index.reindex_document("guides/faq")

        assert refreshed.title == "FAQ"
        assert refreshed.preview_text == "nothing relevant"
        assert [r.path for r in index.search("install")] == ["guides/install.md"]
        assert len(index.documents) == 5

    async def test_keeps_tree_title_over_document_title(self, index, content):
        content.documents["guides/install.md"] = document(
            "guides/install.md", "<p>run npm install</p>", title="Installation"
        )
        await index.rebuild()
        assert index.documents[2].title == "Install Guide"

        refreshed = await index.reindex_document("guides/install")

        assert refreshed.title == "Install Guide"
        assert index.documents[2].title == "Install Guide"

    async def test_document_title_used_without_tree_title(self, index, content):
        await index.rebuild()
        content.documents["guides/advanced/tuning.md"] = document(
            "guides/advanced/tuning.md", "<p>Performance tuning</p>", title="Tuning Notes"
        )

        refreshed = await index.reindex_document("guides/advanced/tuning.md")
        assert refreshed.title == "Tuning Notes"

    async def test_appends_unknown_document(self, index, content):
        await index.rebuild()
        content.documents["new.md"] = document("new.md", "<p>brand new install notes</p>")

        await index.reindex_document("new")

        assert len(index.documents) == 6
        assert index.documents[-1].path == "new.md"
        assert index.documents[-1].title == "new"


class TestHighlightHelpers:
    def test_strip_html_decodes_entities(self):
        assert strip_html("<p>a &lt; b</p>") == "a < b"

    def test_make_preview_truncates(self):
        assert make_preview("abcdef", 3) == "abc..."
        assert make_preview("abc", 3) == "abc"

    def test_highlight_escapes_term(self):
        assert highlight("cost is $5 (approx)", "(approx)", "em") == "cost is $5 <em>(approx)</em>"
