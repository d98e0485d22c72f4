"""Shared fixtures: a controllable clock and an in-memory content API."""

import asyncio
from collections import Counter

import pytest

from docshelf.config import Settings
from docshelf.engine.core import EventBus
from docshelf.engine.stores import DocumentStore, StructureStore
from docshelf.errors import TransportError
from docshelf.models import ContentItem, ContentMetadata, DocumentPayload


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeContentApi:
    """In-memory fetch collaborator.

    Counts calls per path, raises configured failures and can hold every
    fetch until ``release()`` is called.
    """

    def __init__(
        self,
        directories: dict[str, list[ContentItem]] | None = None,
        documents: dict[str, DocumentPayload] | None = None,
    ):
        self.directories = dict(directories or {})
        self.documents = dict(documents or {})
        self.directory_calls: Counter[str] = Counter()
        self.document_calls: Counter[str] = Counter()
        self.directory_failures: dict[str, Exception] = {}
        self.document_failures: dict[str, Exception] = {}
        self._gate: asyncio.Event | None = None

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()
            self._gate = None

    async def _wait(self) -> None:
        await asyncio.sleep(0)
        if self._gate is not None:
            await self._gate.wait()

    async def fetch_directory(self, path: str) -> list[ContentItem]:
        self.directory_calls[path] += 1
        await self._wait()
        if path in self.directory_failures:
            raise self.directory_failures[path]
        if path not in self.directories:
            raise TransportError("HTTP 404: not found", status=404, path=path)
        return list(self.directories[path])

    async def fetch_document(self, path: str) -> DocumentPayload:
        self.document_calls[path] += 1
        await self._wait()
        if path in self.document_failures:
            raise self.document_failures[path]
        if path not in self.documents:
            raise TransportError("HTTP 404: not found", status=404, path=path)
        return self.documents[path]

    async def fetch_document_tags(self, path: str) -> list[str]:
        document = await self.fetch_document(path)
        return document.tags

    @property
    def total_document_calls(self) -> int:
        return sum(self.document_calls.values())


def file_item(path: str, title: str | None = None) -> ContentItem:
    return ContentItem(
        name=path.rsplit("/", 1)[-1],
        path=path,
        is_directory=False,
        metadata=ContentMetadata(title=title),
    )


def dir_item(path: str) -> ContentItem:
    return ContentItem(name=path.rsplit("/", 1)[-1], path=path, is_directory=True)


def document(
    path: str,
    html: str = "",
    title: str | None = None,
    tags: list[str] | None = None,
) -> DocumentPayload:
    return DocumentPayload(
        path=path,
        name=path.rsplit("/", 1)[-1],
        html=html,
        metadata=ContentMetadata(title=title, tags=tags or []),
    )


def sample_content() -> FakeContentApi:
    """A small documentation tree.

    /
    ├── guides/
    │   ├── advanced/
    │   │   ├── cache.md     tags: perf
    │   │   └── tuning.md    tags: perf, setup, npm
    │   ├── faq.md           tags: help
    │   └── install.md       tags: setup, npm
    └── README.md
    """
    directories = {
        "": [dir_item("guides"), file_item("README.md")],
        "guides": [
            dir_item("guides/advanced"),
            file_item("guides/install.md", title="Install Guide"),
            file_item("guides/faq.md", title="FAQ"),
        ],
        "guides/advanced": [
            file_item("guides/advanced/tuning.md"),
            file_item("guides/advanced/cache.md"),
        ],
    }
    documents = {
        "README.md": document("README.md", "<h1>Welcome</h1>", title="Welcome"),
        "guides/install.md": document(
            "guides/install.md",
            "<p>run npm install</p>",
            title="Install Guide",
            tags=["setup", "npm"],
        ),
        "guides/faq.md": document(
            "guides/faq.md", "<p>see install guide above</p>", title="FAQ", tags=["help"]
        ),
        "guides/advanced/tuning.md": document(
            "guides/advanced/tuning.md",
            "<p>Performance tuning</p>",
            title="Tuning",
            tags=["perf", "setup", "npm"],
        ),
        "guides/advanced/cache.md": document(
            "guides/advanced/cache.md",
            "<p>Cache settings &amp; limits</p>",
            title="Caching",
            tags=["perf"],
        ),
    }
    return FakeContentApi(directories, documents)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def content() -> FakeContentApi:
    return sample_content()


@pytest.fixture
def events() -> EventBus:
    return EventBus("test")


@pytest.fixture
def structure(content, clock, events) -> StructureStore:
    return StructureStore(content, cache_ttl=300, max_size=50, events=events, clock=clock)


@pytest.fixture
def documents(content, clock, events) -> DocumentStore:
    return DocumentStore(content, cache_ttl=300, max_size=50, events=events, clock=clock)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        index_enabled=False,
        index_initial_delay=0,
        max_retries=1,
        retry_delay=0,
    )
