"""Fetch collaborator contracts consumed by the stores.

The stores never talk HTTP themselves; anything implementing these
protocols can back them (the httpx client in ``docshelf.services`` or an
in-memory fake in tests). Failures should be raised as
:class:`docshelf.errors.TransportError` so the HTTP status survives.
"""

from typing import Protocol

from ...models import ContentItem, DocumentPayload


class DirectoryFetcher(Protocol):
    """Source of directory listings."""

    async def fetch_directory(self, path: str) -> list[ContentItem]: ...


class DocumentFetcher(Protocol):
    """Source of rendered documents. ``path`` includes the .md extension."""

    async def fetch_document(self, path: str) -> DocumentPayload: ...


class ContentFetcher(DirectoryFetcher, DocumentFetcher, Protocol):
    """Both capabilities, plus tag lookup."""

    async def fetch_document_tags(self, path: str) -> list[str]: ...
