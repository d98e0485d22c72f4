"""Core utilities: path handling and the event bus."""

from .events import CacheCleared, DocShelfEvent, DocumentLoaded, EventBus, IndexRebuilt
from .paths import (
    MARKDOWN_EXTENSION,
    document_key,
    ensure_markdown_extension,
    file_stem,
    is_markdown,
    normalize_path,
    parent_directory,
    strip_markdown_extension,
    validate_document_path,
)

__all__ = [
    # Events
    "CacheCleared",
    "DocShelfEvent",
    "DocumentLoaded",
    "EventBus",
    "IndexRebuilt",
    # Paths
    "MARKDOWN_EXTENSION",
    "document_key",
    "ensure_markdown_extension",
    "file_stem",
    "is_markdown",
    "normalize_path",
    "parent_directory",
    "strip_markdown_extension",
    "validate_document_path",
]
