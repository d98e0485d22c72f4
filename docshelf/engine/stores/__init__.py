"""Cached stores in front of the content API."""

from .base import ContentFetcher, DirectoryFetcher, DocumentFetcher
from .document import DocumentStore
from .structure import StructureStore, structure_cache_key

__all__ = [
    "ContentFetcher",
    "DirectoryFetcher",
    "DocumentFetcher",
    "DocumentStore",
    "StructureStore",
    "structure_cache_key",
]
