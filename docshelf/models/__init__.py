"""Pydantic models for docshelf.

This module re-exports all models. Import from submodules directly for
cleaner imports:

    from docshelf.models.content import ContentItem
    from docshelf.models.search import SearchResult
"""

# ============ CACHE MODELS ============
from .cache import CacheStats, DocumentCacheStats

# ============ CONTENT MODELS ============
from .content import ContentItem, ContentMetadata, DocumentPayload, Heading

# ============ ENUMS ============
from .enums import IndexState, LoadState

# ============ RELATED MODELS ============
from .related import RelatedDocument

# ============ RESPONSE MODELS ============
from .responses import HealthResponse, RelatedResponse, SearchResponse

# ============ SEARCH MODELS ============
from .search import IndexBuildReport, SearchMatch, SearchResult

__all__ = [
    # Cache
    "CacheStats",
    "DocumentCacheStats",
    # Content
    "ContentItem",
    "ContentMetadata",
    "DocumentPayload",
    "Heading",
    # Enums
    "IndexState",
    "LoadState",
    # Related
    "RelatedDocument",
    # Responses
    "HealthResponse",
    "RelatedResponse",
    "SearchResponse",
    # Search
    "IndexBuildReport",
    "SearchMatch",
    "SearchResult",
]
