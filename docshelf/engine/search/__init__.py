"""Search index over the document tree.

Usage:
    from docshelf.engine.search import SearchIndex

    index = SearchIndex(structure_store, document_store)
    await index.rebuild()
    results = index.search("install")
"""

from .highlight import highlight, make_preview, strip_html
from .index import PREVIEW_MATCH_SCORE, TITLE_MATCH_SCORE, IndexedDocument, SearchIndex
from .recent import RecentSearches

__all__ = [
    "IndexedDocument",
    "PREVIEW_MATCH_SCORE",
    "RecentSearches",
    "SearchIndex",
    "TITLE_MATCH_SCORE",
    "highlight",
    "make_preview",
    "strip_html",
]
