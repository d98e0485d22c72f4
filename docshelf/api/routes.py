"""Content, search and related-document endpoints.

Base URL: /api
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ..engine import DocShelf
from ..models import (
    ContentItem,
    DocumentPayload,
    IndexBuildReport,
    RelatedResponse,
    SearchResponse,
)
from .deps import get_shelf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Content"])

Shelf = Annotated[DocShelf, Depends(get_shelf)]


# ============ STRUCTURE ============


@router.get("/structure", response_model=list[ContentItem])
@router.get("/structure/{path:path}", response_model=list[ContentItem])
async def get_structure(
    shelf: Shelf,
    path: str = "",
    refresh: bool = Query(default=False, description="Bypass the cache"),
) -> list[ContentItem]:
    """List the items of a directory ('' is the root)."""
    return await shelf.structure.get_directory(path, skip_cache=refresh)


# ============ CONTENT ============


@router.get("/content", response_model=DocumentPayload)
async def get_content(
    shelf: Shelf,
    path: str | None = Query(default=None, description="Document path, with or without .md"),
    refresh: bool = Query(default=False, description="Bypass the cache"),
) -> DocumentPayload:
    return await shelf.documents.get_document(path, force_refresh=refresh)


# ============ SEARCH ============


@router.get("/search", response_model=SearchResponse, tags=["Search"])
async def search(
    shelf: Shelf,
    q: str = Query(default="", description="Search term"),
) -> SearchResponse:
    """Search document titles and previews.

    Answers from the last completed index; ``ready`` is false until the
    first build has finished.
    """
    results = shelf.index.search(q)
    return SearchResponse(
        query=q,
        results=results,
        total=len(results),
        ready=shelf.index.is_ready,
    )


@router.get("/search/recent", response_model=list[str], tags=["Search"])
async def recent_searches(shelf: Shelf) -> list[str]:
    return shelf.index.recent_searches


@router.post("/index/rebuild", response_model=IndexBuildReport, tags=["Search"])
async def rebuild_index(shelf: Shelf) -> IndexBuildReport:
    """Rebuild the search index now, joining a build already in progress."""
    return await shelf.scheduler.trigger()


# ============ RELATED ============


@router.get("/related", response_model=RelatedResponse)
async def get_related(
    shelf: Shelf,
    path: str | None = Query(default=None, description="Document path"),
    limit: int | None = Query(default=None, ge=1, le=50),
) -> RelatedResponse:
    related = await shelf.related.get_related(path, limit=limit)
    return RelatedResponse(path=path, related=related)


# ============ CACHE ============


@router.delete("/cache", tags=["Cache"])
async def clear_caches(shelf: Shelf) -> dict:
    await shelf.clear_all_caches()
    return {"success": True}
