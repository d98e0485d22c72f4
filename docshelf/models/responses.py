"""HTTP response envelopes."""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import IndexState
from .related import RelatedDocument
from .search import SearchResult


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Server version")
    index_state: IndexState = Field(..., description="Search index state")
    timestamp: datetime = Field(..., description="Current server time")


class SearchResponse(BaseModel):
    """Response of the search endpoint."""

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    ready: bool = Field(..., description="Whether a built index answered the query")


class RelatedResponse(BaseModel):
    """Response of the related-documents endpoint."""

    path: str
    related: list[RelatedDocument] = Field(default_factory=list)
