"""Search result and index build models."""

from datetime import datetime

from pydantic import BaseModel, Field


class SearchMatch(BaseModel):
    """A line that matched the search term."""

    line: int = Field(..., ge=0, description="0 for the title, 1-based preview line otherwise")
    content: str = Field(..., description="Original line text")
    highlighted: str = Field(..., description="Line text with matches wrapped in highlight tags")


class SearchResult(BaseModel):
    """A scored search hit."""

    path: str = Field(..., description="Document path")
    title: str = Field(..., description="Document title")
    preview: str = Field(..., description="Plain-text preview")
    score: int = Field(..., ge=0, description="3 for a title match, +1 for a preview match")
    matches: list[SearchMatch] = Field(default_factory=list)


class IndexBuildReport(BaseModel):
    """Outcome of a search index build."""

    indexed: int = Field(default=0, ge=0, description="Documents in the new index")
    failed: int = Field(default=0, ge=0, description="Documents that could not be indexed")
    failure_samples: list[str] = Field(
        default_factory=list, description="Up to five 'path: error' samples"
    )
    duration_ms: int = Field(default=0, ge=0)
    built_at: datetime | None = None

    @property
    def is_partial(self) -> bool:
        return self.failed > 0
