"""Related document models."""

from pydantic import BaseModel, Field


class RelatedDocument(BaseModel):
    """A document related to another by directory proximity and shared tags."""

    path: str = Field(..., description="Document path")
    title: str = Field(..., description="Document title")
    common_tags: list[str] = Field(default_factory=list, description="Tags shared with the target")
    common_tags_count: int = Field(default=0, ge=0)
    relevance: int = Field(..., ge=0, description="Directory weight + 3 per shared tag")
