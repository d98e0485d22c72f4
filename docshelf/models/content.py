"""Document tree and document payload models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_string_list(value):
    """Front matter may give ``tags: a, b`` instead of ``tags: [a, b]``."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class ContentMetadata(BaseModel):
    """Front matter of a document or metadata of a tree node.

    Unknown keys are kept as extra attributes.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    title: str | None = Field(default=None, description="Display title")
    categories: list[str] = Field(default_factory=list, description="Categories")
    tags: list[str] = Field(default_factory=list, description="Tags")

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def coerce_lists(cls, value):
        return _as_string_list(value)


class ContentItem(BaseModel):
    """One node of the document tree.

    ``children`` is None until the directory has been loaded; an empty list
    means loaded and empty. Items are immutable: use :meth:`with_children`
    to get a refreshed copy.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., description="Display label")
    path: str = Field(..., description="Unique slash-separated path")
    is_directory: bool = Field(default=False, alias="isDirectory")
    children: list["ContentItem"] | None = Field(default=None)
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)

    def with_children(self, children: list["ContentItem"]) -> "ContentItem":
        """Return a copy of this item with ``children`` replaced."""
        return self.model_copy(update={"children": list(children)})

    @property
    def stem(self) -> str:
        """File name without its extension."""
        name = self.path.rsplit("/", 1)[-1] or self.name
        return name.rsplit(".", 1)[0] if "." in name else name


class Heading(BaseModel):
    """A heading extracted from a rendered document."""

    text: str
    level: int = Field(..., ge=1, le=6)
    id: str = ""


class DocumentPayload(BaseModel):
    """A rendered document as returned by the content API."""

    model_config = ConfigDict(frozen=True)

    html: str = Field(default="", description="Rendered HTML body")
    markdown: str | None = Field(default=None, description="Source markdown, if provided")
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)
    headings: list[Heading] = Field(default_factory=list)
    path: str = Field(..., description="Document path")
    name: str = Field(default="", description="File name")

    @property
    def tags(self) -> list[str]:
        return list(self.metadata.tags)
