"""Cache statistics models."""

from pydantic import BaseModel, Field


class CacheStats(BaseModel):
    """Hit/miss counters of a KeyedTtlCache."""

    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    hit_ratio: float = Field(default=0.0, ge=0, le=100, description="Hit percentage (0-100)")
    size: int = Field(default=0, ge=0)
    max_size: int = Field(default=0, ge=0)


class DocumentCacheStats(BaseModel):
    """Cache statistics reported by DocumentStore."""

    size: int = Field(default=0, ge=0)
    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    hit_rate: float = Field(default=0.0, ge=0, le=100)
