"""Related-document engine and its scoring rules."""

from .engine import RelatednessEngine
from .scoring import (
    PARENT_DIRECTORY_WEIGHT,
    SAME_DIRECTORY_WEIGHT,
    TAG_MATCH_BONUS,
    calculate_relevance,
    common_tags,
    rank_related,
)

__all__ = [
    "PARENT_DIRECTORY_WEIGHT",
    "RelatednessEngine",
    "SAME_DIRECTORY_WEIGHT",
    "TAG_MATCH_BONUS",
    "calculate_relevance",
    "common_tags",
    "rank_related",
]
