"""Relatedness scoring.

relevance = directory weight + TAG_MATCH_BONUS per shared tag

Directory proximity dominates small tag overlaps: a sibling sharing one tag
(10 + 3 = 13) outranks a parent-directory file sharing two (5 + 6 = 11).
"""

from ...models import RelatedDocument

SAME_DIRECTORY_WEIGHT = 10
PARENT_DIRECTORY_WEIGHT = 5
TAG_MATCH_BONUS = 3


def common_tags(candidate_tags: list[str], current_tags: list[str]) -> list[str]:
    """Exact-match intersection, in the candidate's order, without duplicates."""
    current = set(current_tags)
    shared: list[str] = []
    for tag in candidate_tags:
        if tag in current and tag not in shared:
            shared.append(tag)
    return shared


def calculate_relevance(directory_weight: int, shared_tag_count: int) -> int:
    return directory_weight + TAG_MATCH_BONUS * shared_tag_count


def rank_related(documents: list[RelatedDocument]) -> list[RelatedDocument]:
    """Sort by descending relevance; ties keep candidate order."""
    return sorted(documents, key=lambda document: document.relevance, reverse=True)
