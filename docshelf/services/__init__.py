"""Services: the content API client and index scheduling."""

from .content_api import ContentApiClient, sort_items
from .index_scheduler import IndexScheduler

__all__ = ["ContentApiClient", "IndexScheduler", "sort_items"]
