"""Enumeration types for docshelf."""

from enum import StrEnum


class LoadState(StrEnum):
    """Loading status of a directory's children."""

    NOT_LOADED = "not_loaded"
    LOADING = "loading"
    LOADED = "loaded"


class IndexState(StrEnum):
    """Lifecycle of the search index.

    EMPTY -> BUILDING -> READY, and READY -> BUILDING -> READY on rebuild.
    """

    EMPTY = "empty"
    BUILDING = "building"
    READY = "ready"
