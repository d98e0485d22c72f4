"""Content caching, search and related-document core for a documentation browser."""

__version__ = "0.1.0"
