"""ASGI middleware for the HTTP surface."""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
