"""Shared dependencies and error helpers for the HTTP endpoints."""

import logging

from fastapi import Request

from ..engine import DocShelf
from ..errors import (
    DocShelfError,
    InvalidPathError,
    MissingPathError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def get_shelf(request: Request) -> DocShelf:
    """The DocShelf built by the application lifespan."""
    return request.app.state.shelf


def status_for_error(error: DocShelfError) -> int:
    """HTTP status code for a docshelf error.

    Bad input is 400, content missing upstream is 404 and any other upstream
    failure is 502.
    """
    if isinstance(error, (MissingPathError, InvalidPathError)):
        return 400
    if isinstance(error, NotFoundError) or getattr(error, "status", None) == 404:
        return 404
    return 502


def error_payload(message: str) -> dict:
    return {"success": False, "error": message}
