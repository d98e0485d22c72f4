"""Path helpers shared by the stores, the index and the relatedness engine.

Paths are slash separated and relative to the content root; ``''`` is the
root directory.
"""

import re

from ...errors import InvalidPathError, MissingPathError

MARKDOWN_EXTENSION = ".md"

_REPEATED_SLASHES = re.compile(r"/+")


def normalize_path(path: str | None) -> str:
    """Strip surrounding whitespace and slashes and collapse repeated slashes."""
    if not path:
        return ""
    return _REPEATED_SLASHES.sub("/", path.strip().strip("/"))


def is_markdown(path: str) -> bool:
    return path.lower().endswith(MARKDOWN_EXTENSION)


def strip_markdown_extension(path: str) -> str:
    """'a/b.md' -> 'a/b'. Other extensions are left alone."""
    if is_markdown(path):
        return path[: -len(MARKDOWN_EXTENSION)]
    return path


def ensure_markdown_extension(path: str) -> str:
    """'a/b' -> 'a/b.md'. Paths that already end in .md are unchanged."""
    if not path or is_markdown(path):
        return path
    return path + MARKDOWN_EXTENSION


def document_key(path: str | None) -> str:
    """Canonical identity of a document: normalized, without the .md suffix."""
    return strip_markdown_extension(normalize_path(path))


def parent_directory(path: str) -> str:
    """Directory containing ``path``; '' for top-level entries and the root."""
    normalized = normalize_path(path)
    if "/" not in normalized:
        return ""
    return normalized.rsplit("/", 1)[0]


def file_stem(path: str) -> str:
    """Last path segment without its extension."""
    name = normalize_path(path).rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[0] if "." in name else name


def validate_document_path(path: str | None) -> str:
    """Validate a caller-supplied document path and return it normalized.

    Raises:
        MissingPathError: path is empty or only slashes/whitespace
        InvalidPathError: path contains '.' or '..' segments
    """
    if path is None or not path.strip():
        raise MissingPathError()
    normalized = normalize_path(path)
    if not normalized:
        raise MissingPathError()
    if any(segment in (".", "..") for segment in normalized.split("/")):
        raise InvalidPathError(path)
    return normalized
