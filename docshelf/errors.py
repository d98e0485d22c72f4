"""Exception taxonomy for docshelf.

Cache and coalescing layers never swallow these; only the index build and
related-document candidate enumeration skip individual failures.
"""


class DocShelfError(Exception):
    """Base class for every error raised by docshelf."""


class TransportError(DocShelfError):
    """A fetch collaborator failed (network error or non-2xx response).

    Attributes:
        status: HTTP status code, or None for network errors and timeouts
        message: Human-readable description from the transport
        path: Content path that was requested
    """

    def __init__(self, message: str, status: int | None = None, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.path = path

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class NotFoundError(DocShelfError):
    """The requested content does not exist upstream (HTTP 404)."""

    def __init__(self, path: str, message: str | None = None):
        super().__init__(message or f"Not found: {path}")
        self.path = path


class DirectoryLoadError(DocShelfError):
    """A directory listing could not be loaded."""

    def __init__(self, path: str, cause: BaseException | None = None):
        super().__init__(f"Failed to load directory '{path or '/'}': {cause}")
        self.path = path
        self.cause = cause

    @property
    def status(self) -> int | None:
        return getattr(self.cause, "status", None)


class DocumentLoadError(DocShelfError):
    """A document could not be loaded. ``status`` keeps the HTTP status if any."""

    def __init__(
        self,
        path: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(f"Failed to load document '{path}': {cause}")
        self.path = path
        self.status = status
        self.cause = cause

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class DocumentNotFoundError(DocumentLoadError, NotFoundError):
    """A document load that failed with HTTP 404."""

    def __init__(self, path: str, cause: BaseException | None = None):
        DocumentLoadError.__init__(self, path, status=404, cause=cause)


class PartialIndexError(DocShelfError):
    """Summary of per-document failures during an index build.

    Recorded on the build report, never raised.
    """

    def __init__(self, failed: int, samples: list[str]):
        super().__init__(f"{failed} document(s) could not be indexed")
        self.failed = failed
        self.samples = samples


class MissingPathError(DocShelfError, ValueError):
    """A required document path was empty."""

    def __init__(self, message: str = "Missing document path"):
        super().__init__(message)


class InvalidPathError(DocShelfError, ValueError):
    """A document path was malformed (e.g. contains '..' segments)."""

    def __init__(self, path: str):
        super().__init__(f"Invalid path: {path}")
        self.path = path
