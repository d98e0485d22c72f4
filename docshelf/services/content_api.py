"""HTTP client for the upstream content API.

Implements the fetch collaborator protocols consumed by the stores:

    GET {base_url}/structure/{path}     -> {"items": [...]} or [...]
    GET {base_url}/content?path=<path>  -> document JSON

Transient failures (timeouts, network errors, 5xx) are retried with
exponential backoff. Everything else is raised immediately as
:class:`~docshelf.errors.TransportError`.
"""

import asyncio
import logging
import time

import httpx
from pydantic import ValidationError

from ..errors import TransportError
from ..models import ContentItem, DocumentPayload

logger = logging.getLogger(__name__)


def sort_items(items: list[ContentItem]) -> list[ContentItem]:
    """Directories first, then by name (case-insensitive)."""
    return sorted(items, key=lambda item: (not item.is_directory, item.name.lower()))


def _is_retryable(error: TransportError) -> bool:
    return error.status is None or error.status >= 500


class ContentApiClient:
    """
    Async client for the content API.

    Args:
        base_url: API root, e.g. ``http://localhost:3000/api``
        timeout: Per-request timeout in seconds
        max_retries: Attempts per request (1 disables retrying)
        retry_delay: Backoff base; attempt ``n`` waits ``retry_delay * 2**(n-1)``
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            event_hooks={"request": [self._log_request], "response": [self._log_response]},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ContentApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ============ FETCH COLLABORATOR ============

    async def fetch_directory(self, path: str) -> list[ContentItem]:
        url = f"/structure/{path}" if path else "/structure"
        data = await self._get_json(url, path)
        raw_items = data.get("items", []) if isinstance(data, dict) else data
        try:
            items = [ContentItem.model_validate(raw) for raw in raw_items or []]
        except (ValidationError, TypeError) as e:
            raise TransportError(f"Malformed directory listing: {e}", path=path) from e
        return sort_items(items)

    async def fetch_document(self, path: str) -> DocumentPayload:
        data = await self._get_json("/content", path, params={"path": path})
        if not isinstance(data, dict):
            raise TransportError("Malformed document response", path=path)
        try:
            return DocumentPayload.model_validate({"path": path, **data})
        except ValidationError as e:
            raise TransportError(f"Malformed document response: {e}", path=path) from e

    async def fetch_document_tags(self, path: str) -> list[str]:
        document = await self.fetch_document(path)
        return document.tags

    # ============ INTERNALS ============

    async def _get_json(self, url: str, path: str, params: dict | None = None):
        attempt = 1
        while True:
            try:
                return await self._get_once(url, path, params)
            except TransportError as e:
                if not _is_retryable(e) or attempt >= self.max_retries:
                    raise
                delay = self.retry_delay * 2 ** (attempt - 1)
                logger.warning(
                    f"Content API request for '{path}' failed ({e}); "
                    f"retry {attempt}/{self.max_retries - 1} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                attempt += 1

    async def _get_once(self, url: str, path: str, params: dict | None):
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out requesting {url}", path=path) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Network error requesting {url}: {e}", path=path) from e

        if not response.is_success:
            raise TransportError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status=response.status_code,
                path=path,
            )
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Invalid JSON from {url}", path=path) from e

    async def _log_request(self, request: httpx.Request) -> None:
        request.extensions["docshelf_started"] = time.perf_counter()
        logger.debug(f"--> {request.method} {request.url}")

    async def _log_response(self, response: httpx.Response) -> None:
        started = response.request.extensions.get("docshelf_started")
        elapsed = f" ({int((time.perf_counter() - started) * 1000)}ms)" if started else ""
        logger.debug(
            f"<-- {response.status_code} {response.request.method} {response.request.url}{elapsed}"
        )
