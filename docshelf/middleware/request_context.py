"""Request context middleware.

Tags every HTTP response with a request id and its handling time using the
pure ASGI pattern, and logs one line per request.
"""

import logging
import time
from uuid import uuid4

logger = logging.getLogger(__name__)


class RequestContextMiddleware:
    """
    Add tracing headers to all responses.

    Headers added:
        - X-Request-Id: Unique request identifier (an incoming one is kept)
        - X-Response-Time-Ms: Milliseconds until the response started
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for name, value in scope.get("headers", []):
            if name == b"x-request-id":
                request_id = value.decode("latin-1")
                break
        request_id = request_id or str(uuid4())
        started = time.perf_counter()

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode("latin-1")))
                headers.append((b"x-response-time-ms", str(elapsed_ms).encode()))
                message = {**message, "headers": headers}
                logger.debug(
                    f"{scope['method']} {scope['path']} -> {message['status']} "
                    f"({elapsed_ms}ms, id={request_id})"
                )
            await send(message)

        await self.app(scope, receive, send_with_headers)
