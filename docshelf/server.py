"""FastAPI server for docshelf."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import router
from .api.deps import error_payload, status_for_error
from .config import configure_logging, settings
from .engine import DocShelf
from .errors import DocShelfError
from .middleware import RequestContextMiddleware
from .models import HealthResponse

logger = logging.getLogger(__name__)


def create_app(shelf: DocShelf | None = None) -> FastAPI:
    """Build the application.

    Args:
        shelf: Prebuilt DocShelf to serve. When omitted one is built from
            ``settings`` at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting docshelf server v{__version__}")

        if not settings.debug and settings.cors_allowed_origins == "*":
            logger.warning(
                "CORS is configured to allow all origins ('*'). "
                "Set DOCSHELF_CORS_ALLOWED_ORIGINS to specific domains in production."
            )

        app.state.shelf = shelf if shelf is not None else DocShelf.from_settings(settings)
        app.state.shelf.scheduler.start()

        yield

        await app.state.shelf.aclose()
        logger.info("docshelf server stopped")

    app = FastAPI(
        title="docshelf",
        description="Cached browsing, search and related documents over a Markdown content API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(router)

    # ============ EXCEPTION HANDLERS ============

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content=error_payload(exc.detail))

    @app.exception_handler(DocShelfError)
    async def docshelf_exception_handler(request: Request, exc: DocShelfError):
        status_code = status_for_error(exc)
        if status_code == 502:
            logger.warning(f"Upstream failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=status_code, content=error_payload(str(exc)))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with a sanitized error message."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_payload("An internal server error occurred. Please try again."),
        )

    # ============ HEALTH ENDPOINTS ============

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """Liveness check, with the search index state."""
        return HealthResponse(
            status="healthy",
            version=__version__,
            index_state=request.app.state.shelf.index.state,
            timestamp=datetime.now(UTC),
        )

    @app.get("/", tags=["Health"])
    async def root():
        return {
            "name": "docshelf",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


def main():
    """Run the server with uvicorn."""
    import uvicorn

    configure_logging()
    uvicorn.run(
        "docshelf.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
