"""
Book Tracker API

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from booktracker import __version__
from .schemas import HealthResponse
from .routes import auth, books, search
from .middleware import (
    setup_cors,
    setup_logging,
    setup_exception_handlers,
    get_cors_config,
    http_error_response,
)
from .dependencies import (
    get_settings,
    init_services,
    Settings,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Opens the database (creating tables) at startup and releases the
    connection pool on shutdown.
    """
    settings = app.state.settings
    logger.info(f"Starting Book Tracker in {settings.environment} mode")

    try:
        _ = app.state.services.engine
        logger.info("Book Tracker started successfully")

        yield

    finally:
        logger.info("Shutting down Book Tracker...")
        app.state.services.close()
        logger.info("Shutdown complete")


# =============================================================================
# Front-end
# =============================================================================

def mount_frontend(app: FastAPI, static_dir: str) -> None:
    """
    Serve a single-page front-end.

    Unmatched GETs outside /api are answered from ``static_dir``: the file
    itself if it exists, otherwise index.html so client-side routes work on
    reload. Everything else keeps the API's 404.
    """
    root = Path(static_dir).resolve()
    index_file = root / "index.html"

    if not root.is_dir():
        logger.warning(f"STATIC_DIR {root} does not exist, front-end not served")
        return

    async def frontend_or_not_found(request: Request, exc: StarletteHTTPException):
        path = request.url.path
        is_api = path == API_PREFIX or path.startswith(API_PREFIX + "/")
        if request.method not in ("GET", "HEAD") or is_api:
            return http_error_response(exc)

        candidate = (root / path.lstrip("/")).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        if index_file.is_file():
            return FileResponse(index_file)
        return http_error_response(exc)

    # Status handlers take precedence over the HTTPException class handler
    app.add_exception_handler(404, frontend_or_not_found)


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()
    settings.check()

    app = FastAPI(
        title="Book Tracker",
        description="Personal book inventory.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.services = init_services(settings)

    # ==========================================================================
    # Middleware (order matters - last added = outermost)
    # ==========================================================================

    setup_exception_handlers(app)

    setup_cors(app, config=get_cors_config(settings.environment))

    setup_logging(
        app,
        log_bodies=settings.debug,
        structured=settings.environment not in ("development", "test"),
    )

    # ==========================================================================
    # Routers
    # ==========================================================================

    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(books.router, prefix=API_PREFIX)
    app.include_router(search.router, prefix=API_PREFIX)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    def health_check(request: Request) -> HealthResponse:
        """Health check endpoint."""
        services = request.app.state.services

        components = {}
        overall_healthy = True

        try:
            with services.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            components["database"] = "healthy"
        except Exception as e:
            components["database"] = f"unhealthy: {type(e).__name__}"
            overall_healthy = False

        return HealthResponse(
            status="healthy" if overall_healthy else "degraded",
            version=__version__,
            components=components,
        )

    # Replaces the generic 404 handler for unmatched paths
    if settings.static_dir:
        mount_frontend(app, settings.static_dir)

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "booktracker.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
