"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .container import Services, build_services
from .routers import catalog, health, vector_index
from .utils.errors import CatalogMatcherError
from .utils.logging_config import RequestLoggingMiddleware, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application")

    app.state.index_error = None
    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = build_services(app.state.settings)
        try:
            await app.state.services.index.initialize()
        except CatalogMatcherError as e:
            # The API still starts; /health reports the index as unhealthy
            logger.error(f"Vector index initialization failed: {e.message}")
            app.state.index_error = e.message

    yield

    logger.info("Shutting down application")
    if owns_services:
        await app.state.services.close()


async def catalog_matcher_error_handler(request: Request, exc: CatalogMatcherError) -> JSONResponse:
    """Render application errors with their status code."""
    exc.log(logging.WARNING if exc.status_code < 500 else logging.ERROR)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings object; read from the environment when omitted
        services: Pre-built services (tests); built in the lifespan when omitted
    """
    settings = settings or get_settings()
    setup_logging(settings.logging)

    app = FastAPI(
        title="Catalog Matcher",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware conditionally
    if settings.logging.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(CatalogMatcherError, catalog_matcher_error_handler)

    # Include routers
    app.include_router(catalog.router)
    app.include_router(vector_index.router)
    app.include_router(health.router)

    return app


def main():
    """Run the API with uvicorn (``catalog-matcher`` console script)."""
    uvicorn.run("catalog_matcher.start:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
