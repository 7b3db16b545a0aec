"""
FastAPI Application - Main entry point for the category RAG API

License: MIT
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException

from ..config import AppConfig, get_config, validate_config
from ..exceptions import CategoryRAGError
from ..infrastructure.logging_config import setup_logging
from ..infrastructure.monitoring import record_error, record_request, setup_prometheus_metrics
from .dependencies import ServiceContainer, build_services
from .routes import router

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application configuration; loaded from file and environment when omitted
        services: Prebuilt service container; built from ``config`` when omitted

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = services.config if services is not None else get_config()
    validate_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown tasks."""
        # Startup
        setup_logging(config.logging.level, config.logging.format_type, config.logging.log_file)
        logger.info("Starting category RAG API")

        if config.monitoring.prometheus_enabled:
            setup_prometheus_metrics()

        app.state.services = services if services is not None else build_services(config)
        logger.info("Category RAG API startup complete")

        yield

        # Shutdown
        logger.info("Shutting down category RAG API")
        await app.state.services.cleanup()
        logger.info("Category RAG API shutdown complete")

    app = FastAPI(
        title="Category RAG API",
        description="Category-aware retrieval-augmented chat over websites and documents",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials=True,
        allow_methods=config.security.cors_methods,
        allow_headers=["*"],
    )

    # Monitoring middleware
    @app.middleware("http")
    async def add_monitoring(request: Request, call_next):
        """Add monitoring and metrics to all requests."""
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        record_request(request.method, request.url.path, response.status_code, duration)
        response.headers["X-Process-Time"] = str(duration)

        return response

    @app.exception_handler(CategoryRAGError)
    async def category_rag_exception_handler(request: Request, exc: CategoryRAGError):
        """
        Map domain errors to JSON error responses.

        Args:
            request: The request that caused the exception
            exc: The domain exception

        Returns:
            JSON error response with the exception's HTTP status
        """
        if exc.http_status >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
        else:
            logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

        record_error(type(exc).__name__, "api")
        return JSONResponse(status_code=exc.http_status, content={"error": exc.message})

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        record_error(type(exc).__name__, "api")

        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    # Metrics endpoint for Prometheus
    @app.get(config.monitoring.metrics_path, tags=["Monitoring"])
    async def get_metrics():
        """
        Prometheus metrics endpoint.

        Returns:
            Prometheus-formatted metrics
        """
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(router, prefix="/api")

    return app


def main() -> None:
    """Run the API server."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "category_rag.api.main:create_app",
        factory=True,
        host=config.api_host,
        port=config.api_port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
