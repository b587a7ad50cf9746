"""Main FastAPI application for Knowledge Search."""

import json
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from .api import (
    search_router,
    documents_router,
    sessions_router,
    history_router,
    health_router,
    metrics_router,
)
from .config import get_settings
from .engine_instance import document_feed, index_manager, session_registry
from .models.response import ErrorResponse

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

FALLBACK_DOCUMENTS = [
    {
        "id": "getting-started",
        "title": "Getting Started",
        "categories": ["Guides"],
        "tags": ["onboarding", "setup"],
        "authorName": "Docs Team",
        "excerpt": "Set up your workspace in a few minutes.",
        "content": "<p>Create an account, invite your team and connect a data source.</p>"
    }
]


def _sample_documents_path() -> str:
    if settings.sample_documents_path:
        return settings.sample_documents_path
    return os.path.join(os.path.dirname(__file__), "sample_documents.json")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Knowledge Search service", version=settings.app_version)

    unsubscribe = document_feed.subscribe(index_manager.replace)

    try:
        with open(_sample_documents_path(), "r", encoding="utf-8") as f:
            documents = json.load(f)

        document_feed.publish(documents)
        logger.info("Sample documents loaded from JSON", total_documents=len(index_manager.snapshot))
    except FileNotFoundError:
        logger.warning("Sample documents not found, using fallback data")
        document_feed.publish(FALLBACK_DOCUMENTS)
        logger.info("Fallback documents loaded", total_documents=len(index_manager.snapshot))
    except Exception as e:
        logger.error("Failed to load documents", error=str(e))
        unsubscribe()
        raise

    yield

    # Shutdown
    logger.info("Shutting down Knowledge Search service", active_sessions=len(session_registry))
    await session_registry.close_all()
    unsubscribe()


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Interactive fuzzy search over knowledge base documents",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next) -> Response:
    """Log all HTTP requests."""
    start_time = time.time()

    logger.info(
        "Request started",
        method=request.method,
        url=str(request.url),
        client_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code,
        process_time_ms=round(process_time * 1000, 2)
    )

    return response


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle global exceptions."""
    logger.error(
        "Unhandled exception",
        method=request.method,
        url=str(request.url),
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred",
            details={"exception": str(exc)} if settings.debug else None
        ).model_dump(mode="json")
    )


# Include API routers
app.include_router(search_router)
app.include_router(documents_router)
app.include_router(sessions_router)
app.include_router(history_router)
app.include_router(health_router)
app.include_router(metrics_router)


# Root endpoint
@app.get("/", summary="Root endpoint", description="Get basic information about the API")
async def root() -> dict:
    """Root endpoint with basic API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Interactive fuzzy search over knowledge base documents",
        "docs_url": "/docs",
        "health_url": "/api/v1/health",
        "status": "running"
    }


# API info endpoint
@app.get("/api", summary="API information", description="Get detailed API information")
async def api_info() -> dict:
    """Get detailed API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Interactive fuzzy search over knowledge base documents",
        "endpoints": {
            "search": "/api/v1/search/{query}",
            "suggestions": "/api/v1/suggestions/{query}",
            "documents": "/api/v1/documents",
            "document_stats": "/api/v1/documents/stats",
            "sessions": "/api/v1/sessions",
            "history": "/api/v1/history/{identity}",
            "health": "/api/v1/health",
            "metrics": "/api/v1/metrics"
        },
        "features": [
            "Weighted multi-field fuzzy matching",
            "Exact over substring over fuzzy title ranking",
            "Markup-aware body search",
            "Debounced interactive sessions",
            "Per-identity recent query history",
            "Popular tags and categories"
        ],
        "configuration": {
            "fuzzy_threshold": settings.fuzzy_threshold,
            "result_cap": settings.result_cap,
            "history_cap": settings.history_cap,
            "debounce_ms": settings.debounce_ms,
            "max_query_length": settings.max_query_length
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "knowledge_search.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
        log_level=settings.log_level.lower()
    )
