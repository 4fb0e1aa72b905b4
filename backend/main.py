"""FastAPI Backend Main Application

This module initializes the FastAPI application with all routers, middleware,
and configuration for the Marketing Relay API.
"""
import sys
from pathlib import Path

# Add parent directory to path to import existing services
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from backend.config import settings
from backend.core.models import HealthResponse
from backend.core.service_wrapper import close_services
from backend.utils.helpers import utc_now_iso
from backend.utils.logger import setup_logging, get_logger
from backend.middleware.body_limit import BodySizeLimitMiddleware
from backend.middleware.logging import LoggingMiddleware
from backend.middleware.error_handler import setup_exception_handlers
from backend.api.router import api_router
from config.settings import settings as provider_settings

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")
    logger.info(f"Server: {settings.host}:{settings.port}")
    logger.info(f"Log Level: {settings.log_level}")
    logger.info(f"Completion Model: {provider_settings.openrouter_model}")
    logger.info(f"Body Limit: {settings.max_body_bytes // (1024 * 1024)}MB")
    logger.info("=" * 60)

    missing = provider_settings.missing_credentials()
    if missing:
        logger.warning(f"Missing credentials, related routes will fail: {', '.join(missing)}")

    yield

    # Shutdown
    logger.info("Shutting down API server...")
    await close_services()
    logger.info("Cleanup completed")


# Initialize FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

# Reject oversized bodies before anything else reads them
app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)

# Setup exception handlers
setup_exception_handlers(app)

# Include API routers
app.include_router(api_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return HealthResponse(ok=True, time=utc_now_iso())


if __name__ == "__main__":
    import argparse
    import uvicorn
    import os

    # Parse command line arguments
    parser = argparse.ArgumentParser(description="Run Marketing Relay API server")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable DEBUG logging level"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides --debug)"
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help=f"Host to bind to (default: {settings.host})"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to bind to (default: {settings.port})"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )

    args = parser.parse_args()

    # Determine log level
    if args.log_level:
        log_level = args.log_level
    elif args.debug:
        log_level = "DEBUG"
    else:
        log_level = settings.log_level

    settings.log_level = log_level

    # Child processes started by --reload read the level from the environment
    os.environ['LOG_LEVEL'] = log_level

    # Re-initialize logging with new level
    setup_logging(log_level=log_level)

    uvicorn.run(
        "backend.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level.lower()
    )
