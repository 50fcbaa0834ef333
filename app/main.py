# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Software Marketplace API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.exceptions import (
    MarketplaceException,
    marketplace_exception_handler,
    validation_exception_handler,
)
from app.routers import health, software
from lib.database import init_db

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: create missing tables, log configuration
    - Shutdown: log only; sessions are closed per request
    """
    logger.info(f"Starting Software Marketplace API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Upload location: {settings.UPLOAD_LOCATION}")

    init_db()

    yield

    logger.info("Shutting down Software Marketplace API")


# Create FastAPI application
app = FastAPI(
    title="Software Marketplace API",
    description="""
## Software Marketplace API

Upload paid software packages, browse the marketplace and buy listings.

### Access Rules

| Action | Who |
|--------|-----|
| Browse / view a listing | anyone |
| Upload | any authenticated user |
| Update a listing | its uploader or an admin |
| Delete a listing | admins only |
| Purchase | any authenticated user, once per listing |

Authenticate with `Authorization: Bearer <token>`.

### Quick Start

```bash
# Upload a listing
curl -X POST http://localhost:8080/api/software/upload \\
  -H "Authorization: Bearer $TOKEN" \\
  -F "title=Tool A" -F "price=9.99" \\
  -F "video=@demo.mp4" -F "zipFile=@tool.zip"

# Buy it
curl -X POST http://localhost:8080/api/software/purchase/1 \\
  -H "Authorization: Bearer $TOKEN"
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Software",
            "description": "Upload, browse, edit, delete and purchase listings",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - the storefront runs on a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(MarketplaceException)
async def handle_marketplace_exception(request: Request, exc: MarketplaceException):
    """Handle custom marketplace exceptions."""
    return await marketplace_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed requests (e.g. a non-numeric software id)."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Marketplace endpoints
app.include_router(
    software.router,
    prefix="/api/software",
    tags=["Software"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api",
    tags=["Health"]
)

# Stored videos and archives, referenced from listings as /uploads/<name>
if settings.SERVE_UPLOADS:
    app.mount(
        settings.UPLOAD_URL_PREFIX.rstrip("/"),
        StaticFiles(directory=settings.UPLOAD_LOCATION, check_dir=False),
        name="uploads",
    )


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Software Marketplace API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }
