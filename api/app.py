"""
Module 08 - FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.deps import load_runtime_config
from api.errors import APIError, api_error_handler, coverpass_error_handler, generic_error_handler
from api.routes import coverage, health, ledger, merkle
from core.schemas.errors import CoverPassException


# Configure logging, respecting COVERPASS_LOG_LEVEL
logging.basicConfig(
    level=getattr(logging, os.getenv("COVERPASS_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(cors_origins: list[str] | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="CoverPass API",
        description="""
HTTP API for committing insurance documents to Merkle roots and verifying coverage.

## Endpoints

- **POST /merkle/build** - Root over a list of leaves
- **POST /merkle/prove** - Membership proof for one leaf
- **POST /merkle/verify** - Check a proof against a root
- **POST /documents/hash** - Leaf hashes of insurance documents
- **GET /ledger/...** - Published root records
- **POST /ledger/publish** - Publish a documents batch (insurer role)
- **POST /coverage/verify** - Verify a user's coverage (verifier role)
- **GET /health** - Health check

## Errors

Failures return `{"ok": false, "error": {"code", "message", "details"}}`.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(CoverPassException, coverpass_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(merkle.router)
    app.include_router(ledger.router)
    app.include_router(coverage.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    config = load_runtime_config()
    uvicorn.run(app, host=config.api.host, port=config.api.port)
