"""
FastAPI preview server for the navigation core.

Exposes URL parsing, hydration planning and section visibility as read-only
endpoints, so route tables and permission rules can be inspected without a
browser.

Usage:
    # Run standalone
    python -m scrumnav.api.server

    # Or via factory
    from scrumnav.api import create_app
    app = create_app()
    uvicorn.run(app, port=5002)

API Structure:
    /api/preview/parse     - URL -> route, state, errors, canonical URL
    /api/preview/plan      - (route | URL, snapshot) -> commands
    /api/preview/sections  - Admin sections visible to a role
    /api/health            - Health check
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from scrumnav.config.runtime_config import get_api_host, get_api_port, get_log_level

from .routes import preview_router

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str
    version: str


def create_app(enable_cors: bool = True) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        enable_cors: Whether to enable CORS middleware.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Scrum Navigation Preview API",
        description="Read-only previews of URL parsing, hydration planning and admin section visibility.",
        version=API_VERSION,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(preview_router, prefix="/api")

    # -------------------------------------------------------------------------
    # Request Logging Middleware
    # -------------------------------------------------------------------------

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info(
            "%s %s %s %.3fs",
            request.method,
            request.url.path,
            response.status_code,
            duration,
        )
        return response

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", version=API_VERSION)

    return app


app = create_app()


def main():
    """Run the API server."""
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Navigation Preview API Server")
    parser.add_argument("--host", default=get_api_host(), help="Host to bind to")
    parser.add_argument("--port", type=int, default=get_api_port(), help="Port to bind to")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-cors", action="store_true", help="Disable CORS")
    args = parser.parse_args()

    level = "DEBUG" if args.debug else get_log_level()
    logging.basicConfig(level=getattr(logging, level))

    global app
    app = create_app(enable_cors=not args.no_cors)

    print(f"Starting navigation preview API at http://{args.host}:{args.port}")
    print("    POST   /api/preview/parse     - Parse a URL")
    print("    POST   /api/preview/plan      - Plan hydration for a route")
    print("    GET    /api/preview/sections  - Visible admin sections")
    print("    GET    /api/health            - Health check")

    uvicorn.run(app, host=args.host, port=args.port, log_level=level.lower())


if __name__ == "__main__":
    main()
