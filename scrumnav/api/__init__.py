"""
Navigation preview API - FastAPI REST API over the navigation core.

Endpoints:
    POST   /api/preview/parse     - URL -> route, state, errors, canonical URL
    POST   /api/preview/plan      - (route | URL, snapshot) -> commands
    GET    /api/preview/sections  - Admin sections visible to a role
    GET    /api/health            - Health check
"""

from .routes import preview_router
from .server import app, create_app

__all__ = ["create_app", "app", "preview_router"]
