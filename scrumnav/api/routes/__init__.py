"""
Routes package for the navigation preview API.

This package contains the FastAPI routers for:
- preview: Read-only parse, plan and section previews
"""

from .preview import router as preview_router

__all__ = ["preview_router"]
