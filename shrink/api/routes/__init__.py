"""Routes package initialization.

This module exports the route collection for the application.
"""

from fastapi import APIRouter

from shrink.api.routes import shortener, redirect, health

# Create root router
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(shortener.router)

# Redirect routes go last: /{short_url} matches any single path segment
api_router.include_router(redirect.router)

__all__ = ["api_router"]
