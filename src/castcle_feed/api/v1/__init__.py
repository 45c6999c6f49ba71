"""Version 1 API endpoints."""

from .routes_feed import router as feed_router

__all__ = ["feed_router"]
