"""Analytics presentation layer - HTTP routes."""

from analytics.presentation.routes import router

__all__ = ["router"]
