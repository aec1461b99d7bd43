"""
API v1 package.

Contains versioned API routes for the Training Calendar Registration API.
"""

from training_calendar.api.v1.routes import router

__all__ = ["router"]
