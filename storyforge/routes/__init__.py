"""
Routes module - contains all API route handlers
"""

from .projects import router as projects_router
from .logs import router as logs_router
from .voices import router as voices_router

__all__ = [
    "projects_router",
    "logs_router",
    "voices_router",
]
