# src/kratia_forums/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .constitution import router as constitution_router
from .forums import router as forums_router
from .members import router as members_router
from .notifications import router as notifications_router
from .proposals import router as proposals_router
from .threads import router as threads_router
from .votations import router as votations_router

__all__ = [
    "constitution_router",
    "forums_router",
    "members_router",
    "notifications_router",
    "proposals_router",
    "threads_router",
    "votations_router",
]
