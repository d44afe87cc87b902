# src/kratia_forums/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    constitution_router,
    forums_router,
    members_router,
    notifications_router,
    proposals_router,
    threads_router,
    votations_router,
)

__all__ = [
    "constitution_router",
    "forums_router",
    "members_router",
    "notifications_router",
    "proposals_router",
    "threads_router",
    "votations_router",
]
