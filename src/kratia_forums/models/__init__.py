# src/kratia_forums/models/__init__.py
"""SQLAlchemy models for the Kratia Forums application."""

from .forum import Forum, ForumCategory, Post, Thread
from .notification import Notification, NotificationType
from .site_settings import CONSTITUTION_ID, SiteSettings
from .user import User, UserRole, UserStatus
from .votation import Votation, VotationStatus, VotationType, VotationVoter, VoteChoice

__all__ = [
    "Forum", "ForumCategory", "Post", "Thread",
    "Notification", "NotificationType",
    "CONSTITUTION_ID", "SiteSettings",
    "User", "UserRole", "UserStatus",
    "Votation", "VotationStatus", "VotationType", "VotationVoter", "VoteChoice",
]
