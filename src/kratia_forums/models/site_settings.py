"""Singleton site settings row holding the constitution."""
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from kratia_forums.db.session import Base

CONSTITUTION_ID = "constitution"


class SiteSettings(Base):
    """Constitution text; only a passed rule-change votation rewrites it."""

    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=CONSTITUTION_ID)
    constitution_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
