"""Idempotent creation of the documents governance depends on."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from kratia_forums.core.settings import settings
from kratia_forums.models import CONSTITUTION_ID, Forum, ForumCategory, SiteSettings

logger = logging.getLogger(__name__)

DEFAULT_CONSTITUTION = """\
1. Every member in good standing may propose changes to these rules in the Agora.
2. Binding decisions are taken by votation. A votation passes when it reaches \
quorum and more members vote for it than against it.
3. Sanctions are applied only through a passed votation and always carry an end date.
4. New forums are created and new members admitted by votation.
"""


def seed_defaults(session: Session) -> list[str]:
    """Create the governance category, the Agora forum and the constitution if absent.

    Returns the names of the documents that were created.
    """
    created = []
    if session.get(ForumCategory, settings.agora_category_id) is None:
        session.add(
            ForumCategory(
                id=settings.agora_category_id,
                name="Governance",
                description="Official proposals and community votations.",
            )
        )
        created.append("category")
        # The forum row references the category.
        session.flush()
    if session.get(Forum, settings.agora_forum_id) is None:
        session.add(
            Forum(
                id=settings.agora_forum_id,
                category_id=settings.agora_category_id,
                name="Agora - Votations",
                description="Official proposals and community votations.",
                thread_count=0,
                post_count=0,
                is_public=True,
                is_agora=True,
            )
        )
        created.append("agora")
    if session.get(SiteSettings, CONSTITUTION_ID) is None:
        session.add(SiteSettings(id=CONSTITUTION_ID, constitution_text=DEFAULT_CONSTITUTION))
        created.append("constitution")
    session.commit()
    if created:
        logger.info("Seeded governance defaults: %s", ", ".join(created))
    return created
