"""Engine, declarative base and session factory."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from kratia_forums.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for every governance and forum table."""


# Model modules register their tables on Base.metadata when imported.
import kratia_forums.models  # noqa: E402,F401


def build_engine(url: str, **kwargs: Any) -> Engine:
    """Create an engine for ``url``.

    SQLite connections are handed between the request threadpool and the
    event loop thread, so the same-thread check is disabled for them.
    """
    if make_url(url).get_backend_name() == "sqlite":
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, echo=settings.sql_debug, **kwargs)


engine = build_engine(settings.effective_database_url)

SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session."""
    with SessionLocal() as db:
        yield db


def create_tables(bind: Engine | None = None) -> None:
    """Create missing tables straight from the models, bypassing alembic."""
    Base.metadata.create_all(bind=bind or engine)
