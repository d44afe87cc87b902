# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count
from typing import Any

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kratia_forums.core.security import create_access_token
from kratia_forums.core.settings import settings
from kratia_forums.db.session import Base, build_engine, create_tables
from kratia_forums.db.session import get_db as app_get_session
from kratia_forums.db.time import utcnow
from kratia_forums.main import app as fastapi_app
from kratia_forums.models import (
    CONSTITUTION_ID,
    Forum,
    SiteSettings,
    Thread,
    User,
    UserRole,
    UserStatus,
    Votation,
    VotationStatus,
    VotationType,
    VotationVoter,
)
from kratia_forums.services.bootstrap import seed_defaults
from kratia_forums.services.ledger import AtomicStore

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    create_tables(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit for real, so each test cleans the tables afterwards
    # instead of rolling back an outer transaction.
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def store(db_session: Session) -> AtomicStore:
    return AtomicStore(db_session)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def now() -> datetime:
    return utcnow()


@pytest.fixture()
def agora(db_session: Session) -> Forum:
    """Seed the governance category, the Agora and the constitution."""
    seed_defaults(db_session)
    return db_session.get(Forum, settings.agora_forum_id)


@pytest.fixture()
def make_member(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting members; defaults to a member with voting rights."""

    def _make(
        username: str | None = None,
        *,
        status: UserStatus = UserStatus.ACTIVE,
        role: UserRole = UserRole.NORMAL_USER,
        can_vote: bool = True,
        karma: int = 150,
        registered_days_ago: int = 60,
        **fields: Any,
    ) -> User:
        member = User(
            username=username or f"member{next(_USERNAME_COUNTER)}",
            status=status,
            role=role,
            can_vote=can_vote,
            is_quarantined=not can_vote,
            karma=karma,
            registration_date=utcnow() - timedelta(days=registered_days_ago),
            **fields,
        )
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        return member

    return _make


@pytest.fixture()
def proposer(make_member: Callable[..., User]) -> User:
    return make_member("alice")


@pytest.fixture()
def voter(make_member: Callable[..., User]) -> User:
    return make_member("bob")


@pytest.fixture()
def make_votation(
    db_session: Session,
    agora: Forum,
    make_member: Callable[..., User],
    proposer: User,
) -> Callable[..., Votation]:
    """Return a factory writing a votation, its thread and optional ballots.

    ``ballots`` maps a choice to how many fresh members cast it; the tally
    columns are derived from it so they always match the ballot rows.
    """

    def _make(
        type_: VotationType = VotationType.RULE_CHANGE,
        *,
        payload: dict[str, Any] | None = None,
        ballots: dict[str, int] | None = None,
        quorum_required: int = 5,
        deadline: datetime | None = None,
        status: VotationStatus = VotationStatus.ACTIVE,
    ) -> Votation:
        ballots = ballots or {}
        votation = Votation(
            type=type_,
            status=status,
            title=f"Test {type_} votation",
            description="A votation created by the test suite.",
            justification="Because the tests need one.",
            proposer_id=proposer.id,
            proposer_username=proposer.username,
            deadline=deadline or utcnow() - timedelta(hours=1),
            votes_for=ballots.get("for", 0),
            votes_against=ballots.get("against", 0),
            votes_abstain=ballots.get("abstain", 0),
            total_votes_cast=sum(ballots.values()),
            quorum_required=quorum_required,
            payload=payload,
            related_thread_id="pending",
        )
        db_session.add(votation)
        db_session.flush()
        thread = Thread(
            forum_id=agora.id,
            title=f"Votation: {votation.title}",
            author_id=proposer.id,
            author_username=proposer.username,
            post_count=1,
            related_votation_id=votation.id,
        )
        db_session.add(thread)
        db_session.flush()
        votation.related_thread_id = thread.id
        for choice, amount in ballots.items():
            for _ in range(amount):
                ballot_member = make_member()
                db_session.add(
                    VotationVoter(
                        votation_id=votation.id,
                        voter_id=ballot_member.id,
                        choice=choice,
                    )
                )
        db_session.commit()
        db_session.refresh(votation)
        return votation

    return _make


@pytest.fixture()
def constitution(db_session: Session, agora: Forum) -> SiteSettings:
    return db_session.get(SiteSettings, CONSTITUTION_ID)


def _auth_headers(member: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(member.id)}"}


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Return a helper building authorization headers for any member."""
    return _auth_headers


@pytest.fixture()
def proposer_headers(proposer: User) -> dict[str, str]:
    """Return authorization headers for the proposing member."""
    return _auth_headers(proposer)


@pytest.fixture()
def voter_headers(voter: User) -> dict[str, str]:
    """Return authorization headers for the voting member."""
    return _auth_headers(voter)
