"""Tests for the thread page, the read path that closes votations."""

from datetime import timedelta

from fastapi import status
from sqlalchemy.exc import OperationalError

from kratia_forums.models import Forum, Post, Thread, UserStatus, VotationType


def test_thread_page_closes_due_votation(client, db_session, make_member, make_votation) -> None:
    target = make_member("mallory", status=UserStatus.UNDER_SANCTION_PROCESS)
    votation = make_votation(
        payload={
            "kind": "sanction",
            "target_user_id": target.id,
            "target_username": target.username,
            "sanction_duration": "1 week",
        },
        ballots={"for": 6, "against": 2},
        type_=VotationType.SANCTION,
    )

    response = client.get(f"/api/v1/threads/{votation.related_thread_id}")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["votation"]["status"] == "closed_passed"
    assert body["thread"]["isLocked"] is True
    db_session.refresh(target)
    assert target.status == UserStatus.SANCTIONED


def test_thread_page_serves_active_votation_when_closure_fails(
    client, db_session, make_votation, monkeypatch
) -> None:
    votation = make_votation(ballots={"for": 5})

    def failing_commit() -> None:
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    response = client.get(f"/api/v1/threads/{votation.related_thread_id}")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["votation"]["status"] == "active"
    assert body["thread"]["isLocked"] is False


def test_thread_page_lists_posts_in_order(client, db_session, agora, proposer, now) -> None:
    thread = Thread(
        forum_id=agora.id,
        title="Welcome",
        author_id=proposer.id,
        author_username=proposer.username,
        post_count=2,
    )
    db_session.add(thread)
    db_session.flush()
    db_session.add_all(
        [
            Post(
                thread_id=thread.id,
                author_id=proposer.id,
                author_username=proposer.username,
                content="second",
                created_at=now,
            ),
            Post(
                thread_id=thread.id,
                author_id=proposer.id,
                author_username=proposer.username,
                content="first",
                created_at=now - timedelta(minutes=5),
            ),
        ]
    )
    db_session.commit()

    body = client.get(f"/api/v1/threads/{thread.id}").json()

    assert [post["content"] for post in body["posts"]] == ["first", "second"]
    assert body["votation"] is None


def test_private_thread_requires_login(client, db_session, proposer, proposer_headers) -> None:
    forum = Forum(name="Back room", description="Members only", is_public=False)
    db_session.add(forum)
    db_session.flush()
    thread = Thread(
        forum_id=forum.id,
        title="Secret plans",
        author_id=proposer.id,
        author_username=proposer.username,
        is_public=False,
    )
    db_session.add(thread)
    db_session.commit()

    assert client.get(f"/api/v1/threads/{thread.id}").status_code == status.HTTP_401_UNAUTHORIZED
    response = client.get(f"/api/v1/threads/{thread.id}", headers=proposer_headers)
    assert response.status_code == status.HTTP_200_OK


def test_missing_thread(client) -> None:
    assert client.get("/api/v1/threads/nope").status_code == status.HTTP_404_NOT_FOUND
