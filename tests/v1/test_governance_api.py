"""Tests for constitution, notification and member endpoints."""

from datetime import timedelta

from fastapi import status
from jose import jwt

from kratia_forums.core.settings import settings
from kratia_forums.models import Forum, UserStatus
from kratia_forums.services.closure import ensure_closed


def test_get_constitution(client, constitution) -> None:
    response = client.get("/api/v1/constitution")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["constitutionText"] == constitution.constitution_text


def test_constitution_missing(client) -> None:
    assert client.get("/api/v1/constitution").status_code == status.HTTP_404_NOT_FOUND


def test_notifications_after_closure(client, store, make_votation, proposer_headers, now) -> None:
    votation = make_votation(ballots={"for": 5})
    ensure_closed(store, votation.id, now=now)

    response = client.get("/api/v1/notifications", headers=proposer_headers)

    assert response.status_code == status.HTTP_200_OK
    items = response.json()
    assert len(items) == 1
    assert items[0]["type"] == "votation_concluded_proposer"
    assert items[0]["votationId"] == votation.id
    assert items[0]["isRead"] is False

    marked = client.post(f"/api/v1/notifications/{items[0]['id']}/read", headers=proposer_headers)
    assert marked.json()["isRead"] is True

    unread = client.get(
        "/api/v1/notifications",
        params={"unread_only": True},
        headers=proposer_headers,
    )
    assert unread.json() == []


def test_cannot_mark_someone_elses_notification(
    client, store, make_votation, voter_headers, proposer_headers, now
) -> None:
    votation = make_votation(ballots={"for": 5})
    ensure_closed(store, votation.id, now=now)
    notification_id = client.get("/api/v1/notifications", headers=proposer_headers).json()[0]["id"]

    response = client.post(f"/api/v1/notifications/{notification_id}/read", headers=voter_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_read_me(client, proposer, proposer_headers) -> None:
    response = client.get("/api/v1/members/me", headers=proposer_headers)

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["id"] == proposer.id
    assert body["canVote"] is True


def test_expired_sanction_lifted_on_login(client, make_member, headers_for, now) -> None:
    member = make_member(
        "reformed",
        status=UserStatus.SANCTIONED,
        sanction_end_date=now - timedelta(minutes=1),
    )

    body = client.get("/api/v1/members/me", headers=headers_for(member)).json()

    assert body["status"] == UserStatus.ACTIVE
    assert body["sanctionEndDate"] is None


def test_invalid_token_rejected(client) -> None:
    token = jwt.encode({"sub": "someone"}, "wrong-key", algorithm=settings.jwt_algorithm)

    response = client.get("/api/v1/members/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_unknown_member(client) -> None:
    assert client.get("/api/v1/members/nobody").status_code == status.HTTP_404_NOT_FOUND


def test_forum_listing_includes_voted_forum(client, store, make_votation, agora, now) -> None:
    votation = make_votation(
        "new_forum_proposal",
        payload={
            "kind": "new_forum_proposal",
            "proposed_forum_name": "Gardening",
            "proposed_forum_description": "Everything about plants.",
            "proposed_forum_category_id": agora.category_id,
            "proposed_forum_is_public": True,
        },
        ballots={"for": 5},
    )
    ensure_closed(store, votation.id, now=now)

    forums = client.get("/api/v1/forums").json()

    assert [forum["name"] for forum in forums] == ["Agora - Votations", "Gardening"]
    assert forums[0]["isAgora"] is True
    assert forums[1]["threadCount"] == 0


def test_private_forum_hidden_from_anonymous(client, db_session, agora, voter_headers) -> None:
    hidden = Forum(category_id=agora.category_id, name="Backroom", is_public=False)
    db_session.add(hidden)
    db_session.commit()

    anonymous = [forum["name"] for forum in client.get("/api/v1/forums").json()]
    signed_in = [
        forum["name"] for forum in client.get("/api/v1/forums", headers=voter_headers).json()
    ]

    assert "Backroom" not in anonymous
    assert "Backroom" in signed_in
    assert client.get(f"/api/v1/forums/{hidden.id}").status_code == status.HTTP_404_NOT_FOUND
    assert (
        client.get(f"/api/v1/forums/{hidden.id}", headers=voter_headers).status_code
        == status.HTTP_200_OK
    )


def test_unknown_forum(client, agora) -> None:
    assert client.get("/api/v1/forums/nope").status_code == status.HTTP_404_NOT_FOUND
