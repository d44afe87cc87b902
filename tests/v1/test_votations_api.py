"""Tests for votation endpoints."""

from datetime import timedelta

from fastapi import status

from kratia_forums.models import VotationStatus, VotationType


def test_get_votation_uses_camel_case(client, make_votation, now) -> None:
    votation = make_votation(ballots={"for": 2}, deadline=now + timedelta(days=1))

    response = client.get(f"/api/v1/votations/{votation.id}")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "active"
    assert body["totalVotesCast"] == 2
    assert body["quorumRequired"] == 5
    assert body["relatedThreadId"] == votation.related_thread_id
    assert body["options"] == {"for": 2, "against": 0, "abstain": 0}
    assert len(body["voters"]) == 2


def test_get_expired_votation_closes_it(client, make_votation) -> None:
    votation = make_votation(ballots={"for": 5})

    response = client.get(f"/api/v1/votations/{votation.id}")

    assert response.json()["status"] == VotationStatus.CLOSED_PASSED
    assert response.json()["closedAt"] is not None


def test_get_missing_votation(client) -> None:
    response = client.get("/api/v1/votations/nope")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_cast_vote(client, make_votation, voter, voter_headers, now) -> None:
    votation = make_votation(deadline=now + timedelta(days=1))

    response = client.post(
        f"/api/v1/votations/{votation.id}/vote",
        json={"choice": "for"},
        headers=voter_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["votationId"] == votation.id
    assert body["options"]["for"] == 1
    assert body["totalVotesCast"] == 1

    mine = client.get(f"/api/v1/votations/{votation.id}/my-vote", headers=voter_headers)
    assert mine.json() == {"votationId": votation.id, "choice": "for"}


def test_cast_vote_requires_auth(client, make_votation, now) -> None:
    votation = make_votation(deadline=now + timedelta(days=1))

    response = client.post(f"/api/v1/votations/{votation.id}/vote", json={"choice": "for"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_choice(client, make_votation, voter_headers, now) -> None:
    votation = make_votation(deadline=now + timedelta(days=1))

    response = client.post(
        f"/api/v1/votations/{votation.id}/vote",
        json={"choice": "maybe"},
        headers=voter_headers,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_duplicate_vote_conflict(client, make_votation, voter_headers, now) -> None:
    votation = make_votation(deadline=now + timedelta(days=1))
    url = f"/api/v1/votations/{votation.id}/vote"
    client.post(url, json={"choice": "against"}, headers=voter_headers)

    response = client.post(url, json={"choice": "for"}, headers=voter_headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert "already voted" in response.json()["detail"]
    tally = client.get(f"/api/v1/votations/{votation.id}").json()
    assert tally["options"] == {"for": 0, "against": 1, "abstain": 0}


def test_vote_forbidden_without_rights(client, make_member, make_votation, headers_for, now) -> None:
    votation = make_votation(deadline=now + timedelta(days=1))
    newcomer = make_member("newbie", can_vote=False)

    response = client.post(
        f"/api/v1/votations/{votation.id}/vote",
        json={"choice": "for"},
        headers=headers_for(newcomer),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_list_votations_paginates(client, make_votation, now) -> None:
    created = [make_votation(deadline=now + timedelta(days=1)) for _ in range(3)]

    first = client.get("/api/v1/votations", params={"limit": 2}).json()
    assert len(first["items"]) == 2
    cursor = first["nextCursor"]["before"]
    assert cursor is not None

    second = client.get("/api/v1/votations", params={"limit": 2, "before": cursor}).json()
    assert len(second["items"]) == 1
    assert second["nextCursor"]["before"] is None

    seen = {item["id"] for item in first["items"] + second["items"]}
    assert seen == {votation.id for votation in created}


def test_list_votations_filters_and_closes(client, make_votation, now) -> None:
    make_votation(VotationType.RULE_CHANGE, deadline=now + timedelta(days=1))
    expired = make_votation(VotationType.NEW_FORUM_PROPOSAL, ballots={"for": 1})

    response = client.get("/api/v1/votations", params={"type": "new_forum_proposal"})

    items = response.json()["items"]
    assert [item["id"] for item in items] == [expired.id]
    assert items[0]["status"] == VotationStatus.CLOSED_FAILED_QUORUM
