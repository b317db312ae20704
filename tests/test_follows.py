"""Follow request workflow and follow status."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import auth_headers
from guildhall.core.config import settings
from guildhall.core.exceptions import ConflictError, NotFoundError, StateInvalidError, ValidationFailed
from guildhall.modules.follows.models.follow import Follow, FollowRequest
from guildhall.modules.follows.schemas.follow import FollowAction, FollowRelation, FollowRequestDirection
from guildhall.modules.follows.services import follow as follow_service
from guildhall.modules.follows.services.follow import (
    get_follow_requests,
    get_follow_status,
    perform_follow_action,
)
from guildhall.modules.notifications.models.notification import Notification
from guildhall.modules.notifications.services.notification import get_user_notifications

FOLLOW_URL = "/api/v1/follow"


def test_follow_request_then_accept(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    result = perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)
    assert result["action"] == "follow_request_sent"
    assert result["follow_request"].status == "PENDING"
    assert get_follow_status(db_session, alice.id, bob.id)["status"] == FollowRelation.REQUEST_SENT
    assert get_follow_status(db_session, bob.id, alice.id)["status"] == FollowRelation.REQUEST_RECEIVED

    received = get_user_notifications(db_session, bob.id)
    assert [n.type for n in received["notifications"]] == ["FOLLOW_REQUEST"]

    result = perform_follow_action(db_session, bob, alice.id, FollowAction.ACCEPT)
    assert result["action"] == "request_accepted"

    request = db_session.query(FollowRequest).one()
    assert request.status == "ACCEPTED"
    edge = db_session.query(Follow).one()
    assert (edge.follower_id, edge.following_id) == (alice.id, bob.id)

    status = get_follow_status(db_session, alice.id, bob.id)
    assert status["status"] == FollowRelation.FOLLOWING
    assert status["follower_count"] == 1
    assert status["following_count"] == 0

    accepted = get_user_notifications(db_session, alice.id)
    assert [n.type for n in accepted["notifications"]] == ["FOLLOW_ACCEPTED"]


def test_accept_requires_pending_request_addressed_to_user(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    with pytest.raises(StateInvalidError):
        perform_follow_action(db_session, bob, alice.id, FollowAction.ACCEPT)

    perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)

    # Only the receiver can accept
    with pytest.raises(StateInvalidError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.ACCEPT)

    perform_follow_action(db_session, bob, alice.id, FollowAction.ACCEPT)
    with pytest.raises(StateInvalidError):
        perform_follow_action(db_session, bob, alice.id, FollowAction.ACCEPT)
    assert db_session.query(Follow).count() == 1


def test_cancel_request_hides_notification(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)
    assert get_user_notifications(db_session, bob.id)["total_notifications"] == 1

    result = perform_follow_action(db_session, alice, bob.id, FollowAction.CANCEL_REQUEST)
    assert result["action"] == "request_cancelled"

    assert db_session.query(FollowRequest).count() == 0
    notifications = get_user_notifications(db_session, bob.id)
    assert notifications["total_notifications"] == 0
    assert notifications["unread_count"] == 0
    # Soft deleted, not removed
    assert db_session.query(Notification).filter(Notification.deleted_at.isnot(None)).count() == 1
    assert get_follow_status(db_session, alice.id, bob.id)["status"] == FollowRelation.NONE

    # Nothing left to cancel
    with pytest.raises(StateInvalidError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.CANCEL_REQUEST)

    # A cancelled request does not block a new one
    result = perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)
    assert result["action"] == "follow_request_sent"


def test_rejected_request_blocks_new_requests(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)
    result = perform_follow_action(db_session, bob, alice.id, FollowAction.REJECT)
    assert result["action"] == "request_rejected"

    assert db_session.query(Follow).count() == 0
    assert db_session.query(FollowRequest).one().status == "REJECTED"
    # The rejected row still stands between the pair, and status says so
    assert get_follow_status(db_session, alice.id, bob.id)["status"] == FollowRelation.REQUEST_SENT
    assert get_follow_status(db_session, bob.id, alice.id)["status"] == FollowRelation.REQUEST_RECEIVED
    assert [n.type for n in get_user_notifications(db_session, alice.id)["notifications"]] == ["FOLLOW_REJECTED"]

    with pytest.raises(ConflictError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)


def test_duplicate_follow_and_unfollow(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)
    with pytest.raises(ConflictError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)

    perform_follow_action(db_session, bob, alice.id, FollowAction.ACCEPT)
    with pytest.raises(ConflictError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)

    result = perform_follow_action(db_session, alice, bob.id, FollowAction.UNFOLLOW)
    assert result["action"] == "unfollowed"
    assert db_session.query(Follow).count() == 0
    assert get_follow_status(db_session, alice.id, bob.id)["status"] == FollowRelation.REQUEST_SENT
    with pytest.raises(ConflictError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)

    with pytest.raises(StateInvalidError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.UNFOLLOW)


def test_self_and_unknown_targets(db_session, make_user):
    alice = make_user("alice")

    with pytest.raises(ValidationFailed):
        perform_follow_action(db_session, alice, alice.id, FollowAction.FOLLOW)
    with pytest.raises(NotFoundError):
        perform_follow_action(db_session, alice, "ghost", FollowAction.FOLLOW)


def test_follow_request_listing(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")

    perform_follow_action(db_session, alice, carol.id, FollowAction.FOLLOW)
    perform_follow_action(db_session, bob, carol.id, FollowAction.FOLLOW)
    perform_follow_action(db_session, carol, bob.id, FollowAction.REJECT)

    received = get_follow_requests(db_session, carol.id, FollowRequestDirection.RECEIVED)
    assert received["total_requests"] == 1
    assert received["requests"][0].sender.id == alice.id

    sent = get_follow_requests(db_session, bob.id, FollowRequestDirection.SENT)
    assert sent["total_requests"] == 1
    assert sent["requests"][0].status == "REJECTED"


def test_follow_endpoints(client: TestClient, make_user):
    alice = make_user("alice")
    bob = make_user("bob")

    response = client.post(
        FOLLOW_URL,
        json={"target_user_id": bob.id, "action": "follow"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["action"] == "follow_request_sent"
    assert body["follow_request"]["receiver_id"] == bob.id

    response = client.get(FOLLOW_URL, params={"target_user_id": bob.id}, headers=auth_headers(alice))
    assert response.json()["data"]["status"] == "request_sent"

    response = client.get(f"{FOLLOW_URL}/requests", params={"type": "received"}, headers=auth_headers(bob))
    assert response.status_code == 200
    assert response.json()["data"]["requests"][0]["sender"]["id"] == alice.id
    assert response.json()["data"]["pagination"]["limit"] == settings.FOLLOW_REQUESTS_PAGE_SIZE

    response = client.post(
        FOLLOW_URL,
        json={"target_user_id": alice.id, "action": "accept"},
        headers=auth_headers(bob),
    )
    assert response.json()["action"] == "request_accepted"

    response = client.get(FOLLOW_URL, params={"target_user_id": bob.id}, headers=auth_headers(alice))
    data = response.json()["data"]
    assert data["status"] == "following"
    assert data["follower_count"] == 1


def test_follow_endpoint_errors(client: TestClient, make_user):
    alice = make_user("alice")

    response = client.post(FOLLOW_URL, json={"target_user_id": alice.id, "action": "follow"})
    assert response.status_code == 401

    response = client.post(
        FOLLOW_URL,
        json={"target_user_id": alice.id, "action": "follow"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Cannot follow yourself", "error": "validation"}

    response = client.post(
        FOLLOW_URL,
        json={"target_user_id": "ghost", "action": "follow"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 404

    response = client.post(
        FOLLOW_URL,
        json={"target_user_id": "ghost", "action": "poke"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation"


def test_concurrent_duplicate_request_is_reported_as_conflict(db_session, session_factory, make_user, monkeypatch):
    alice = make_user("alice")
    bob = make_user("bob")

    def lookup_then_lose_race(db, sender_id, receiver_id):
        # A second request from alice commits right after this lookup ran
        other = session_factory()
        other.add(FollowRequest(id="winner", sender_id=sender_id, receiver_id=receiver_id, status="PENDING"))
        other.commit()
        other.close()
        return None

    monkeypatch.setattr(follow_service, "get_follow_request", lookup_then_lose_race)

    with pytest.raises(ConflictError):
        perform_follow_action(db_session, alice, bob.id, FollowAction.FOLLOW)

    assert [r.id for r in db_session.query(FollowRequest).all()] == ["winner"]
    assert db_session.query(Notification).count() == 0
