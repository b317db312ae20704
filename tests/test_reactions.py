"""Reaction toggling and grouping."""

from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from conftest import auth_headers
from guildhall.core.content import ContentType
from guildhall.core.exceptions import ConflictError, ValidationFailed
from guildhall.modules.reactions.models.reaction import Reaction
from guildhall.modules.reactions.schemas.reaction import ReactionAction
from guildhall.modules.reactions.services import reaction as reaction_service
from guildhall.modules.reactions.services.reaction import get_reactions, toggle_reaction


def test_toggle_same_emoji_twice_removes_reaction(db_session, make_user):
    alice = make_user("alice")

    action, reaction = toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "👍")
    assert action == ReactionAction.CREATED
    assert reaction.emoji == "👍"

    action, reaction = toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "👍")
    assert action == ReactionAction.REMOVED
    assert reaction is None
    assert get_reactions(db_session, "n1", ContentType.NEWS_POST)["total_reactions"] == 0

    action, reaction = toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "❤️")
    assert action == ReactionAction.CREATED
    summary = get_reactions(db_session, "n1", ContentType.NEWS_POST, viewer_id=alice.id)
    assert summary["total_reactions"] == 1
    assert summary["user_reaction"] == "❤️"


def test_toggle_different_emoji_replaces_reaction(db_session, make_user):
    alice = make_user("alice")

    toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "👍")
    action, reaction = toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "🔥")

    assert action == ReactionAction.UPDATED
    assert reaction.emoji == "🔥"
    rows = db_session.query(Reaction).filter(Reaction.user_id == alice.id).all()
    assert [r.emoji for r in rows] == ["🔥"]


def test_reactions_are_scoped_to_content_type(db_session, make_user):
    alice = make_user("alice")

    toggle_reaction(db_session, alice.id, "42", ContentType.NEWS_POST, "👍")
    toggle_reaction(db_session, alice.id, "42", ContentType.FORUM_THREAD, "👍")

    assert get_reactions(db_session, "42", ContentType.NEWS_POST)["total_reactions"] == 1
    assert get_reactions(db_session, "42", ContentType.FORUM_THREAD)["total_reactions"] == 1


def test_empty_emoji_is_rejected(db_session, make_user):
    alice = make_user("alice")

    with pytest.raises(ValidationFailed):
        toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "")


def test_reactions_grouped_by_emoji_newest_first(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    carol = make_user("carol")

    for index, (user, emoji) in enumerate([(alice, "👍"), (bob, "👍"), (carol, "😂")]):
        db_session.add(Reaction(
            id=f"r{index}",
            content_id="e1",
            content_type=ContentType.EVENT.value,
            user_id=user.id,
            emoji=emoji,
            created_at=datetime(2024, 1, 1, 12, index),
        ))
    db_session.commit()

    summary = get_reactions(db_session, "e1", ContentType.EVENT, viewer_id=bob.id)

    assert summary["total_reactions"] == 3
    assert summary["user_reaction"] == "👍"
    thumbs = summary["reactions"]["👍"]
    assert thumbs.count == 2
    assert [u.id for u in thumbs.users] == [bob.id, alice.id]
    assert summary["reactions"]["😂"].count == 1


def test_toggle_reaction_endpoint(client: TestClient, make_user):
    alice = make_user("alice")
    payload = {"content_id": "n1", "content_type": "NEWS_POST", "emoji": "👍"}

    response = client.post("/api/v1/reactions", json=payload, headers=auth_headers(alice))
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["action"] == "created"
    assert body["reaction"]["emoji"] == "👍"

    response = client.get(
        "/api/v1/reactions",
        params={"content_id": "n1", "content_type": "NEWS_POST"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_reactions"] == 1
    assert data["user_reaction"] == "👍"
    assert data["reactions"]["👍"]["users"][0]["id"] == alice.id

    response = client.post("/api/v1/reactions", json=payload, headers=auth_headers(alice))
    assert response.json()["action"] == "removed"
    assert response.json()["reaction"] is None


def test_toggle_reaction_requires_auth(client: TestClient):
    response = client.post(
        "/api/v1/reactions",
        json={"content_id": "n1", "content_type": "NEWS_POST", "emoji": "👍"},
    )
    assert response.status_code == 401


def test_unknown_content_type_is_a_validation_error(client: TestClient, make_user):
    alice = make_user("alice")

    response = client.post(
        "/api/v1/reactions",
        json={"content_id": "n1", "content_type": "BLOG", "emoji": "👍"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "validation"


def test_concurrent_first_reaction_is_reported_as_conflict(db_session, session_factory, make_user, monkeypatch):
    alice = make_user("alice")

    def lookup_then_lose_race(db, user_id, content_id, content_type, lock=False):
        # Another request commits alice's reaction right after this lookup ran
        other = session_factory()
        other.add(Reaction(id="winner", content_id=content_id, content_type=content_type, user_id=user_id, emoji="🔥"))
        other.commit()
        other.close()
        return None

    monkeypatch.setattr(reaction_service, "get_reaction", lookup_then_lose_race)

    with pytest.raises(ConflictError):
        toggle_reaction(db_session, alice.id, "n1", ContentType.NEWS_POST, "👍")

    rows = db_session.query(Reaction).filter(Reaction.user_id == alice.id).all()
    assert [(r.id, r.emoji) for r in rows] == [("winner", "🔥")]
