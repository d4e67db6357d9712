"""Tests for password hashing and user lookup."""

from __future__ import annotations

import pytest

from habitloop.errors import InvalidInputError
from habitloop.services import auth as auth_service


def test_create_user_hashes_password(session_factory):
    user = auth_service.create_user(
        username="  alice ", password="correct-horse", display_name="Alice",
        session_factory=session_factory,
    )

    assert user.id is not None
    assert user.username == "alice"
    assert user.password_hash != "correct-horse"
    assert user.password_hash.startswith("$argon2")


def test_duplicate_username_is_rejected(session_factory):
    auth_service.create_user(username="alice", password="correct-horse", session_factory=session_factory)

    with pytest.raises(InvalidInputError):
        auth_service.create_user(username="alice", password="another-pass", session_factory=session_factory)


def test_short_password_is_rejected(session_factory):
    with pytest.raises(InvalidInputError):
        auth_service.create_user(username="bob", password="short", session_factory=session_factory)


def test_authenticate(session_factory):
    created = auth_service.create_user(
        username="alice", password="correct-horse", session_factory=session_factory
    )

    user = auth_service.authenticate(
        username="alice", password="correct-horse", session_factory=session_factory
    )

    assert user is not None
    assert user.id == created.id
    assert user.last_login is not None


@pytest.mark.parametrize(
    "username, password",
    [("alice", "wrong-password"), ("nobody", "correct-horse"), ("  ", "correct-horse")],
)
def test_authenticate_failures(session_factory, username, password):
    auth_service.create_user(username="alice", password="correct-horse", session_factory=session_factory)

    assert (
        auth_service.authenticate(username=username, password=password, session_factory=session_factory)
        is None
    )


def test_user_label_falls_back_to_username(session_factory):
    user = auth_service.create_user(username="carol", password="correct-horse", session_factory=session_factory)

    assert user.display_name is None
    assert user.public_dict() == {"id": user.id, "username": "carol", "name": "carol"}
    assert auth_service.get_user_by_username("carol", session_factory).id == user.id
    assert auth_service.get_user(user.id, session_factory).username == "carol"
