"""Sign-up and sign-in routes backed by the Flask session cookie."""

from __future__ import annotations

from typing import Optional

from flask import jsonify, session
from pydantic import BaseModel, ConfigDict, Field

from ...errors import AuthenticationRequired, NotFoundError
from ...extensions import get_session_factory
from ...services import auth as auth_service
from ...web import SESSION_USER_KEY, current_user_id, parse_form
from . import bp


class CredentialsForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=256)
    display_name: Optional[str] = Field(default=None, max_length=80)


@bp.post("/register")
def register():
    form = parse_form(CredentialsForm)
    user = auth_service.create_user(
        username=form.username,
        password=form.password,
        display_name=form.display_name,
        session_factory=get_session_factory(),
    )
    session.clear()
    session[SESSION_USER_KEY] = user.id
    return jsonify(user.public_dict()), 201


@bp.post("/login")
def login():
    form = parse_form(CredentialsForm)
    user = auth_service.authenticate(
        username=form.username, password=form.password, session_factory=get_session_factory()
    )
    if user is None:
        raise AuthenticationRequired("Invalid username or password")
    session.clear()
    session[SESSION_USER_KEY] = user.id
    return jsonify(user.public_dict())


@bp.post("/logout")
def logout():
    session.clear()
    return jsonify({"success": True})


@bp.get("/me")
def me():
    user = auth_service.get_user(current_user_id(), get_session_factory())
    if user is None:
        session.clear()
        raise NotFoundError("User not found")
    return jsonify(user.public_dict())
