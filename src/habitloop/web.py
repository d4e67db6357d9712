"""Request helpers shared by the blueprints."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Callable, TypeVar

from flask import current_app, request, session
from pydantic import BaseModel

from .config import BaseConfig
from .errors import AuthenticationRequired, InvalidInputError
from .extensions import get_session_factory
from .infra.repositories import SQLModelGroupRepository, SQLModelHabitRepository

FormT = TypeVar("FormT", bound=BaseModel)

SESSION_USER_KEY = "user_id"


def current_user_id() -> int:
    user_id = session.get(SESSION_USER_KEY)
    if user_id is None:
        raise AuthenticationRequired("Sign in to continue")
    return int(user_id)


def login_required(view: Callable) -> Callable:
    """Reject anonymous requests with 401 before the view runs."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user_id()
        return view(*args, **kwargs)

    return wrapper


def app_config() -> BaseConfig:
    return current_app.config["HABITLOOP_CONFIG"]


def today() -> date:
    """Calendar day for this request in the configured time zone."""

    return app_config().local_today()


def parse_form(model: type[FormT]) -> FormT:
    """Validate the JSON body against ``model``; errors become 400 responses."""

    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidInputError("Expected a JSON object")
    return model.model_validate(payload)


def int_arg(name: str, default: int, *, minimum: int = 1, maximum: int = 366) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be an integer") from exc
    if not minimum <= value <= maximum:
        raise InvalidInputError(f"{name} must be between {minimum} and {maximum}")
    return value


def habit_repo() -> SQLModelHabitRepository:
    return SQLModelHabitRepository(get_session_factory())


def group_repo() -> SQLModelGroupRepository:
    return SQLModelGroupRepository(get_session_factory())
