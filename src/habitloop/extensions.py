"""Database wiring for the Flask app."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import SessionFactory, bootstrap_database

_EXTENSION_KEY = "habitloop.db"


def init_db(app: Flask) -> None:
    """Create the engine and schema, and attach a session factory to ``app``."""

    config: BaseConfig = app.config["HABITLOOP_CONFIG"]
    engine, factory = bootstrap_database(config)
    app.extensions[_EXTENSION_KEY] = {"engine": engine, "session_factory": factory}


def get_session_factory() -> SessionFactory:
    """Return the session factory bound to the current app."""

    state = current_app.extensions.get(_EXTENSION_KEY)
    if state is None:
        raise RuntimeError("Database not initialized; call init_db(app) first")
    return state["session_factory"]
