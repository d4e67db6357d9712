"""Groups blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("groups", __name__, url_prefix="/groups")

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
