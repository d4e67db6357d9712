"""Poll-based group chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from ..errors import InvalidInputError
from ..models.group import GroupMessage
from .groups import require_membership

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.group import GroupRepository

LATEST_LIMIT = 50
POLL_LIMIT = 100
MAX_MESSAGE_LENGTH = 2000


def _message_dict(message: GroupMessage, user) -> dict[str, Any]:
    return {
        "id": message.id,
        "group_id": message.group_id,
        "text": message.text,
        "created_at": message.created_at.isoformat(),
        "user": user.public_dict(),
    }


def list_messages(
    repo: "GroupRepository", *, user_id: int, group_id: int, cursor: Optional[int] = None
) -> list[dict[str, Any]]:
    """Latest messages, or only those newer than ``cursor`` when polling."""

    require_membership(repo, group_id, user_id)
    limit = POLL_LIMIT if cursor is not None else LATEST_LIMIT
    rows = repo.list_messages(group_id, after_id=cursor, limit=limit)
    return [_message_dict(message, user) for message, user in rows]


def post_message(
    repo: "GroupRepository", *, user_id: int, group_id: int, text: str
) -> dict[str, Any]:
    require_membership(repo, group_id, user_id)
    body = (text or "").strip()
    if not body:
        raise InvalidInputError("Empty message")
    if len(body) > MAX_MESSAGE_LENGTH:
        raise InvalidInputError(f"Messages are limited to {MAX_MESSAGE_LENGTH} characters")
    message = repo.add_message(GroupMessage(group_id=group_id, user_id=user_id, text=body))
    author = next(user for member, user in repo.list_members(group_id) if user.id == user_id)
    return _message_dict(message, author)


__all__ = ["list_messages", "post_message"]
