"""
Ownership check shared by the interview, relay, resume and export services.
"""
from typing import TypeVar

from chessview.app.core.exceptions import ForbiddenError, NotFoundError
from chessview.app.models.user import User

T = TypeVar("T")


def require_owner(record: T | None, actor: User, kind: str) -> T:
    """Return `record` if it exists and belongs to `actor`.

    Raises NotFoundError for a missing record and ForbiddenError for another user's record.
    """
    if record is None:
        raise NotFoundError(f"{kind.capitalize()} not found")
    if record.user_id != actor.id:
        raise ForbiddenError(f"Not authorized to access this {kind}")
    return record
