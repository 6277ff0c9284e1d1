"""Resolve the acting principal into an access-control context.

Authentication itself happens upstream; by the time a request reaches this
service it carries the authenticated user's id. The context built here is
passed explicitly to every step that needs to know who is acting.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.models.user import User


@dataclass(frozen=True)
class AccessControl:
    """Read-only identity of the user performing a request."""

    user_id: str
    username: str
    role: str


async def resolve_access_control(db: AsyncSession, user_id: str) -> AccessControl | None:
    """Return the access-control context for an active user, or None."""
    result = await db.execute(
        select(User).where(User.id == user_id, User.active.is_(True))
    )
    user = result.scalar_one_or_none()
    if user is None:
        return None
    return AccessControl(user_id=str(user.id), username=user.username, role=user.role)
