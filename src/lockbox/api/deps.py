"""Shared FastAPI dependencies for database sessions, identity, and resource services."""

from collections.abc import AsyncGenerator
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.config import get_settings
from lockbox.services.events import EventDispatcher
from lockbox.services.identity import AccessControl, resolve_access_control
from lockbox.services.resource_service import ResourceService


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session from the app-level session factory.

    The session factory is stored on ``request.app.state.session_factory``
    by the application lifespan. The session auto-closes when the request ends.
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_event_dispatcher(request: Request) -> EventDispatcher:
    """Return the EventDispatcher stored on app state.

    The dispatcher and its listeners are set up during the application
    lifespan and stored on ``request.app.state.event_dispatcher``.
    """
    return request.app.state.event_dispatcher


async def get_access_control(
    x_user_id: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> AccessControl:
    """Resolve the authenticated user from the ``X-User-Id`` header.

    The header is set by the authenticating gateway in front of this
    service. A missing, malformed, unknown or inactive user is rejected.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication is required.")
    try:
        user_id = str(UUID(x_user_id))
    except ValueError as exc:
        raise HTTPException(status_code=401, detail="Authentication is required.") from exc

    access_control = await resolve_access_control(db, user_id)
    if access_control is None:
        raise HTTPException(status_code=401, detail="Authentication is required.")
    return access_control


async def get_resource_service(
    db: AsyncSession = Depends(get_db),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> ResourceService:
    """Provide a ResourceService with the current DB session and app dispatcher."""
    return ResourceService(
        db,
        dispatcher,
        require_armored_secrets=get_settings().require_armored_secrets,
    )
