"""Action log recording and querying service.

Action log rows are written through the caller's session so they share the
caller's transaction: a rolled back action leaves no trace in the log.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.errors import ValidationErrors
from lockbox.models.action_log import ActionLog
from lockbox.services.events import ResourceCreatedEvent

logger = logging.getLogger(__name__)

RESOURCE_ADD_ACTION = "resources.add"


class ActionLogService:
    """Service for logging and querying user action records.

    Args:
        db: Async SQLAlchemy session for database operations.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def log_action(
        self,
        user_id: str,
        action: str,
        resource_id: str | None = None,
        details: dict | None = None,
    ) -> ActionLog:
        """Add an action log record to the current transaction.

        Args:
            user_id: UUID of the user performing the action.
            action: Short action classifier (max 50 chars), e.g.
                "resources.add".
            resource_id: UUID of the resource acted upon, if any.
            details: Optional structured data for the action.

        Returns:
            The flushed ActionLog record.
        """
        entry = ActionLog(
            user_id=user_id,
            action=action,
            resource_id=resource_id,
            details=details,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def list_actions(
        self,
        user_id: str,
        limit: int = 50,
        action: str | None = None,
    ) -> list[ActionLog]:
        """Query action logs for a user, ordered by newest first.

        Args:
            user_id: UUID of the user whose actions to retrieve.
            limit: Maximum number of records to return (default 50).
            action: Optional filter to return only this action.

        Returns:
            List of ActionLog records, newest first.
        """
        query = select(ActionLog).where(ActionLog.user_id == user_id)
        if action is not None:
            query = query.where(ActionLog.action == action)
        query = query.order_by(ActionLog.created_at.desc()).limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())


async def record_resource_created(event: ResourceCreatedEvent) -> ValidationErrors:
    """Creation listener writing a ``resources.add`` action log entry."""
    service = ActionLogService(event.session)
    await service.log_action(
        user_id=event.access_control.user_id,
        action=RESOURCE_ADD_ACTION,
        resource_id=event.resource.id,
        details={"name": event.resource.name, "secrets": len(event.resource.secrets)},
    )
    logger.debug("Logged %s for resource %s", RESOURCE_ADD_ACTION, event.resource.id)
    return {}
