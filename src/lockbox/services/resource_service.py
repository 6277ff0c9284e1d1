"""Resource creation and read-back service layer.

Creation is all-or-nothing: the resource row, its permission rows and its
secret rows are written, re-validated and announced to the creation
listeners inside a single transaction. Any rejected check, engine fault or
listener failure rolls every write back. Reading a resource joins it with
the context of the requesting user (their permission, secret and
favorite, plus creator and modifier identities).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lockbox.database import transactional
from lockbox.errors import NotFoundFailure, StorageFailure, ValidationFailure
from lockbox.models.favorite import Favorite
from lockbox.models.permission import ARO_USER, Permission
from lockbox.models.resource import Resource
from lockbox.models.secret import Secret
from lockbox.models.user import User
from lockbox.services.events import RESOURCE_CREATED, EventDispatcher, ResourceCreatedEvent
from lockbox.services.identity import AccessControl
from lockbox.services.resource_builder import CandidateResource, build_resource
from lockbox.services.resource_validator import validate_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceView:
    """A resource as seen by one user."""

    resource: Resource
    creator: User
    modifier: User
    permission: Permission
    secret: Secret | None
    favorite: Favorite | None


class ResourceService:
    """Service for creating resources and reading them back.

    Args:
        db: Async SQLAlchemy session for database operations.
        dispatcher: Event dispatcher notified of every created resource.
            A dispatcher with no listeners is used when omitted.
        require_armored_secrets: Reject secret data that is not an
            ASCII-armored OpenPGP message.
    """

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: EventDispatcher | None = None,
        *,
        require_armored_secrets: bool = True,
    ) -> None:
        self.db = db
        self.dispatcher = dispatcher or EventDispatcher()
        self.require_armored_secrets = require_armored_secrets

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_resource(
        self,
        data: Mapping[str, Any],
        access_control: AccessControl,
    ) -> Resource:
        """Create a resource owned by the acting user.

        Steps, each gated on the previous one:

        1. Build and validate the candidate (no storage access).
        2. Write the resource, its permissions and its secrets.
        3. Re-validate the written rows.
        4. Dispatch :data:`RESOURCE_CREATED` to the listeners.
        5. Commit, unless a listener returned errors.

        Args:
            data: The normalized creation request.
            access_control: Identity of the acting user.

        Returns:
            The committed Resource with its permissions and secrets loaded.

        Raises:
            ValidationFailure: If the request, the written rows or a
                listener reported errors. Nothing is persisted.
            StorageFailure: If the database rejected the writes.
            NotificationFailure: If a listener raised.
        """
        user_id = access_control.user_id
        result = build_resource(
            data,
            user_id,
            require_armored_secrets=self.require_armored_secrets,
        )
        if not result.ok:
            raise ValidationFailure(result.errors)

        try:
            async with transactional(self.db):
                resource = await self._save(result.candidate)

                errors = validate_resource(
                    resource,
                    user_id,
                    require_armored_secrets=self.require_armored_secrets,
                )
                if errors:
                    logger.warning("Resource rows for user %s failed validation: %s", user_id, errors)
                    raise ValidationFailure(errors)

                event = ResourceCreatedEvent(
                    resource=resource,
                    access_control=access_control,
                    data=data,
                    session=self.db,
                )
                errors = await self.dispatcher.dispatch(RESOURCE_CREATED, event)
                if errors:
                    raise ValidationFailure(errors)
        except SQLAlchemyError as exc:
            logger.error("Could not save resource for user %s", user_id, exc_info=True)
            raise StorageFailure() from exc

        logger.info("User %s created resource %s", user_id, resource.id)
        return resource

    async def _save(self, candidate: CandidateResource) -> Resource:
        """Add the resource and its collections to the session and flush them."""
        resource = Resource(
            name=candidate.name,
            username=candidate.username,
            uri=candidate.uri,
            description=candidate.description,
            created_by=candidate.created_by,
            modified_by=candidate.modified_by,
            permissions=[
                Permission(
                    aro=p.aro,
                    aro_foreign_key=p.aro_foreign_key,
                    aco=p.aco,
                    type=p.type,
                )
                for p in candidate.permissions
            ],
            secrets=[
                Secret(user_id=s.user_id, data=s.data)
                for s in candidate.secrets or ()
            ],
        )
        self.db.add(resource)
        await self.db.flush()
        return resource

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_resource_view(self, user_id: str, resource_id: str) -> ResourceView:
        """Get a resource with the requesting user's context.

        Args:
            user_id: UUID of the requesting user.
            resource_id: UUID of the resource.

        Returns:
            The ResourceView for ``user_id``.

        Raises:
            NotFoundFailure: If the resource does not exist, is deleted, or
                ``user_id`` holds no permission on it.
        """
        query = (
            select(Resource, Permission, Secret, Favorite)
            .join(
                Permission,
                and_(
                    Permission.aco_foreign_key == Resource.id,
                    Permission.aro == ARO_USER,
                    Permission.aro_foreign_key == user_id,
                ),
            )
            .outerjoin(
                Secret,
                and_(Secret.resource_id == Resource.id, Secret.user_id == user_id),
            )
            .outerjoin(
                Favorite,
                and_(Favorite.foreign_key == Resource.id, Favorite.user_id == user_id),
            )
            .where(Resource.id == resource_id, Resource.deleted.is_(False))
            .options(selectinload(Resource.creator), selectinload(Resource.modifier))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        row = result.first()
        if row is None:
            raise NotFoundFailure()

        resource, permission, secret, favorite = row
        return ResourceView(
            resource=resource,
            creator=resource.creator,
            modifier=resource.modifier,
            permission=permission,
            secret=secret,
            favorite=favorite,
        )
