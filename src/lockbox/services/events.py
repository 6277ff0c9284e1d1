"""Synchronous, in-transaction event dispatch for resource lifecycle events.

Listeners are awaited one after another in registration order while the
creating transaction is still open. A listener accepts the event by
returning an empty mapping (or None) and vetoes it by returning field path
-> error codes; the dispatcher merges every listener's errors and leaves
the commit/rollback decision to the caller. Listeners share the caller's
session and must never commit or roll it back.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from lockbox.errors import NotificationFailure, ValidationErrors, merge_errors
from lockbox.models.resource import Resource
from lockbox.services.identity import AccessControl

logger = logging.getLogger(__name__)

RESOURCE_CREATED = "resources.add.success"


@dataclass(frozen=True)
class ResourceCreatedEvent:
    """Payload handed to listeners after a resource was written.

    Attributes:
        resource: The flushed resource with its permissions and secrets.
        access_control: Identity of the creating user.
        data: The normalized request payload, as received.
        session: The open session holding the uncommitted writes.
    """

    resource: Resource
    access_control: AccessControl
    data: Mapping[str, Any]
    session: AsyncSession


Listener = Callable[[Any], Awaitable[ValidationErrors | None]]


class EventDispatcher:
    """Registry of listeners keyed by event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event_name: str, listener: Listener) -> None:
        """Register ``listener`` to run after those already registered for ``event_name``."""
        self._listeners.setdefault(event_name, []).append(listener)

    def listeners(self, event_name: str) -> list[Listener]:
        return list(self._listeners.get(event_name, []))

    async def dispatch(self, event_name: str, event: Any) -> ValidationErrors:
        """Run every listener of ``event_name`` and return their merged errors.

        Raises:
            NotificationFailure: If a listener raises. Listeners after it
                are not run.
        """
        errors: ValidationErrors = {}
        for listener in self.listeners(event_name):
            name = getattr(listener, "__qualname__", repr(listener))
            try:
                result = await listener(event)
            except Exception as exc:
                logger.error("Listener %s failed on %s", name, event_name, exc_info=True)
                raise NotificationFailure(name) from exc
            if result:
                logger.warning("Listener %s rejected %s: %s", name, event_name, result)
                merge_errors(errors, result)
        return errors
