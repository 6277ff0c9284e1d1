"""Tests for transactional resource creation and read-back."""

import pytest
from conftest import ARMORED, count_rows
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

import lockbox.services.resource_service as resource_service_module
from lockbox.errors import NotFoundFailure, NotificationFailure, StorageFailure, ValidationFailure
from lockbox.models import ActionLog, Favorite, Permission, Resource, Secret
from lockbox.models.permission import OWNER
from lockbox.services.action_log_service import ActionLogService, record_resource_created
from lockbox.services.events import RESOURCE_CREATED, EventDispatcher
from lockbox.services.identity import resolve_access_control
from lockbox.services.resource_service import ResourceService


def _request(**overrides):
    data = {
        "name": "Mail server",
        "username": "root",
        "uri": "https://mail.example.com",
        "description": "Primary SMTP relay",
        "secrets": [{"data": ARMORED}],
    }
    data.update(overrides)
    return data


async def _assert_nothing_persisted(session_factory):
    for model in (Resource, Permission, Secret, ActionLog):
        assert await count_rows(session_factory, model) == 0


# ---------------------------------------------------------------------------
# Successful creation
# ---------------------------------------------------------------------------


async def test_create_persists_resource_permission_and_secret(session_factory, ada_access):
    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(_request(), ada_access)

    assert resource.id
    assert await count_rows(session_factory, Resource) == 1
    assert await count_rows(session_factory, Permission) == 1
    assert await count_rows(session_factory, Secret) == 1


async def test_owner_permission_is_assigned_to_actor(session_factory, ada_access, users):
    hostile = [{"aro": "User", "aro_foreign_key": users["betty"].id, "aco": "Resource", "type": OWNER}]

    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(
            _request(permissions=hostile), ada_access
        )

    async with session_factory() as session:
        result = await session.execute(
            select(Permission).where(Permission.aco_foreign_key == resource.id)
        )
        permissions = list(result.scalars().all())

    assert len(permissions) == 1
    assert permissions[0].type == OWNER
    assert permissions[0].aro_foreign_key == ada_access.user_id


async def test_first_secret_belongs_to_actor(session_factory, ada_access, users):
    secrets = [{"user_id": users["betty"].id, "data": ARMORED}]

    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(_request(secrets=secrets), ada_access)

    async with session_factory() as session:
        result = await session.execute(select(Secret).where(Secret.resource_id == resource.id))
        stored = result.scalar_one()

    assert stored.user_id == ada_access.user_id


async def test_extraneous_fields_are_not_persisted(session_factory, ada_access):
    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(
            _request(isAdmin=True, deleted=True, id="not-a-uuid"), ada_access
        )

    assert resource.deleted is False
    assert resource.id != "not-a-uuid"
    assert not hasattr(resource, "isAdmin")


# ---------------------------------------------------------------------------
# Rollback at every checkpoint
# ---------------------------------------------------------------------------


async def test_missing_secrets_are_rejected_without_writes(session_factory, ada_access):
    request = _request()
    del request["secrets"]

    async with session_factory() as session:
        with pytest.raises(ValidationFailure) as exc_info:
            await ResourceService(session).create_resource(request, ada_access)

    assert exc_info.value.errors == {"secrets": ["_required"]}
    await _assert_nothing_persisted(session_factory)


async def test_empty_secrets_are_rejected_without_writes(session_factory, ada_access):
    async with session_factory() as session:
        with pytest.raises(ValidationFailure) as exc_info:
            await ResourceService(session).create_resource(_request(secrets=[]), ada_access)

    assert "secrets" in exc_info.value.errors
    await _assert_nothing_persisted(session_factory)


async def test_failed_post_save_check_rolls_back(session_factory, ada_access, monkeypatch):
    monkeypatch.setattr(
        resource_service_module,
        "validate_resource",
        lambda resource, user_id, **kwargs: {"secrets": ["hasAtLeast"]},
    )

    async with session_factory() as session:
        with pytest.raises(ValidationFailure) as exc_info:
            await ResourceService(session).create_resource(_request(), ada_access)

    assert exc_info.value.errors == {"secrets": ["hasAtLeast"]}
    await _assert_nothing_persisted(session_factory)


async def test_listener_veto_rolls_back_every_write(session_factory, ada_access):
    async def veto(event):
        return {"name": ["reserved"]}

    dispatcher = EventDispatcher()
    dispatcher.subscribe(RESOURCE_CREATED, record_resource_created)
    dispatcher.subscribe(RESOURCE_CREATED, veto)

    async with session_factory() as session:
        with pytest.raises(ValidationFailure) as exc_info:
            await ResourceService(session, dispatcher).create_resource(_request(), ada_access)

    assert exc_info.value.errors == {"name": ["reserved"]}
    await _assert_nothing_persisted(session_factory)


async def test_raising_listener_rolls_back(session_factory, ada_access):
    async def broken(event):
        raise RuntimeError("notification backend unavailable")

    dispatcher = EventDispatcher()
    dispatcher.subscribe(RESOURCE_CREATED, broken)

    async with session_factory() as session:
        with pytest.raises(NotificationFailure):
            await ResourceService(session, dispatcher).create_resource(_request(), ada_access)

    await _assert_nothing_persisted(session_factory)


async def test_storage_fault_rolls_back(session_factory, ada_access, monkeypatch):
    save = ResourceService._save

    async def failing_save(self, candidate):
        # Rows reach the session before the engine gives up
        await save(self, candidate)
        raise OperationalError("INSERT INTO secrets", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ResourceService, "_save", failing_save)

    async with session_factory() as session:
        with pytest.raises(StorageFailure) as exc_info:
            await ResourceService(session).create_resource(_request(), ada_access)

    assert isinstance(exc_info.value.__cause__, OperationalError)
    await _assert_nothing_persisted(session_factory)


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------


async def test_listener_receives_persisted_resource_and_context(session_factory, ada_access):
    received = []

    async def capture(event):
        received.append(event)
        return {}

    dispatcher = EventDispatcher()
    dispatcher.subscribe(RESOURCE_CREATED, capture)
    request = _request(extra="kept for listeners")

    async with session_factory() as session:
        resource = await ResourceService(session, dispatcher).create_resource(request, ada_access)

    event = received[0]
    assert event.resource is resource
    assert event.access_control == ada_access
    assert event.data["extra"] == "kept for listeners"
    assert len(event.resource.secrets) == 1


async def test_listener_sees_writes_of_earlier_listener(session_factory, ada_access):
    async def expect_action_log(event):
        result = await event.session.execute(
            select(ActionLog).where(ActionLog.resource_id == event.resource.id)
        )
        return {} if result.scalar_one_or_none() is not None else {"action_log": ["missing"]}

    dispatcher = EventDispatcher()
    dispatcher.subscribe(RESOURCE_CREATED, record_resource_created)
    dispatcher.subscribe(RESOURCE_CREATED, expect_action_log)

    async with session_factory() as session:
        await ResourceService(session, dispatcher).create_resource(_request(), ada_access)

    assert await count_rows(session_factory, ActionLog) == 1


async def test_action_log_is_committed_with_resource(session_factory, ada_access):
    dispatcher = EventDispatcher()
    dispatcher.subscribe(RESOURCE_CREATED, record_resource_created)

    async with session_factory() as session:
        resource = await ResourceService(session, dispatcher).create_resource(_request(), ada_access)

    async with session_factory() as session:
        entries = await ActionLogService(session).list_actions(ada_access.user_id, action="resources.add")

    assert len(entries) == 1
    assert entries[0].resource_id == resource.id
    assert entries[0].details == {"name": "Mail server", "secrets": 1}


# ---------------------------------------------------------------------------
# Read-back
# ---------------------------------------------------------------------------


async def test_view_includes_actor_context(session_factory, ada_access, users):
    async with session_factory() as session:
        service = ResourceService(session)
        resource = await service.create_resource(_request(), ada_access)
        view = await service.get_resource_view(ada_access.user_id, resource.id)

    assert view.resource.id == resource.id
    assert view.creator.username == users["ada"].username
    assert view.modifier.username == users["ada"].username
    assert view.permission.type == OWNER
    assert view.permission.aro_foreign_key == ada_access.user_id
    assert view.secret.user_id == ada_access.user_id
    assert view.secret.data == ARMORED
    assert view.favorite is None


async def test_view_includes_favorite(session_factory, ada_access):
    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(_request(), ada_access)

    async with session_factory() as session:
        session.add(Favorite(user_id=ada_access.user_id, foreign_key=resource.id))
        await session.commit()

    async with session_factory() as session:
        view = await ResourceService(session).get_resource_view(ada_access.user_id, resource.id)

    assert view.favorite is not None
    assert view.favorite.foreign_key == resource.id


async def test_view_is_not_found_for_user_without_permission(session_factory, ada_access, users):
    async with session_factory() as session:
        resource = await ResourceService(session).create_resource(_request(), ada_access)

    async with session_factory() as session:
        with pytest.raises(NotFoundFailure):
            await ResourceService(session).get_resource_view(users["betty"].id, resource.id)


async def test_view_is_not_found_for_unknown_resource(session_factory, ada_access):
    async with session_factory() as session:
        with pytest.raises(NotFoundFailure):
            await ResourceService(session).get_resource_view(
                ada_access.user_id, "00000000-0000-4000-8000-000000000000"
            )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


async def test_resolve_access_control(session_factory, users):
    async with session_factory() as session:
        ada = await resolve_access_control(session, users["ada"].id)
        carl = await resolve_access_control(session, users["carl"].id)

    assert ada.username == "ada@lockbox.test"
    assert ada.role == "user"
    assert carl is None
