"""Resource endpoints returning JSON:API responses.

Provides resource creation and single-resource read-back. Creation accepts
the request body in the current shape or, with ``api-version=v1``, in the
legacy ``{Resource: {...}, Secret: [...]}`` shape. Both endpoints return
the resource as seen by the requesting user, with its creator, modifier,
permission, secret and favorite as included resources.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from lockbox.api.deps import get_access_control, get_resource_service
from lockbox.config import get_settings
from lockbox.errors import NotFoundFailure
from lockbox.models.favorite import Favorite
from lockbox.models.permission import Permission
from lockbox.models.secret import Secret
from lockbox.models.user import User
from lockbox.schemas.jsonapi import JSONAPIResource, JSONAPISingleResponse
from lockbox.services.identity import AccessControl
from lockbox.services.request_normalizer import SUPPORTED_API_VERSIONS, normalize_request
from lockbox.services.resource_service import ResourceService, ResourceView

router = APIRouter()

ADD_SUCCESS_MESSAGE = "The resource has been added successfully."


# ---------------------------------------------------------------------------
# Attribute mapping helpers
# ---------------------------------------------------------------------------


def _timestamps(obj: Any) -> dict:
    return {
        "created_at": obj.created_at.isoformat(),
        "updated_at": obj.updated_at.isoformat(),
    }


def _user_resource(user: User) -> JSONAPIResource:
    """Build a JSON:API resource object from a User."""
    return JSONAPIResource(
        type="users",
        id=str(user.id),
        attributes={
            "username": user.username,
            "first_name": user.first_name,
            "last_name": user.last_name,
        },
    )


def _permission_resource(permission: Permission) -> JSONAPIResource:
    """Build a JSON:API resource object from a Permission."""
    return JSONAPIResource(
        type="permissions",
        id=str(permission.id),
        attributes={
            "aco": permission.aco,
            "aco_foreign_key": str(permission.aco_foreign_key),
            "aro": permission.aro,
            "aro_foreign_key": str(permission.aro_foreign_key),
            "type": permission.type,
            **_timestamps(permission),
        },
    )


def _secret_resource(secret: Secret) -> JSONAPIResource:
    """Build a JSON:API resource object from a Secret."""
    return JSONAPIResource(
        type="secrets",
        id=str(secret.id),
        attributes={
            "resource_id": str(secret.resource_id),
            "user_id": str(secret.user_id),
            "data": secret.data,
            **_timestamps(secret),
        },
    )


def _favorite_resource(favorite: Favorite) -> JSONAPIResource:
    """Build a JSON:API resource object from a Favorite."""
    return JSONAPIResource(
        type="favorites",
        id=str(favorite.id),
        attributes={
            "user_id": str(favorite.user_id),
            "foreign_model": favorite.foreign_model,
            "foreign_key": str(favorite.foreign_key),
            **_timestamps(favorite),
        },
    )


def _identifier(resource: JSONAPIResource | None) -> dict:
    if resource is None:
        return {"data": None}
    return {"data": {"type": resource.type, "id": resource.id}}


def _view_response(view: ResourceView, meta: dict | None = None) -> JSONAPISingleResponse:
    """Build a compound JSON:API document from a ResourceView."""
    resource = view.resource
    creator = _user_resource(view.creator)
    modifier = _user_resource(view.modifier)
    permission = _permission_resource(view.permission)
    secret = _secret_resource(view.secret) if view.secret is not None else None
    favorite = _favorite_resource(view.favorite) if view.favorite is not None else None

    included = [creator]
    if modifier.id != creator.id:
        included.append(modifier)
    included.extend(r for r in (permission, secret, favorite) if r is not None)

    data = JSONAPIResource(
        type="resources",
        id=str(resource.id),
        attributes={
            "name": resource.name,
            "username": resource.username,
            "uri": resource.uri,
            "description": resource.description,
            "deleted": resource.deleted,
            "created_by": str(resource.created_by),
            "modified_by": str(resource.modified_by),
            **_timestamps(resource),
        },
        relationships={
            "creator": _identifier(creator),
            "modifier": _identifier(modifier),
            "permission": _identifier(permission),
            "secret": _identifier(secret),
            "favorite": _identifier(favorite),
        },
    )
    return JSONAPISingleResponse(data=data, included=included, meta=meta)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("", status_code=201)
async def create_resource(
    body: dict[str, Any] = Body(...),
    api_version: str | None = Query(default=None, alias="api-version"),
    access_control: AccessControl = Depends(get_access_control),
    service: ResourceService = Depends(get_resource_service),
) -> JSONAPISingleResponse:
    """Create a resource owned by the requesting user.

    The resource, its owner permission and its secrets are saved in one
    transaction, then read back in the requesting user's context.

    ``api-version`` selects the body shape: ``v2`` (the default) or the
    legacy ``v1``. Any other value is rejected with 400 before the body is
    read, rather than being parsed as the legacy shape.
    """
    version = api_version or get_settings().default_api_version
    if version not in SUPPORTED_API_VERSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported api-version: {version}")

    data = normalize_request(body, version)
    resource = await service.create_resource(data, access_control)

    # A NotFoundFailure here is a server fault: the creator always has access.
    view = await service.get_resource_view(access_control.user_id, resource.id)
    return _view_response(view, meta={"status": "success", "message": ADD_SUCCESS_MESSAGE})


@router.get("/{resource_id}")
async def get_resource(
    resource_id: UUID,
    access_control: AccessControl = Depends(get_access_control),
    service: ResourceService = Depends(get_resource_service),
) -> JSONAPISingleResponse:
    """Get a single resource in the requesting user's context."""
    try:
        view = await service.get_resource_view(access_control.user_id, str(resource_id))
    except NotFoundFailure as exc:
        raise HTTPException(status_code=404, detail="Resource not found") from exc

    return _view_response(view)
