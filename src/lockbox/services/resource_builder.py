"""Build a validated, in-memory resource candidate from a creation request.

The builder decides which values are trusted: audit fields and the owner
permission always come from the acting user, the first secret is always
attributed to them, and only the fields listed on the request projections
are read from client data.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from lockbox.errors import ValidationErrors
from lockbox.models.permission import ACO_RESOURCE, ARO_USER, OWNER
from lockbox.schemas.resource import CreateResourceRequest
from lockbox.services.resource_validator import field_path, validate_resource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidatePermission:
    aro: str | None
    aro_foreign_key: str | None
    aco: str | None
    type: int | None


@dataclass(frozen=True)
class CandidateSecret:
    user_id: str | None
    data: str | None


@dataclass(frozen=True)
class CandidateResource:
    """A resource ready to be written, with its permissions and secrets.

    ``secrets`` is None when the request carried no secrets at all, so the
    validator can tell a missing collection from an empty one.
    """

    name: str | None
    username: str | None
    uri: str | None
    description: str | None
    created_by: str
    modified_by: str
    permissions: tuple[CandidatePermission, ...]
    secrets: tuple[CandidateSecret, ...] | None


@dataclass(frozen=True)
class BuildResult:
    """Outcome of :func:`build_resource`: a candidate or the errors found."""

    candidate: CandidateResource | None = None
    errors: ValidationErrors = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def owner_permission(user_id: str) -> dict[str, Any]:
    """Return the permission data granting ``user_id`` ownership of a new resource."""
    return {
        "aro": ARO_USER,
        "aro_foreign_key": user_id,
        "aco": ACO_RESOURCE,
        "type": OWNER,
    }


def _enforce_data(request: Mapping[str, Any], acting_user_id: str) -> dict[str, Any]:
    data = dict(request)
    data["created_by"] = acting_user_id
    data["modified_by"] = acting_user_id
    # Client supplied permissions are never trusted on creation
    data["permissions"] = [owner_permission(acting_user_id)]

    secrets = data.get("secrets")
    if isinstance(secrets, list) and secrets and isinstance(secrets[0], Mapping):
        secrets = list(secrets)
        secrets[0] = {**secrets[0], "user_id": acting_user_id}
        data["secrets"] = secrets
    return data


def _project(fields: CreateResourceRequest, acting_user_id: str) -> CandidateResource:
    return CandidateResource(
        name=fields.name,
        username=fields.username,
        uri=fields.uri,
        description=fields.description,
        created_by=fields.created_by or acting_user_id,
        modified_by=fields.modified_by or acting_user_id,
        permissions=tuple(
            CandidatePermission(
                aro=p.aro,
                aro_foreign_key=p.aro_foreign_key,
                aco=p.aco,
                type=p.type,
            )
            for p in fields.permissions or ()
        ),
        secrets=None
        if fields.secrets is None
        else tuple(CandidateSecret(user_id=s.user_id, data=s.data) for s in fields.secrets),
    )


def build_resource(
    request: Mapping[str, Any],
    acting_user_id: str,
    *,
    require_armored_secrets: bool = True,
) -> BuildResult:
    """Build and validate a resource candidate for ``acting_user_id``.

    Args:
        request: The normalized creation request.
        acting_user_id: UUID of the user creating the resource.
        require_armored_secrets: Forwarded to the validator.

    Returns:
        A BuildResult holding the candidate, or the validation errors when
        the request cannot produce a valid resource.
    """
    data = _enforce_data(request, acting_user_id)

    try:
        fields = CreateResourceRequest.model_validate(data)
    except ValidationError as exc:
        errors: ValidationErrors = {}
        for error in exc.errors():
            errors.setdefault(field_path(error["loc"]), []).append(error["type"])
        logger.info("Resource request for user %s has malformed fields: %s", acting_user_id, errors)
        return BuildResult(errors=errors)

    candidate = _project(fields, acting_user_id)
    errors = validate_resource(
        candidate,
        acting_user_id,
        require_armored_secrets=require_armored_secrets,
    )
    if errors:
        logger.info("Resource request for user %s failed validation: %s", acting_user_id, errors)
        return BuildResult(errors=errors)
    return BuildResult(candidate=candidate)
