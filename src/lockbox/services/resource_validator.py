"""Business-rule validation for resources and their nested collections.

Validation never raises: every violated rule adds an error code under the
field path it concerns, and callers decide what a non-empty mapping means.
The same rules run on a freshly built candidate and on the rows written
to the session, so both are accepted here.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from lockbox.errors import ValidationErrors
from lockbox.models.permission import ACO_RESOURCE, ARO_USER, OWNER

NAME_MAX_LENGTH = 255
USERNAME_MAX_LENGTH = 255
URI_MAX_LENGTH = 1024
DESCRIPTION_MAX_LENGTH = 10000

_ARMORED_MESSAGE = re.compile(
    r"^-----BEGIN PGP MESSAGE-----\r?\n.+\r?\n-----END PGP MESSAGE-----\s*$",
    re.DOTALL,
)


def field_path(loc: Sequence[str | int]) -> str:
    """Render a location tuple as a field path, e.g. ``secrets[0].data``."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def is_armored_message(data: str) -> bool:
    """Return True if ``data`` looks like an ASCII-armored OpenPGP message."""
    return bool(_ARMORED_MESSAGE.match(data.strip()))


def _is_valid_text(value: str) -> bool:
    """Return False for NUL bytes and for lone surrogates that cannot be stored as UTF-8."""
    if "\x00" in value:
        return False
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _add(errors: ValidationErrors, path: str, code: str) -> None:
    errors.setdefault(path, [])
    if code not in errors[path]:
        errors[path].append(code)


def _validate_text(
    errors: ValidationErrors,
    path: str,
    value: str | None,
    max_length: int,
    *,
    required: bool = False,
) -> None:
    if value is None:
        if required:
            _add(errors, path, "_required")
        return
    if required and not value.strip():
        _add(errors, path, "_empty")
    if len(value) > max_length:
        _add(errors, path, "maxLength")
    if not _is_valid_text(value):
        _add(errors, path, "utf8Extended")


def _validate_permissions(
    errors: ValidationErrors,
    permissions: Sequence[Any],
    acting_user_id: str,
) -> None:
    if len(permissions) != 1:
        _add(errors, "permissions", "exactlyOne")
    for index, permission in enumerate(permissions):
        prefix = f"permissions[{index}]"
        if permission.type != OWNER:
            _add(errors, f"{prefix}.type", "isOwner")
        if permission.aro != ARO_USER:
            _add(errors, f"{prefix}.aro", "inList")
        if permission.aco != ACO_RESOURCE:
            _add(errors, f"{prefix}.aco", "inList")
        if permission.aro_foreign_key != acting_user_id:
            _add(errors, f"{prefix}.aro_foreign_key", "isActingUser")


def _validate_secrets(
    errors: ValidationErrors,
    secrets: Sequence[Any] | None,
    permissions: Sequence[Any],
    *,
    require_armored: bool,
) -> None:
    if secrets is None:
        _add(errors, "secrets", "_required")
        return
    if len(secrets) == 0:
        _add(errors, "secrets", "hasAtLeast")
        return

    # A secret may only be addressed to a user holding a grant on the resource
    grantees = {p.aro_foreign_key for p in permissions if p.aro == ARO_USER}
    seen: set[str] = set()
    for index, secret in enumerate(secrets):
        prefix = f"secrets[{index}]"
        if not secret.user_id:
            _add(errors, f"{prefix}.user_id", "_required")
        elif secret.user_id not in grantees:
            _add(errors, f"{prefix}.user_id", "hasAccess")
        elif secret.user_id in seen:
            _add(errors, f"{prefix}.user_id", "unique")
        else:
            seen.add(secret.user_id)

        if secret.data is None:
            _add(errors, f"{prefix}.data", "_required")
        elif not secret.data.strip():
            _add(errors, f"{prefix}.data", "_empty")
        elif not _is_valid_text(secret.data):
            _add(errors, f"{prefix}.data", "utf8Extended")
        elif require_armored and not is_armored_message(secret.data):
            _add(errors, f"{prefix}.data", "isValidGpgMessage")


def validate_resource(
    resource: Any,
    acting_user_id: str,
    *,
    require_armored_secrets: bool = True,
) -> ValidationErrors:
    """Validate a resource candidate (or its persisted rows) for creation.

    Args:
        resource: A :class:`CandidateResource` or a :class:`Resource` whose
            ``permissions`` and ``secrets`` collections are loaded.
        acting_user_id: UUID of the user creating the resource.
        require_armored_secrets: Reject secret data that is not an
            ASCII-armored OpenPGP message.

    Returns:
        Field path -> error codes. Empty when the resource is valid.
    """
    errors: ValidationErrors = {}
    _validate_text(errors, "name", resource.name, NAME_MAX_LENGTH, required=True)
    _validate_text(errors, "username", resource.username, USERNAME_MAX_LENGTH)
    _validate_text(errors, "uri", resource.uri, URI_MAX_LENGTH)
    _validate_text(errors, "description", resource.description, DESCRIPTION_MAX_LENGTH)
    if resource.created_by != acting_user_id:
        _add(errors, "created_by", "isActingUser")
    if resource.modified_by != acting_user_id:
        _add(errors, "modified_by", "isActingUser")

    permissions = list(resource.permissions or ())
    _validate_permissions(errors, permissions, acting_user_id)
    _validate_secrets(
        errors,
        resource.secrets,
        permissions,
        require_armored=require_armored_secrets,
    )
    return errors
